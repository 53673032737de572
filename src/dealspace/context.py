"""Render extracted documents and assemble them into a bounded prompt context."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, List, Optional, Tuple

from dealspace.config import QA_CONTEXT_BUDGET, SUMMARY_CONTEXT_BUDGET
from dealspace.extract import BINARY_PLACEHOLDER_PREFIX, ExtractedContent, extract_content
from dealspace.storage import DocumentRef

LOGGER = logging.getLogger(__name__)

SEGMENT_SEPARATOR = "\n\n---\n\n"
TRUNCATION_SUFFIX = "\n...[Content truncated due to length]"
EMPTY_CONTEXT = "No documents have been uploaded yet."


class AssistantMode(str, Enum):
    QA = "qa"
    SUMMARIZE = "summarize"

    @property
    def default_budget(self) -> int:
        return QA_CONTEXT_BUDGET if self is AssistantMode.QA else SUMMARY_CONTEXT_BUDGET


def render_segment(name: str, content: ExtractedContent) -> str:
    """Render one document as a ``### name`` block with inline location tags.

    Precedence is pages, then sheets, then slides, then the flat text.
    """

    if content.pages:
        body = "\n\n".join(f"[Page {page.page_number}]\n{page.text}" for page in content.pages)
    elif content.sheets:
        body = "\n\n".join(f"[Sheet: {sheet.sheet_name}]\n{sheet.text}" for sheet in content.sheets)
    elif content.slides:
        body = "\n\n".join(f"[Slide {slide.slide_number}]\n{slide.text}" for slide in content.slides)
    else:
        body = content.text
    return f"### {name}\n{body}"


def truncate_segment(segment: str, budget: int) -> Tuple[str, bool]:
    if len(segment) <= budget:
        return segment, False
    return segment[:budget] + TRUNCATION_SUFFIX, True


@dataclass(slots=True)
class IncludedDocument:
    document: DocumentRef
    content: ExtractedContent
    segment: str
    truncated: bool


@dataclass(slots=True)
class AssembledContext:
    """Prompt-ready context plus the record of what went into it."""

    text: str
    mode: AssistantMode
    budget: int
    included: List[IncludedDocument] = field(default_factory=list)
    considered: List[str] = field(default_factory=list)

    @property
    def included_names(self) -> List[str]:
        return [item.document.name for item in self.included]

    @property
    def truncated_names(self) -> List[str]:
        return [item.document.name for item in self.included if item.truncated]

    @property
    def has_extractable_content(self) -> bool:
        return any(item.content.has_text for item in self.included)


def assemble_context(
    documents: Iterable[Tuple[DocumentRef, bytes]],
    mode: AssistantMode,
    budget: Optional[int] = None,
) -> AssembledContext:
    """Extract, render and truncate each document, keeping the listing order.

    Each rendered segment is truncated independently to ``budget`` characters
    so that every document gets its own bounded share of the context.
    Binary-unsupported documents are recorded as considered but not included.
    """

    budget = budget if budget is not None else mode.default_budget
    assembled = AssembledContext(text="", mode=mode, budget=budget)

    for document, data in documents:
        assembled.considered.append(document.name)
        content = extract_content(document.name, data)
        if content.text.startswith(BINARY_PLACEHOLDER_PREFIX):
            LOGGER.info("Skipping unsupported binary document %s", document.name)
            continue

        segment, truncated = truncate_segment(render_segment(document.name, content), budget)
        if truncated:
            LOGGER.info("Truncated %s to %s characters", document.name, budget)
        assembled.included.append(
            IncludedDocument(document=document, content=content, segment=segment, truncated=truncated)
        )

    if assembled.included:
        assembled.text = SEGMENT_SEPARATOR.join(item.segment for item in assembled.included)
    elif mode is AssistantMode.QA:
        assembled.text = EMPTY_CONTEXT
    return assembled
