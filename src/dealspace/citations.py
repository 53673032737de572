"""Best-effort recovery of cited documents from a free-text answer.

The completion service is asked to cite documents by name and location, but
nothing enforces it. Recovery is therefore a heuristic: a document counts as
cited when its name appears in the answer (case-insensitive), and a location
is read from the text that follows the name on the same line. Both false
positives and false negatives are expected.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Callable, Iterable, List, Optional, Sequence, Tuple

LOCATION_WINDOW = 150

_PAGE_RE = re.compile(r"\b(?:pages?|pp?\.)\s*#?\s*(\d+)", re.IGNORECASE)
_SLIDE_RE = re.compile(r"\bslides?\s*#?\s*(\d+)", re.IGNORECASE)
_SHEET_QUOTED_RE = re.compile(r"\bsheet\b\s*:?\s*['\"‘“]([^'\"’”\n]+)['\"’”]", re.IGNORECASE)
# Unquoted names are read as a run of capitalised or numeric words.
_SHEET_COLON_RE = re.compile(r"\b(?i:sheet)\s*:\s*([A-Z0-9][\w&'-]*(?:[ \t]+[A-Z0-9][\w&'-]*)*)")
_WINDOW_STOP_RE = re.compile(r"[\n)\];]")


@dataclass(frozen=True, slots=True)
class SourceCitation:
    document_name: str
    location: Optional[str] = None

    @property
    def label(self) -> str:
        if self.location:
            return f"{self.document_name} ({self.location})"
        return self.document_name


def _page(window: str) -> Optional[str]:
    match = _PAGE_RE.search(window)
    return f"Page {match.group(1)}" if match else None


def _slide(window: str) -> Optional[str]:
    match = _SLIDE_RE.search(window)
    return f"Slide {match.group(1)}" if match else None


def _sheet(window: str) -> Optional[str]:
    match = _SHEET_QUOTED_RE.search(window) or _SHEET_COLON_RE.search(window)
    if not match:
        return None
    name = match.group(1).strip().rstrip(".*_").strip()
    return f"Sheet: {name}" if name else None


_LOCATION_MATCHERS: Tuple[Callable[[str], Optional[str]], ...] = (_page, _slide, _sheet)


def _windows(answer: str, lowered_answer: str, name: str, other_names: Sequence[str]) -> Iterable[str]:
    """Yield the text following each occurrence of ``name``, up to a stop."""

    lowered_name = name.lower()
    start = lowered_answer.find(lowered_name)
    while start != -1:
        tail_start = start + len(lowered_name)
        window = answer[tail_start : tail_start + LOCATION_WINDOW]
        cut = len(window)
        stop = _WINDOW_STOP_RE.search(window)
        if stop:
            cut = stop.start()
        lowered_window = window.lower()
        for other in other_names:
            position = lowered_window.find(other)
            if position != -1:
                cut = min(cut, position)
        yield window[:cut]
        start = lowered_answer.find(lowered_name, start + 1)


def _recover_location(answer: str, lowered_answer: str, name: str, other_names: Sequence[str]) -> Optional[str]:
    windows = list(_windows(answer, lowered_answer, name, other_names))
    for matcher in _LOCATION_MATCHERS:
        for window in windows:
            location = matcher(window)
            if location:
                return location
    return None


def recover_citations(answer: str, candidates: Sequence[str]) -> List[SourceCitation]:
    """Return a citation for every candidate document named in ``answer``.

    Candidates sharing a display name collapse into a single citation.
    """

    lowered_answer = answer.lower()
    unique_names: List[str] = []
    for name in candidates:
        if name and name not in unique_names:
            unique_names.append(name)

    citations: List[SourceCitation] = []
    for name in unique_names:
        if name.lower() not in lowered_answer:
            continue
        others = [other.lower() for other in unique_names if other != name and other.lower() != name.lower()]
        location = _recover_location(answer, lowered_answer, name, others)
        citation = SourceCitation(document_name=name, location=location)
        if citation not in citations:
            citations.append(citation)
    return citations


def format_sources(citations: Iterable[SourceCitation]) -> List[str]:
    return [citation.label for citation in citations]
