"""Compose chat prompts for question answering and summarisation."""
from __future__ import annotations

from pathlib import Path
from typing import Dict, List, Mapping, Sequence

from dealspace.context import AssembledContext

_PROMPTS_DIR = Path(__file__).resolve().parent / "prompts"

ChatMessage = Dict[str, str]


def _load_template(name: str) -> str:
    """Read and trim the contents of a template file."""
    return (_PROMPTS_DIR / name).read_text(encoding="utf-8").strip()


QA_SYSTEM_TEMPLATE = _load_template("qa_system.md")
SUMMARIZE_SYSTEM_PROMPT = _load_template("summarize_system.md")
SUMMARIZE_USER_TEMPLATE = _load_template("summarize_user.md")


def build_qa_messages(
    context: AssembledContext, history: Sequence[Mapping[str, str]]
) -> List[ChatMessage]:
    """System instructions with the embedded context, then the caller's history."""

    system_prompt = QA_SYSTEM_TEMPLATE.format(context=context.text)
    messages: List[ChatMessage] = [{"role": "system", "content": system_prompt}]
    messages.extend(
        {"role": str(message["role"]), "content": str(message["content"])} for message in history
    )
    return messages


def build_summary_messages(context: AssembledContext) -> List[ChatMessage]:
    """Fixed summary instructions and a single user turn carrying the context."""

    return [
        {"role": "system", "content": SUMMARIZE_SYSTEM_PROMPT},
        {"role": "user", "content": SUMMARIZE_USER_TEMPLATE.format(context=context.text)},
    ]


__all__ = ["build_qa_messages", "build_summary_messages", "ChatMessage"]
