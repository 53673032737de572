"""Canned completion gateway for local runs and tests."""
from __future__ import annotations

from typing import List, Mapping, Optional, Sequence

from .gateway import CompletionGateway, CompletionResult

DEFAULT_MOCK_ANSWER = "MOCK_ANSWER: no completion backend is configured."


class MockCompletionGateway(CompletionGateway):
    """Return a fixed answer and remember every request."""

    def __init__(self, answer: str = DEFAULT_MOCK_ANSWER, *, error: Optional[Exception] = None) -> None:
        self.answer = answer
        self.error = error
        self.requests: List[List[dict]] = []

    @property
    def model_name(self) -> str:
        return "mock"

    async def complete(self, messages: Sequence[Mapping[str, str]]) -> CompletionResult:
        self.requests.append([dict(message) for message in messages])
        if self.error is not None:
            raise self.error
        return CompletionResult(content=self.answer, model=self.model_name)
