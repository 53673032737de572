"""Client for the external chat-completion gateway."""
from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence

import httpx

from dealspace.config import Settings
from dealspace.errors import CompletionError, CreditsExhaustedError, RateLimitError

LOGGER = logging.getLogger(__name__)

EMPTY_ANSWER_FALLBACK = "I couldn't generate a response."


@dataclass(slots=True)
class CompletionResult:
    """Raw answer text plus whatever usage metadata the gateway returned."""

    content: str
    model: str
    usage: Dict[str, Any] = field(default_factory=dict)


class CompletionGateway(ABC):
    """Common contract for completion backends."""

    @property
    @abstractmethod
    def model_name(self) -> str:
        """Identifier of the model requests are sent to."""

    @property
    def is_configured(self) -> bool:
        return True

    @abstractmethod
    async def complete(self, messages: Sequence[Mapping[str, str]]) -> CompletionResult:
        """Send ``messages`` and return the answer, raising :class:`CompletionError`."""


def classify_status(status_code: int, body: str) -> CompletionError:
    """Map a failed gateway response onto the user-facing error categories."""

    if status_code == 429:
        return RateLimitError()
    if status_code == 402:
        return CreditsExhaustedError()
    excerpt = body.strip()[:200]
    LOGGER.error("AI API error: %s %s", status_code, excerpt)
    return CompletionError("AI API request failed")


def _extract_content(payload: Mapping[str, Any]) -> str:
    choices = payload.get("choices") or []
    if not choices or not isinstance(choices[0], Mapping):
        return ""
    message = choices[0].get("message") or {}
    content = message.get("content") if isinstance(message, Mapping) else None
    return content if isinstance(content, str) else ""


class HttpCompletionGateway(CompletionGateway):
    """OpenAI-compatible ``/chat/completions`` client over httpx."""

    def __init__(
        self,
        *,
        url: str,
        api_key: Optional[str],
        model: str,
        timeout: float = 60.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._url = url
        self._api_key = api_key
        self._model = model
        self._timeout = timeout
        self._transport = transport

    @classmethod
    def from_settings(cls, settings: Settings) -> "HttpCompletionGateway":
        return cls(
            url=settings.gateway_url,
            api_key=settings.gateway_api_key,
            model=settings.model,
            timeout=settings.gateway_timeout,
        )

    @property
    def model_name(self) -> str:
        return self._model

    @property
    def is_configured(self) -> bool:
        return bool(self._api_key)

    async def complete(self, messages: Sequence[Mapping[str, str]]) -> CompletionResult:
        if not self._api_key:
            raise CompletionError("AI_GATEWAY_API_KEY is not configured")

        body = {"model": self._model, "messages": [dict(message) for message in messages]}
        headers = {
            "Authorization": f"Bearer {self._api_key}",
            "Content-Type": "application/json",
        }
        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                response = await client.post(self._url, json=body, headers=headers)
        except httpx.HTTPError as exc:
            raise CompletionError(f"AI API request failed: {exc}", cause=exc) from exc

        if response.is_error:
            raise classify_status(response.status_code, response.text)

        try:
            payload = response.json()
        except ValueError as exc:
            raise CompletionError("AI API returned an invalid response", cause=exc) from exc
        if not isinstance(payload, Mapping):
            raise CompletionError("AI API returned an invalid response")

        content = _extract_content(payload) or EMPTY_ANSWER_FALLBACK
        usage = payload.get("usage") if isinstance(payload.get("usage"), dict) else {}
        return CompletionResult(content=content, model=str(payload.get("model") or self._model), usage=usage)
