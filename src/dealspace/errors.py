"""Exception taxonomy surfaced by the assistant pipeline."""
from __future__ import annotations

RATE_LIMIT_MESSAGE = "Rate limit exceeded. Please try again in a moment."
CREDITS_EXHAUSTED_MESSAGE = "AI credits exhausted. Please add credits to continue."


class DealAssistantError(RuntimeError):
    """Base error carrying the HTTP status and user-facing message."""

    status_code = 500

    def __init__(self, message: str, *, cause: Exception | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.__cause__ = cause


class InvalidRequestError(DealAssistantError):
    """Raised when required request fields are missing."""

    status_code = 400


class NothingToSummarizeError(DealAssistantError):
    """Raised before the completion call when no document has usable content."""

    status_code = 400


class StorageError(DealAssistantError):
    """Raised when document metadata or bytes cannot be retrieved."""


class CompletionError(DealAssistantError):
    """Raised when the completion gateway fails for any unclassified reason."""


class RateLimitError(CompletionError):
    """The completion gateway answered with HTTP 429."""

    status_code = 429

    def __init__(self, message: str = RATE_LIMIT_MESSAGE, *, cause: Exception | None = None) -> None:
        super().__init__(message, cause=cause)


class CreditsExhaustedError(CompletionError):
    """The completion gateway answered with HTTP 402."""

    status_code = 402

    def __init__(
        self, message: str = CREDITS_EXHAUSTED_MESSAGE, *, cause: Exception | None = None
    ) -> None:
        super().__init__(message, cause=cause)
