"""Completion gateway clients."""

from dealspace.config import Settings, get_settings

from .gateway import CompletionGateway, CompletionResult, HttpCompletionGateway, classify_status
from .mock import MockCompletionGateway


def get_completion_gateway(settings: Settings | None = None) -> CompletionGateway:
    """Build the gateway selected by ``AI_GATEWAY_PROVIDER``."""

    settings = settings or get_settings()
    if settings.gateway_provider == "mock":
        return MockCompletionGateway()
    return HttpCompletionGateway.from_settings(settings)


__all__ = [
    "CompletionGateway",
    "CompletionResult",
    "HttpCompletionGateway",
    "MockCompletionGateway",
    "classify_status",
    "get_completion_gateway",
]
