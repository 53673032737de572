"""Environment driven settings for the deal space assistant."""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

LOGGER = logging.getLogger(__name__)

DEFAULT_GATEWAY_URL = "https://ai.gateway.lovable.dev/v1/chat/completions"
DEFAULT_MODEL = "google/gemini-2.5-flash"
QA_CONTEXT_BUDGET = 50_000
SUMMARY_CONTEXT_BUDGET = 20_000


def _int_from_env(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        LOGGER.warning("Invalid integer for %s: %s; using default %s", name, value, default)
        return default


def _float_from_env(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return float(value)
    except ValueError:
        LOGGER.warning("Invalid float for %s: %s; using default %s", name, value, default)
        return default


@dataclass(slots=True)
class Settings:
    """Runtime configuration resolved once per process."""

    gateway_url: str = DEFAULT_GATEWAY_URL
    gateway_api_key: str | None = None
    gateway_provider: str = "http"
    model: str = DEFAULT_MODEL
    gateway_timeout: float = 60.0
    storage_dir: Path = Path("data/deal-space")
    qa_context_budget: int = QA_CONTEXT_BUDGET
    summary_context_budget: int = SUMMARY_CONTEXT_BUDGET
    log_dir: Path = Path("logs")
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        api_key = os.getenv("AI_GATEWAY_API_KEY") or os.getenv("LOVABLE_API_KEY")
        return cls(
            gateway_url=os.getenv("AI_GATEWAY_URL", DEFAULT_GATEWAY_URL),
            gateway_api_key=api_key or None,
            gateway_provider=os.getenv("AI_GATEWAY_PROVIDER", "http").strip().lower(),
            model=os.getenv("AI_MODEL", DEFAULT_MODEL),
            gateway_timeout=_float_from_env("AI_GATEWAY_TIMEOUT", 60.0),
            storage_dir=Path(os.getenv("DEAL_SPACE_STORAGE_DIR", "data/deal-space")),
            qa_context_budget=_int_from_env("QA_CONTEXT_BUDGET", QA_CONTEXT_BUDGET),
            summary_context_budget=_int_from_env("SUMMARY_CONTEXT_BUDGET", SUMMARY_CONTEXT_BUDGET),
            log_dir=Path(os.getenv("LOG_DIR", "logs")),
            log_level=os.getenv("LOG_LEVEL", "INFO").strip().upper(),
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return the process-wide settings instance."""

    return Settings.from_env()
