"""Structured lifecycle events for the document assistant pipeline."""

from __future__ import annotations

import logging
import traceback
from typing import Any, Iterable, Optional

LOGGER = logging.getLogger("dealspace.telemetry")


def _format_exception(error: BaseException) -> str:
    return "".join(traceback.format_exception(error.__class__, error, error.__traceback__))


def log_event(
    logger: Optional[logging.Logger],
    step: str,
    *,
    level: str = "info",
    req_id: str | None = None,
    deal_id: str | None = None,
    duration_ms: float | None = None,
    exc: BaseException | str | None = None,
    details: dict[str, Any] | None = None,
    **payload: Any,
) -> None:
    """Emit a structured log event with the agreed-upon schema."""

    logger = logger or LOGGER
    event: dict[str, Any] = {"step": step, "module": logger.name}
    if req_id:
        event["req_id"] = req_id
    if deal_id:
        event["deal_id"] = deal_id
    if duration_ms is not None:
        event["duration_ms"] = round(duration_ms, 3)
    if details is not None:
        event["details"] = details
    event.update(payload)

    exc_info = None
    if exc is not None:
        if isinstance(exc, BaseException):
            event["exc"] = _format_exception(exc)
            exc_info = (exc.__class__, exc, exc.__traceback__)
        else:
            event["exc"] = str(exc)

    log_method = getattr(logger, level.lower(), logger.info)
    log_method(event, exc_info=exc_info)


def emit_document_event(
    step: str,
    *,
    deal_id: str,
    document_name: str,
    strategy: str | None = None,
    size_bytes: int | None = None,
    duration_ms: float | None = None,
    structure: str | None = None,
    segments: int | None = None,
    degraded: bool | None = None,
    error: BaseException | None = None,
) -> None:
    details = {
        "document": document_name,
        "strategy": strategy,
        "size_bytes": size_bytes,
        "structure": structure,
        "segments": segments,
        "degraded": degraded,
    }
    level = "warning" if error else "info"
    log_event(
        LOGGER,
        step,
        level=level,
        deal_id=deal_id,
        duration_ms=duration_ms,
        details=details,
        exc=error,
    )


def emit_context_event(
    *,
    deal_id: str,
    mode: str,
    budget: int,
    considered: Iterable[str],
    included: Iterable[str],
    truncated: Iterable[str],
    context_chars: int,
) -> None:
    details = {
        "mode": mode,
        "budget": budget,
        "considered": list(considered),
        "included": list(included),
        "truncated": list(truncated),
        "context_chars": context_chars,
    }
    log_event(LOGGER, "context.assemble", deal_id=deal_id, details=details)


def emit_completion_request(
    *,
    req_id: str,
    deal_id: str,
    model: str,
    message_count: int,
    prompt_chars: int,
) -> None:
    details = {
        "model": model,
        "message_count": message_count,
        "prompt_chars": prompt_chars,
    }
    log_event(LOGGER, "completion.request", req_id=req_id, deal_id=deal_id, details=details)


def emit_completion_result(
    *,
    req_id: str,
    deal_id: str,
    duration_ms: float,
    model: str,
    answer_preview: str,
    usage: dict[str, Any] | None,
) -> None:
    details = {
        "model": model,
        "answer_preview": answer_preview[:120],
        "usage": usage or {},
    }
    log_event(
        LOGGER,
        "completion.result",
        req_id=req_id,
        deal_id=deal_id,
        duration_ms=duration_ms,
        details=details,
    )


def emit_exception(
    *,
    module: str,
    error: BaseException,
    req_id: str | None = None,
    deal_id: str | None = None,
    suggestion: str | None = None,
) -> None:
    details = {"module": module}
    if suggestion:
        details["suggestion"] = suggestion
    log_event(
        LOGGER,
        "exception",
        level="error",
        req_id=req_id,
        deal_id=deal_id,
        details=details,
        exc=error,
    )
