import logging
from typing import Any, Callable, TypeVar

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, PlainTextResponse

from dealspace.api.assistant import router as assistant_router
from dealspace.errors import DealAssistantError
from dealspace.logging_config import configure_logging
from dealspace.services.assistant import get_assistant_service
from dealspace.telemetry import emit_exception

configure_logging()

LOGGER = logging.getLogger(__name__)

app = FastAPI(title="Deal Space Assistant API")
app.include_router(assistant_router)


@app.exception_handler(DealAssistantError)
async def _assistant_error_handler(request: Request, exc: DealAssistantError) -> JSONResponse:
    if exc.status_code >= 500:
        LOGGER.error("Deal space AI error: %s", exc.message)
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


@app.exception_handler(RequestValidationError)
async def _validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(status_code=400, content={"error": "Invalid request body"})


@app.exception_handler(Exception)
async def _unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
    emit_exception(module=__name__, error=exc)
    return JSONResponse(status_code=500, content={"error": str(exc) or "An error occurred"})


@app.get("/", response_class=PlainTextResponse)
def read_root() -> str:
    """Healthcheck endpoint for the service."""
    return "ok"


T = TypeVar("T")


def _resolve_dependency(factory: Callable[[], T]) -> T:
    """Resolve a dependency while respecting FastAPI overrides."""

    override: Any | None = app.dependency_overrides.get(factory)
    resolved: Any = override if override is not None else factory
    return resolved() if callable(resolved) else resolved


@app.get("/healthz")
def healthcheck() -> dict[str, object]:
    """Report whether the completion gateway is configured."""

    gateway = _resolve_dependency(get_assistant_service).gateway
    return {"status": "ok", "model": gateway.model_name, "gateway_configured": gateway.is_configured}
