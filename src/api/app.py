"""FastAPI application factory and process entry point."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from src.stt_core.context import AppContext, load_context

from .logging_setup import setup_logging
from .metrics import instrument_app, router as metrics_router
from .routers import health, transcribe
from .schemas import TranscribeResponse
from .settings import get_settings

LOGGER = logging.getLogger("moonshine.api")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Load engines on startup unless a context was injected; release on shutdown."""
    owns_context = app.state.context is None
    if owns_context:
        settings = get_settings()
        context = load_context(settings.engine_config())
        if settings.warmup:
            context.warmup()
        app.state.context = context
        LOGGER.info(
            "Service on %s:%d | EN: ready | RU: %s | VAD: %s",
            settings.host,
            settings.port,
            "ready" if context.ru else "unavailable",
            "ready" if context.vad_ready else "disabled",
        )

    yield

    if owns_context and app.state.context is not None:
        app.state.context.close()
        app.state.context = None


def create_app(context: AppContext | None = None) -> FastAPI:
    settings = get_settings()
    app = FastAPI(title=settings.app_name, version=settings.version, lifespan=lifespan)
    app.state.context = context

    instrument_app(app)
    app.include_router(health.router)
    app.include_router(transcribe.router)
    app.include_router(metrics_router)

    @app.exception_handler(RequestValidationError)
    async def validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        details = "; ".join(
            f"{'.'.join(str(part) for part in err.get('loc', ()))}: {err.get('msg')}"
            for err in exc.errors()
        )
        return JSONResponse(
            status_code=400,
            content=TranscribeResponse(error=f"invalid request: {details}").payload(),
        )

    @app.exception_handler(Exception)
    async def unhandled_handler(request: Request, exc: Exception) -> JSONResponse:
        LOGGER.error("Unhandled exception on %s: %s", request.url.path, exc, exc_info=True)
        return JSONResponse(status_code=500, content=TranscribeResponse(error="internal error").payload())

    return app


def main() -> None:
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_file)
    uvicorn.run(
        create_app(),
        host=settings.host,
        port=settings.port,
        timeout_keep_alive=settings.timeout_keep_alive_s,
        timeout_graceful_shutdown=settings.graceful_shutdown_s,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
