"""FastAPI dependencies shared by the routers."""

from __future__ import annotations

from fastapi import Depends, HTTPException, Request

from src.stt_core.context import AppContext

from .services.transcript_service import TranscriptService
from .settings import APISettings, get_settings


def get_context(request: Request) -> AppContext:
    context = getattr(request.app.state, "context", None)
    if context is None:
        raise HTTPException(status_code=503, detail="models are not loaded")
    return context


def get_service(
    settings: APISettings = Depends(get_settings),
    context: AppContext = Depends(get_context),
) -> TranscriptService:
    return TranscriptService(settings, context)
