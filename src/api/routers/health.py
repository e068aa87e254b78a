"""Liveness/readiness endpoint."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from src.stt_core.context import AppContext
from src.stt_core.engines import EN_MODEL_NAME, RU_MODEL_NAME

from ..deps import get_context
from ..schemas import HealthResponse, LanguageStatus
from ..settings import APISettings, get_settings

router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthResponse)
def health(
    settings: APISettings = Depends(get_settings),
    context: AppContext = Depends(get_context),
) -> HealthResponse:
    return HealthResponse(
        version=settings.version,
        commit=settings.commit,
        vad=context.vad_ready,
        languages={
            "en": LanguageStatus(model=context.en.model if context.en else EN_MODEL_NAME, ready=context.en is not None),
            "ru": LanguageStatus(model=context.ru.model if context.ru else RU_MODEL_NAME, ready=context.ru is not None),
        },
    )
