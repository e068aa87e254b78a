"""Pydantic schemas for API contracts."""

from __future__ import annotations

from typing import Dict

from pydantic import BaseModel, Field

from src.stt_core.types import TranscriptionResult


class TranscribeRequest(BaseModel):
    audio_path: str = ""
    language: str | None = None
    # None = auto (segment long audio when a VAD is loaded)
    vad: bool | None = None


class TranscribeResponse(BaseModel):
    text: str = ""
    duration_ms: float = 0.0
    speech_ms: float | None = None
    error: str | None = None
    failed_chunks: int | None = None

    @classmethod
    def from_result(cls, result: TranscriptionResult) -> "TranscribeResponse":
        return cls(
            text=result.text,
            duration_ms=result.duration_ms,
            speech_ms=result.speech_ms,
            error=result.error,
            failed_chunks=result.failed_chunks or None,
        )

    def payload(self) -> Dict[str, object]:
        return self.model_dump(exclude_none=True)


class LanguageStatus(BaseModel):
    model: str
    ready: bool


class HealthResponse(BaseModel):
    status: str = "ok"
    engine: str = "sherpa-onnx"
    version: str
    commit: str
    vad: bool
    languages: Dict[str, LanguageStatus] = Field(default_factory=dict)
