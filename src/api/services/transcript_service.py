"""Bridge HTTP inputs (paths, uploads, loose form fields) to the pipeline."""

from __future__ import annotations

from typing import BinaryIO, Tuple

from src.stt_core.context import AppContext
from src.stt_core.transcriber import Transcriber
from src.stt_core.types import TranscriptionRequest, TranscriptionResult

from ..settings import APISettings


class UploadTooLarge(Exception):
    def __init__(self, limit: int) -> None:
        super().__init__(f"upload exceeds {limit} bytes")
        self.limit = limit


def normalize_language(value: str | None) -> str:
    lang = (value or "").strip().lower()
    return lang or "en"


def parse_vad_flag(value: str | None) -> bool | None:
    """Lenient tri-state parse; unrecognized values mean "auto"."""
    lowered = (value or "").strip().lower()
    if lowered in {"true", "1", "yes"}:
        return True
    if lowered in {"false", "0", "no"}:
        return False
    return None


class TranscriptService:
    """Per-request facade over the shared :class:`Transcriber`."""

    def __init__(self, settings: APISettings, context: AppContext) -> None:
        self.settings = settings
        self.transcriber = Transcriber(context, settings.pipeline_config())

    def transcribe_path(
        self, audio_path: str, language: str | None, vad: bool | None
    ) -> Tuple[TranscriptionResult, int]:
        request = TranscriptionRequest(
            audio=audio_path,
            language=normalize_language(language),
            vad=vad,
        )
        return self.transcriber.transcribe(request)

    def transcribe_upload(
        self,
        stream: BinaryIO,
        filename: str | None,
        language: str | None,
        vad: str | None,
    ) -> Tuple[TranscriptionResult, int]:
        limit = self.settings.max_upload_bytes
        data = stream.read(limit + 1)
        if len(data) > limit:
            raise UploadTooLarge(limit)
        request = TranscriptionRequest(
            audio=data,
            language=normalize_language(language),
            vad=parse_vad_flag(vad),
            filename=filename,
        )
        return self.transcriber.transcribe(request)
