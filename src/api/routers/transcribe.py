"""Transcription endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, File, Form, UploadFile
from fastapi.responses import JSONResponse

from ..deps import get_service
from ..schemas import TranscribeRequest, TranscribeResponse
from ..services.transcript_service import TranscriptService, UploadTooLarge

router = APIRouter(tags=["transcribe"])


def error_response(status: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status, content=TranscribeResponse(error=message).payload())


# Plain ``def`` handlers run on the threadpool; the pipeline blocks.
@router.post("/transcribe", response_model=TranscribeResponse, response_model_exclude_none=True)
def transcribe_path(
    payload: TranscribeRequest,
    service: TranscriptService = Depends(get_service),
):
    if not payload.audio_path:
        return error_response(400, "audio_path required")
    result, status = service.transcribe_path(payload.audio_path, payload.language, payload.vad)
    return JSONResponse(status_code=int(status), content=TranscribeResponse.from_result(result).payload())


@router.post("/transcribe/upload", response_model=TranscribeResponse, response_model_exclude_none=True)
def transcribe_upload(
    audio: UploadFile = File(...),
    language: str | None = Form(None),
    vad: str | None = Form(None),
    service: TranscriptService = Depends(get_service),
):
    try:
        result, status = service.transcribe_upload(audio.file, audio.filename, language, vad)
    except UploadTooLarge as exc:
        return error_response(413, str(exc))
    finally:
        audio.file.close()
    return JSONResponse(status_code=int(status), content=TranscribeResponse.from_result(result).payload())
