"""Error taxonomy raised by the transcription pipeline."""

from __future__ import annotations


class TranscriptionError(Exception):
    """Base class; ``status_code`` is the HTTP status the boundary should use."""

    status_code = 500


class ConversionError(TranscriptionError):
    """ffmpeg could not convert the input to canonical PCM."""

    status_code = 422

    def __init__(self, message: str, diagnostics: str = "") -> None:
        super().__init__(f"{message} {diagnostics}".strip())
        self.diagnostics = diagnostics


class MalformedInput(TranscriptionError):
    status_code = 400


class UnsupportedFormat(TranscriptionError):
    status_code = 400


class UnsupportedSampleRate(TranscriptionError):
    status_code = 400


class AudioTooLong(TranscriptionError):
    status_code = 400


class EngineUnavailable(TranscriptionError):
    """The engine for the requested language was never loaded."""

    status_code = 503


class RecognitionError(TranscriptionError):
    """A recognition engine raised while decoding a chunk."""

    status_code = 500
