"""Request-scoped transcription: normalize, gate, segment, recognize, filter."""

from __future__ import annotations

import logging
import time
from contextlib import contextmanager
from http import HTTPStatus
from pathlib import Path
from typing import Iterator, List, Tuple

from .config import CHUNK_POLICY_ABORT, PipelineConfig
from .context import AppContext
from .dispatcher import resolve_language
from .errors import (
    AudioTooLong,
    EngineUnavailable,
    RecognitionError,
    TranscriptionError,
    UnsupportedSampleRate,
)
from .hallucination import filter_hallucination
from .metrics import HALLUCINATION_COUNTER, TRANSCRIBE_COUNTER
from .normalizer import CANONICAL_SUFFIX, normalize_audio, temp_path
from .types import AudioBuffer, Chunk, TranscriptionRequest, TranscriptionResult
from .wav import load_wav

LOGGER = logging.getLogger("moonshine.transcriber")


def _elapsed_ms(started: float) -> float:
    return float(int((time.perf_counter() - started) * 1000))


class Transcriber:
    """Runs the pipeline for one request at a time per calling thread."""

    def __init__(self, context: AppContext, config: PipelineConfig | None = None) -> None:
        self.context = context
        self.config = config or PipelineConfig()

    def transcribe(self, request: TranscriptionRequest) -> Tuple[TranscriptionResult, int]:
        """Boundary call: pipeline errors become ``result.error`` plus a status hint."""
        started = time.perf_counter()
        language = resolve_language(request.language)
        try:
            result = self.run(request)
        except TranscriptionError as exc:
            TRANSCRIBE_COUNTER.labels(language=language, status="error").inc()
            LOGGER.warning("Transcription failed (%s): %s", type(exc).__name__, exc)
            return TranscriptionResult(error=str(exc), duration_ms=_elapsed_ms(started)), exc.status_code
        TRANSCRIBE_COUNTER.labels(language=language, status="ok").inc()
        return result, HTTPStatus.OK

    def run(self, request: TranscriptionRequest) -> TranscriptionResult:
        started = time.perf_counter()
        language = resolve_language(request.language)

        buffer = self.load(request)
        self.check_limits(buffer)
        if self.context.dispatcher.handle_for(language) is None:
            raise EngineUnavailable(f"{language.upper()} model not loaded")

        speech_ms: float | None = None
        if self.should_segment(request.vad, buffer.duration_s):
            chunks = self.context.segmenter.segment(buffer)  # type: ignore[union-attr]
            speech_samples = sum(len(chunk.samples) for chunk in chunks)
            speech_ms = speech_samples * 1000.0 / buffer.sample_rate
            total_ms = buffer.duration_s * 1000.0
            LOGGER.info(
                "VAD: %.0fms speech / %.0fms total (%.0f%% kept), %d chunk(s)",
                speech_ms,
                total_ms,
                100 * speech_ms / total_ms if total_ms else 0.0,
                len(chunks),
            )
            if not chunks:
                return TranscriptionResult(text="", speech_ms=0.0, duration_ms=_elapsed_ms(started))
        else:
            chunks = [Chunk(samples=buffer.samples, start=0, segment_count=1, sample_rate=buffer.sample_rate)]

        text, failed = self.recognize_chunks(chunks, buffer.sample_rate, language)
        return TranscriptionResult(
            text=text,
            duration_ms=_elapsed_ms(started),
            speech_ms=speech_ms,
            failed_chunks=failed,
        )

    def load(self, request: TranscriptionRequest) -> AudioBuffer:
        with self._materialize(request) as source:
            with normalize_audio(
                source,
                self.config.tmp_dir,
                sample_rate=self.config.sample_rate,
                ffmpeg_binary=self.config.ffmpeg_binary,
            ) as wav_path:
                return load_wav(wav_path)

    def check_limits(self, buffer: AudioBuffer) -> None:
        if buffer.sample_rate != self.config.sample_rate:
            raise UnsupportedSampleRate(
                f"unsupported sample rate {buffer.sample_rate} (need {self.config.sample_rate})"
            )
        if buffer.duration_s > self.config.max_audio_duration_s:
            raise AudioTooLong(
                f"audio too long: {buffer.duration_s:.1f}s > max {self.config.max_audio_duration_s:.0f}s"
            )

    def should_segment(self, vad: bool | None, duration_s: float) -> bool:
        if self.context.segmenter is None:
            return False
        if vad is None:
            return duration_s >= self.config.vad_min_duration_s
        return vad

    def recognize_chunks(self, chunks: List[Chunk], sample_rate: int, language: str) -> Tuple[str, int]:
        texts: list[str] = []
        failed = 0
        for index, chunk in enumerate(chunks):
            try:
                raw = self.context.dispatcher.recognize(chunk.samples, sample_rate, language)
            except TranscriptionError:
                raise
            except Exception as exc:
                if self.config.chunk_failure_policy == CHUNK_POLICY_ABORT:
                    raise RecognitionError(f"decode chunk {index + 1}/{len(chunks)}: {exc}") from exc
                LOGGER.warning("Decode failed for chunk %d/%d, skipping: %s", index + 1, len(chunks), exc)
                failed += 1
                continue
            text = (raw or "").strip()
            kept = filter_hallucination(text, self.config.hallucination_threshold)
            if text and not kept:
                HALLUCINATION_COUNTER.labels(language=language).inc()
            if kept:
                texts.append(kept)
        if chunks and failed == len(chunks):
            raise RecognitionError(f"decode failed for all {failed} chunk(s)")
        return " ".join(texts), failed

    @contextmanager
    def _materialize(self, request: TranscriptionRequest) -> Iterator[Path]:
        """Yield a filesystem path for the request audio, spilling uploads to disk."""
        if not isinstance(request.audio, bytes):
            yield Path(request.audio)
            return
        suffix = Path(request.filename or "").suffix or CANONICAL_SUFFIX
        path = temp_path(self.config.tmp_dir, suffix)
        try:
            path.write_bytes(request.audio)
            yield path
        finally:
            path.unlink(missing_ok=True)
