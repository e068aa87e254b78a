"""VAD-driven segmentation of a buffer into duration-bounded chunks."""

from __future__ import annotations

import logging
import threading
from typing import Any, Iterable, List, Protocol

import numpy as np

from .types import CANONICAL_SAMPLE_RATE, AudioBuffer, Chunk, SpeechSegment

LOGGER = logging.getLogger("moonshine.vad")

WINDOW_SIZE = 512
MAX_CHUNK_DURATION_S = 25.0


class VoiceActivityDetector(Protocol):
    """Streaming VAD contract (matches ``sherpa_onnx.VoiceActivityDetector``)."""

    def accept_waveform(self, samples: Any) -> None: ...

    def flush(self) -> None: ...

    def empty(self) -> bool: ...

    @property
    def front(self) -> Any: ...

    def pop(self) -> None: ...

    def reset(self) -> None: ...


def group_segments(
    segments: Iterable[SpeechSegment],
    *,
    sample_rate: int = CANONICAL_SAMPLE_RATE,
    max_chunk_duration_s: float = MAX_CHUNK_DURATION_S,
) -> List[Chunk]:
    """Greedily pack segments into chunks no longer than ``max_chunk_duration_s``.

    A segment is never split: one that is longer than the bound on its own
    becomes a single oversized chunk.
    """
    max_samples = int(max_chunk_duration_s * sample_rate)
    chunks: List[Chunk] = []
    pending: list[SpeechSegment] = []
    pending_len = 0

    def close() -> None:
        chunks.append(
            Chunk(
                samples=np.concatenate([seg.samples for seg in pending]).astype(np.float32, copy=False),
                start=pending[0].start,
                segment_count=len(pending),
                sample_rate=sample_rate,
            )
        )

    for segment in segments:
        seg_len = len(segment.samples)
        if seg_len == 0:
            continue
        if pending and pending_len + seg_len > max_samples:
            close()
            pending = []
            pending_len = 0
        pending.append(segment)
        pending_len += seg_len
    if pending:
        close()
    return chunks


class Segmenter:
    """Owns the process-wide VAD instance and serializes access to it."""

    def __init__(
        self,
        vad: VoiceActivityDetector,
        *,
        sample_rate: int = CANONICAL_SAMPLE_RATE,
        window_size: int = WINDOW_SIZE,
        max_chunk_duration_s: float = MAX_CHUNK_DURATION_S,
    ) -> None:
        self.vad = vad
        self.sample_rate = sample_rate
        self.window_size = window_size
        self.max_chunk_duration_s = max_chunk_duration_s
        self._lock = threading.Lock()

    def segment(self, buffer: AudioBuffer) -> List[Chunk]:
        """Return the speech-bearing chunks of ``buffer`` in temporal order."""
        with self._lock:
            try:
                self._feed(buffer.samples)
                self.vad.flush()
                segments = list(self._drain(len(buffer.samples)))
            finally:
                self.vad.reset()
        return group_segments(
            segments,
            sample_rate=self.sample_rate,
            max_chunk_duration_s=self.max_chunk_duration_s,
        )

    def _feed(self, samples: np.ndarray) -> None:
        size = self.window_size
        full = len(samples) - len(samples) % size
        for offset in range(0, full, size):
            self.vad.accept_waveform(samples[offset : offset + size])
        remainder = len(samples) - full
        if remainder:
            window = np.zeros(size, dtype=np.float32)
            window[:remainder] = samples[full:]
            self.vad.accept_waveform(window)

    def _drain(self, total: int) -> Iterable[SpeechSegment]:
        while not self.vad.empty():
            front = self.vad.front
            start = int(getattr(front, "start", 0))
            samples = np.asarray(front.samples, dtype=np.float32)
            self.vad.pop()
            # Drop zero padding from the final window.
            if start + len(samples) > total:
                samples = samples[: max(0, total - start)]
            yield SpeechSegment(start=start, samples=samples)
