"""Dataclasses shared across the pipeline stages."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

import numpy as np

CANONICAL_SAMPLE_RATE = 16_000


@dataclass(slots=True)
class AudioBuffer:
    """Mono float32 samples in [-1.0, 1.0] plus the container's declared layout."""

    samples: np.ndarray
    sample_rate: int
    channels: int = 1

    @property
    def duration_s(self) -> float:
        if self.sample_rate <= 0:
            return 0.0
        return len(self.samples) / float(self.sample_rate)


@dataclass(slots=True)
class SpeechSegment:
    """Speech span reported by the VAD (``start`` is a sample offset)."""

    start: int
    samples: np.ndarray


@dataclass(slots=True)
class Chunk:
    """One or more adjacent speech segments recognized as a single unit."""

    samples: np.ndarray
    start: int
    segment_count: int
    sample_rate: int = CANONICAL_SAMPLE_RATE

    @property
    def duration_s(self) -> float:
        return len(self.samples) / float(self.sample_rate)


@dataclass(slots=True)
class TranscriptionRequest:
    audio: Union[Path, str, bytes]
    language: str = "en"
    vad: Optional[bool] = None
    # Client-supplied upload name; only its extension matters.
    filename: str | None = None


@dataclass(slots=True)
class TranscriptionResult:
    text: str = ""
    duration_ms: float = 0.0
    speech_ms: float | None = None
    error: str | None = None
    failed_chunks: int = 0
