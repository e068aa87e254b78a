"""Prometheus metrics recorded by the pipeline itself."""

from __future__ import annotations

from prometheus_client import Counter, Histogram

ENGINE_DECODE_SECONDS = Histogram(
    "engine_decode_seconds",
    "Time spent inside a recognition engine decode call",
    labelnames=("language",),
)

HALLUCINATION_COUNTER = Counter(
    "hallucinations_dropped_total",
    "Chunks whose text was discarded by the compression-ratio filter",
    labelnames=("language",),
)

TRANSCRIBE_COUNTER = Counter(
    "transcriptions_total",
    "Transcription requests by outcome",
    labelnames=("language", "status"),
)
