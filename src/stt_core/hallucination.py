"""Compression-ratio guard against looping decoder output."""

from __future__ import annotations

import logging
import zlib

LOGGER = logging.getLogger("moonshine.hallucination")

DEFAULT_THRESHOLD = 2.4
MIN_SCORED_LENGTH = 10


def compression_ratio(text: str) -> float:
    """Return raw/zlib-compressed byte length; 0 for texts too short to judge."""
    if len(text) < MIN_SCORED_LENGTH:
        return 0.0
    raw = text.encode("utf-8")
    return len(raw) / float(len(zlib.compress(raw)))


def is_hallucination(text: str, threshold: float = DEFAULT_THRESHOLD) -> bool:
    return compression_ratio(text) > threshold


def filter_hallucination(text: str, threshold: float = DEFAULT_THRESHOLD) -> str:
    """Return ``text`` unchanged, or "" when it looks like a decoder loop."""
    ratio = compression_ratio(text)
    if ratio > threshold:
        LOGGER.warning(
            "compression ratio %.2f > %.1f, clearing likely hallucination: %r",
            ratio,
            threshold,
            text,
        )
        return ""
    return text
