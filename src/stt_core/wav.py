"""Canonical WAV (RIFF, 44-byte header, 16-bit PCM) decoding."""

from __future__ import annotations

import struct
from pathlib import Path

import numpy as np

from .errors import MalformedInput, UnsupportedFormat
from .types import AudioBuffer

HEADER_SIZE = 44
FULL_SCALE = 32768.0


def load_wav(path: Path | str) -> AudioBuffer:
    """Read ``path`` and decode it as canonical PCM."""
    try:
        data = Path(path).read_bytes()
    except OSError as exc:
        raise MalformedInput(f"read wav: {exc}") from exc
    return decode_wav(data)


def decode_wav(data: bytes) -> AudioBuffer:
    """Decode a canonical WAV payload into mono float32 samples.

    Stereo input is downmixed by averaging both channels per frame. Only
    16-bit mono and 16-bit stereo are supported; trailing bytes that do not
    form a whole frame are ignored.
    """
    if len(data) < HEADER_SIZE:
        raise MalformedInput(f"read header: expected {HEADER_SIZE} bytes, got {len(data)}")
    if data[0:4] != b"RIFF" or data[8:12] != b"WAVE":
        raise MalformedInput("read header: not a RIFF/WAVE container")

    (channels,) = struct.unpack_from("<H", data, 22)
    (sample_rate,) = struct.unpack_from("<I", data, 24)
    (bits_per_sample,) = struct.unpack_from("<H", data, 34)

    if bits_per_sample != 16 or channels not in (1, 2):
        raise UnsupportedFormat(f"unsupported WAV: {bits_per_sample}bit {channels}ch")

    frame_bytes = 2 * channels
    payload = data[HEADER_SIZE:]
    usable = len(payload) - (len(payload) % frame_bytes)
    pcm = np.frombuffer(payload[:usable], dtype="<i2")

    if channels == 1:
        samples = pcm.astype(np.float32) / FULL_SCALE
    else:
        frames = pcm.reshape(-1, 2).astype(np.float32)
        samples = (frames[:, 0] + frames[:, 1]) / 2.0 / FULL_SCALE
    return AudioBuffer(
        samples=samples.astype(np.float32, copy=False),
        sample_rate=int(sample_rate),
        channels=int(channels),
    )
