"""Convert arbitrary audio into canonical 16 kHz mono WAV via ffmpeg."""

from __future__ import annotations

import logging
import uuid
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

import ffmpeg

from .errors import ConversionError
from .types import CANONICAL_SAMPLE_RATE

LOGGER = logging.getLogger("moonshine.normalizer")

CANONICAL_SUFFIX = ".wav"


def temp_path(tmp_dir: Path, suffix: str) -> Path:
    return Path(tmp_dir) / f"moonshine_{uuid.uuid4().hex[:8]}{suffix}"


def convert_to_wav(
    source: Path,
    target: Path,
    *,
    sample_rate: int = CANONICAL_SAMPLE_RATE,
    ffmpeg_binary: str = "ffmpeg",
) -> None:
    """Run ffmpeg to resample and downmix ``source`` into ``target``."""
    # bitexact + no metadata keeps the WAV header at exactly 44 bytes.
    stream = (
        ffmpeg.input(str(source))
        .output(
            str(target),
            ar=sample_rate,
            ac=1,
            acodec="pcm_s16le",
            format="wav",
            map_metadata="-1",
            fflags="+bitexact",
        )
        .global_args("-loglevel", "error")
        .overwrite_output()
    )
    try:
        stream.run(cmd=ffmpeg_binary, capture_stdout=True, capture_stderr=True)
    except ffmpeg.Error as exc:
        stderr = exc.stderr.decode("utf-8", errors="replace").strip() if exc.stderr else ""
        raise ConversionError("ffmpeg:", stderr or str(exc)) from exc
    except OSError as exc:
        raise ConversionError("ffmpeg:", str(exc)) from exc


@contextmanager
def normalize_audio(
    source: Path | str,
    tmp_dir: Path,
    *,
    sample_rate: int = CANONICAL_SAMPLE_RATE,
    ffmpeg_binary: str = "ffmpeg",
) -> Iterator[Path]:
    """Yield a canonical WAV path for ``source``.

    ``.wav`` inputs are yielded as-is; their format is validated by the
    decoder. Anything else is converted into a temporary file that is
    removed when the context exits.
    """
    source = Path(source)
    if source.suffix.lower() == CANONICAL_SUFFIX:
        yield source
        return

    target = temp_path(tmp_dir, CANONICAL_SUFFIX)
    try:
        convert_to_wav(source, target, sample_rate=sample_rate, ffmpeg_binary=ffmpeg_binary)
        LOGGER.debug("Converted %s -> %s", source.name, target)
        yield target
    finally:
        target.unlink(missing_ok=True)
