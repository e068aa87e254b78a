"""Recognition engine handles and sherpa-onnx loaders."""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Protocol

import numpy as np

try:  # pragma: no cover - optional heavy dependency
    import sherpa_onnx  # type: ignore
except Exception:  # pragma: no cover
    sherpa_onnx = None  # type: ignore

from .config import EngineConfig

LOGGER = logging.getLogger("moonshine.engines")

EN_MODEL_NAME = "moonshine-tiny-en-int8"
RU_MODEL_NAME = "zipformer-ru-int8"


class RecognitionEngine(Protocol):
    def decode(self, samples: np.ndarray, sample_rate: int) -> str: ...

    def release(self) -> None: ...


@dataclass
class EngineHandle:
    """A loaded engine plus the lock that keeps its decode calls exclusive."""

    language: str
    model: str
    engine: RecognitionEngine
    lock: threading.Lock = field(default_factory=threading.Lock)

    def decode(self, samples: np.ndarray, sample_rate: int) -> str:
        with self.lock:
            return self.engine.decode(samples, sample_rate)

    def release(self) -> None:
        with self.lock:
            self.engine.release()


class SherpaRecognizer:
    """Adapts ``sherpa_onnx.OfflineRecognizer`` to :class:`RecognitionEngine`."""

    def __init__(self, recognizer: Any) -> None:
        self._recognizer = recognizer

    def decode(self, samples: np.ndarray, sample_rate: int) -> str:
        if self._recognizer is None:
            raise RuntimeError("recognizer already released")
        stream = self._recognizer.create_stream()
        stream.accept_waveform(sample_rate, samples)
        self._recognizer.decode_stream(stream)
        return stream.result.text

    def release(self) -> None:
        self._recognizer = None


def _require_sherpa() -> Any:
    if sherpa_onnx is None:
        raise RuntimeError("sherpa-onnx is not installed")
    return sherpa_onnx


def load_moonshine(model_dir: Path, num_threads: int = 4) -> SherpaRecognizer:
    """Load the English Moonshine model from ``model_dir``."""
    sherpa = _require_sherpa()
    model_dir = Path(model_dir)
    recognizer = sherpa.OfflineRecognizer.from_moonshine(
        preprocessor=str(model_dir / "preprocess.onnx"),
        encoder=str(model_dir / "encode.int8.onnx"),
        uncached_decoder=str(model_dir / "uncached_decode.int8.onnx"),
        cached_decoder=str(model_dir / "cached_decode.int8.onnx"),
        tokens=str(model_dir / "tokens.txt"),
        num_threads=num_threads,
        decoding_method="greedy_search",
        provider="cpu",
    )
    return SherpaRecognizer(recognizer)


def zipformer_available(model_dir: Path) -> bool:
    return (Path(model_dir) / "encoder.int8.onnx").exists()


def load_zipformer(model_dir: Path, num_threads: int = 4, sample_rate: int = 16_000) -> SherpaRecognizer:
    """Load the Russian Zipformer transducer from ``model_dir``."""
    sherpa = _require_sherpa()
    model_dir = Path(model_dir)
    recognizer = sherpa.OfflineRecognizer.from_transducer(
        encoder=str(model_dir / "encoder.int8.onnx"),
        decoder=str(model_dir / "decoder.int8.onnx"),
        joiner=str(model_dir / "joiner.int8.onnx"),
        tokens=str(model_dir / "tokens.txt"),
        num_threads=num_threads,
        sample_rate=sample_rate,
        feature_dim=80,
        decoding_method="greedy_search",
        provider="cpu",
    )
    return SherpaRecognizer(recognizer)


def load_silero_vad(config: EngineConfig) -> Any:
    """Build a Silero ``VoiceActivityDetector`` from ``config.vad_model``."""
    sherpa = _require_sherpa()
    vad_config = sherpa.VadModelConfig()
    vad_config.silero_vad.model = str(config.vad_model)
    vad_config.silero_vad.threshold = config.vad_threshold
    vad_config.silero_vad.min_silence_duration = config.vad_min_silence_s
    vad_config.silero_vad.min_speech_duration = config.vad_min_speech_s
    vad_config.silero_vad.window_size = config.vad_window_size
    vad_config.sample_rate = config.sample_rate
    vad_config.num_threads = 1
    vad_config.provider = "cpu"
    return sherpa.VoiceActivityDetector(vad_config, buffer_size_in_seconds=config.vad_buffer_s)


def timed_load(label: str, loader, *args, **kwargs):
    """Run ``loader`` and log how long it took."""
    started = time.perf_counter()
    result = loader(*args, **kwargs)
    LOGGER.info("%s model loaded in %.2fs", label, time.perf_counter() - started)
    return result
