"""Process-wide engine ownership: load once at startup, release at shutdown."""

from __future__ import annotations

import logging
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Optional

import numpy as np

from . import engines
from .config import EngineConfig
from .dispatcher import LANG_EN, LANG_RU, RecognitionDispatcher
from .engines import EngineHandle
from .segmentation import Segmenter

LOGGER = logging.getLogger("moonshine.context")


@dataclass
class AppContext:
    """Owned engine handles shared by every request."""

    en: Optional[EngineHandle]
    ru: Optional[EngineHandle] = None
    segmenter: Optional[Segmenter] = None
    dispatcher: RecognitionDispatcher = field(init=False)

    def __post_init__(self) -> None:
        self.dispatcher = RecognitionDispatcher({LANG_EN: self.en, LANG_RU: self.ru})

    @property
    def vad_ready(self) -> bool:
        return self.segmenter is not None

    def warmup(self, sample_rate: int = 16_000) -> None:
        """Decode one second of silence on every loaded engine."""
        silence = np.zeros(sample_rate, dtype=np.float32)
        for handle in (self.en, self.ru):
            if handle is not None:
                handle.decode(silence, sample_rate)
        LOGGER.info("Warmup complete")

    def close(self) -> None:
        for handle in (self.en, self.ru):
            if handle is not None:
                handle.release()
        self.segmenter = None
        LOGGER.info("Engines released")


def _load_ru(config: EngineConfig) -> Optional[EngineHandle]:
    if not engines.zipformer_available(config.ru_models_dir):
        LOGGER.warning("RU model not found at %s, RU transcription unavailable", config.ru_models_dir)
        return None
    try:
        engine = engines.timed_load(
            "RU", engines.load_zipformer, config.ru_models_dir, config.num_threads, config.sample_rate
        )
    except Exception as exc:
        LOGGER.warning("Failed to load RU model, RU transcription unavailable: %s", exc)
        return None
    return EngineHandle(language=LANG_RU, model=engines.RU_MODEL_NAME, engine=engine)


def _load_vad(config: EngineConfig) -> Optional[Segmenter]:
    if not config.vad_model.exists():
        LOGGER.info("Silero VAD not found at %s (set SILERO_VAD_MODEL to enable)", config.vad_model)
        return None
    try:
        vad = engines.load_silero_vad(config)
    except Exception as exc:
        LOGGER.warning("Failed to load Silero VAD from %s: %s", config.vad_model, exc)
        return None
    LOGGER.info("Silero VAD loaded from %s", config.vad_model)
    return Segmenter(
        vad,
        sample_rate=config.sample_rate,
        window_size=config.vad_window_size,
        max_chunk_duration_s=config.max_chunk_duration_s,
    )


def load_context(config: EngineConfig) -> AppContext:
    """Load EN and RU concurrently, then the optional VAD.

    Failing to load the English model raises; everything else degrades to an
    unavailable handle.
    """
    started = time.perf_counter()
    with ThreadPoolExecutor(max_workers=2, thread_name_prefix="model-load") as pool:
        en_future = pool.submit(
            engines.timed_load, "EN", engines.load_moonshine, config.models_dir, config.num_threads
        )
        ru_future = pool.submit(_load_ru, config)
        try:
            en_engine = en_future.result()
        except Exception:
            LOGGER.error("Failed to load EN model from %s", config.models_dir)
            raise
        ru = ru_future.result()
    LOGGER.info("All models loaded in %.2fs", time.perf_counter() - started)

    segmenter = _load_vad(config)

    en = EngineHandle(language=LANG_EN, model=engines.EN_MODEL_NAME, engine=en_engine)
    return AppContext(en=en, ru=ru, segmenter=segmenter)
