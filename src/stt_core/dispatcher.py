"""Route sample buffers to the recognition engine for a language."""

from __future__ import annotations

import time
from typing import Dict, Optional

import numpy as np

from .engines import EngineHandle
from .errors import EngineUnavailable
from .metrics import ENGINE_DECODE_SECONDS

LANG_EN = "en"
LANG_RU = "ru"


def resolve_language(language: str | None) -> str:
    """``ru`` selects Russian; everything else, including empty, is English."""
    return LANG_RU if (language or "").strip().lower() == LANG_RU else LANG_EN


class RecognitionDispatcher:
    """Holds one handle per language; decode calls on a handle never overlap."""

    def __init__(self, handles: Dict[str, Optional[EngineHandle]]) -> None:
        self._handles = dict(handles)

    def handle_for(self, language: str | None) -> Optional[EngineHandle]:
        return self._handles.get(resolve_language(language))

    def is_ready(self, language: str) -> bool:
        return self.handle_for(language) is not None

    def recognize(self, samples: np.ndarray, sample_rate: int, language: str | None) -> str:
        lang = resolve_language(language)
        handle = self._handles.get(lang)
        if handle is None:
            raise EngineUnavailable(f"{lang.upper()} model not loaded")
        started = time.perf_counter()
        try:
            return handle.decode(samples, sample_rate)
        finally:
            ENGINE_DECODE_SECONDS.labels(language=lang).observe(time.perf_counter() - started)
