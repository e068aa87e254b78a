import threading

import numpy as np
import pytest

from src.stt_core.dispatcher import RecognitionDispatcher, resolve_language
from src.stt_core.engines import EngineHandle
from src.stt_core.errors import EngineUnavailable
from tests.fakes import BarrierEngine, RecordingEngine

SAMPLES = np.zeros(1600, dtype=np.float32)


def _dispatcher(en, ru):
    return RecognitionDispatcher(
        {
            "en": EngineHandle(language="en", model="en", engine=en) if en else None,
            "ru": EngineHandle(language="ru", model="ru", engine=ru) if ru else None,
        }
    )


@pytest.mark.parametrize(
    "language, expected",
    [("ru", "ru"), ("RU ", "ru"), ("en", "en"), ("", "en"), (None, "en"), ("de", "en")],
)
def test_resolve_language(language, expected):
    assert resolve_language(language) == expected


def test_routes_by_language():
    en, ru = RecordingEngine("hello"), RecordingEngine("привет")
    dispatcher = _dispatcher(en, ru)
    assert dispatcher.recognize(SAMPLES, 16000, "ru") == "привет"
    assert dispatcher.recognize(SAMPLES, 16000, "fr") == "hello"
    assert len(en.calls) == 1 and len(ru.calls) == 1


def test_missing_engine_is_unavailable_without_decoding():
    en = RecordingEngine("hello")
    dispatcher = _dispatcher(en, None)
    with pytest.raises(EngineUnavailable):
        dispatcher.recognize(SAMPLES, 16000, "ru")
    assert en.calls == []
    assert not dispatcher.is_ready("ru")


def test_same_language_decodes_never_overlap():
    engine = RecordingEngine("x", delay=0.02)
    dispatcher = _dispatcher(engine, None)
    threads = [
        threading.Thread(target=dispatcher.recognize, args=(SAMPLES, 16000, "en")) for _ in range(6)
    ]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert engine.max_active == 1
    intervals = sorted(engine.intervals)
    assert len(intervals) == 6
    for (_, prev_exit), (next_enter, _) in zip(intervals, intervals[1:]):
        assert next_enter >= prev_exit


def test_different_languages_may_overlap():
    # Both decodes must be inside their engines at the same time to pass the barrier.
    barrier = threading.Barrier(2, timeout=5)
    en, ru = BarrierEngine(barrier), BarrierEngine(barrier)
    dispatcher = _dispatcher(en, ru)
    errors: list[BaseException] = []

    def call(lang: str) -> None:
        try:
            dispatcher.recognize(SAMPLES, 16000, lang)
        except BaseException as exc:  # noqa: BLE001
            errors.append(exc)

    threads = [threading.Thread(target=call, args=(lang,)) for lang in ("en", "ru")]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert errors == []
    assert len(en.calls) == 1 and len(ru.calls) == 1
