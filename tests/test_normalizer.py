import shutil

import numpy as np
import pytest
import soundfile as sf

from src.stt_core import normalizer
from src.stt_core.errors import ConversionError
from src.stt_core.wav import load_wav


def test_wav_passes_through_untouched(tmp_path, monkeypatch):
    source = tmp_path / "clip.WAV"
    source.write_bytes(b"not really audio")

    def _fail(*args, **kwargs):
        raise AssertionError("ffmpeg should not run for wav input")

    monkeypatch.setattr(normalizer, "convert_to_wav", _fail)
    with normalizer.normalize_audio(source, tmp_path) as path:
        assert path == source
    assert source.exists()


def test_temp_file_removed_after_success(tmp_path, monkeypatch):
    work = tmp_path / "work"
    work.mkdir()
    created = []

    def _fake_convert(source, target, **kwargs):
        target.write_bytes(b"RIFF")
        created.append(target)

    monkeypatch.setattr(normalizer, "convert_to_wav", _fake_convert)
    with normalizer.normalize_audio(tmp_path / "clip.mp3", work) as path:
        assert path.exists()
        assert path.suffix == ".wav"
        assert path.name.startswith("moonshine_")
    assert created and not created[0].exists()
    assert list(work.iterdir()) == []


def test_temp_file_removed_when_body_raises(tmp_path, monkeypatch):
    monkeypatch.setattr(normalizer, "convert_to_wav", lambda s, t, **kw: t.write_bytes(b"x"))
    with pytest.raises(ValueError):
        with normalizer.normalize_audio(tmp_path / "clip.ogg", tmp_path):
            raise ValueError("downstream failure")
    assert list(tmp_path.glob("moonshine_*")) == []


def test_missing_ffmpeg_binary_is_conversion_error(tmp_path):
    source = tmp_path / "clip.mp3"
    source.write_bytes(b"\x00" * 32)
    with pytest.raises(ConversionError):
        with normalizer.normalize_audio(source, tmp_path, ffmpeg_binary="ffmpeg-does-not-exist"):
            pass
    assert list(tmp_path.glob("moonshine_*")) == []


@pytest.mark.skipif(shutil.which("ffmpeg") is None, reason="ffmpeg not installed")
def test_ffmpeg_resamples_and_downmixes(tmp_path):
    t = np.arange(44100) / 44100.0
    stereo = np.column_stack([np.sin(2 * np.pi * 440 * t), np.sin(2 * np.pi * 440 * t)]) * 0.3
    source = tmp_path / "clip.flac"
    sf.write(str(source), stereo, 44100, format="FLAC")

    with normalizer.normalize_audio(source, tmp_path) as path:
        buffer = load_wav(path)

    assert buffer.sample_rate == 16000
    assert buffer.channels == 1
    assert abs(len(buffer.samples) - 16000) < 200


@pytest.mark.skipif(shutil.which("ffmpeg") is None, reason="ffmpeg not installed")
def test_ffmpeg_failure_carries_diagnostics(tmp_path):
    source = tmp_path / "broken.mp3"
    source.write_bytes(b"definitely not an mp3")
    with pytest.raises(ConversionError) as excinfo:
        with normalizer.normalize_audio(source, tmp_path):
            pass
    assert "ffmpeg" in str(excinfo.value)
