import numpy as np
import pytest
import soundfile as sf

from src.stt_core.errors import MalformedInput, UnsupportedFormat
from src.stt_core.wav import HEADER_SIZE, decode_wav, load_wav
from tests.fakes import wav_bytes


def test_mono_decode_is_exact(tmp_path):
    rng = np.random.default_rng(7)
    pcm = rng.integers(-32768, 32767, size=4000, dtype=np.int16)
    path = tmp_path / "mono.wav"
    sf.write(str(path), pcm, 16000, subtype="PCM_16")

    buffer = load_wav(path)

    assert buffer.sample_rate == 16000
    assert buffer.channels == 1
    assert buffer.samples.dtype == np.float32
    assert np.array_equal((buffer.samples * 32768).astype(np.int16), pcm)
    assert buffer.samples.min() >= -1.0 and buffer.samples.max() < 1.0


def test_stereo_is_downmixed_by_averaging():
    left = np.array([1000, -2000, 32767], dtype=np.int16)
    right = np.array([3000, 2000, 32767], dtype=np.int16)
    interleaved = np.column_stack([left, right]).reshape(-1)

    buffer = decode_wav(wav_bytes(interleaved, channels=2))

    assert buffer.channels == 2
    expected = (left.astype(np.float32) + right.astype(np.float32)) / 2.0 / 32768.0
    assert np.allclose(buffer.samples, expected)
    assert len(buffer.samples) == 3


def test_duration_reflects_sample_rate():
    buffer = decode_wav(wav_bytes(np.zeros(8000, dtype=np.int16), sample_rate=8000))
    assert buffer.sample_rate == 8000
    assert buffer.duration_s == pytest.approx(1.0)


def test_trailing_partial_frame_is_ignored():
    data = wav_bytes(np.array([1, 2, 3, 4], dtype=np.int16), channels=2) + b"\x01"
    buffer = decode_wav(data)
    assert len(buffer.samples) == 2


def test_unsupported_bit_depth():
    with pytest.raises(UnsupportedFormat, match="8bit 1ch"):
        decode_wav(wav_bytes(bytes([128] * 100), bits=8))


def test_unsupported_channel_count():
    with pytest.raises(UnsupportedFormat):
        decode_wav(wav_bytes(np.zeros(12, dtype=np.int16), channels=3))


def test_truncated_header_is_malformed():
    with pytest.raises(MalformedInput):
        decode_wav(wav_bytes(np.zeros(10, dtype=np.int16))[: HEADER_SIZE - 1])


def test_non_riff_payload_is_malformed():
    with pytest.raises(MalformedInput):
        decode_wav(b"ID3" + b"\x00" * 100)


def test_missing_file_is_malformed(tmp_path):
    with pytest.raises(MalformedInput, match="read wav"):
        load_wav(tmp_path / "nope.wav")
