"""Plain configuration objects consumed by the pipeline and engine loaders."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from .types import CANONICAL_SAMPLE_RATE

CHUNK_POLICY_ABORT = "abort"
CHUNK_POLICY_BEST_EFFORT = "best_effort"


@dataclass(slots=True)
class PipelineConfig:
    sample_rate: int = CANONICAL_SAMPLE_RATE
    max_audio_duration_s: float = 300.0
    vad_min_duration_s: float = 10.0
    hallucination_threshold: float = 2.4
    tmp_dir: Path = Path("/tmp")
    ffmpeg_binary: str = "ffmpeg"
    chunk_failure_policy: str = CHUNK_POLICY_ABORT


@dataclass(slots=True)
class EngineConfig:
    """Model locations and tuning for the sherpa-onnx engines."""

    models_dir: Path = Path("/models")
    ru_models_dir: Path = Path("/ru-models")
    vad_model: Path = Path("/vad/silero_vad.onnx")
    num_threads: int = 4
    vad_threshold: float = 0.5
    vad_min_silence_s: float = 0.5
    vad_min_speech_s: float = 0.25
    vad_window_size: int = 512
    vad_buffer_s: float = 60.0
    max_chunk_duration_s: float = 25.0
    sample_rate: int = CANONICAL_SAMPLE_RATE
