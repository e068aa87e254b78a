"""API settings resolved from the environment."""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path

from pydantic import BaseModel, Field

from src.stt_core.config import EngineConfig, PipelineConfig


def _flag(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in {"1", "true", "yes"}


class APISettings(BaseModel):
    app_name: str = Field(default="Moonshine Transcription API")
    version: str = Field(default=os.getenv("BUILD_VERSION", "dev"))
    commit: str = Field(default=os.getenv("BUILD_COMMIT", "unknown"))
    host: str = Field(default=os.getenv("MOONSHINE_HOST", "0.0.0.0"))
    port: int = Field(default=int(os.getenv("MOONSHINE_PORT", "8092")))
    models_dir: str = Field(default=os.getenv("MOONSHINE_MODELS_DIR", "/models"))
    ru_models_dir: str = Field(default=os.getenv("ZIPFORMER_RU_DIR", "/ru-models"))
    vad_model: str = Field(default=os.getenv("SILERO_VAD_MODEL", "/vad/silero_vad.onnx"))
    num_threads: int = Field(default=int(os.getenv("NUM_THREADS", "4")))
    max_audio_duration_s: float = Field(
        default=float(os.getenv("MAX_AUDIO_DURATION_S", "300"))
    )
    vad_min_duration_s: float = Field(default=float(os.getenv("VAD_MIN_DURATION_S", "10")))
    max_chunk_duration_s: float = Field(
        default=float(os.getenv("MAX_CHUNK_DURATION_S", "25"))
    )
    hallucination_threshold: float = Field(
        default=float(os.getenv("HALLUCINATION_THRESHOLD", "2.4"))
    )
    vad_threshold: float = Field(default=float(os.getenv("VAD_THRESHOLD", "0.5")))
    vad_min_silence_s: float = Field(default=float(os.getenv("VAD_MIN_SILENCE_S", "0.5")))
    vad_min_speech_s: float = Field(default=float(os.getenv("VAD_MIN_SPEECH_S", "0.25")))
    tmp_dir: str = Field(default=os.getenv("TMP_DIR", "/tmp"))
    ffmpeg_binary: str = Field(default=os.getenv("FFMPEG_BINARY", "ffmpeg"))
    max_upload_bytes: int = Field(default=int(os.getenv("MAX_UPLOAD_BYTES", str(50 << 20))))
    chunk_failure_policy: str = Field(default=os.getenv("CHUNK_FAILURE_POLICY", "abort"))
    warmup: bool = Field(default=_flag("WARMUP", "true"))
    log_level: str = Field(default=os.getenv("LOG_LEVEL", "INFO"))
    log_file: str | None = Field(default=os.getenv("LOG_FILE"))
    graceful_shutdown_s: int = Field(default=int(os.getenv("GRACEFUL_SHUTDOWN_S", "30")))
    timeout_keep_alive_s: int = Field(default=int(os.getenv("TIMEOUT_KEEP_ALIVE_S", "120")))

    def pipeline_config(self) -> PipelineConfig:
        return PipelineConfig(
            max_audio_duration_s=self.max_audio_duration_s,
            vad_min_duration_s=self.vad_min_duration_s,
            hallucination_threshold=self.hallucination_threshold,
            tmp_dir=Path(self.tmp_dir),
            ffmpeg_binary=self.ffmpeg_binary,
            chunk_failure_policy=self.chunk_failure_policy,
        )

    def engine_config(self) -> EngineConfig:
        return EngineConfig(
            models_dir=Path(self.models_dir),
            ru_models_dir=Path(self.ru_models_dir),
            vad_model=Path(self.vad_model),
            num_threads=self.num_threads,
            vad_threshold=self.vad_threshold,
            vad_min_silence_s=self.vad_min_silence_s,
            vad_min_speech_s=self.vad_min_speech_s,
            max_chunk_duration_s=self.max_chunk_duration_s,
        )


@lru_cache()
def get_settings() -> APISettings:
    return APISettings()
