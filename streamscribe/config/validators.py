"""Configuration validation schemas using Pydantic."""

from typing import Any, Dict, Optional, Union

from pydantic import BaseModel, Field, field_validator


class AudioConfig(BaseModel):
    """Audio input configuration validation."""

    host_api: Optional[str] = Field(
        default=None, description="Host API name (e.g. 'JACK Audio Connection Kit')"
    )
    device: Optional[Union[int, str]] = Field(
        default=None, description="Input device index or name"
    )
    blocksize: int = Field(
        default=0, description="Frames per callback (0 lets the host choose)"
    )
    input_file: Optional[str] = Field(
        default=None, description="Replay a mono WAV file instead of the microphone"
    )
    realtime_playback: bool = Field(
        default=True, description="Pace file replay at the file's sample rate"
    )

    @field_validator("blocksize")
    @classmethod
    def validate_blocksize(cls, v: int) -> int:
        if v < 0:
            raise ValueError("Blocksize cannot be negative")
        return v

    @field_validator("host_api")
    @classmethod
    def validate_host_api(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not v.strip():
            raise ValueError("Host API name must be a non-empty string")
        return v


class ASRConfig(BaseModel):
    """Speech recognizer configuration validation."""

    model_path: str = Field(
        default="model/vosk-model-en-us-0.42-gigaspeech",
        description="Path to an unpacked Vosk model directory",
    )
    max_alternatives: int = Field(
        default=0, description="Number of alternatives to request (0 = single)"
    )
    words: bool = Field(default=False, description="Include word timings in results")
    log_level: int = Field(
        default=-1, description="Kaldi log level (-1 silences engine output)"
    )

    @field_validator("model_path")
    @classmethod
    def validate_model_path(cls, v: Any) -> str:
        if not v or not isinstance(v, str):
            raise ValueError("Model path must be a non-empty string")
        return v

    @field_validator("max_alternatives")
    @classmethod
    def validate_max_alternatives(cls, v: int) -> int:
        if v < 0:
            raise ValueError("Max alternatives cannot be negative")
        return v


class PipelineConfig(BaseModel):
    """Transfer channel monitoring configuration."""

    backlog_warning_chunks: int = Field(
        default=200,
        description="Warn when this many chunks wait for recognition (0 disables)",
    )

    @field_validator("backlog_warning_chunks")
    @classmethod
    def validate_backlog(cls, v: int) -> int:
        if v < 0:
            raise ValueError("Backlog warning threshold cannot be negative")
        return v


class LoggingConfig(BaseModel):
    """Logging configuration validation."""

    level: str = Field(default="INFO", description="Logging level")
    format: str = Field(
        default="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        description="Log record format",
    )
    directory: Optional[str] = Field(
        default=None, description="Directory for daily log files (None disables)"
    )

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        valid_levels = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
        if v.upper() not in valid_levels:
            raise ValueError(f"Log level must be one of: {valid_levels}")
        return v.upper()


class StreamScribeConfig(BaseModel):
    """Main streamscribe configuration validation."""

    audio: AudioConfig = Field(default_factory=AudioConfig)
    asr: ASRConfig = Field(default_factory=ASRConfig)
    pipeline: PipelineConfig = Field(default_factory=PipelineConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = {
        "extra": "allow",
        "validate_assignment": True,
    }


def validate_config(config_dict: Dict[str, Any]) -> StreamScribeConfig:
    """Validate configuration dictionary using Pydantic schemas.

    Args:
        config_dict: Configuration dictionary to validate

    Returns:
        Validated StreamScribeConfig instance

    Raises:
        ValueError: If configuration validation fails
    """
    try:
        return StreamScribeConfig(**config_dict)
    except Exception as e:
        raise ValueError(f"Configuration validation failed: {e}") from e
