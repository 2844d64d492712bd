"""
Configuration management for Jukebox.

Reads configuration from an optional .env file and environment variables
with sensible defaults. All variables use the JUKEBOX_ prefix.
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv


# Default .env file location
DEFAULT_ENV_FILE = Path("/etc/jukebox/jukebox.env")

# ===== PCM FORMAT CONSTANTS ===== #
# Decoders must emit signed 16-bit big-endian stereo at 48 kHz.
SAMPLE_RATE = 48000
CHANNELS = 2
BYTES_PER_SAMPLE = 2  # s16be
FRAME_DURATION_MS = 20
SAMPLES_PER_FRAME = SAMPLE_RATE * FRAME_DURATION_MS // 1000  # 960
FRAME_BYTES = SAMPLES_PER_FRAME * CHANNELS * BYTES_PER_SAMPLE  # 3840
BYTES_PER_SECOND = SAMPLE_RATE * CHANNELS * BYTES_PER_SAMPLE  # 192000

VALID_OUTPUT_MODES = ("null", "wav")
VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

logger = logging.getLogger(__name__)


def _load_env_file() -> None:
    """Load environment variables from .env file if it exists."""
    env_file = os.getenv("JUKEBOX_ENV_FILE", str(DEFAULT_ENV_FILE))
    env_path = Path(env_file)

    if env_path.exists():
        load_dotenv(env_path, override=False)  # Don't override existing env vars


def _parse_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    value = raw.strip().lower()
    if value in ("1", "true", "yes", "on"):
        return True
    if value in ("0", "false", "no", "off"):
        return False
    raise ValueError(f"Invalid {name}: {raw} (must be a boolean)")


def _parse_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"Invalid {name}: {raw} (must be a number)")


@dataclass
class PlayerConfig:
    """Player configuration loaded from .env file and environment variables."""

    # External decoder binaries
    ffmpeg_path: str = "ffmpeg"
    ffprobe_path: str = "ffprobe"
    probe_timeout_sec: float = 5.0
    http_timeout_sec: float = 5.0

    # Initial playback flags
    volume: float = 1.0
    shuffle: bool = False
    repeat: bool = False
    auto_continue: bool = True

    # Saturate instead of wrapping when volume pushes a sample past 16 bits
    volume_clipping: bool = False
    # Emit a STOPPED event (in addition to FINISHED) when the queue runs dry
    emit_stop_on_queue_end: bool = False

    # Output
    output_mode: str = "null"
    output_path: Optional[str] = None

    # Logging
    log_level: str = "INFO"
    log_file: Optional[str] = None

    # Audio format constants (canonical format - not configurable)
    sample_rate: int = SAMPLE_RATE
    channels: int = CHANNELS
    bytes_per_sample: int = BYTES_PER_SAMPLE
    frame_duration_ms: int = FRAME_DURATION_MS

    @property
    def samples_per_frame(self) -> int:
        """Samples per channel in one frame (960 for 20ms at 48kHz)."""
        return self.sample_rate * self.frame_duration_ms // 1000

    @property
    def frame_bytes(self) -> int:
        """Calculate frame size in bytes."""
        return self.samples_per_frame * self.channels * self.bytes_per_sample  # 3840 bytes

    @property
    def frame_duration_sec(self) -> float:
        return self.frame_duration_ms / 1000.0

    @classmethod
    def load_config(cls) -> "PlayerConfig":
        """
        Load configuration from environment variables.

        Returns:
            PlayerConfig instance with loaded values

        Raises:
            ValueError: If configuration is invalid
        """
        # Load .env file first (if it exists)
        _load_env_file()

        output_path = os.getenv("JUKEBOX_OUTPUT_PATH")
        if output_path == "":
            output_path = None

        log_file = os.getenv("JUKEBOX_LOG_FILE")
        if log_file == "":
            log_file = None

        config = cls(
            ffmpeg_path=os.getenv("JUKEBOX_FFMPEG_PATH", "ffmpeg"),
            ffprobe_path=os.getenv("JUKEBOX_FFPROBE_PATH", "ffprobe"),
            probe_timeout_sec=_parse_float("JUKEBOX_PROBE_TIMEOUT_SEC", 5.0),
            http_timeout_sec=_parse_float("JUKEBOX_HTTP_TIMEOUT_SEC", 5.0),
            volume=_parse_float("JUKEBOX_VOLUME", 1.0),
            shuffle=_parse_bool("JUKEBOX_SHUFFLE", False),
            repeat=_parse_bool("JUKEBOX_REPEAT", False),
            auto_continue=_parse_bool("JUKEBOX_AUTO_CONTINUE", True),
            volume_clipping=_parse_bool("JUKEBOX_VOLUME_CLIPPING", False),
            emit_stop_on_queue_end=_parse_bool("JUKEBOX_EMIT_STOP_ON_QUEUE_END", False),
            output_mode=os.getenv("JUKEBOX_OUTPUT_MODE", "null").lower(),
            output_path=output_path,
            log_level=os.getenv("JUKEBOX_LOG_LEVEL", "INFO"),
            log_file=log_file,
        )

        # Validate configuration
        config.validate()

        return config

    def validate(self) -> None:
        """
        Validate configuration values.

        Raises:
            ValueError: If configuration is invalid
        """
        if not self.ffmpeg_path:
            raise ValueError("ffmpeg path cannot be empty")

        if not self.ffprobe_path:
            raise ValueError("ffprobe path cannot be empty")

        if self.probe_timeout_sec <= 0:
            raise ValueError(f"Invalid probe timeout: {self.probe_timeout_sec} (must be > 0)")

        if self.http_timeout_sec <= 0:
            raise ValueError(f"Invalid HTTP timeout: {self.http_timeout_sec} (must be > 0)")

        if self.volume < 0:
            raise ValueError(f"Invalid volume: {self.volume} (must be >= 0)")

        if self.output_mode not in VALID_OUTPUT_MODES:
            raise ValueError(
                f"Invalid JUKEBOX_OUTPUT_MODE: {self.output_mode} "
                f"(must be one of: {', '.join(VALID_OUTPUT_MODES)})"
            )

        if self.output_mode == "wav" and not self.output_path:
            raise ValueError("JUKEBOX_OUTPUT_PATH is required when JUKEBOX_OUTPUT_MODE is 'wav'")

        if self.log_level.upper() not in VALID_LOG_LEVELS:
            raise ValueError(
                f"Invalid log level: {self.log_level} "
                f"(must be one of: {', '.join(VALID_LOG_LEVELS)})"
            )


def load_config() -> PlayerConfig:
    """
    Load and validate Jukebox configuration from environment variables.

    Returns:
        PlayerConfig instance with loaded and validated values

    Raises:
        ValueError: If configuration is invalid
    """
    try:
        return PlayerConfig.load_config()
    except ValueError as e:
        logger.error(f"Configuration error: {e}")
        raise
