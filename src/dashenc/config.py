"""Library configuration using Pydantic BaseSettings."""

import tempfile
from pathlib import Path

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """dashenc configuration loaded from environment variables."""

    model_config = {"env_prefix": "DASHENC_", "env_file": ".env", "extra": "ignore"}

    # External tools
    ffmpeg_path: str = "ffmpeg"
    ffprobe_path: str = "ffprobe"
    mp4box_path: str = "MP4Box"

    # Directories
    working_dir: Path = Path(tempfile.gettempdir())

    # Quality crushing
    crush_tolerance: float = 0.90

    # Process handling
    poll_interval_seconds: float = 0.1

    # Encoding defaults
    video_codec: str = "libx264"
    audio_codec: str = "aac"
    audio_bitrate_kbps: int = 128
    subtitle_codec: str = "webvtt"


def get_settings() -> Settings:
    """Return a settings instance."""
    return Settings()
