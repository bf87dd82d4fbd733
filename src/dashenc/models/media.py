"""Probed media data models."""

from decimal import Decimal

from pydantic import BaseModel, Field


class MediaStream(BaseModel):
    """One stream as reported by ffprobe."""

    index: int = Field(default=0, ge=0)
    codec_name: str = ""
    codec_type: str = ""
    pixel_format: str = ""
    profile: str = ""
    level: str = ""
    language: str = ""
    r_frame_rate: str = ""
    bit_rate: int = Field(default=0, ge=0, description="Stream bitrate in b/s")
    width: int = Field(default=0, ge=0)
    height: int = Field(default=0, ge=0)


class MediaMetadata(BaseModel):
    """Normalized view of a probed input file."""

    input_path: str = Field(..., min_length=1)
    video_streams: list[MediaStream] = Field(default_factory=list)
    audio_streams: list[MediaStream] = Field(default_factory=list)
    subtitle_streams: list[MediaStream] = Field(default_factory=list)
    tags: dict[str, str] = Field(default_factory=dict)
    bitrate: int = Field(default=0, ge=0, description="Video (or container) bitrate in b/s")
    framerate: Decimal = Field(default=Decimal(0), ge=0)
    duration: float = Field(default=0.0, ge=0, description="Duration in seconds")
    reference_video_index: int = Field(
        default=0, ge=0, description="Position of the reference stream in video_streams"
    )

    @property
    def kbitrate(self) -> int:
        """Bitrate in kb/s."""
        return self.bitrate // 1000
