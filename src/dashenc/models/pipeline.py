"""Encode stage and result models."""

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field

from dashenc.models.commands import FFmpegCommand
from dashenc.models.manifest import Mpd


class EncodeStage(StrEnum):
    """States of a single DASH encode run."""

    PROBED = "probed"
    QUALITIES_RESOLVED = "qualities_resolved"
    ENCODING = "encoding"
    ENCODED = "encoded"
    MUXING = "muxing"
    MUXED = "muxed"
    SUBTITLES_HARVESTED = "subtitles_harvested"
    MANIFEST_POST_PROCESSED = "manifest_post_processed"
    DONE = "done"
    FAILED = "failed"


class DashEncodeResult(BaseModel):
    """Artifacts of a finished run."""

    model_config = ConfigDict(frozen=True)

    mpd_path: str = Field(..., min_length=1)
    mpd: Mpd
    ffmpeg_command: FFmpegCommand
