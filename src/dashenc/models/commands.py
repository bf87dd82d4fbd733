"""Rendered external tool commands and the files they produce."""

import shlex
from pathlib import Path

from pydantic import BaseModel, Field

from dashenc.models.media import MediaStream
from dashenc.models.quality import Quality


class StreamFile(BaseModel):
    """One output piece of the ffmpeg command."""

    index: int = Field(..., ge=0)
    path: str = Field(..., min_length=1)

    @property
    def file_name(self) -> str:
        return Path(self.path).name


class StreamVideoFile(StreamFile):
    quality: Quality
    copied: bool = False


class StreamAudioFile(StreamFile):
    language: str = "und"
    stream: MediaStream | None = None


class StreamSubtitleFile(StreamFile):
    language: str = "und"
    stream: MediaStream | None = None


class RenderedCommand(BaseModel):
    """An argument list for an external tool."""

    arguments: list[str] = Field(default_factory=list)

    @property
    def rendered(self) -> str:
        """The arguments as a single shell-safe string."""
        return shlex.join(self.arguments)


class FFmpegCommand(RenderedCommand):
    """The ffmpeg invocation and every piece it is expected to write."""

    video_pieces: list[StreamVideoFile] = Field(default_factory=list)
    audio_pieces: list[StreamAudioFile] = Field(default_factory=list)
    subtitle_pieces: list[StreamSubtitleFile] = Field(default_factory=list)

    @property
    def all_pieces(self) -> list[StreamFile]:
        return [*self.video_pieces, *self.audio_pieces, *self.subtitle_pieces]


class Mp4BoxCommand(RenderedCommand):
    """The MP4Box invocation and the manifest it writes."""

    mpd_path: str = Field(..., min_length=1)
