"""DASH request and resolved configuration models."""

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, model_validator

from dashenc.models.quality import Quality


class EncodeOptions(BaseModel):
    """Free-form flags passed to the external tools verbatim."""

    model_config = ConfigDict(frozen=True)

    additional_ffmpeg_flags: str = Field(default="", description="Inserted before the first output")
    additional_video_flags: str = Field(default="", description="Appended to every video output")
    additional_audio_flags: str = Field(default="", description="Appended to every audio output")
    additional_subtitle_flags: str = Field(default="", description="Appended to every subtitle output")
    additional_mp4box_flags: str = Field(default="", description="Appended to the MP4Box command")


class DashConfig(BaseModel):
    """What to encode and how. Never mutated by the encoder."""

    model_config = ConfigDict(frozen=True)

    input_file_path: str = Field(..., min_length=1)
    output_directory: str = Field(..., min_length=1)
    output_file_name: str = ""
    qualities: list[Quality] = Field(..., min_length=1, description="Highest rendition first")
    framerate: int = Field(default=0, ge=0, description="0 means match the input")
    keyframe_interval: int = Field(default=0, ge=0, description="GOP size in frames, 0 means 3 seconds")
    enable_stream_copying: bool = False
    enable_quality_crushing: bool = True
    options: EncodeOptions = Field(default_factory=EncodeOptions)

    @model_validator(mode="before")
    @classmethod
    def default_output_file_name(cls, data):
        if isinstance(data, dict) and not data.get("output_file_name") and data.get("input_file_path"):
            data = {**data, "output_file_name": Path(str(data["input_file_path"])).stem}
        return data

    @property
    def mpd_path(self) -> Path:
        return Path(self.output_directory) / f"{self.output_file_name}.mpd"


class ResolvedDashConfig(DashConfig):
    """A DashConfig after probing: crushed ladder, back-filled timing, copy decision."""

    stream_copy_allowed: bool = False

    @classmethod
    def resolve(
        cls,
        config: DashConfig,
        qualities: list[Quality],
        framerate: int,
        keyframe_interval: int,
        stream_copy_allowed: bool,
    ) -> "ResolvedDashConfig":
        fields = {name: getattr(config, name) for name in DashConfig.model_fields}
        fields.update(
            qualities=qualities,
            framerate=framerate,
            keyframe_interval=keyframe_interval,
            stream_copy_allowed=stream_copy_allowed,
        )
        return cls(**fields)
