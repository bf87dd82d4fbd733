"""Data models for dashenc."""

from dashenc.models.commands import (
    FFmpegCommand,
    Mp4BoxCommand,
    RenderedCommand,
    StreamAudioFile,
    StreamFile,
    StreamSubtitleFile,
    StreamVideoFile,
)
from dashenc.models.dash import DashConfig, EncodeOptions, ResolvedDashConfig
from dashenc.models.errors import (
    DashEncError,
    EncodeCancelledError,
    EncoderFailedError,
    ErrorResponse,
    InvalidArgumentError,
    InvalidWorkingDirectoryError,
    ManifestNotCreatedError,
    MuxerFailedError,
)
from dashenc.models.manifest import AdaptationSet, Descriptor, Mpd, Period, Representation
from dashenc.models.media import MediaMetadata, MediaStream
from dashenc.models.pipeline import DashEncodeResult, EncodeStage
from dashenc.models.quality import DefaultQuality, Quality, default_qualities, distinct_by_bitrate

__all__ = [
    "AdaptationSet",
    "DashConfig",
    "DashEncError",
    "DashEncodeResult",
    "DefaultQuality",
    "Descriptor",
    "EncodeCancelledError",
    "EncodeOptions",
    "EncodeStage",
    "EncoderFailedError",
    "ErrorResponse",
    "FFmpegCommand",
    "InvalidArgumentError",
    "InvalidWorkingDirectoryError",
    "ManifestNotCreatedError",
    "MediaMetadata",
    "MediaStream",
    "Mp4BoxCommand",
    "Mpd",
    "MuxerFailedError",
    "Period",
    "Quality",
    "RenderedCommand",
    "Representation",
    "ResolvedDashConfig",
    "StreamAudioFile",
    "StreamFile",
    "StreamSubtitleFile",
    "StreamVideoFile",
    "default_qualities",
    "distinct_by_bitrate",
]
