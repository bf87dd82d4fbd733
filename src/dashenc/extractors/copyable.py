"""Stream-copy eligibility check."""

from collections.abc import Sequence
from typing import Protocol

from dashenc.models.media import MediaStream

COPYABLE_VIDEO_CODECS = {"h264"}


class CopyEligibilityChecker(Protocol):
    def __call__(
        self,
        pixel_format: str,
        level: str,
        profile: str,
        video_streams: Sequence[MediaStream],
        reference_index: int = 0,
    ) -> bool: ...


def h264_copy_eligible(
    pixel_format: str,
    level: str,
    profile: str,
    video_streams: Sequence[MediaStream],
    reference_index: int = 0,
) -> bool:
    """Accept a copy only when the reference stream is h264 and matches every given hint.

    ``reference_index`` is the position in ``video_streams`` of the stream
    ffmpeg maps. Empty hints are not checked. A missing stream means nothing
    can be copied.
    """
    if not 0 <= reference_index < len(video_streams):
        return False
    stream = video_streams[reference_index]
    if stream.codec_name not in COPYABLE_VIDEO_CODECS:
        return False
    if pixel_format and stream.pixel_format != pixel_format:
        return False
    if profile and stream.profile.lower() != profile.lower():
        return False
    if level and _normalize_level(stream.level) != _normalize_level(level):
        return False
    return True


def _normalize_level(level: str) -> str:
    # ffprobe reports h264 level 4.1 as "41"
    return level.replace(".", "").strip()
