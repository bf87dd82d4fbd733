"""Input probing with ffprobe."""

import json
import logging
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from dashenc.encoding.execution import run_managed
from dashenc.models.media import MediaMetadata, MediaStream

logger = logging.getLogger(__name__)

SUPPORTED_INPUT_CODECS = {"h264", "hevc", "vp8", "vp9", "av1", "mpeg4", "mpeg2video", "theora", "vc1"}


def parse_framerate(value: str | None) -> Decimal:
    """Parse "29.97" or "30000/1001" into a decimal; 0 when unparsable."""
    if not value:
        return Decimal(0)
    try:
        rate = Decimal(value)
    except InvalidOperation:
        rate = Decimal(0)
        if "/" in value:
            try:
                numerator, denominator = (Decimal(part) for part in value.split("/", 1))
                rate = numerator / denominator
            except (InvalidOperation, ZeroDivisionError, ValueError):
                return Decimal(0)
    if not rate.is_finite() or rate < 0:
        return Decimal(0)
    return rate


def _int(value: Any) -> int:
    try:
        return int(float(value))
    except (TypeError, ValueError):
        return 0


def _stream(raw: dict) -> MediaStream:
    tags = {str(k).lower(): str(v) for k, v in (raw.get("tags") or {}).items()}
    level = raw.get("level")
    return MediaStream(
        index=_int(raw.get("index")),
        codec_name=raw.get("codec_name") or "",
        codec_type=raw.get("codec_type") or "",
        pixel_format=raw.get("pix_fmt") or "",
        profile=str(raw.get("profile") or ""),
        level="" if level is None else str(level),
        language=tags.get("language", ""),
        r_frame_rate=raw.get("r_frame_rate") or "",
        bit_rate=max(_int(raw.get("bit_rate")), 0),
        width=max(_int(raw.get("width")), 0),
        height=max(_int(raw.get("height")), 0),
    )


def parse_probe_data(input_path: str, data: dict) -> MediaMetadata:
    """Normalize ffprobe's JSON (``-show_format -show_streams``) into MediaMetadata."""
    streams: dict[str, list[MediaStream]] = {"video": [], "audio": [], "subtitle": []}
    for raw in data.get("streams") or []:
        stream = _stream(raw)
        if stream.codec_type in streams:
            streams[stream.codec_type].append(stream)

    fmt = data.get("format") or {}
    tags: dict[str, str] = {}
    for key, value in (fmt.get("tags") or {}).items():
        tags.setdefault(str(key).lower(), str(value))

    video_streams = streams["video"]
    reference_index = next(
        (i for i, s in enumerate(video_streams) if s.codec_name in SUPPORTED_INPUT_CODECS), 0
    )
    framerate = Decimal(0)
    bitrate = 0
    if video_streams:
        reference = video_streams[reference_index]
        framerate = parse_framerate(reference.r_frame_rate)
        bitrate = reference.bit_rate or max(_int(fmt.get("bit_rate")), 0)

    duration = fmt.get("duration")
    return MediaMetadata(
        input_path=input_path,
        video_streams=video_streams,
        audio_streams=streams["audio"],
        subtitle_streams=streams["subtitle"],
        tags=tags,
        bitrate=bitrate,
        framerate=framerate,
        duration=max(float(duration), 0.0) if duration not in (None, "", "N/A") else 0.0,
        reference_video_index=reference_index,
    )


def probe_file(input_path: str | Path, ffprobe_path: str = "ffprobe") -> tuple[MediaMetadata | None, dict | None]:
    """Run ffprobe on a file and return the metadata plus the raw probe data.

    Output that cannot be parsed gives ``(None, None)`` rather than an error.
    """
    args = ["-v", "quiet", "-print_format", "json", "-show_format", "-show_streams", "--", str(input_path)]
    result = run_managed(ffprobe_path, args)
    try:
        raw = json.loads("\n".join(result.output))
        return parse_probe_data(str(input_path), raw), raw
    except (json.JSONDecodeError, ValidationError, ValueError, AttributeError) as e:
        logger.warning(f"Failed to parse ffprobe output for {input_path}: {e}")
        return None, None
