"""MP4Box command construction for DASH manifest generation."""

import shlex
from collections.abc import Sequence
from pathlib import Path

from dashenc.models.commands import Mp4BoxCommand, StreamAudioFile, StreamVideoFile
from dashenc.models.dash import DashConfig

DEFAULT_KEY_INTERVAL_MS = 3000


def compute_key_interval_ms(framerate: float, keyframe_interval: int) -> float:
    """Segment duration in milliseconds for one GOP.

    Falls back to three seconds when either value is unset.
    """
    if not framerate or not keyframe_interval:
        return DEFAULT_KEY_INTERVAL_MS
    return keyframe_interval / framerate * 1000


def format_key_interval(value: float) -> str:
    if float(value).is_integer():
        return str(int(value))
    return f"{value:.3f}"


def build_mp4box_mpd_command(
    video_files: Sequence[StreamVideoFile],
    audio_files: Sequence[StreamAudioFile],
    mpd_output_path: str,
    key_interval: float,
    additional_flags: str = "",
) -> Mp4BoxCommand:
    """Build an onDemand-profile MP4Box command over the given pieces."""
    interval = format_key_interval(key_interval)
    arguments = [
        "-dash",
        interval,
        "-frag",
        interval,
        "-rap",
        "-frag-rap",
        "-profile",
        "onDemand",
        *shlex.split(additional_flags),
        "-out",
        mpd_output_path,
    ]
    arguments.extend(f"{v.path}#video" for v in video_files)
    arguments.extend(f"{a.path}#audio" for a in audio_files)
    return Mp4BoxCommand(arguments=arguments, mpd_path=mpd_output_path)


def generate_mp4box_command(
    config: DashConfig,
    video_files: Sequence[StreamVideoFile],
    audio_files: Sequence[StreamAudioFile],
) -> Mp4BoxCommand:
    """Default MP4Box command for a resolved configuration."""
    key_interval = compute_key_interval_ms(config.framerate, config.keyframe_interval)
    mpd_output_path = str(Path(config.output_directory) / f"{config.output_file_name}.mpd")
    return build_mp4box_mpd_command(
        video_files=video_files,
        audio_files=audio_files,
        mpd_output_path=mpd_output_path,
        key_interval=key_interval,
        additional_flags=config.options.additional_mp4box_flags,
    )
