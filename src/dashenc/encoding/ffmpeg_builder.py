"""ffmpeg command construction for splitting an input into DASH-ready pieces."""

import re
import shlex
from collections.abc import Sequence
from pathlib import Path

from dashenc.config import Settings, get_settings
from dashenc.models.commands import FFmpegCommand, StreamAudioFile, StreamSubtitleFile, StreamVideoFile
from dashenc.models.dash import EncodeOptions, ResolvedDashConfig
from dashenc.models.media import MediaMetadata, MediaStream
from dashenc.models.quality import Quality

DEFAULT_PIXEL_FORMAT = "yuv420p"


def _file_token(value: str) -> str:
    """Make a value safe for use inside a file name."""
    return re.sub(r"[^A-Za-z0-9-]+", "", value) or "und"


class FFmpegCommandBuilder:
    """Builds a single ffmpeg invocation with one output per rendition and stream.

    Every output piece gets an index from one shared counter (video, then audio,
    then subtitles), so later steps can keep numbering where ffmpeg stopped.
    """

    def __init__(
        self,
        input_path: str,
        output_directory: str,
        output_file_name: str,
        options: EncodeOptions | None = None,
        enable_stream_copying: bool = False,
        settings: Settings | None = None,
    ):
        self.input_path = input_path
        self.output_directory = Path(output_directory)
        self.output_file_name = output_file_name
        self.options = options or EncodeOptions()
        self.enable_stream_copying = enable_stream_copying
        self.settings = settings or get_settings()
        self._next_index = 0
        self._video_args: list[str] = []
        self._audio_args: list[str] = []
        self._subtitle_args: list[str] = []
        self.video_pieces: list[StreamVideoFile] = []
        self.audio_pieces: list[StreamAudioFile] = []
        self.subtitle_pieces: list[StreamSubtitleFile] = []

    def _take_index(self) -> int:
        index = self._next_index
        self._next_index += 1
        return index

    def _piece_path(self, suffix: str) -> str:
        return str(self.output_directory / f"{self.output_file_name}_{suffix}")

    def with_video_commands(
        self,
        video_streams: Sequence[MediaStream],
        qualities: Sequence[Quality],
        framerate: int,
        keyframe_interval: int,
        source_kbps: int,
        reference_index: int = 0,
    ) -> "FFmpegCommandBuilder":
        """Add one video output per quality.

        A copy quality in first position is passed through when stream copying
        is enabled; any other copy quality is re-encoded at the source bitrate
        and resolution.
        """
        if not video_streams:
            return self

        extra = shlex.split(self.options.additional_video_flags)
        for position, quality in enumerate(qualities):
            index = self._take_index()
            copied = position == 0 and quality.is_copy and self.enable_stream_copying
            label = "copy" if quality.is_copy else f"{quality.bitrate}k"
            path = self._piece_path(f"video_{label}_{index}.mp4")

            args = ["-map", f"0:v:{reference_index}"]
            if copied:
                args.extend(["-c:v", "copy"])
            else:
                bitrate = quality.bitrate or source_kbps
                args.extend(["-c:v", self.settings.video_codec, "-preset", quality.preset or "medium"])
                if quality.width and quality.height:
                    args.extend(["-s", f"{quality.width}x{quality.height}"])
                if bitrate:
                    args.extend(["-b:v", f"{bitrate}k", "-maxrate", f"{bitrate}k", "-bufsize", f"{bitrate * 2}k"])
                args.extend(["-pix_fmt", quality.pixel_format or DEFAULT_PIXEL_FORMAT])
                if quality.profile:
                    args.extend(["-profile:v", quality.profile])
                if quality.level:
                    args.extend(["-level:v", quality.level])
                if framerate:
                    args.extend(["-r", str(framerate)])
                if keyframe_interval:
                    args.extend(["-g", str(keyframe_interval), "-keyint_min", str(keyframe_interval)])
                    args.extend(["-sc_threshold", "0"])
            args.extend([*extra, "-f", "mp4", path])

            self._video_args.extend(args)
            self.video_pieces.append(StreamVideoFile(index=index, path=path, quality=quality, copied=copied))
        return self

    def with_audio_commands(self, audio_streams: Sequence[MediaStream]) -> "FFmpegCommandBuilder":
        """Add one audio output per input audio stream, in input order."""
        codec = self.settings.audio_codec
        extra = shlex.split(self.options.additional_audio_flags)
        for position, stream in enumerate(audio_streams):
            index = self._take_index()
            language = _file_token(stream.language or "und")
            path = self._piece_path(f"audio_{language}_{index}.mp4")
            args = ["-map", f"0:a:{position}", "-c:a", codec]
            if codec != "copy":
                args.extend(["-b:a", f"{self.settings.audio_bitrate_kbps}k"])
            args.extend([*extra, "-f", "mp4", path])

            self._audio_args.extend(args)
            self.audio_pieces.append(StreamAudioFile(index=index, path=path, language=language, stream=stream))
        return self

    def with_subtitle_commands(self, subtitle_streams: Sequence[MediaStream]) -> "FFmpegCommandBuilder":
        """Add one WebVTT output per input subtitle stream, in input order."""
        extra = shlex.split(self.options.additional_subtitle_flags)
        for position, stream in enumerate(subtitle_streams):
            index = self._take_index()
            language = _file_token(stream.language or "und")
            path = self._piece_path(f"subtitle_{language}_{index}.vtt")
            args = ["-map", f"0:s:{position}", "-c:s", self.settings.subtitle_codec, *extra, "-f", "webvtt", path]

            self._subtitle_args.extend(args)
            self.subtitle_pieces.append(
                StreamSubtitleFile(index=index, path=path, language=language, stream=stream)
            )
        return self

    def build(self) -> FFmpegCommand:
        arguments = ["-hide_banner", "-y", "-i", self.input_path]
        arguments.extend(shlex.split(self.options.additional_ffmpeg_flags))
        arguments.extend(self._video_args)
        arguments.extend(self._audio_args)
        arguments.extend(self._subtitle_args)
        return FFmpegCommand(
            arguments=arguments,
            video_pieces=list(self.video_pieces),
            audio_pieces=list(self.audio_pieces),
            subtitle_pieces=list(self.subtitle_pieces),
        )


def generate_ffmpeg_command(
    config: ResolvedDashConfig, metadata: MediaMetadata, settings: Settings | None = None
) -> FFmpegCommand:
    """Default ffmpeg command for a resolved configuration and its probe data."""
    return (
        FFmpegCommandBuilder(
            input_path=config.input_file_path,
            output_directory=config.output_directory,
            output_file_name=config.output_file_name,
            options=config.options,
            enable_stream_copying=config.enable_stream_copying and config.stream_copy_allowed,
            settings=settings,
        )
        .with_video_commands(
            metadata.video_streams,
            config.qualities,
            config.framerate,
            config.keyframe_interval,
            metadata.kbitrate,
            metadata.reference_video_index,
        )
        .with_audio_commands(metadata.audio_streams)
        .with_subtitle_commands(metadata.subtitle_streams)
        .build()
    )
