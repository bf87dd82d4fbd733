"""Encode orchestrator - runs ffmpeg and MP4Box and finishes the manifest."""

import logging
import threading
from collections.abc import Callable, Sequence
from functools import partial
from pathlib import Path

from dashenc.config import Settings, get_settings
from dashenc.encoding.crusher import crush_qualities
from dashenc.encoding.execution import run_managed
from dashenc.encoding.ffmpeg_builder import generate_ffmpeg_command
from dashenc.encoding.mp4box_builder import generate_mp4box_command
from dashenc.encoding.progress import FFmpegProgressMonitor
from dashenc.extractors.copyable import CopyEligibilityChecker, h264_copy_eligible
from dashenc.extractors.probe import probe_file
from dashenc.manifest.mpd_io import try_load_mpd
from dashenc.manifest.postprocess import post_process_mpd_file
from dashenc.models.commands import FFmpegCommand, Mp4BoxCommand, StreamAudioFile, StreamVideoFile
from dashenc.models.dash import DashConfig, ResolvedDashConfig
from dashenc.models.errors import (
    DashEncError,
    EncodeCancelledError,
    EncoderFailedError,
    InvalidArgumentError,
    InvalidWorkingDirectoryError,
    ManifestNotCreatedError,
    MuxerFailedError,
)
from dashenc.models.media import MediaMetadata
from dashenc.models.pipeline import DashEncodeResult, EncodeStage
from dashenc.pipeline.subtitles import process_subtitles
from dashenc.storage.cleanup import clean_files

logger = logging.getLogger(__name__)

FFmpegCommandGenerator = Callable[[ResolvedDashConfig, MediaMetadata], FFmpegCommand]
Mp4BoxCommandGenerator = Callable[
    [ResolvedDashConfig, Sequence[StreamVideoFile], Sequence[StreamAudioFile]], Mp4BoxCommand
]


class DashEncoder:
    """Converts one input file into a DASH manifest with its media and subtitle files.

    Tool paths default to the values in Settings. ``stdout_log`` and
    ``stderr_log`` receive the tools' output and cleanup messages; they default
    to this module's logger.
    """

    def __init__(
        self,
        ffmpeg_path: str | None = None,
        ffprobe_path: str | None = None,
        mp4box_path: str | None = None,
        stdout_log: Callable[[str], None] | None = None,
        stderr_log: Callable[[str], None] | None = None,
        working_directory: str | Path | None = None,
        ffmpeg_command_generator: FFmpegCommandGenerator | None = None,
        mp4box_command_generator: Mp4BoxCommandGenerator | None = None,
        copy_checker: CopyEligibilityChecker | None = None,
        settings: Settings | None = None,
    ):
        self.settings = settings or get_settings()
        self.ffmpeg_path = ffmpeg_path or self.settings.ffmpeg_path
        self.ffprobe_path = ffprobe_path or self.settings.ffprobe_path
        self.mp4box_path = mp4box_path or self.settings.mp4box_path
        self.stdout_log = stdout_log or logger.debug
        self.stderr_log = stderr_log or logger.info
        self.working_directory = Path(working_directory or self.settings.working_dir)
        self.ffmpeg_command_generator = ffmpeg_command_generator or partial(
            generate_ffmpeg_command, settings=self.settings
        )
        self.mp4box_command_generator = mp4box_command_generator or generate_mp4box_command
        self.copy_checker = copy_checker or h264_copy_eligible
        self._check_working_directory()

    def _check_working_directory(self) -> None:
        if not self.working_directory.is_dir():
            raise InvalidWorkingDirectoryError(
                "The given path for the working directory doesn't exist.",
                details={"working_directory": str(self.working_directory)},
            )

    def probe_file(self, input_path: str | Path) -> tuple[MediaMetadata | None, dict | None]:
        """Probe an input with ffprobe. Returns (None, None) if the output can't be parsed."""
        return probe_file(input_path, self.ffprobe_path)

    def resolve_config(self, config: DashConfig, metadata: MediaMetadata) -> ResolvedDashConfig:
        """Crush the ladder, decide on stream copying and fill in frame timing."""
        qualities = list(config.qualities)
        if config.enable_quality_crushing:
            qualities = list(crush_qualities(qualities, metadata.kbitrate, self.settings.crush_tolerance))
        compare_quality = qualities[0]

        stream_copy = False
        if config.enable_stream_copying and compare_quality.is_copy:
            stream_copy = self.copy_checker(
                compare_quality.pixel_format,
                compare_quality.level,
                compare_quality.profile,
                metadata.video_streams,
                metadata.reference_video_index,
            )
            if not stream_copy:
                logger.info(f"Source video of {config.input_file_path} can't be copied, transcoding instead")

        framerate = config.framerate if config.framerate > 0 else int(round(metadata.framerate))
        keyframe_interval = config.keyframe_interval if config.keyframe_interval > 0 else framerate * 3

        return ResolvedDashConfig.resolve(
            config,
            qualities=qualities,
            framerate=framerate,
            keyframe_interval=keyframe_interval,
            stream_copy_allowed=stream_copy,
        )

    def encode_video(
        self,
        config: ResolvedDashConfig,
        metadata: MediaMetadata,
        progress: Callable[[float], None] | None = None,
        cancel: threading.Event | None = None,
    ) -> FFmpegCommand:
        """Split and re-encode the input into per-stream files with ffmpeg.

        On any failure every file the command would have produced is removed
        and EncoderFailedError is raised.
        """
        command = None
        log: list[str] = []

        def on_stdout(line: str) -> None:
            log.append(line)
            self.stdout_log(line)

        try:
            command = self.ffmpeg_command_generator(config, metadata)
            Path(config.output_directory).mkdir(parents=True, exist_ok=True)
            monitor = FFmpegProgressMonitor(metadata.duration, progress, self.stdout_log, self.stderr_log)

            def on_stderr(line: str) -> None:
                log.append(line)
                monitor.handle_line(line)

            result = run_managed(
                self.ffmpeg_path,
                command.arguments,
                on_stdout,
                on_stderr,
                cancel,
                self.settings.poll_interval_seconds,
            )
            if result.exit_code != 0:
                raise EncoderFailedError(
                    f"ffmpeg returned code {result.exit_code}. File: {config.input_file_path}",
                    command=command,
                    log="\n".join(log),
                )
        except Exception as e:
            if command is not None:
                clean_files((piece.path for piece in command.all_pieces), self.stderr_log)
            logger.error(f"ffmpeg stage failed for {config.input_file_path}: {e}")
            if isinstance(e, EncoderFailedError):
                raise
            raise EncoderFailedError(str(e), command=command, log="\n".join(log)) from e

        return command

    def _clean_partial_manifest(self, config: DashConfig, mpd_path: Path, output: list[str]) -> None:
        """Remove a half-written manifest, everything it references and files MP4Box reported."""
        if not mpd_path.exists():
            return
        output_directory = Path(config.output_directory).resolve()
        mpd = try_load_mpd(mpd_path)
        if mpd is not None:
            clean_files((output_directory / name for name in mpd.file_names()), self.stderr_log)
        reported = [
            line.strip()
            for line in output
            if line.strip() and Path(line.strip()).is_file() and Path(line.strip()).resolve().parent == output_directory
        ]
        clean_files([*reported, mpd_path], self.stderr_log)

    def generate_dash_manifest(
        self,
        config: ResolvedDashConfig,
        video_files: Sequence[StreamVideoFile],
        audio_files: Sequence[StreamAudioFile],
        cancel: threading.Event | None = None,
        ffmpeg_command: FFmpegCommand | None = None,
    ) -> Mp4BoxCommand:
        """Run MP4Box over the ffmpeg pieces to produce the manifest.

        The video and audio pieces are intermediates and are deleted whether or
        not MP4Box succeeds. ``ffmpeg_command`` is only used for error context.
        """
        mp4box_command = None
        log: list[str] = []

        def on_stdout(line: str) -> None:
            log.append(line)
            self.stdout_log(line)

        def on_stderr(line: str) -> None:
            log.append(line)
            self.stderr_log(line)

        try:
            mp4box_command = self.mp4box_command_generator(config, video_files, audio_files)
            result = run_managed(
                self.mp4box_path,
                mp4box_command.arguments,
                on_stdout,
                on_stderr,
                cancel,
                self.settings.poll_interval_seconds,
            )
            mpd_path = Path(mp4box_command.mpd_path)
            if result.exit_code != 0:
                self._clean_partial_manifest(config, mpd_path, result.output)
                raise MuxerFailedError(
                    f"MP4Box returned code {result.exit_code}. File: {config.input_file_path}",
                    command=ffmpeg_command,
                    mp4box_command=mp4box_command,
                    log="\n".join(log),
                )
            if not mpd_path.exists():
                raise ManifestNotCreatedError(
                    f"MP4Box appeared to succeed, but no MPD file was created at {mpd_path}. "
                    f"File: {config.input_file_path}",
                    manifest_path=str(mpd_path),
                    command=ffmpeg_command,
                    mp4box_command=mp4box_command,
                    log="\n".join(log),
                )
        except MuxerFailedError as e:
            logger.error(e.message)
            raise
        except Exception as e:
            logger.error(f"MP4Box stage failed for {config.input_file_path}: {e}")
            raise MuxerFailedError(
                str(e), command=ffmpeg_command, mp4box_command=mp4box_command, log="\n".join(log)
            ) from e
        finally:
            clean_files((f.path for f in video_files), self.stderr_log)
            clean_files((f.path for f in audio_files), self.stderr_log)

        return mp4box_command

    def generate_dash(
        self,
        config: DashConfig,
        metadata: MediaMetadata | None,
        progress: Callable[[float], None] | None = None,
        cancel: threading.Event | None = None,
        on_stage: Callable[[EncodeStage], None] | None = None,
    ) -> DashEncodeResult:
        """Convert the input described by ``config`` into an MPEG-DASH presentation.

        ``metadata`` normally comes from :meth:`probe_file`. ``progress``
        receives the encode fraction in [0, 1]; ``cancel`` stops the run at the
        next stage boundary or kills the running tool. ``on_stage`` is told
        about every state the run enters, including FAILED.
        """

        produced: list[str] = []

        def enter(stage: EncodeStage) -> None:
            logger.debug(f"{config.input_file_path}: {stage}")
            if on_stage:
                on_stage(stage)

        def check_cancelled() -> None:
            if cancel is not None and cancel.is_set():
                if produced:
                    clean_files(produced, self.stderr_log)
                raise EncodeCancelledError(f"Encode of {config.input_file_path} was cancelled")

        try:
            check_cancelled()
            self._check_working_directory()
            if metadata is None:
                raise InvalidArgumentError(
                    "Probe data cannot be null. Get this parameter from calling probe_file.",
                    details={"input": config.input_file_path},
                )
            enter(EncodeStage.PROBED)

            check_cancelled()
            resolved = self.resolve_config(config, metadata)
            enter(EncodeStage.QUALITIES_RESOLVED)

            check_cancelled()
            enter(EncodeStage.ENCODING)
            ffmpeg_command = self.encode_video(resolved, metadata, progress, cancel)
            produced.extend(p.path for p in ffmpeg_command.all_pieces)
            enter(EncodeStage.ENCODED)

            check_cancelled()
            enter(EncodeStage.MUXING)
            try:
                mp4box_command = self.generate_dash_manifest(
                    resolved, ffmpeg_command.video_pieces, ffmpeg_command.audio_pieces, cancel, ffmpeg_command
                )
            except MuxerFailedError:
                clean_files((p.path for p in ffmpeg_command.subtitle_pieces), self.stderr_log)
                raise
            mpd_path = Path(mp4box_command.mpd_path)
            if not mpd_path.exists():
                raise ManifestNotCreatedError(
                    f"MP4Box did not produce the expected mpd file at path {mpd_path}. "
                    f"File: {config.input_file_path}",
                    manifest_path=str(mpd_path),
                    command=ffmpeg_command,
                    mp4box_command=mp4box_command,
                )
            written = try_load_mpd(mpd_path)
            if written is not None:
                produced.extend(str(Path(resolved.output_directory) / name) for name in written.file_names())
            produced.append(str(mpd_path))
            enter(EncodeStage.MUXED)

            try:
                check_cancelled()
                max_index = max((p.index for p in ffmpeg_command.all_pieces), default=-1)
                subtitles = []
                for subtitle in process_subtitles(resolved, ffmpeg_command.subtitle_pieces, max_index + 1):
                    subtitles.append(subtitle)
                    produced.append(subtitle.path)
                enter(EncodeStage.SUBTITLES_HARVESTED)

                check_cancelled()
                mpd = post_process_mpd_file(mpd_path, subtitles)
                enter(EncodeStage.MANIFEST_POST_PROCESSED)
            except EncodeCancelledError:
                raise
            except DashEncError:
                clean_files(produced, self.stderr_log)
                raise
            except Exception as e:
                logger.error(f"Manifest post-processing failed for {config.input_file_path}: {e}")
                clean_files(produced, self.stderr_log)
                raise MuxerFailedError(
                    f"Manifest post-processing failed: {e}",
                    command=ffmpeg_command,
                    mp4box_command=mp4box_command,
                ) from e

            result = DashEncodeResult(mpd_path=str(mpd_path), mpd=mpd, ffmpeg_command=ffmpeg_command)
            enter(EncodeStage.DONE)
            return result
        except Exception:
            if on_stage:
                on_stage(EncodeStage.FAILED)
            raise
