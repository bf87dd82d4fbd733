"""Collection of subtitle files that end up next to the manifest."""

import logging
import shutil
from collections.abc import Iterable, Iterator
from pathlib import Path

from dashenc.extractors.languages import subtitle_language_from_filename
from dashenc.models.commands import StreamSubtitleFile
from dashenc.models.dash import DashConfig

logger = logging.getLogger(__name__)


def subtitle_output_path(config: DashConfig, language: str, index: int) -> Path:
    return Path(config.output_directory) / f"{config.output_file_name}_subtitle_{language}_{index}.vtt"


def find_sidecar_subtitles(input_path: str | Path) -> list[Path]:
    """WebVTT files next to the input whose name starts with the input's base name."""
    input_path = Path(input_path)
    directory = input_path.parent
    if not directory.is_dir():
        return []
    return sorted(
        p for p in directory.iterdir() if p.is_file() and p.name.startswith(input_path.stem) and p.suffix == ".vtt"
    )


def _sidecars(config: DashConfig, subtitle_files: list[StreamSubtitleFile]) -> list[Path]:
    output_directory = Path(config.output_directory).resolve()
    own_prefix = f"{config.output_file_name}_subtitle_"
    produced = {Path(sub.path).resolve() for sub in subtitle_files}
    sidecars = []
    for vtt in find_sidecar_subtitles(config.input_file_path):
        resolved = vtt.resolve()
        if resolved in produced:
            continue
        if resolved.parent == output_directory and vtt.name.startswith(own_prefix):
            continue
        sidecars.append(vtt)
    return sidecars


def process_subtitles(
    config: DashConfig, subtitle_files: Iterable[StreamSubtitleFile], start_index: int
) -> Iterator[StreamSubtitleFile]:
    """Move ffmpeg's subtitle pieces and copy sidecar .vtt files into the output directory.

    Every yielded subtitle is numbered from ``start_index`` upward. Existing
    files at the destination are overwritten. Sidecars are listed before any
    piece is moved, and files this encode writes are never taken as sidecars.
    """
    subtitle_files = list(subtitle_files)
    sidecars = _sidecars(config, subtitle_files)
    index = start_index
    for sub in subtitle_files:
        source = Path(sub.path)
        if not source.exists():
            logger.warning(f"ffmpeg did not write subtitle piece {source}, skipping it")
            continue
        destination = subtitle_output_path(config, sub.language, index)
        if source != destination:
            destination.unlink(missing_ok=True)
            shutil.move(str(source), str(destination))
        logger.debug(f"Subtitle {source} -> {destination}")
        yield sub.model_copy(update={"index": index, "path": str(destination)})
        index += 1

    for vtt in sidecars:
        language = subtitle_language_from_filename(vtt.name)
        destination = subtitle_output_path(config, language, index)
        shutil.copyfile(vtt, destination)
        logger.debug(f"Sidecar subtitle {vtt} -> {destination}")
        yield StreamSubtitleFile(index=index, path=str(destination), language=language)
        index += 1
