"""Manifest post-processing: subtitle injection and cleanup."""

import logging
from collections.abc import Sequence
from pathlib import Path

from dashenc.manifest.mpd_io import load_mpd, save_mpd
from dashenc.models.commands import StreamSubtitleFile
from dashenc.models.manifest import AdaptationSet, Descriptor, Mpd, Representation

logger = logging.getLogger(__name__)

SUBTITLE_MIME_TYPE = "text/vtt"
SUBTITLE_BANDWIDTH = 256
ROLE_SCHEME = "urn:gpac:dash:role:2013"


def subtitle_adaptation_set(subtitle: StreamSubtitleFile, representation_id: int) -> AdaptationSet:
    """Build the adaptation set announcing one WebVTT file."""
    return AdaptationSet(
        mime_type=SUBTITLE_MIME_TYPE,
        content_type="text",
        lang=subtitle.language,
        role=Descriptor(scheme_id_uri=ROLE_SCHEME, value=f"{subtitle.language} {representation_id}"),
        representations=[
            Representation(
                id=str(representation_id),
                bandwidth=SUBTITLE_BANDWIDTH,
                base_urls=[subtitle.file_name],
            )
        ],
    )


def add_subtitles(mpd: Mpd, subtitles: Sequence[StreamSubtitleFile]) -> Mpd:
    """Return a new manifest with the program information dropped and subtitles appended.

    New representation IDs continue from the highest ID in the whole manifest,
    so they stay unique across periods.
    """
    next_id = mpd.max_representation_id() + 1
    periods = []
    for period in mpd.periods:
        added = []
        for sub in subtitles:
            added.append(subtitle_adaptation_set(sub, next_id))
            next_id += 1
        periods.append(period.model_copy(update={"adaptation_sets": [*period.adaptation_sets, *added]}))
    return mpd.model_copy(update={"program_information": None, "periods": periods})


def post_process_mpd_file(path: str | Path, subtitles: Sequence[StreamSubtitleFile]) -> Mpd:
    """Load the manifest MP4Box wrote, add the subtitles and write it back in place."""
    mpd = add_subtitles(load_mpd(path), subtitles)
    save_mpd(mpd, path)
    logger.info(f"Post-processed manifest {path} with {len(subtitles)} subtitle track(s)")
    return mpd
