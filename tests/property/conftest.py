"""Hypothesis strategies for property-based testing."""

from hypothesis import strategies as st

from dashenc.models.commands import StreamSubtitleFile
from dashenc.models.manifest import AdaptationSet, Mpd, Period, Representation
from dashenc.models.quality import Quality

LANGUAGE_CODES = ["eng", "fre", "ger", "spa", "und", "jpn"]


@st.composite
def generate_quality(draw, allow_copy=False):
    """Generate a random Quality; copy sentinels only when allowed."""
    min_bitrate = 0 if allow_copy else 1
    return Quality(
        width=draw(st.sampled_from([0, 640, 1280, 1920])),
        height=draw(st.sampled_from([0, 360, 720, 1080])),
        bitrate=draw(st.integers(min_value=min_bitrate, max_value=20000)),
        preset=draw(st.sampled_from(["fast", "medium", "slow"])),
        pixel_format=draw(st.sampled_from(["", "yuv420p", "yuv420p10le"])),
        profile=draw(st.sampled_from(["", "main", "high"])),
        level=draw(st.sampled_from(["", "3.1", "4.0", "4.1"])),
    )


@st.composite
def generate_ladder(draw, allow_copy=False):
    """Generate a non-empty quality ladder."""
    return draw(st.lists(generate_quality(allow_copy=allow_copy), min_size=1, max_size=8))


@st.composite
def generate_mpd(draw):
    """Generate a manifest with numeric representation IDs spread over 1-3 periods."""
    next_id = draw(st.integers(min_value=1, max_value=100))
    periods = []
    for _ in range(draw(st.integers(min_value=1, max_value=3))):
        sets = []
        for _ in range(draw(st.integers(min_value=0, max_value=3))):
            reps = []
            for _ in range(draw(st.integers(min_value=1, max_value=3))):
                reps.append(Representation(id=str(next_id), bandwidth=draw(st.integers(0, 10_000_000))))
                next_id += draw(st.integers(min_value=1, max_value=5))
            sets.append(AdaptationSet(mime_type="video/mp4", representations=reps))
        periods.append(Period(adaptation_sets=sets))
    return Mpd(periods=periods, program_information="<ProgramInformation />")


@st.composite
def generate_subtitles(draw):
    """Generate 0-4 harvested subtitle files."""
    count = draw(st.integers(min_value=0, max_value=4))
    return [
        StreamSubtitleFile(
            index=i, path=f"/out/movie_subtitle_{i}.vtt", language=draw(st.sampled_from(LANGUAGE_CODES))
        )
        for i in range(count)
    ]
