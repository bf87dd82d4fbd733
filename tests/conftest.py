"""Shared test fixtures: probe data, configurations and simulated tools."""

import re
from decimal import Decimal
from pathlib import Path

import pytest

from dashenc.encoding.execution import ExecutionResult
from dashenc.models.dash import DashConfig
from dashenc.models.media import MediaMetadata, MediaStream
from dashenc.models.quality import Quality

SAMPLE_MPD = """<?xml version="1.0"?>
<!-- MPD file Generated with GPAC -->
<MPD xmlns="urn:mpeg:dash:schema:mpd:2011" minBufferTime="PT1.500S" type="static" \
mediaPresentationDuration="PT0H0M10.000S" maxSegmentDuration="PT0H0M3.000S" \
profiles="urn:mpeg:dash:profile:isoff-on-demand:2011">
 <ProgramInformation moreInformationURL="https://gpac.io">
  <Title>movie.mpd generated by GPAC</Title>
 </ProgramInformation>
 <Period duration="PT0H0M10.000S">
  <AdaptationSet segmentAlignment="true" maxWidth="1920" maxHeight="1080" maxFrameRate="24" par="16:9" \
lang="und" startWithSAP="1">
   <Representation id="1" mimeType="video/mp4" codecs="avc1.640028" width="1920" height="1080" \
frameRate="24" sar="1:1" bandwidth="4000000">
    <BaseURL>movie_video_4000k_1_dashinit.mp4</BaseURL>
    <SegmentBase indexRangeExact="true" indexRange="914-989">
     <Initialization range="0-913"/>
    </SegmentBase>
   </Representation>
   <Representation id="2" mimeType="video/mp4" codecs="avc1.64001f" width="1280" height="720" \
frameRate="24" sar="1:1" bandwidth="2000000">
    <BaseURL>movie_video_2000k_2_dashinit.mp4</BaseURL>
    <SegmentBase indexRangeExact="true" indexRange="912-987">
     <Initialization range="0-911"/>
    </SegmentBase>
   </Representation>
  </AdaptationSet>
  <AdaptationSet segmentAlignment="true" lang="eng" startWithSAP="1">
   <Representation id="3" mimeType="audio/mp4" codecs="mp4a.40.2" audioSamplingRate="48000" bandwidth="128000">
    <AudioChannelConfiguration schemeIdUri="urn:mpeg:dash:23003:3:audio_channel_configuration:2011" value="2"/>
    <BaseURL>movie_audio_eng_3_dashinit.mp4</BaseURL>
    <SegmentBase indexRangeExact="true" indexRange="850-925">
     <Initialization range="0-849"/>
    </SegmentBase>
   </Representation>
  </AdaptationSet>
 </Period>
</MPD>
"""

SAMPLE_PROBE = {
    "streams": [
        {
            "index": 0,
            "codec_name": "h264",
            "codec_type": "video",
            "profile": "High",
            "pix_fmt": "yuv420p",
            "level": 40,
            "width": 1920,
            "height": 1080,
            "r_frame_rate": "24000/1001",
            "bit_rate": "5000000",
        },
        {
            "index": 1,
            "codec_name": "aac",
            "codec_type": "audio",
            "profile": "LC",
            "bit_rate": "128000",
            "tags": {"language": "eng"},
        },
        {
            "index": 2,
            "codec_name": "subrip",
            "codec_type": "subtitle",
            "tags": {"language": "spa"},
        },
    ],
    "format": {
        "filename": "movie.mkv",
        "duration": "10.000000",
        "bit_rate": "5200000",
        "tags": {"TITLE": "Movie", "title": "ignored", "ENCODER": "Lavf60"},
    },
}


@pytest.fixture
def sample_mpd_text():
    return SAMPLE_MPD


@pytest.fixture
def sample_probe():
    return SAMPLE_PROBE


@pytest.fixture
def sample_ladder():
    return [
        Quality(width=1920, height=1080, bitrate=6000, preset="fast", pixel_format="yuv420p", profile="high", level="4.0"),
        Quality(width=1920, height=1080, bitrate=4000, preset="fast"),
        Quality(width=1280, height=720, bitrate=2000, preset="fast"),
    ]


@pytest.fixture
def sample_metadata(tmp_path):
    return MediaMetadata(
        input_path=str(tmp_path / "movie.mkv"),
        video_streams=[
            MediaStream(
                index=0,
                codec_name="h264",
                codec_type="video",
                pixel_format="yuv420p",
                profile="High",
                level="40",
                r_frame_rate="24/1",
                bit_rate=5_000_000,
                width=1920,
                height=1080,
            )
        ],
        audio_streams=[MediaStream(index=1, codec_name="aac", codec_type="audio", language="eng")],
        subtitle_streams=[MediaStream(index=2, codec_name="subrip", codec_type="subtitle", language="spa")],
        tags={"title": "Movie"},
        bitrate=5_000_000,
        framerate=Decimal(24),
        duration=10.0,
    )


@pytest.fixture
def sample_config(tmp_path, sample_ladder):
    input_path = tmp_path / "movie.mkv"
    input_path.write_bytes(b"\x00")
    output_dir = tmp_path / "out"
    output_dir.mkdir()
    return DashConfig(
        input_file_path=str(input_path),
        output_directory=str(output_dir),
        qualities=sample_ladder,
    )


def output_paths(arguments: list[str]) -> list[str]:
    """Paths that follow every ``-f <format>`` pair in an ffmpeg argument list."""
    return [arguments[i + 2] for i, arg in enumerate(arguments[:-2]) if arg == "-f"]


def mpd_for_inputs(arguments: list[str]) -> str:
    """An MP4Box-like manifest referencing every input of an MP4Box argument list."""
    reps = []
    rep_id = 1
    for arg in arguments:
        match = re.match(r"(.+)#(video|audio)$", arg)
        if not match:
            continue
        name = Path(match.group(1)).stem + "_dashinit.mp4"
        kind = match.group(2)
        reps.append(
            f'<AdaptationSet><Representation id="{rep_id}" mimeType="{kind}/mp4" bandwidth="1000">'
            f"<BaseURL>{name}</BaseURL></Representation></AdaptationSet>"
        )
        rep_id += 1
    return (
        '<?xml version="1.0"?><MPD xmlns="urn:mpeg:dash:schema:mpd:2011" type="static">'
        "<ProgramInformation><Title>generated</Title></ProgramInformation>"
        f"<Period>{''.join(reps)}</Period></MPD>"
    )


class FakeTools:
    """Stands in for run_managed: ffmpeg writes its outputs, MP4Box writes a manifest.

    ``ffmpeg_exit``/``mp4box_exit`` set the exit codes; ``write_mpd`` controls
    whether MP4Box leaves a manifest behind.
    """

    def __init__(self, ffmpeg_exit=0, mp4box_exit=0, write_mpd=True, write_ffmpeg_outputs=True):
        self.ffmpeg_exit = ffmpeg_exit
        self.mp4box_exit = mp4box_exit
        self.write_mpd = write_mpd
        self.write_ffmpeg_outputs = write_ffmpeg_outputs
        self.calls: list[tuple[str, list[str]]] = []
        self.mp4box_output: list[str] = []

    def __call__(self, executable, arguments, stdout_callback=None, stderr_callback=None, cancel=None,
                 poll_interval=0.1):
        arguments = list(arguments)
        self.calls.append((executable, arguments))
        if "mp4box" in executable.lower():
            return self._mp4box(arguments, stdout_callback)
        return self._ffmpeg(arguments, stderr_callback)

    def _ffmpeg(self, arguments, stderr_callback):
        if self.write_ffmpeg_outputs:
            for path in output_paths(arguments):
                Path(path).write_text("piece")
        for line in ["Input #0, matroska", "frame=  120 fps=30 time=00:00:05.00 bitrate=1000k", "done"]:
            if stderr_callback:
                stderr_callback(line)
        return ExecutionResult(exit_code=self.ffmpeg_exit, errors=["done"])

    def _mp4box(self, arguments, stdout_callback):
        mpd_path = Path(arguments[arguments.index("-out") + 1])
        if self.write_mpd:
            mpd_path.write_text(mpd_for_inputs(arguments))
            for arg in arguments:
                if arg.endswith(("#video", "#audio")):
                    source = Path(arg.rsplit("#", 1)[0])
                    (mpd_path.parent / (source.stem + "_dashinit.mp4")).write_text("segment")
        for line in self.mp4box_output:
            if stdout_callback:
                stdout_callback(line)
        return ExecutionResult(exit_code=self.mp4box_exit, output=list(self.mp4box_output))


@pytest.fixture
def fake_tools(monkeypatch):
    tools = FakeTools()
    monkeypatch.setattr("dashenc.pipeline.manager.run_managed", tools)
    return tools
