"""Manifest loading, saving and post-processing."""

from dashenc.manifest.mpd_io import load_mpd, mpd_to_xml, parse_mpd, save_mpd, try_load_mpd
from dashenc.manifest.postprocess import add_subtitles, post_process_mpd_file

__all__ = [
    "add_subtitles",
    "load_mpd",
    "mpd_to_xml",
    "parse_mpd",
    "post_process_mpd_file",
    "save_mpd",
    "try_load_mpd",
]
