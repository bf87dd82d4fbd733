"""dashenc - convert a media file into an MPEG-DASH presentation."""

from dashenc.pipeline.manager import DashEncoder

__version__ = "0.1.0"

__all__ = ["DashEncoder"]
