"""Quality ladder data models."""

from collections.abc import Iterable
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field


class DefaultQuality(StrEnum):
    """Named preset ladders."""

    POTATO = "potato"
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    ULTRA = "ultra"


class Quality(BaseModel):
    """One output rendition.

    A bitrate of zero is reserved for the copy sentinel: the source video is
    passed through without re-encoding. Such an entry may still carry the
    pixel format, profile and level hints used by the copy-eligibility check.
    """

    model_config = ConfigDict(frozen=True)

    width: int = Field(default=0, ge=0, description="Frame width in pixels")
    height: int = Field(default=0, ge=0, description="Frame height in pixels")
    bitrate: int = Field(default=0, ge=0, description="Bitrate in kb/s")
    preset: str = Field(default="medium", description="ffmpeg preset")
    pixel_format: str = ""
    profile: str = ""
    level: str = ""

    @classmethod
    def copy_quality(cls) -> "Quality":
        """Return a copy sentinel with every numeric value zero and no preset."""
        return cls(width=0, height=0, bitrate=0, preset="")

    @property
    def is_copy(self) -> bool:
        return self.bitrate == 0

    @property
    def bitrate_key(self) -> int:
        """Identity used for ladder de-duplication."""
        return self.bitrate

    def same_bitrate(self, other: "Quality") -> bool:
        """Compare two qualities the way the ladder de-duplication does."""
        return self.bitrate_key == other.bitrate_key

    def __str__(self) -> str:
        return f"{self.width}x{self.height} @ {self.bitrate} kb/s - {self.preset}"


def distinct_by_bitrate(qualities: Iterable[Quality]) -> list[Quality]:
    """Drop later entries whose bitrate already appeared, keeping order."""
    seen: set[int] = set()
    result = []
    for q in qualities:
        if q.bitrate_key in seen:
            continue
        seen.add(q.bitrate_key)
        result.append(q)
    return result


_LADDERS: dict[DefaultQuality, list[tuple[int, int, int]]] = {
    DefaultQuality.POTATO: [(1280, 720, 1600), (854, 480, 800), (640, 360, 500)],
    DefaultQuality.LOW: [(1280, 720, 2400), (1280, 720, 1600), (640, 360, 700)],
    DefaultQuality.MEDIUM: [(1920, 1080, 3400), (1280, 720, 1800), (640, 360, 800)],
    DefaultQuality.HIGH: [(1920, 1080, 6000), (1920, 1080, 4000), (1280, 720, 2000)],
    DefaultQuality.ULTRA: [(1920, 1080, 8000), (1920, 1080, 6000), (1280, 720, 2000)],
}


def default_qualities(level: DefaultQuality | str = DefaultQuality.MEDIUM, preset: str = "medium") -> list[Quality]:
    """Build one of the preset ladders, highest rendition first."""
    ladder = _LADDERS.get(DefaultQuality(level), _LADDERS[DefaultQuality.MEDIUM])
    return [Quality(width=w, height=h, bitrate=b, preset=preset) for w, h, b in ladder]
