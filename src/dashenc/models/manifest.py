"""MPEG-DASH manifest (MPD) data models.

Only the parts of the manifest that the post-processor reads or writes are
modelled as fields. Any other attribute lands in ``attributes`` and any other
child element is kept as serialized XML in ``extra_elements`` so that a load and
save cycle does not lose what MP4Box wrote.
"""

from pydantic import BaseModel, Field


class Descriptor(BaseModel):
    """A DASH descriptor such as Role."""

    scheme_id_uri: str
    value: str = ""


class Representation(BaseModel):
    id: str | None = Field(default=None, description="Absent when the source manifest has none")
    bandwidth: int = Field(default=0, ge=0)
    base_urls: list[str] = Field(default_factory=list)
    attributes: dict[str, str] = Field(default_factory=dict)
    extra_elements: list[str] = Field(default_factory=list)


class AdaptationSet(BaseModel):
    mime_type: str | None = None
    content_type: str | None = None
    lang: str | None = None
    role: Descriptor | None = None
    representations: list[Representation] = Field(default_factory=list)
    attributes: dict[str, str] = Field(default_factory=dict)
    extra_elements: list[str] = Field(default_factory=list)


class Period(BaseModel):
    adaptation_sets: list[AdaptationSet] = Field(default_factory=list)
    attributes: dict[str, str] = Field(default_factory=dict)
    extra_elements: list[str] = Field(default_factory=list)


class Mpd(BaseModel):
    """Root of the manifest tree."""

    program_information: str | None = Field(default=None, description="Serialized ProgramInformation")
    periods: list[Period] = Field(default_factory=list)
    attributes: dict[str, str] = Field(default_factory=dict)
    extra_elements: list[str] = Field(default_factory=list)

    def representations(self) -> list[Representation]:
        return [r for p in self.periods for a in p.adaptation_sets for r in a.representations]

    def representation_ids(self) -> list[str]:
        return [r.id for r in self.representations() if r.id is not None]

    def max_representation_id(self) -> int:
        """Highest numeric representation ID, 0 when there is none."""
        ids = [int(i) for i in self.representation_ids() if i.isdigit()]
        return max(ids, default=0)

    def file_names(self) -> list[str]:
        """Every file referenced through a BaseURL, in document order."""
        names = []
        for r in self.representations():
            for url in r.base_urls:
                if url not in names:
                    names.append(url)
        return names
