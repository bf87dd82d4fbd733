"""MPD XML parsing and serialization."""

import logging
import os
import tempfile
import xml.etree.ElementTree as ET
from pathlib import Path

from dashenc.models.manifest import AdaptationSet, Descriptor, Mpd, Period, Representation

logger = logging.getLogger(__name__)

DASH_NS = "urn:mpeg:dash:schema:mpd:2011"

ET.register_namespace("", DASH_NS)

# Children that the schema places after the modelled ones.
_TRAILING_MPD = {"Metrics", "EssentialProperty", "SupplementalProperty", "UTCTiming", "LeapSecondInformation"}
_TRAILING_PERIOD = {"Subset", "SupplementalProperty", "EmptyAdaptationSet", "GroupLabel", "Preselection"}
_TRAILING_REPRESENTATION = {"SubRepresentation", "SegmentBase", "SegmentList", "SegmentTemplate"}


def _local(tag: str) -> str:
    return tag.rsplit("}", 1)[-1]


def _namespace(tag: str) -> str:
    return tag[1:].split("}", 1)[0] if tag.startswith("{") else ""


def _q(ns: str, name: str) -> str:
    return f"{{{ns}}}{name}" if ns else name


def _dump(element: ET.Element) -> str:
    """Serialize a child element without its layout whitespace."""
    for node in element.iter():
        if node.text is not None and not node.text.strip():
            node.text = None
        if node.tail is not None and not node.tail.strip():
            node.tail = None
    element.tail = None
    return ET.tostring(element, encoding="unicode")


def _pop(attrs: dict[str, str], name: str) -> str | None:
    return attrs.pop(name, None)


def _parse_representation(el: ET.Element) -> Representation:
    attrs = dict(el.attrib)
    rep_id = _pop(attrs, "id")
    bandwidth = int(_pop(attrs, "bandwidth") or 0)
    base_urls, extras = [], []
    for child in el:
        if _local(child.tag) == "BaseURL":
            base_urls.append((child.text or "").strip())
        else:
            extras.append(_dump(child))
    return Representation(id=rep_id, bandwidth=bandwidth, base_urls=base_urls, attributes=attrs, extra_elements=extras)


def _parse_adaptation_set(el: ET.Element) -> AdaptationSet:
    attrs = dict(el.attrib)
    aset = AdaptationSet(
        mime_type=_pop(attrs, "mimeType"),
        content_type=_pop(attrs, "contentType"),
        lang=_pop(attrs, "lang"),
    )
    for child in el:
        name = _local(child.tag)
        if name == "Representation":
            aset.representations.append(_parse_representation(child))
        elif name == "Role" and aset.role is None:
            aset.role = Descriptor(scheme_id_uri=child.get("schemeIdUri", ""), value=child.get("value", ""))
        else:
            aset.extra_elements.append(_dump(child))
    aset.attributes = attrs
    return aset


def _parse_period(el: ET.Element) -> Period:
    period = Period(attributes=dict(el.attrib))
    for child in el:
        if _local(child.tag) == "AdaptationSet":
            period.adaptation_sets.append(_parse_adaptation_set(child))
        else:
            period.extra_elements.append(_dump(child))
    return period


def parse_mpd(text: str) -> Mpd:
    """Parse MPD XML text into the manifest model."""
    root = ET.fromstring(text)
    if _local(root.tag) != "MPD":
        raise ValueError(f"Not an MPD document: root element is {_local(root.tag)}")
    mpd = Mpd(attributes=dict(root.attrib))
    for child in root:
        name = _local(child.tag)
        if name == "Period":
            mpd.periods.append(_parse_period(child))
        elif name == "ProgramInformation":
            mpd.program_information = _dump(child)
        else:
            mpd.extra_elements.append(_dump(child))
    return mpd


def load_mpd(path: str | Path) -> Mpd:
    """Load an MPD file from disk."""
    return parse_mpd(Path(path).read_text(encoding="utf-8"))


def try_load_mpd(path: str | Path) -> Mpd | None:
    """Load an MPD file, returning None when it is missing or unreadable."""
    try:
        return load_mpd(path)
    except (OSError, ET.ParseError, ValueError) as e:
        logger.warning(f"Could not load manifest {path}: {e}")
        return None


def _append_extras(parent: ET.Element, extras: list[ET.Element]) -> None:
    for extra in extras:
        parent.append(extra)


def _split(extras: list[str], trailing: set[str]) -> tuple[list[ET.Element], list[ET.Element]]:
    leading, after = [], []
    for text in extras:
        el = ET.fromstring(text)
        (after if _local(el.tag) in trailing else leading).append(el)
    return leading, after


def _build_representation(ns: str, rep: Representation) -> ET.Element:
    attrs = {} if rep.id is None else {"id": rep.id}
    el = ET.Element(_q(ns, "Representation"), {**attrs, **rep.attributes, "bandwidth": str(rep.bandwidth)})
    leading, trailing = _split(rep.extra_elements, _TRAILING_REPRESENTATION)
    _append_extras(el, leading)
    for url in rep.base_urls:
        ET.SubElement(el, _q(ns, "BaseURL")).text = url
    _append_extras(el, trailing)
    return el


def _build_adaptation_set(ns: str, aset: AdaptationSet) -> ET.Element:
    attrs = {}
    if aset.mime_type is not None:
        attrs["mimeType"] = aset.mime_type
    if aset.content_type is not None:
        attrs["contentType"] = aset.content_type
    if aset.lang is not None:
        attrs["lang"] = aset.lang
    el = ET.Element(_q(ns, "AdaptationSet"), {**aset.attributes, **attrs})
    if aset.role is not None:
        ET.SubElement(el, _q(ns, "Role"), {"schemeIdUri": aset.role.scheme_id_uri, "value": aset.role.value})
    _append_extras(el, [ET.fromstring(x) for x in aset.extra_elements])
    for rep in aset.representations:
        el.append(_build_representation(ns, rep))
    return el


def _build_period(ns: str, period: Period) -> ET.Element:
    el = ET.Element(_q(ns, "Period"), period.attributes)
    leading, trailing = _split(period.extra_elements, _TRAILING_PERIOD)
    _append_extras(el, leading)
    for aset in period.adaptation_sets:
        el.append(_build_adaptation_set(ns, aset))
    _append_extras(el, trailing)
    return el


def mpd_to_xml(mpd: Mpd, namespace: str = DASH_NS) -> str:
    """Serialize the manifest model to an XML document."""
    root = ET.Element(_q(namespace, "MPD"), mpd.attributes)
    if mpd.program_information:
        root.append(ET.fromstring(mpd.program_information))
    leading, trailing = _split(mpd.extra_elements, _TRAILING_MPD)
    _append_extras(root, leading)
    for period in mpd.periods:
        root.append(_build_period(namespace, period))
    _append_extras(root, trailing)
    ET.indent(root, space="  ")
    body = ET.tostring(root, encoding="unicode")
    return f'<?xml version="1.0" encoding="UTF-8"?>\n{body}\n'


def save_mpd(mpd: Mpd, path: str | Path) -> Path:
    """Write the manifest with a single replace so readers never see a partial file."""
    path = Path(path)
    data = mpd_to_xml(mpd)
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(data)
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise
    return path
