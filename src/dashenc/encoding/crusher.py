"""Quality crushing: drop renditions the source bitrate cannot feed."""

from collections.abc import Sequence

from dashenc.models.quality import Quality, distinct_by_bitrate


def crush_qualities(
    qualities: Sequence[Quality] | None, bitrate_kbps: int, crush_tolerance: float = 0.90
) -> Sequence[Quality] | None:
    """Remove qualities at or above ``bitrate_kbps * crush_tolerance``.

    When something was removed and no copy quality survived, a copy quality
    carrying the level, pixel format and profile of the first requested
    quality is put at the front. A tolerance of zero or less, or an empty
    ladder, returns the ladder unchanged.
    """
    if crush_tolerance <= 0:
        return qualities
    if not qualities:
        return qualities

    first = qualities[0]
    threshold = bitrate_kbps * crush_tolerance
    crushed = distinct_by_bitrate(q for q in qualities if q.bitrate < threshold)
    if len(crushed) == len(qualities):
        return qualities

    if any(q.is_copy for q in crushed):
        return crushed

    copy_quality = Quality.copy_quality().model_copy(
        update={"level": first.level, "pixel_format": first.pixel_format, "profile": first.profile}
    )
    return [copy_quality, *crushed]
