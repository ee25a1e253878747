"""Pick one segment out of a manifest by index or label."""

from __future__ import annotations

from typing import Sequence

from segmask.errors import IndexOutOfRange, LabelNotFound, NoSelectionCriterion
from segmask.ml.segment import Segment


def resolve_segment(
    segments: Sequence[Segment],
    index: int | None = None,
    label: str | None = None,
) -> Segment:
    """Return the selected segment.

    index wins over label when both are given. Label matching is exact and
    case-sensitive; with duplicate labels the first one in manifest order is used.
    """
    if index is not None:
        if index < 0 or index >= len(segments):
            raise IndexOutOfRange(index, len(segments))
        return segments[index]
    if label is not None:
        for segment in segments:
            if segment.label == label:
                return segment
        raise LabelNotFound(label)
    raise NoSelectionCriterion()
