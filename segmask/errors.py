"""Error types raised by the resolver, compositor, and orchestrators."""

from __future__ import annotations

from pathlib import Path


class SegmaskError(Exception):
    """Base class for every recoverable segmask failure."""


class NoSelectionCriterion(SegmaskError):
    def __init__(self) -> None:
        super().__init__("Either index or label must be provided.")


class IndexOutOfRange(SegmaskError):
    def __init__(self, index: int, length: int) -> None:
        self.index = index
        self.length = length
        super().__init__(f"Segment index {index} out of range for manifest of {length} segments.")


class LabelNotFound(SegmaskError):
    def __init__(self, label: str) -> None:
        self.label = label
        super().__init__(f"Label {label!r} was not found.")


class ManifestFormatError(SegmaskError):
    """Manifest JSON is not an array of {label, mask[, score]} objects."""


class MaskDecodeError(SegmaskError):
    """Mask bytes are not a readable PNG stream."""


class MaskDimensionMismatch(SegmaskError):
    def __init__(self, size: int, rows: int, cols: int) -> None:
        self.size = size
        self.rows = rows
        self.cols = cols
        super().__init__(f"Mask of {size} bytes cannot be reshaped to {rows}x{cols}.")


class ManifestMissing(SegmaskError):
    def __init__(self, image_path: str | Path) -> None:
        self.image_path = Path(image_path)
        super().__init__(f'Mask not found for image "{self.image_path}"')


class InvalidPathCombination(SegmaskError):
    """Input/output/mask paths do not match a supported file/directory layout."""


class InferenceRequestFailed(SegmaskError):
    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.status_code = status_code
        super().__init__(message)
