"""Per-image and batch pipeline: load -> resolve segment -> composite -> export."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Dict, List, Tuple

from segmask.errors import InvalidPathCombination, ManifestMissing, SegmaskError
from segmask.ml.composite import composite_mask
from segmask.ml.resolve import resolve_segment
from segmask.ml.segment import load_manifest
from segmask.utils.image_io import load_image, save_image

logger = logging.getLogger(__name__)

MANIFEST_SUFFIX = ".json"
OUTPUT_SUFFIX = ".png"


class PathLayout(Enum):
    """Supported shapes of the input/output(/mask) paths."""
    SINGLE_FILE = "single_file"
    BATCH_NEW_OUTPUT = "batch_new_output"
    BATCH_EXISTING_OUTPUT = "batch_existing_output"


@dataclass
class BatchReport:
    """Outcome of a batch run: written paths and per-item failures."""
    written: List[Path] = field(default_factory=list)
    failed: Dict[Path, Exception] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.failed


def classify_layout(input_path: Path, output_path: Path, mask_path: Path | None = None) -> PathLayout:
    """Map the path shapes to a PathLayout or raise InvalidPathCombination.

    With mask_path=None only input and output are considered (inference fan-out).
    """
    input_path, output_path = Path(input_path), Path(output_path)
    mask_is_dir = None if mask_path is None else Path(mask_path).is_dir()

    if not input_path.is_dir() and not mask_is_dir and not output_path.is_dir():
        return PathLayout.SINGLE_FILE
    if input_path.is_dir() and mask_is_dir is not False:
        if output_path.is_dir():
            return PathLayout.BATCH_EXISTING_OUTPUT
        if not output_path.exists():
            return PathLayout.BATCH_NEW_OUTPUT
    names = "input, output, and mask paths" if mask_path is not None else "input and output paths"
    raise InvalidPathCombination(f"Invalid combination of {names}.")


def list_images(image_dir: Path) -> List[Path]:
    """Files directly under image_dir, sorted by name."""
    images = sorted(p for p in Path(image_dir).iterdir() if p.is_file())
    seen: Dict[str, Path] = {}
    for image_path in images:
        if image_path.stem in seen:
            logger.warning(
                "%s and %s share stem %r; the later one overwrites the earlier output",
                seen[image_path.stem].name,
                image_path.name,
                image_path.stem,
            )
        seen.setdefault(image_path.stem, image_path)
    return images


def pair_manifests(
    image_dir: Path,
    manifest_dir: Path,
    allow_missing: bool = False,
) -> Tuple[List[Tuple[Path, Path]], List[Path]]:
    """Match each image to manifest_dir/{stem}.json.

    Returns (pairs, images_without_manifest). Unless allow_missing, the first
    image without a manifest raises ManifestMissing.
    """
    manifest_dir = Path(manifest_dir)
    stems = set()
    for entry in manifest_dir.iterdir():
        if not entry.is_file() or entry.suffix != MANIFEST_SUFFIX:
            logger.warning("Skipping non-manifest entry %s", entry)
            continue
        stems.add(entry.stem)

    pairs: List[Tuple[Path, Path]] = []
    missing: List[Path] = []
    for image_path in list_images(image_dir):
        if image_path.stem in stems:
            pairs.append((image_path, manifest_dir / f"{image_path.stem}{MANIFEST_SUFFIX}"))
        elif allow_missing:
            missing.append(image_path)
        else:
            raise ManifestMissing(image_path)
    return pairs, missing


def segment_image(
    image_path: Path,
    manifest_path: Path,
    output_path: Path,
    index: int | None = None,
    label: str | None = None,
) -> Path:
    """Apply the selected segment's mask to one image and save the PNG result."""
    image = load_image(image_path)
    segments = load_manifest(manifest_path)
    segment = resolve_segment(segments, index=index, label=label)
    masked = composite_mask(image, segment.mask)
    save_image(masked, output_path)
    logger.info("Wrote %s (segment %r)", output_path, segment.label)
    return Path(output_path)


def run_batch(
    image_dir: Path,
    manifest_dir: Path,
    output_dir: Path,
    index: int | None = None,
    label: str | None = None,
    keep_going: bool = False,
) -> BatchReport:
    """Segment every image in image_dir into output_dir/{stem}.png.

    Missing manifests abort before anything is written unless keep_going, in
    which case they and any per-image error are recorded in the report.
    """
    output_dir = Path(output_dir)
    pairs, missing = pair_manifests(image_dir, manifest_dir, allow_missing=keep_going)

    report = BatchReport()
    for image_path in missing:
        error = ManifestMissing(image_path)
        logger.error("%s", error)
        report.failed[image_path] = error

    output_dir.mkdir(parents=True, exist_ok=True)
    for image_path, manifest_path in pairs:
        output_path = output_dir / f"{image_path.stem}{OUTPUT_SUFFIX}"
        try:
            report.written.append(segment_image(image_path, manifest_path, output_path, index, label))
        except (SegmaskError, OSError) as exc:
            if not keep_going:
                raise
            logger.error("Failed on %s: %s", image_path, exc)
            report.failed[image_path] = exc
    return report


def run(
    input_path: Path,
    output_path: Path,
    mask_path: Path,
    index: int | None = None,
    label: str | None = None,
    keep_going: bool = False,
) -> BatchReport:
    """Dispatch on the path layout: one image or a directory of images."""
    layout = classify_layout(input_path, output_path, mask_path)
    logger.debug("Path layout: %s", layout.value)
    if layout is PathLayout.SINGLE_FILE:
        return BatchReport(written=[segment_image(input_path, mask_path, output_path, index, label)])
    return run_batch(input_path, mask_path, output_path, index, label, keep_going=keep_going)
