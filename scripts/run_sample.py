#!/usr/bin/env python3
"""Sample run: create a tiny image and manifest, then segment it by label (no network)."""

from __future__ import annotations

import sys
from pathlib import Path

import numpy as np

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from segmask.ml.composite import encode_mask
from segmask.ml.segment import Segment, save_manifest
from segmask.pipeline import segment_image
from segmask.utils.image_io import save_image


def main():
    # Tiny 32x32 RGB image
    h, w = 32, 32
    img = np.full((h, w, 3), 128, dtype=np.uint8)
    img[8:24, 8:24] = 200

    # Two candidate segments: centre square and left half
    centre = np.zeros((h, w), dtype=bool)
    centre[8:24, 8:24] = True
    left = np.zeros((h, w), dtype=bool)
    left[:, : w // 2] = True
    segments = [
        Segment(label="left", mask=encode_mask(left), score=0.71),
        Segment(label="object", mask=encode_mask(centre), score=0.98),
    ]

    out_dir = Path(__file__).resolve().parent.parent / "data"
    image_path = save_image(img, out_dir / "sample.png")
    manifest_path = save_manifest(segments, out_dir / "sample.json")
    output_path = segment_image(image_path, manifest_path, out_dir / "sample_segmented.png", label="object")
    print(f"Sample run OK: {output_path.relative_to(out_dir.parent)}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
