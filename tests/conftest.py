"""Shared fixtures: tiny images, PNG masks and manifests on disk."""

from __future__ import annotations

from pathlib import Path

import numpy as np
import pytest
from PIL import Image

from segmask.ml.composite import encode_mask
from segmask.ml.segment import Segment, save_manifest


@pytest.fixture
def make_segment():
    """Build a Segment from a 2-D mask array."""
    def _make(label: str, mask: np.ndarray, score: float | None = None) -> Segment:
        return Segment(label=label, mask=encode_mask(mask), score=score)
    return _make


@pytest.fixture
def write_image():
    """Write an (H, W, 3) uint8 array to path in the format implied by its suffix."""
    def _write(path: Path, image: np.ndarray) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        Image.fromarray(image).save(path)
        return path
    return _write


@pytest.fixture
def write_manifest():
    def _write(path: Path, segments: list[Segment]) -> Path:
        return save_manifest(segments, path)
    return _write


@pytest.fixture
def gray_image():
    """4x6 RGB image, every channel 200."""
    return np.full((4, 6, 3), 200, dtype=np.uint8)


@pytest.fixture
def full_mask(gray_image):
    return np.full(gray_image.shape[:2], 255, dtype=np.uint8)
