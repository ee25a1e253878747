"""Image I/O for source images and composited PNG output."""

from __future__ import annotations

from pathlib import Path

import numpy as np
from PIL import Image


def load_image(path: str | Path) -> np.ndarray:
    """Load image from path as an RGB uint8 array (H, W, 3)."""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Image not found: {path}")
    with Image.open(path) as pil:
        return np.array(pil.convert("RGB"))


def save_image(image: np.ndarray, path: str | Path) -> Path:
    """Save image as PNG. Expects (H, W), (H, W, 3) or (H, W, 4) uint8."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    pil = Image.fromarray(image.astype(np.uint8))
    pil.save(path, format="PNG")
    return path
