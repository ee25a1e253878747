"""Decode a segment's PNG mask and apply it to the source image."""

from __future__ import annotations

import io

import cv2
import numpy as np
from PIL import Image

from segmask.errors import MaskDecodeError, MaskDimensionMismatch

# Modes Pillow can collapse to 8-bit greyscale without losing the on/off signal.
COLLAPSIBLE_MODES = {"1", "P", "PA", "LA", "La", "RGB", "RGBA", "RGBa", "RGBX"}


def decode_mask(mask_bytes: bytes) -> bytes:
    """Decode PNG bytes and return the raw single-channel pixel buffer, row-major.

    8-bit greyscale is returned untouched; multi-channel, palette and 1-bit masks
    are collapsed to 8-bit greyscale. Other modes (e.g. 16-bit) keep their raw
    buffer, which will not line up with one byte per pixel.
    """
    try:
        with Image.open(io.BytesIO(mask_bytes)) as img:
            if img.format != "PNG":
                raise MaskDecodeError(f"Mask is {img.format}, expected PNG")
            img.load()
            if img.mode in COLLAPSIBLE_MODES:
                img = img.convert("L")
            return img.tobytes()
    except MaskDecodeError:
        raise
    except (OSError, EOFError, SyntaxError, ValueError, Image.DecompressionBombError) as exc:
        raise MaskDecodeError(f"Could not decode mask: {exc}") from exc


def reshape_mask(buffer: bytes, rows: int, cols: int) -> np.ndarray:
    """Reinterpret a flat byte buffer as a (rows, cols) uint8 mask."""
    if len(buffer) != rows * cols:
        raise MaskDimensionMismatch(len(buffer), rows, cols)
    return np.frombuffer(buffer, dtype=np.uint8).reshape(rows, cols)


def encode_mask(mask: np.ndarray) -> bytes:
    """Encode a 2-D mask as 8-bit greyscale PNG bytes. Bool masks map to 0/255."""
    if mask.ndim != 2:
        raise ValueError(f"Mask must be 2-D, got shape {mask.shape}")
    if mask.dtype == bool:
        mask = mask.astype(np.uint8) * 255
    buffer = io.BytesIO()
    Image.fromarray(mask.astype(np.uint8)).save(buffer, format="PNG")
    return buffer.getvalue()


def apply_mask(image: np.ndarray, mask: np.ndarray) -> np.ndarray:
    """Bitwise-AND every channel of image with the (rows, cols) mask.

    A mask byte of 0xFF passes the pixel through, 0x00 zeroes it, and any other
    value keeps only the bits it has set in each channel.
    """
    if image.shape[:2] != mask.shape:
        raise MaskDimensionMismatch(mask.size, image.shape[0], image.shape[1])
    image = np.ascontiguousarray(image, dtype=np.uint8)
    if image.ndim == 3:
        mask = np.repeat(mask[:, :, None], image.shape[2], axis=2)
    mask = np.ascontiguousarray(mask, dtype=np.uint8)
    out = np.zeros_like(image)
    return cv2.bitwise_and(image, mask, dst=out)


def composite_mask(image: np.ndarray, mask_bytes: bytes) -> np.ndarray:
    """Decode mask_bytes, fit it to the image's rows/cols and apply it."""
    rows, cols = image.shape[:2]
    mask = reshape_mask(decode_mask(mask_bytes), rows, cols)
    return apply_mask(image, mask)
