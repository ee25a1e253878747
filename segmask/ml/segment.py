"""Segment manifests: the labelled masks an upstream model returns for one image."""

from __future__ import annotations

import base64
import binascii
from pathlib import Path
from typing import Any, List

from pydantic import BaseModel, ConfigDict, TypeAdapter, ValidationError, field_serializer, field_validator

from segmask.errors import ManifestFormatError


def b64decode_unpadded(value: str) -> bytes:
    """Decode standard-alphabet base64 with or without trailing '=' padding."""
    stripped = value.rstrip("=")
    padded = stripped + "=" * (-len(stripped) % 4)
    return base64.b64decode(padded, validate=True)


def b64encode_unpadded(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii").rstrip("=")


class Segment(BaseModel):
    """One candidate mask: label, PNG mask bytes, optional model score."""

    model_config = ConfigDict(frozen=True)

    score: float | None = None
    label: str
    mask: bytes

    @field_validator("mask", mode="before")
    @classmethod
    def _decode_mask(cls, value: Any) -> Any:
        if isinstance(value, str):
            try:
                return b64decode_unpadded(value)
            except binascii.Error as exc:
                raise ValueError("mask is not valid base64") from exc
        return value

    @field_serializer("mask")
    def _encode_mask(self, value: bytes) -> str:
        return b64encode_unpadded(value)

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(exclude_none=True)


_MANIFEST = TypeAdapter(List[Segment])


def parse_manifest(text: str | bytes) -> List[Segment]:
    """Parse a JSON manifest (array of segment objects) in order."""
    try:
        return _MANIFEST.validate_json(text)
    except ValidationError as exc:
        raise ManifestFormatError(f"Invalid manifest: {exc}") from exc
    except ValueError as exc:
        raise ManifestFormatError(f"Manifest is not valid JSON: {exc}") from exc


def load_manifest(path: str | Path) -> List[Segment]:
    """Read and parse the manifest at path."""
    path = Path(path)
    try:
        return parse_manifest(path.read_bytes())
    except ManifestFormatError as exc:
        raise ManifestFormatError(f"{path}: {exc}") from exc


def dump_manifest(segments: List[Segment]) -> str:
    return _MANIFEST.dump_json(list(segments), exclude_none=True).decode("utf-8")


def save_manifest(segments: List[Segment], path: str | Path) -> Path:
    """Write segments as a JSON manifest; create parent directory if needed."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(dump_manifest(segments), encoding="utf-8")
    return path
