"""Core: manifest model, segment resolution, mask compositing."""

from segmask.ml.segment import Segment, load_manifest, parse_manifest, dump_manifest
from segmask.ml.resolve import resolve_segment
from segmask.ml.composite import composite_mask, decode_mask, encode_mask

__all__ = [
    "Segment",
    "load_manifest",
    "parse_manifest",
    "dump_manifest",
    "resolve_segment",
    "composite_mask",
    "decode_mask",
    "encode_mask",
]
