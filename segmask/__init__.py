"""segmask: pick a segment out of a manifest and apply its mask to an image."""

__version__ = "0.1.0"
