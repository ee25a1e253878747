"""Command-line entry points: segmask-segment and segmask-infer."""
