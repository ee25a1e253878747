"""segmask-segment: apply a manifest segment's mask to one image or a directory of images."""

from __future__ import annotations

import argparse
import logging
from pathlib import Path

from segmask.errors import SegmaskError
from segmask.pipeline import run
from segmask.utils.log import configure_logging

logger = logging.getLogger(__name__)


def segment_index(value: str) -> int:
    """argparse type for --index: unsigned integer in 0..255."""
    try:
        index = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid index: {value!r}")
    if not 0 <= index <= 255:
        raise argparse.ArgumentTypeError(f"index must be between 0 and 255, got {index}")
    return index


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="segmask-segment",
        description="Keep only the pixels of a selected segment; everything else is zeroed.",
    )
    parser.add_argument("-i", "--input", type=Path, required=True, help="Image file or directory of images")
    parser.add_argument("-o", "--output", type=Path, required=True, help="Output PNG or output directory")
    parser.add_argument("-m", "--mask", type=Path, required=True, help="Manifest JSON or directory of manifests")
    parser.add_argument("--index", type=segment_index, default=None, help="Segment index (takes precedence)")
    parser.add_argument("--label", default=None, help="Segment label; first match wins")
    parser.add_argument(
        "--keep-going",
        action="store_true",
        help="In batch mode, report per-image failures instead of stopping at the first",
    )
    parser.add_argument("--log-level", default=None, help="Logging level (default: $LOG_LEVEL or INFO)")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level)
    try:
        report = run(
            args.input,
            args.output,
            args.mask,
            index=args.index,
            label=args.label,
            keep_going=args.keep_going,
        )
    except (SegmaskError, OSError) as exc:
        logger.error("%s", exc)
        return 1
    logger.info("Wrote %d image(s), %d failed", len(report.written), len(report.failed))
    return 0 if report.ok else 1


if __name__ == "__main__":
    raise SystemExit(main())
