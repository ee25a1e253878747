"""segmask-infer: run remote segmentation on images and write one manifest per image."""

from __future__ import annotations

import argparse
import asyncio
import logging
from pathlib import Path

from segmask.errors import SegmaskError
from segmask.inference import InferenceClient, run_inference
from segmask.utils.log import configure_logging
from segmask.utils.settings import get_api_token, get_request_timeout

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="segmask-infer",
        description="Send images to a hosted segmentation model and save the returned segments.",
    )
    parser.add_argument("-i", "--input", type=Path, required=True, help="Image file or directory of images")
    parser.add_argument("-o", "--output", type=Path, required=True, help="Manifest JSON or output directory")
    parser.add_argument("-m", "--model", required=True, help="Model identifier, e.g. facebook/detr-resnet-50-panoptic")
    parser.add_argument("-t", "--token", default=None, help="API token (default: $HF_TOKEN)")
    parser.add_argument("--endpoint", default=None, help="Inference API base URL (default: $SEGMASK_INFERENCE_ENDPOINT)")
    parser.add_argument("--timeout", type=float, default=None, help="Request timeout in seconds")
    parser.add_argument("--concurrent", action="store_true", help="Send all requests at once")
    parser.add_argument("--log-level", default=None, help="Logging level (default: $LOG_LEVEL or INFO)")
    return parser


async def _run(args: argparse.Namespace, token: str):
    async with InferenceClient(token, endpoint=args.endpoint, timeout=args.timeout) as client:
        return await run_inference(client, args.model, args.input, args.output, concurrent=args.concurrent)


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.log_level)
    token = args.token or get_api_token()
    if not token:
        parser.error("--token is required when HF_TOKEN is not set")
    if args.timeout is None:
        try:
            args.timeout = get_request_timeout()
        except ValueError:
            parser.error("SEGMASK_REQUEST_TIMEOUT must be a number of seconds")
    try:
        report = asyncio.run(_run(args, token))
    except (SegmaskError, OSError) as exc:
        logger.error("%s", exc)
        return 1
    logger.info("Wrote %d manifest(s), %d failed", len(report.written), len(report.failed))
    return 0 if report.ok else 1


if __name__ == "__main__":
    raise SystemExit(main())
