"""Async client for the remote segmentation endpoint and the manifest fan-out."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import List

import httpx

from segmask.errors import InferenceRequestFailed, ManifestFormatError, SegmaskError
from segmask.ml.segment import Segment, parse_manifest, save_manifest
from segmask.pipeline import MANIFEST_SUFFIX, BatchReport, PathLayout, classify_layout, list_images
from segmask.utils.settings import get_inference_endpoint, get_request_timeout

logger = logging.getLogger(__name__)


class InferenceClient:
    """Posts raw image bytes to `{endpoint}/{model}` with bearer auth."""

    def __init__(
        self,
        token: str,
        endpoint: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.endpoint = (endpoint or get_inference_endpoint()).rstrip("/")
        self._client = httpx.AsyncClient(
            timeout=timeout if timeout is not None else get_request_timeout(),
            headers={"Authorization": f"Bearer {token}"},
            transport=transport,
        )

    async def __aenter__(self) -> "InferenceClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()

    async def infer(self, model: str, image_bytes: bytes) -> List[Segment]:
        """Run model on one image and return its segments."""
        url = f"{self.endpoint}/{model}"
        try:
            response = await self._client.post(url, content=image_bytes)
        except httpx.HTTPError as exc:
            raise InferenceRequestFailed(f"Request to {url} failed: {exc}") from exc
        if response.status_code != 200:
            raise InferenceRequestFailed(
                f"{url} returned {response.status_code}: {response.text}",
                status_code=response.status_code,
            )
        try:
            return parse_manifest(response.content)
        except ManifestFormatError as exc:
            raise InferenceRequestFailed(f"{url} returned an unexpected body: {exc}", status_code=200) from exc


async def infer_file(client: InferenceClient, model: str, image_path: Path, manifest_path: Path) -> Path:
    """Send one image and write the returned segments as a manifest."""
    image_bytes = Path(image_path).read_bytes()
    segments = await client.infer(model, image_bytes)
    save_manifest(segments, manifest_path)
    logger.info("Wrote %s (%d segments)", manifest_path, len(segments))
    return Path(manifest_path)


async def infer_directory(
    client: InferenceClient,
    model: str,
    image_dir: Path,
    output_dir: Path,
    concurrent: bool = False,
) -> BatchReport:
    """Produce output_dir/{stem}.json for every image in image_dir.

    Sequentially the first failure propagates. Concurrently every request runs
    to completion and failures are collected per image in the report.
    """
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    images = list_images(image_dir)
    report = BatchReport()

    def target(image_path: Path) -> Path:
        return output_dir / f"{image_path.stem}{MANIFEST_SUFFIX}"

    if not concurrent:
        for image_path in images:
            report.written.append(await infer_file(client, model, image_path, target(image_path)))
        return report

    results = await asyncio.gather(
        *(infer_file(client, model, image_path, target(image_path)) for image_path in images),
        return_exceptions=True,
    )
    for image_path, result in zip(images, results):
        if isinstance(result, (SegmaskError, OSError)):
            logger.error("Inference failed for %s: %s", image_path, result)
            report.failed[image_path] = result
        elif isinstance(result, BaseException):
            raise result
        else:
            report.written.append(result)
    return report


async def run_inference(
    client: InferenceClient,
    model: str,
    input_path: Path,
    output_path: Path,
    concurrent: bool = False,
) -> BatchReport:
    """Dispatch on the path layout: one image or a directory of images."""
    layout = classify_layout(input_path, output_path)
    if layout is PathLayout.SINGLE_FILE:
        return BatchReport(written=[await infer_file(client, model, input_path, output_path)])
    return await infer_directory(client, model, input_path, output_path, concurrent=concurrent)
