"""Tests for the inference client and manifest fan-out, using httpx.MockTransport."""

from __future__ import annotations

import json

import httpx
import numpy as np
import pytest

from segmask.errors import InferenceRequestFailed, InvalidPathCombination
from segmask.inference import InferenceClient, infer_directory, run_inference
from segmask.ml.segment import load_manifest

ENDPOINT = "https://inference.test/models"
MODEL = "acme/panoptic"
BODY = [
    {"score": 0.97, "label": "cat", "mask": "AAE"},
    {"score": 0.42, "label": "sofa", "mask": "/w=="},
]


def make_client(handler, token: str = "secret") -> InferenceClient:
    return InferenceClient(token, endpoint=ENDPOINT + "/", timeout=5.0, transport=httpx.MockTransport(handler))


@pytest.fixture
def image_dir(tmp_path):
    images = tmp_path / "images"
    images.mkdir()
    for stem in ("a", "b", "c"):
        (images / f"{stem}.jpg").write_bytes(f"image-{stem}".encode())
    return images


@pytest.mark.asyncio
async def test_infer_posts_raw_bytes_with_bearer():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["auth"] = request.headers["Authorization"]
        seen["body"] = request.content
        return httpx.Response(200, json=BODY)

    async with make_client(handler) as client:
        segments = await client.infer(MODEL, b"\x89PNG raw")

    assert seen == {"url": f"{ENDPOINT}/{MODEL}", "auth": "Bearer secret", "body": b"\x89PNG raw"}
    assert [s.label for s in segments] == ["cat", "sofa"]
    assert segments[1].mask == b"\xff"
    assert segments[0].score == pytest.approx(0.97)


@pytest.mark.asyncio
async def test_non_200_raises_with_status():
    def handler(request):
        return httpx.Response(503, text="Model is loading")

    async with make_client(handler) as client:
        with pytest.raises(InferenceRequestFailed) as excinfo:
            await client.infer(MODEL, b"img")
    assert excinfo.value.status_code == 503
    assert "Model is loading" in str(excinfo.value)


@pytest.mark.asyncio
async def test_transport_error_is_wrapped():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    async with make_client(handler) as client:
        with pytest.raises(InferenceRequestFailed) as excinfo:
            await client.infer(MODEL, b"img")
    assert excinfo.value.status_code is None


@pytest.mark.asyncio
async def test_unexpected_body_is_reported():
    def handler(request):
        return httpx.Response(200, json={"error": "nope"})

    async with make_client(handler) as client:
        with pytest.raises(InferenceRequestFailed):
            await client.infer(MODEL, b"img")


@pytest.mark.asyncio
async def test_sequential_directory_writes_manifest_per_stem(image_dir, tmp_path):
    bodies = []

    def handler(request):
        bodies.append(request.content)
        return httpx.Response(200, json=BODY)

    out = tmp_path / "manifests"
    async with make_client(handler) as client:
        report = await run_inference(client, MODEL, image_dir, out)

    assert report.ok
    assert bodies == [b"image-a", b"image-b", b"image-c"]
    assert sorted(p.name for p in out.iterdir()) == ["a.json", "b.json", "c.json"]
    written = json.loads((out / "a.json").read_text())
    assert written[1] == {"score": 0.42, "label": "sofa", "mask": "/w"}
    assert [s.label for s in load_manifest(out / "b.json")] == ["cat", "sofa"]


@pytest.mark.asyncio
async def test_sequential_stops_at_first_failure(image_dir, tmp_path):
    def handler(request):
        if request.content == b"image-b":
            return httpx.Response(500)
        return httpx.Response(200, json=BODY)

    out = tmp_path / "manifests"
    async with make_client(handler) as client:
        with pytest.raises(InferenceRequestFailed):
            await infer_directory(client, MODEL, image_dir, out)
    assert sorted(p.name for p in out.iterdir()) == ["a.json"]


@pytest.mark.asyncio
async def test_concurrent_reports_failures_per_image(image_dir, tmp_path):
    def handler(request):
        if request.content == b"image-b":
            return httpx.Response(401, text="bad token")
        return httpx.Response(200, json=BODY)

    out = tmp_path / "manifests"
    async with make_client(handler) as client:
        report = await infer_directory(client, MODEL, image_dir, out, concurrent=True)

    assert sorted(p.name for p in report.written) == ["a.json", "c.json"]
    assert list(report.failed) == [image_dir / "b.jpg"]
    assert report.failed[image_dir / "b.jpg"].status_code == 401
    assert not (out / "b.json").exists()


@pytest.mark.asyncio
async def test_single_file(tmp_path):
    image = tmp_path / "photo.png"
    image.write_bytes(np.arange(4, dtype=np.uint8).tobytes())

    async with make_client(lambda request: httpx.Response(200, json=BODY[:1])) as client:
        report = await run_inference(client, MODEL, image, tmp_path / "photo.json")

    assert report.written == [tmp_path / "photo.json"]
    assert load_manifest(tmp_path / "photo.json")[0].label == "cat"


@pytest.mark.asyncio
async def test_directory_into_existing_file_is_rejected(image_dir, tmp_path):
    target = tmp_path / "out.json"
    target.write_text("[]")
    async with make_client(lambda request: httpx.Response(200, json=[])) as client:
        with pytest.raises(InvalidPathCombination):
            await run_inference(client, MODEL, image_dir, target)
