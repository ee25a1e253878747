"""Runtime settings read from environment variables."""

from __future__ import annotations

import os

DEFAULT_INFERENCE_ENDPOINT = "https://api-inference.huggingface.co/models"
DEFAULT_REQUEST_TIMEOUT = 120.0


def get_inference_endpoint() -> str:
    """Return base URL of the inference API, without trailing slash."""
    return os.environ.get("SEGMASK_INFERENCE_ENDPOINT", DEFAULT_INFERENCE_ENDPOINT).rstrip("/")


def get_request_timeout() -> float:
    """Return HTTP timeout in seconds for inference requests."""
    return float(os.environ.get("SEGMASK_REQUEST_TIMEOUT", DEFAULT_REQUEST_TIMEOUT))


def get_api_token() -> str | None:
    return os.environ.get("HF_TOKEN") or None


def get_log_level() -> str:
    return os.environ.get("LOG_LEVEL", "INFO")
