import os
import time
import base64
import logging
from typing import Optional

import requests

from .errors import GenerationError, GenerationTimeout

logger = logging.getLogger(__name__)

API_ROOT = "https://generativelanguage.googleapis.com/v1beta"
VEO_MODEL = "veo-3.0-generate-001"
VEO_FAST_MODEL = "veo-3.0-fast-generate-001"
ASPECT_RATIOS = ("16:9", "9:16")
RESOLUTIONS = ("720p", "1080p")


class VeoClient:
    """Google Veo image-to-video over the Gemini REST API.

    Veo runs as a long-running operation: `predictLongRunning` returns an
    operation name which is polled until `done`. The finished operation holds a
    file URI that is downloaded with the same API key.
    """

    def __init__(self, api_key: Optional[str] = None, api_root: Optional[str] = None,
                 poll_interval: Optional[float] = None, max_polls: Optional[int] = None):
        self.api_key = api_key or os.getenv("GOOGLE_API_KEY") or os.getenv("GEMINI_API_KEY")
        self.api_root = (api_root or os.getenv("GEMINI_API_ROOT") or API_ROOT).rstrip("/")
        self.poll_interval = poll_interval if poll_interval is not None else float(os.getenv("VEO_POLL_INTERVAL", "10"))
        self.max_polls = max_polls if max_polls is not None else int(os.getenv("VEO_MAX_POLLS", "60"))

    def _headers(self) -> dict:
        if not self.api_key:
            raise RuntimeError("GOOGLE_API_KEY (or GEMINI_API_KEY) is required for Veo video generation.")
        return {"x-goog-api-key": self.api_key, "Content-Type": "application/json"}

    @staticmethod
    def pick_model(speed: Optional[str]) -> str:
        return VEO_FAST_MODEL if speed == "fast" else VEO_MODEL

    @staticmethod
    def normalize_aspect(aspect: Optional[str]) -> str:
        return aspect if aspect in ASPECT_RATIOS else "16:9"

    @staticmethod
    def normalize_resolution(resolution: Optional[str]) -> str:
        return resolution if resolution in RESOLUTIONS else "720p"

    def submit(self, image_bytes: bytes, mime_type: str, prompt: str, model: str = VEO_MODEL,
               aspect: str = "16:9", resolution: str = "720p") -> str:
        url = f"{self.api_root}/models/{model}:predictLongRunning"
        payload = {
            "instances": [{
                "prompt": prompt,
                "image": {
                    "bytesBase64Encoded": base64.b64encode(image_bytes).decode("ascii"),
                    "mimeType": mime_type or "image/png",
                },
            }],
            "parameters": {"aspectRatio": aspect, "resolution": resolution},
        }
        resp = requests.post(url, json=payload, headers=self._headers(), timeout=60)
        if resp.status_code >= 400:
            raise GenerationError(f"Veo submit failed ({resp.status_code}): {resp.text[:500]}")
        operation = resp.json()
        name = operation.get("name")
        if not name:
            raise GenerationError(f"Veo response missing operation name: {operation}")
        logger.info("Veo operation started: %s", name)
        return name

    def wait(self, operation_name: str) -> dict:
        """Poll the operation until it reports `done` and return it."""
        url = f"{self.api_root}/{operation_name}"
        for attempt in range(self.max_polls):
            time.sleep(self.poll_interval)
            resp = requests.get(url, headers=self._headers(), timeout=30)
            if resp.status_code >= 400:
                raise GenerationError(f"Veo polling failed ({resp.status_code}): {resp.text[:500]}")
            operation = resp.json()
            if operation.get("done"):
                logger.info("Veo operation %s done after %s polls", operation_name, attempt + 1)
                return operation
            logger.debug("Veo %s still running (%s/%s)", operation_name, attempt + 1, self.max_polls)

        raise GenerationTimeout(f"Veo generation timed out after {self.max_polls} polls")

    @staticmethod
    def video_uri(operation: dict) -> str:
        error = operation.get("error")
        if error:
            message = error.get("message") if isinstance(error, dict) else str(error)
            raise GenerationError(message or "generation_failed")

        response = operation.get("response") or {}
        samples = (response.get("generateVideoResponse") or {}).get("generatedSamples") or []
        try:
            uri = samples[0]["video"]["uri"]
        except (IndexError, KeyError, TypeError):
            uri = None
        if not uri:
            raise GenerationError("generation_failed")
        return uri

    def download_headers(self) -> dict:
        return {"x-goog-api-key": self._headers()["x-goog-api-key"]}
