import os
import time
import base64
import logging
import mimetypes
from typing import Optional

import requests

from .errors import GenerationError, GenerationTimeout

logger = logging.getLogger(__name__)

PENDING_STATUSES = ("queued", "generating", "waiting", "active", "processing")
FAILED_STATUSES = ("error", "failed")


class KlingClient:
    """Kling image-to-video via AimlAPI.

    Flow:
    1. POST the prompt and an image reference to `/generate/video/kling/generation`
    2. GET the same path with `generation_id` every `poll_interval` seconds
    3. Return the remote video URL once the status is `completed`

    The image reference is a public URL when the caller can provide one,
    otherwise the image is inlined as a base64 data URI.
    """

    def __init__(self, api_key: Optional[str] = None, base_url: Optional[str] = None, model: Optional[str] = None,
                 poll_interval: Optional[float] = None, max_polls: Optional[int] = None):
        self.api_key = api_key or os.getenv("AIMLAPI_API_KEY")
        self.base_url = (base_url or os.getenv("AIMLAPI_BASE_URL") or "https://api.aimlapi.com/v2").rstrip("/")
        self.model = model or os.getenv("KLING_MODEL") or "kling-video/v1.6/standard/image-to-video"
        self.poll_interval = poll_interval if poll_interval is not None else float(os.getenv("KLING_POLL_INTERVAL", "5"))
        self.max_polls = max_polls if max_polls is not None else int(os.getenv("KLING_MAX_POLLS", "60"))

    @property
    def generation_url(self) -> str:
        return f"{self.base_url}/generate/video/kling/generation"

    def _headers(self) -> dict:
        if not self.api_key:
            raise RuntimeError("AIMLAPI_API_KEY is required for Kling video generation.")
        return {"Authorization": f"Bearer {self.api_key}", "Content-Type": "application/json"}

    @staticmethod
    def normalize_duration(duration) -> str:
        try:
            value = int(duration)
        except (TypeError, ValueError):
            return "5"
        return str(value) if value in (5, 10) else "5"

    @staticmethod
    def image_data_uri(image_path: str, mime_type: Optional[str] = None) -> str:
        mime = mime_type or mimetypes.guess_type(image_path)[0] or "image/png"
        with open(image_path, "rb") as f:
            encoded = base64.b64encode(f.read()).decode("ascii")
        return f"data:{mime};base64,{encoded}"

    def submit(self, image_url: str, prompt: str, duration="5") -> str:
        payload = {
            "model": self.model,
            "prompt": prompt,
            "image_url": image_url,
            "duration": self.normalize_duration(duration),
        }
        resp = requests.post(self.generation_url, json=payload, headers=self._headers(), timeout=60)
        if resp.status_code >= 400:
            raise GenerationError(f"Kling submit failed ({resp.status_code}): {resp.text[:500]}")
        data = resp.json()
        generation_id = data.get("id") or data.get("generation_id")
        if not generation_id:
            raise GenerationError(f"Kling submit response missing id: {data}")
        logger.info("Kling generation started. ID: %s", generation_id)
        return generation_id

    def poll(self, generation_id: str) -> str:
        """Poll until the generation completes and return the remote video URL."""
        for attempt in range(self.max_polls):
            time.sleep(self.poll_interval)
            resp = requests.get(
                self.generation_url,
                params={"generation_id": generation_id},
                headers=self._headers(),
                timeout=30,
            )
            if resp.status_code >= 400:
                raise GenerationError(f"Kling polling failed ({resp.status_code}): {resp.text[:500]}")
            data = resp.json()
            status = (data.get("status") or "").lower()
            logger.debug("Kling %s poll %s/%s: %s", generation_id, attempt + 1, self.max_polls, status)

            if status == "completed":
                video = data.get("video") or {}
                url = video.get("url") if isinstance(video, dict) else None
                if not url:
                    raise GenerationError("internal_error")
                logger.info("Kling generation %s complete", generation_id)
                return url
            if status in FAILED_STATUSES:
                error = data.get("error")
                if isinstance(error, dict):
                    error = error.get("message") or error.get("name")
                raise GenerationError(error or "internal_error")
            if status and status not in PENDING_STATUSES:
                logger.warning("Kling returned unexpected status %r, still waiting", status)

        raise GenerationTimeout(f"Kling generation timed out after {self.max_polls} polls")

    def generate(self, image_url: str, prompt: str, duration="5") -> str:
        generation_id = self.submit(image_url, prompt, duration)
        return self.poll(generation_id)
