import os
import time
import logging
from typing import Mapping, Optional

from .errors import GenerationError
from .kling_client import KlingClient
from .local_renderer import LocalRenderer
from .media_store import MediaStore
from .motions import build_motion_prompt
from .veo_client import VeoClient

logger = logging.getLogger(__name__)

PROVIDERS = ("local", "kling", "veo")
LOCAL_MODEL = "local-css-effects"
LOCAL_FFMPEG_MODEL = "local-ffmpeg-effects"


class UnknownProvider(ValueError):
    pass


class VideoGenerator:
    """Video generator dispatcher.

    Behavior:
    - `local` waits a simulated delay and copies the upload into outputs/ so
      the browser can animate it with CSS. With `LOCAL_RENDER=ffmpeg` it renders
      a real mp4 instead and falls back to the copy if ffmpeg fails.
    - `kling` submits to AimlAPI, polls, downloads the result.
    - `veo` submits to Google Veo, polls, downloads the result.
    - In `dry_run=True` mode kling and veo take the local copy path but keep
      their own response shape.
    """

    def __init__(self, store: MediaStore, dry_run: bool = False, kling: Optional[KlingClient] = None,
                 veo: Optional[VeoClient] = None, renderer: Optional[LocalRenderer] = None,
                 local_delay: Optional[float] = None, public_base_url: Optional[str] = None):
        self.store = store
        self.dry_run = dry_run
        self.kling = kling or KlingClient()
        self.veo = veo or VeoClient()
        self.renderer = renderer or LocalRenderer()
        self.local_delay = local_delay if local_delay is not None else float(os.getenv("LOCAL_SIMULATED_DELAY", "2"))
        self.local_render = os.getenv("LOCAL_RENDER", "copy").lower()
        self.public_base_url = (public_base_url or os.getenv("PUBLIC_BASE_URL") or "").rstrip("/")

    def generate(self, provider: str, image_path: str, mime_type: Optional[str], form: Mapping) -> dict:
        provider = (provider or "local").lower()
        if provider not in PROVIDERS:
            raise UnknownProvider(f"unknown provider: {provider}")
        handler = getattr(self, f"generate_{provider}")
        logger.info("Generating with provider=%s motion=%s dry_run=%s", provider, form.get("motion"), self.dry_run)
        return handler(image_path, mime_type, form)

    def _local_media(self, image_path: str, motion: str) -> tuple:
        if self.local_render == "ffmpeg":
            out_path = self.store.new_output_path(".mp4")
            rendered = self.renderer.render(image_path, motion, out_path)
            if rendered:
                return rendered, LOCAL_FFMPEG_MODEL
            logger.warning("Falling back to copying the upload for local mode")
        return self.store.copy_to_outputs(image_path), LOCAL_MODEL

    def generate_local(self, image_path: str, mime_type: Optional[str], form: Mapping) -> dict:
        motion = form.get("motion") or "earthquake"
        if self.local_delay > 0:
            time.sleep(self.local_delay)
        out_path, model = self._local_media(image_path, motion)
        return {
            "url": self.store.output_url(out_path),
            "model": model,
            "provider": "local",
            "motion": motion,
            "isLocalMode": True,
        }

    def _kling_image_reference(self, image_path: str, mime_type: Optional[str]) -> str:
        if self.public_base_url:
            return self.public_base_url + self.store.upload_url(image_path)
        return self.kling.image_data_uri(image_path, mime_type)

    def generate_kling(self, image_path: str, mime_type: Optional[str], form: Mapping) -> dict:
        motion = form.get("motion") or "subtle-zoom"
        duration = self.kling.normalize_duration(form.get("duration"))

        if self.dry_run:
            print("[DRY RUN] Would generate Kling video from image:", image_path)
            out_path = self.store.copy_to_outputs(image_path)
            return {"url": self.store.output_url(out_path), "model": self.kling.model, "provider": "kling"}

        video_url = self.kling.generate(
            self._kling_image_reference(image_path, mime_type),
            build_motion_prompt(motion),
            duration,
        )
        out_path = self.store.download_to_outputs(video_url)
        return {"url": self.store.output_url(out_path), "model": self.kling.model, "provider": "kling"}

    def generate_veo(self, image_path: str, mime_type: Optional[str], form: Mapping) -> dict:
        motion = form.get("motion") or "subtle-zoom"
        aspect = self.veo.normalize_aspect(form.get("aspect"))
        resolution = self.veo.normalize_resolution(form.get("resolution"))
        model = self.veo.pick_model(form.get("speed"))

        if self.dry_run:
            print("[DRY RUN] Would generate Veo video from image:", image_path)
            out_path = self.store.copy_to_outputs(image_path)
        else:
            with open(image_path, "rb") as f:
                image_bytes = f.read()
            operation_name = self.veo.submit(
                image_bytes,
                mime_type or "image/png",
                build_motion_prompt(motion),
                model=model,
                aspect=aspect,
                resolution=resolution,
            )
            operation = self.veo.wait(operation_name)
            out_path = self.store.download_to_outputs(self.veo.video_uri(operation), headers=self.veo.download_headers())

        if not os.path.exists(out_path):
            raise GenerationError("generation_failed")
        return {"url": self.store.output_url(out_path), "model": model, "aspect": aspect, "resolution": resolution}
