"""Flask backend for the shake toy.

Routes:
  GET  /                      single page UI
  GET  /health                liveness probe
  GET  /api/motions           motion catalog + download gate config
  POST /api/captions          Gemini meme captions for an image
  POST /api/video/<provider>  local | kling | veo
  POST /api/video             same, provider taken from the form
  GET  /outputs/<name>        generated media
  GET  /uploads/<name>        saved uploads (used as public image refs)
"""
import os
import logging
from typing import Optional

from flask import Flask, Response, jsonify, render_template, request, send_from_directory

from .download_gate import DownloadGate, download_filename
from .gemini_client import GeminiClient
from .media_store import MediaStore
from .motions import motion_catalog, stylesheet
from .notices import friendly_notice
from .video_gen import PROVIDERS, VideoGenerator

logger = logging.getLogger(__name__)


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).lower() in ("1", "true", "yes")


def error_response(message: str, status: int = 500):
    body = {"error": message or "internal_error"}
    if status >= 500:
        body["notice"] = friendly_notice(body["error"])
    return jsonify(body), status


def create_app(config: Optional[dict] = None) -> Flask:
    app = Flask(__name__)
    app.config.update(
        DRY_RUN=_env_flag("DRY_RUN"),
        UPLOADS_DIR=os.getenv("UPLOADS_DIR", "uploads"),
        OUTPUTS_DIR=os.getenv("OUTPUTS_DIR", "outputs"),
        LOCAL_SIMULATED_DELAY=float(os.getenv("LOCAL_SIMULATED_DELAY", "2")),
        MAX_CONTENT_LENGTH=int(os.getenv("MAX_UPLOAD_MB", "20")) * 1024 * 1024,
    )
    if config:
        app.config.update(config)

    store = MediaStore(app.config["UPLOADS_DIR"], app.config["OUTPUTS_DIR"])
    app.extensions["media_store"] = store
    app.extensions["video_generator"] = VideoGenerator(
        store,
        dry_run=app.config["DRY_RUN"],
        local_delay=app.config["LOCAL_SIMULATED_DELAY"],
    )
    app.extensions["gemini_client"] = GeminiClient(dry_run=app.config["DRY_RUN"])

    @app.get("/")
    def index():
        return render_template(
            "index.html",
            motions=motion_catalog(),
            providers=PROVIDERS,
            gate=DownloadGate.client_config(),
        )

    @app.get("/motions.css")
    def motions_css():
        return Response(stylesheet(), mimetype="text/css")

    @app.get("/health")
    def health():
        return jsonify({"ok": True})

    @app.get("/api/motions")
    def motions():
        return jsonify({"motions": motion_catalog(), "providers": list(PROVIDERS), "gate": DownloadGate.client_config()})

    @app.post("/api/captions")
    def captions():
        image = request.files.get("image")
        if image is None or not image.filename:
            return error_response("image is required", 400)
        tone = request.form.get("tone") or "default"
        try:
            path = store.save_upload(image)
            result = app.extensions["gemini_client"].generate_captions(
                path, mime_type=image.mimetype, tone=tone, display_name=os.path.basename(image.filename)
            )
        except Exception as exc:
            logger.exception("Caption generation failed")
            return error_response(str(exc))
        return jsonify(result)

    def _generate(provider: str):
        image = request.files.get("image")
        if image is None or not image.filename:
            return error_response("image is required", 400)
        if provider not in PROVIDERS:
            return error_response(f"unknown provider: {provider}", 400)
        try:
            path = store.save_upload(image)
            result = app.extensions["video_generator"].generate(provider, path, image.mimetype, request.form)
        except Exception as exc:
            logger.exception("Video generation failed (provider=%s)", provider)
            return error_response(str(exc))
        is_video = result.get("url", "").endswith(".mp4")
        result.setdefault("downloadName", download_filename(request.form.get("motion"), is_video=is_video))
        return jsonify(result)

    @app.post("/api/video/<provider>")
    def video_for_provider(provider):
        return _generate(provider)

    @app.post("/api/video")
    def video():
        return _generate(request.form.get("provider") or "local")

    @app.get("/outputs/<path:name>")
    def outputs(name):
        return send_from_directory(store.outputs_dir, name)

    @app.get("/uploads/<path:name>")
    def uploads(name):
        return send_from_directory(store.uploads_dir, name)

    @app.errorhandler(413)
    def too_large(_):
        return error_response("image is too large", 413)

    return app
