import os
import re
import time
import uuid
import shutil
import logging
import mimetypes
from typing import Optional

import requests
from werkzeug.utils import secure_filename

logger = logging.getLogger(__name__)


class MediaStore:
    """Owns the `uploads/` and `outputs/` directories.

    Uploads keep a timestamped copy of the client's file name; generated media
    get a random uuid name and are published under `/outputs/<name>`.
    """

    def __init__(self, uploads_dir: Optional[str] = None, outputs_dir: Optional[str] = None):
        self.uploads_dir = os.path.abspath(uploads_dir or os.getenv("UPLOADS_DIR", "uploads"))
        self.outputs_dir = os.path.abspath(outputs_dir or os.getenv("OUTPUTS_DIR", "outputs"))
        os.makedirs(self.uploads_dir, exist_ok=True)
        os.makedirs(self.outputs_dir, exist_ok=True)

    @staticmethod
    def upload_name(original: str, mime_type: Optional[str] = None, now_ms: Optional[int] = None) -> str:
        """`<ms>-<stem><ext>`. Only the stem is sanitised so non-ASCII names keep their extension."""
        stamp = now_ms if now_ms is not None else int(time.time() * 1000)
        stem, ext = os.path.splitext(re.sub(r"\s+", "_", os.path.basename(original or "")))
        if not re.fullmatch(r"\.[A-Za-z0-9]+", ext):
            ext = (mimetypes.guess_extension(mime_type) if mime_type else None) or ""
        stem = secure_filename(stem) or "image"
        return f"{stamp}-{stem}{ext.lower()}"

    def save_upload(self, file_storage) -> str:
        """Persist a werkzeug FileStorage and return its absolute path."""
        name = self.upload_name(file_storage.filename, file_storage.mimetype)
        path = os.path.join(self.uploads_dir, name)
        file_storage.save(path)
        logger.info("Saved upload %s (%s)", name, file_storage.mimetype)
        return path

    def new_output_path(self, ext: str = ".mp4") -> str:
        if ext and not ext.startswith("."):
            ext = "." + ext
        return os.path.join(self.outputs_dir, f"{uuid.uuid4()}{ext}")

    @staticmethod
    def output_url(path: str) -> str:
        return f"/outputs/{os.path.basename(path)}"

    @staticmethod
    def upload_url(path: str) -> str:
        return f"/uploads/{os.path.basename(path)}"

    def copy_to_outputs(self, source_path: str) -> str:
        ext = os.path.splitext(source_path)[1] or ".png"
        out_path = self.new_output_path(ext)
        shutil.copyfile(source_path, out_path)
        return out_path

    def download_to_outputs(self, url: str, headers: Optional[dict] = None, ext: str = ".mp4", timeout: int = 120) -> str:
        """Stream a remote file into outputs/ and return the local path."""
        out_path = self.new_output_path(ext)
        resp = requests.get(url, headers=headers, stream=True, timeout=timeout)
        resp.raise_for_status()
        try:
            with open(out_path, "wb") as f:
                for chunk in resp.iter_content(chunk_size=1024 * 1024):
                    if chunk:
                        f.write(chunk)
        except Exception:
            logger.error("Download of %s failed, removing partial file", url.split("?")[0])
            if os.path.exists(out_path):
                os.unlink(out_path)
            raise
        logger.info("Downloaded %s -> %s", url.split("?")[0], os.path.basename(out_path))
        return out_path
