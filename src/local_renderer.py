import os
import shutil
import logging
import subprocess
from typing import Optional

from .motions import get_motion

logger = logging.getLogger(__name__)


class LocalRenderer:
    """Turns a still image into a short shaking mp4 with ffmpeg.

    Used only when `LOCAL_RENDER=ffmpeg`. The default local path just copies the
    upload and lets the browser animate it with CSS.
    """

    def __init__(self, duration: int = 4, ffmpeg_path: Optional[str] = None):
        self.duration = duration
        self.ffmpeg_path = ffmpeg_path or shutil.which("ffmpeg")

    @property
    def available(self) -> bool:
        return bool(self.ffmpeg_path)

    def build_command(self, image_path: str, motion_id: str, output_path: str) -> list:
        preset = get_motion(motion_id)
        vf_filter = preset.ffmpeg_filter if preset else "scale=trunc(iw/2)*2:trunc(ih/2)*2"
        fade_dur = min(0.5, self.duration / 4.0)
        vf_filter += f",fps=25,setsar=1,fade=t=in:st=0:d={fade_dur},fade=t=out:st={self.duration - fade_dur}:d={fade_dur}"
        return [
            self.ffmpeg_path or "ffmpeg",
            "-y",
            "-loop", "1",
            "-i", image_path,
            "-vf", vf_filter,
            "-c:v", "libx264",
            "-t", str(self.duration),
            "-pix_fmt", "yuv420p",
            "-movflags", "+faststart",
            output_path,
        ]

    def render(self, image_path: str, motion_id: str, output_path: str) -> Optional[str]:
        """Render to `output_path`. Returns the path, or None when ffmpeg is missing or fails."""
        if not self.available:
            logger.warning("ffmpeg not found on PATH; skipping local render")
            return None

        cmd = self.build_command(image_path, motion_id, output_path)
        try:
            subprocess.run(cmd, check=True, capture_output=True, text=True)
        except (subprocess.CalledProcessError, FileNotFoundError) as e:
            logger.error(f"ffmpeg local render failed: {e}")
            if isinstance(e, subprocess.CalledProcessError):
                logger.error(f"ffmpeg stderr: {e.stderr}")
            if os.path.exists(output_path):
                os.unlink(output_path)
            return None
        return output_path
