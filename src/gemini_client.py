import os
import json
import logging
from typing import Optional

logger = logging.getLogger(__name__)

EMPTY_CAPTIONS = {"top": "", "bottom": ""}


def safe_parse_captions(raw: Optional[str]) -> dict:
    """Parse the model's JSON reply into `{top, bottom}`.

    Falls back to scanning for a JSON object inside the text, then to empty
    captions.
    """
    if not raw:
        return dict(EMPTY_CAPTIONS)

    try:
        data = json.loads(raw)
        if isinstance(data, dict):
            return data
    except ValueError:
        pass

    start = raw.find("{")
    end = raw.rfind("}")
    if start != -1 and end > start:
        try:
            data = json.loads(raw[start : end + 1])
            if isinstance(data, dict):
                return data
        except ValueError:
            logger.warning("Failed to parse JSON snippet from Gemini caption response")

    return dict(EMPTY_CAPTIONS)


class GeminiClient:
    """Gemini caption writer backed by the `google-generativeai` SDK.

    Behavior:
    - In `dry_run=True` mode it returns deterministic placeholder captions and
      never touches the network.
    - Otherwise the image is uploaded through the Files API and the model is
      asked for a JSON object with `top` and `bottom` meme captions.
    """

    def __init__(self, api_key: Optional[str] = None, dry_run: bool = False, model: Optional[str] = None):
        self.api_key = api_key or os.getenv("GOOGLE_API_KEY") or os.getenv("GEMINI_API_KEY")
        self.dry_run = dry_run
        self.model = model or os.getenv("GEMINI_CAPTION_MODEL") or "gemini-2.5-flash"
        self._genai = None

    def _sdk(self):
        if self._genai is not None:
            return self._genai
        if not self.api_key:
            raise RuntimeError("GOOGLE_API_KEY (or GEMINI_API_KEY) must be set for captions")
        try:
            import google.generativeai as genai
        except ImportError as exc:
            raise RuntimeError(
                "Caption generation needs `google-generativeai`: %s. Try: pip install google-generativeai" % exc
            )
        genai.configure(api_key=self.api_key)
        self._genai = genai
        return genai

    @staticmethod
    def caption_instruction(tone: str) -> str:
        return (
            'Return JSON with keys "top" and "bottom". Keep each under 50 characters in Japanese. '
            f"Tone={tone}. Do not include quotes in values."
        )

    def generate_captions(self, image_path: str, mime_type: Optional[str] = None, tone: str = "default",
                          display_name: Optional[str] = None) -> dict:
        """Return `{captions, fileUri, mimeType}` for an uploaded image."""
        if self.dry_run:
            return {
                "captions": {"top": "ゆれる準備はできた?", "bottom": "もう止まらない"},
                "fileUri": None,
                "mimeType": mime_type,
            }

        genai = self._sdk()
        uploaded = genai.upload_file(
            path=image_path,
            display_name=display_name or os.path.basename(image_path),
            mime_type=mime_type,
        )
        logger.info("Uploaded %s to Gemini Files API as %s", os.path.basename(image_path), uploaded.uri)

        model = genai.GenerativeModel(self.model)
        resp = model.generate_content(
            [self.caption_instruction(tone), uploaded],
            generation_config={"response_mime_type": "application/json"},
        )
        return {
            "captions": safe_parse_captions(getattr(resp, "text", None)),
            "fileUri": uploaded.uri,
            "mimeType": uploaded.mime_type,
        }
