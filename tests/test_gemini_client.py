from types import SimpleNamespace

import pytest

from src.gemini_client import GeminiClient, safe_parse_captions


def test_safe_parse_plain_json():
    assert safe_parse_captions('{"top": "うえ", "bottom": "した"}') == {"top": "うえ", "bottom": "した"}


def test_safe_parse_embedded_json():
    raw = 'Sure! ```json\n{"top": "a", "bottom": "b"}\n```'
    assert safe_parse_captions(raw) == {"top": "a", "bottom": "b"}


@pytest.mark.parametrize("raw", [None, "", "not json at all", "[1, 2]", "{broken"])
def test_safe_parse_falls_back_to_empty(raw):
    assert safe_parse_captions(raw) == {"top": "", "bottom": ""}


def test_dry_run_never_touches_sdk():
    client = GeminiClient(api_key=None, dry_run=True)
    result = client.generate_captions("/nowhere.png", mime_type="image/png")
    assert set(result["captions"]) == {"top", "bottom"}
    assert result["mimeType"] == "image/png"


class FakeGenai:
    def __init__(self, reply):
        self.reply = reply
        self.calls = {}

    def upload_file(self, path, display_name=None, mime_type=None):
        self.calls["upload"] = (path, display_name, mime_type)
        return SimpleNamespace(uri="https://files.test/abc", mime_type=mime_type or "image/png")

    def GenerativeModel(self, name):
        self.calls["model"] = name
        fake = self

        class _Model:
            def generate_content(self, contents, generation_config=None):
                fake.calls["contents"] = contents
                fake.calls["config"] = generation_config
                return SimpleNamespace(text=fake.reply)

        return _Model()


def test_generate_captions_uses_files_api_and_json_mode(tmp_path):
    image = tmp_path / "cat.jpg"
    image.write_bytes(b"jpg")
    genai = FakeGenai('{"top": "ねこ", "bottom": "ゆれる"}')

    client = GeminiClient(api_key="k", dry_run=False)
    client._genai = genai
    result = client.generate_captions(str(image), mime_type="image/jpeg", tone="sarcastic", display_name="cat.jpg")

    assert result == {
        "captions": {"top": "ねこ", "bottom": "ゆれる"},
        "fileUri": "https://files.test/abc",
        "mimeType": "image/jpeg",
    }
    assert genai.calls["upload"] == (str(image), "cat.jpg", "image/jpeg")
    assert genai.calls["model"] == "gemini-2.5-flash"
    assert "Tone=sarcastic" in genai.calls["contents"][0]
    assert genai.calls["config"] == {"response_mime_type": "application/json"}


def test_missing_key_raises(monkeypatch):
    monkeypatch.delenv("GOOGLE_API_KEY", raising=False)
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)
    with pytest.raises(RuntimeError, match="GOOGLE_API_KEY"):
        GeminiClient(dry_run=False).generate_captions("x.png")
