import base64

import pytest

from src.errors import GenerationError, GenerationTimeout
from src.veo_client import VEO_FAST_MODEL, VEO_MODEL, VeoClient


class DummyResp:
    def __init__(self, data, status_code=200):
        self._data = data
        self.status_code = status_code
        self.text = str(data)

    def json(self):
        return self._data


def make_client(**kwargs):
    opts = dict(api_key="gkey", api_root="https://gemini.test/v1beta", poll_interval=0, max_polls=3)
    opts.update(kwargs)
    return VeoClient(**opts)


def test_submit_sends_image_and_parameters(monkeypatch):
    captured = {}

    def fake_post(url, json=None, headers=None, timeout=None):
        captured.update(url=url, json=json, headers=headers)
        return DummyResp({"name": "models/veo/operations/op-1"})

    monkeypatch.setattr("requests.post", fake_post)

    name = make_client().submit(b"img", "image/jpeg", "shake", model=VEO_FAST_MODEL, aspect="9:16", resolution="1080p")

    assert name == "models/veo/operations/op-1"
    assert captured["url"] == f"https://gemini.test/v1beta/models/{VEO_FAST_MODEL}:predictLongRunning"
    instance = captured["json"]["instances"][0]
    assert instance["prompt"] == "shake"
    assert instance["image"] == {"bytesBase64Encoded": base64.b64encode(b"img").decode(), "mimeType": "image/jpeg"}
    assert captured["json"]["parameters"] == {"aspectRatio": "9:16", "resolution": "1080p"}
    assert captured["headers"]["x-goog-api-key"] == "gkey"


def test_wait_until_done(monkeypatch):
    ops = iter([{"name": "op"}, {"name": "op", "done": True, "response": {}}])
    urls = []

    def fake_get(url, headers=None, timeout=None):
        urls.append(url)
        return DummyResp(next(ops))

    monkeypatch.setattr("requests.get", fake_get)

    op = make_client().wait("models/veo/operations/op-1")
    assert op["done"] is True
    assert urls == ["https://gemini.test/v1beta/models/veo/operations/op-1"] * 2


def test_wait_times_out(monkeypatch):
    monkeypatch.setattr("requests.get", lambda url, headers=None, timeout=None: DummyResp({"done": False}))
    with pytest.raises(GenerationTimeout):
        make_client(max_polls=2).wait("op")


def test_video_uri_extraction():
    op = {
        "done": True,
        "response": {"generateVideoResponse": {"generatedSamples": [{"video": {"uri": "https://files.test/v.mp4"}}]}},
    }
    assert VeoClient.video_uri(op) == "https://files.test/v.mp4"


def test_video_uri_errors():
    with pytest.raises(GenerationError, match="quota"):
        VeoClient.video_uri({"done": True, "error": {"code": 429, "message": "quota exhausted"}})
    with pytest.raises(GenerationError, match="generation_failed"):
        VeoClient.video_uri({"done": True, "response": {"generateVideoResponse": {"generatedSamples": []}}})


def test_model_and_option_normalization():
    assert VeoClient.pick_model("fast") == VEO_FAST_MODEL
    assert VeoClient.pick_model("normal") == VEO_MODEL
    assert VeoClient.pick_model(None) == VEO_MODEL
    assert VeoClient.normalize_aspect("9:16") == "9:16"
    assert VeoClient.normalize_aspect("4:3") == "16:9"
    assert VeoClient.normalize_resolution("1080p") == "1080p"
    assert VeoClient.normalize_resolution(None) == "720p"


def test_missing_api_key(monkeypatch):
    monkeypatch.delenv("GOOGLE_API_KEY", raising=False)
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)
    with pytest.raises(RuntimeError, match="GOOGLE_API_KEY"):
        VeoClient(poll_interval=0).submit(b"x", "image/png", "p")


def test_default_polling_is_every_ten_seconds_bounded_at_sixty(monkeypatch):
    monkeypatch.delenv("VEO_POLL_INTERVAL", raising=False)
    monkeypatch.delenv("VEO_MAX_POLLS", raising=False)
    client = VeoClient()
    assert (client.poll_interval, client.max_polls) == (10.0, 60)
