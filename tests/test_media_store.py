import os

import pytest

from src.media_store import MediaStore


class BrokenStream:
    status_code = 200

    def raise_for_status(self):
        pass

    def iter_content(self, chunk_size=None):
        yield b"first half"
        raise ConnectionError("connection reset mid-download")


@pytest.fixture
def store(tmp_path):
    return MediaStore(str(tmp_path / "uploads"), str(tmp_path / "outputs"))


def test_upload_name_keeps_extension_of_non_ascii_name():
    assert MediaStore.upload_name("ねこ.jpg", "image/jpeg", now_ms=1700000000000) == "1700000000000-image.jpg"


def test_upload_name_collapses_whitespace():
    assert MediaStore.upload_name("my cat  pic.PNG", now_ms=1) == "1-my_cat_pic.png"


def test_upload_name_takes_extension_from_mimetype():
    assert MediaStore.upload_name("snapshot", "image/png", now_ms=1) == "1-snapshot.png"


def test_partial_download_is_removed(store, monkeypatch):
    monkeypatch.setattr("requests.get", lambda url, headers=None, stream=False, timeout=None: BrokenStream())

    with pytest.raises(ConnectionError):
        store.download_to_outputs("https://cdn.test/video.mp4")
    assert os.listdir(store.outputs_dir) == []
