"""Tests for the JSON store, the gallery and saving media to disk."""

import base64
import io
import json
import os

import pytest
from PIL import Image

from genstudio import media
from genstudio.media import Gallery, MediaItem, save_media
from genstudio.storage import KeyValueStore


def _png_data_url():
    buffer = io.BytesIO()
    Image.new("RGB", (4, 4), color=(200, 30, 30)).save(buffer, format="PNG")
    return "data:image/png;base64," + base64.b64encode(buffer.getvalue()).decode()


def test_store_persists_between_instances(tmp_path):
    path = tmp_path / "nested" / "store.json"
    store = KeyValueStore(str(path))
    assert store.get("missing", "default") == "default"

    store.set("api-keys", {"openai": "sk-x"})
    store.set("count", 3)
    store.delete("count")
    store.delete("never-set")

    reopened = KeyValueStore(str(path))
    assert reopened.get("api-keys") == {"openai": "sk-x"}
    assert "count" not in reopened
    assert reopened.keys() == ["api-keys"]
    assert json.loads(path.read_text()) == {"api-keys": {"openai": "sk-x"}}
    assert [p.name for p in path.parent.iterdir()] == ["store.json"]


def test_store_reload_picks_up_external_changes(tmp_path):
    path = tmp_path / "store.json"
    store = KeyValueStore(str(path))
    store.set("a", 1)
    path.write_text(json.dumps({"a": 2}))
    assert store.get("a") == 1
    store.reload()
    assert store.get("a") == 2


def test_store_rejects_non_object_file(tmp_path):
    path = tmp_path / "store.json"
    path.write_text("[1, 2]")
    with pytest.raises(ValueError, match="Invalid store file"):
        KeyValueStore(str(path)).get("a")


def test_gallery_newest_first_and_filtering(tmp_path):
    gallery = Gallery(KeyValueStore(str(tmp_path / "store.json")))
    first = gallery.add(MediaItem.create("image", "https://x/1.png", "one", "openai"))
    second = gallery.add(
        MediaItem.create("video", "https://x/2.mp4", "two", "runwayml", template_id="epic-zoom")
    )

    assert [i.id for i in gallery.list()] == [second.id, first.id]
    assert [i.id for i in gallery.list("image")] == [first.id]
    assert gallery.get(second.id).template_id == "epic-zoom"
    assert first.id.startswith("image-")
    assert len(gallery) == 2

    gallery.remove(first.id)
    assert len(gallery) == 1
    with pytest.raises(KeyError):
        gallery.remove(first.id)
    with pytest.raises(KeyError):
        gallery.get("image-missing")

    gallery.clear()
    assert gallery.list() == []


def test_save_image_from_data_url(tmp_path):
    item = MediaItem.create("image", _png_data_url(), "red square", "stabilityai")
    path = save_media(item, str(tmp_path / "out"))
    assert path.endswith(f"{item.id}.png")
    with Image.open(path) as saved:
        assert saved.size == (4, 4)


def test_save_video_downloads_url(tmp_path, monkeypatch):
    class _Response:
        content = b"\x00\x00\x00\x18ftypmp42"

        def raise_for_status(self):
            pass

    requested = []

    def fake_get(url, timeout):
        requested.append((url, timeout))
        return _Response()

    monkeypatch.setattr(media.requests, "get", fake_get)
    item = MediaItem.create("video", "https://rw/v.mp4", "storm", "runwayml")

    path = save_media(item, str(tmp_path), timeout=5)

    assert requested == [("https://rw/v.mp4", 5)]
    assert os.path.basename(path) == f"{item.id}.mp4"
    with open(path, "rb") as fh:
        assert fh.read() == _Response.content
