"""
Generated media records and the gallery.

Every successful generation becomes a :class:`MediaItem` stored in the
key/value store under ``gallery``, newest first. Items only hold a URL;
:func:`save_media` materializes them on disk, decoding ``data:`` URLs or
downloading remote ones.
"""

from __future__ import annotations

import base64
import io
import os
import re
import time
import uuid
from dataclasses import asdict, dataclass
from typing import Any, Dict, List, Optional

import requests
from PIL import Image

from genstudio.storage import KeyValueStore

GALLERY_KEY = "gallery"

_DATA_URL = re.compile(r"^data:(?P<mime>[\w/+.-]+);base64,(?P<data>.*)$", re.DOTALL)


@dataclass
class MediaItem:
    """A generated image or video.

    Attributes:
        id: Unique identifier.
        type: ``"image"`` or ``"video"``.
        url: Hosted URL or ``data:`` URL.
        prompt: Prompt sent to the provider (after template/style merge).
        timestamp: Creation time (epoch seconds).
        provider: Provider id that produced the item.
        template_id: Video template used, if any.
        style_id: Animation style used, if any.
    """

    id: str
    type: str
    url: str
    prompt: str
    timestamp: float
    provider: str
    template_id: Optional[str] = None
    style_id: Optional[str] = None

    @classmethod
    def create(cls, media_type: str, url: str, prompt: str, provider: str, **kwargs: Any) -> "MediaItem":
        return cls(
            id=f"{media_type}-{uuid.uuid4().hex[:12]}",
            type=media_type,
            url=url,
            prompt=prompt,
            timestamp=time.time(),
            provider=provider,
            **kwargs,
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "MediaItem":
        return cls(**d)


class Gallery:
    """Gallery of generated media persisted in a :class:`KeyValueStore`."""

    def __init__(self, store: KeyValueStore):
        self.store = store

    def _items(self) -> List[Dict[str, Any]]:
        return list(self.store.get(GALLERY_KEY, []))

    def add(self, item: MediaItem) -> MediaItem:
        self.store.set(GALLERY_KEY, [item.to_dict()] + self._items())
        return item

    def list(self, media_type: Optional[str] = None) -> List[MediaItem]:
        items = [MediaItem.from_dict(d) for d in self._items()]
        if media_type:
            items = [i for i in items if i.type == media_type]
        return items

    def get(self, item_id: str) -> MediaItem:
        for d in self._items():
            if d["id"] == item_id:
                return MediaItem.from_dict(d)
        raise KeyError(f"Media item '{item_id}' not found")

    def remove(self, item_id: str) -> None:
        items = self._items()
        remaining = [d for d in items if d["id"] != item_id]
        if len(remaining) == len(items):
            raise KeyError(f"Media item '{item_id}' not found")
        self.store.set(GALLERY_KEY, remaining)

    def clear(self) -> None:
        self.store.set(GALLERY_KEY, [])

    def __len__(self) -> int:
        return len(self._items())


# ── Saving ───────────────────────────────────────────────────────────────────


def _fetch_bytes(url: str, timeout: float) -> bytes:
    match = _DATA_URL.match(url)
    if match:
        return base64.b64decode(match.group("data"))
    response = requests.get(url, timeout=timeout)
    response.raise_for_status()
    return response.content


def save_media(item: MediaItem, output_dir: str, timeout: float = 60.0) -> str:
    """Write a media item to ``output_dir``.

    Images are re-encoded as PNG through PIL; videos are written as
    downloaded (``.mp4``).

    Returns:
        The absolute path to the saved file.
    """
    os.makedirs(output_dir, exist_ok=True)
    content = _fetch_bytes(item.url, timeout)

    if item.type == "image":
        filepath = os.path.join(output_dir, f"{item.id}.png")
        image = Image.open(io.BytesIO(content))
        image.save(filepath, format="PNG")
    else:
        filepath = os.path.join(output_dir, f"{item.id}.mp4")
        with open(filepath, "wb") as fh:
            fh.write(content)

    return os.path.abspath(filepath)
