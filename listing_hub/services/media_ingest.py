from __future__ import annotations

import base64
import binascii
import logging
import re
import time
from dataclasses import dataclass, field
from typing import Any, Sequence
from urllib.parse import urlparse

from listing_hub.core.config import settings
from listing_hub.core.errors import MediaUploadFailedError, ValidationError
from listing_hub.services.storage import ObjectStore

log = logging.getLogger(__name__)

ALLOWED_IMAGE_TYPES = {
    "image/jpeg": ".jpg",
    "image/jpg": ".jpg",
    "image/png": ".png",
    "image/webp": ".webp",
    "image/gif": ".gif",
    "image/heic": ".heic",
}

# matches the listing_media.url column
MAX_REFERENCE_LENGTH = 1000

_DATA_URL = re.compile(r"^data:(?P<type>[\w.+-]+/[\w.+-]+)?(;[\w=-]+)*;base64,(?P<data>.*)$", re.DOTALL)
_UNSAFE_NAME = re.compile(r"[^A-Za-z0-9._-]+")


@dataclass
class MediaBatch:
    urls: list[str] = field(default_factory=list)
    # storage keys written during this request; discarded if the request fails later
    uploaded_keys: list[str] = field(default_factory=list)
    attempted: int = 0

    def discard_uploads(self, store: ObjectStore) -> None:
        for key in self.uploaded_keys:
            try:
                store.delete(key=key)
            except Exception:
                log.warning("could not discard orphaned upload %s", key, exc_info=True)
        self.uploaded_keys.clear()


def image_ceiling(category: str) -> int:
    return settings.image_ceilings.get(category, settings.image_ceilings.get("sale", 20))


def _is_http_url(value: str) -> bool:
    parsed = urlparse(value.strip())
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def _reference(value: Any, *, index: int, name: str | None) -> str:
    if not isinstance(value, str) or not _is_http_url(value):
        raise MediaUploadFailedError(index=index, name=name, reason="invalid storage reference")
    url = value.strip()
    if len(url) > MAX_REFERENCE_LENGTH:
        raise MediaUploadFailedError(index=index, name=name, reason="storage reference too long")
    return url


def _decode_payload(item: dict[str, Any]) -> tuple[bytes, str | None]:
    data = item.get("data")
    if not isinstance(data, str) or not data:
        raise ValueError("missing data")

    content_type = item.get("type") or item.get("content_type")
    m = _DATA_URL.match(data)
    if m:
        content_type = content_type or m.group("type")
        data = m.group("data")
    return base64.b64decode(data, validate=True), content_type


def _safe_name(name: str | None, index: int, ext: str) -> str:
    base = _UNSAFE_NAME.sub("-", (name or "").strip()).strip("-.")
    if not base:
        base = f"image-{index}"
    if not base.lower().endswith(ext) and "." not in base:
        base += ext
    return base[:120]


class MediaIngestor:
    def __init__(self, store: ObjectStore):
        self.store = store

    def ingest(self, items: Sequence[Any], *, category: str, owner_id: str, is_draft: bool) -> MediaBatch:
        ceiling = image_ceiling(category)
        if len(items) > ceiling:
            raise ValidationError(invalid={"images": f"image limit exceeded ({ceiling} allowed)"})
        if not items and not is_draft:
            raise ValidationError(missing=["images"])

        batch = MediaBatch(attempted=len(items))
        try:
            # one at a time; the first failure aborts the batch
            for index, item in enumerate(items):
                batch.urls.append(self._ingest_one(item, index=index, owner_id=owner_id, batch=batch))
        except MediaUploadFailedError:
            batch.discard_uploads(self.store)
            raise
        return batch

    def _ingest_one(self, item: Any, *, index: int, owner_id: str, batch: MediaBatch) -> str:
        if isinstance(item, str):
            return _reference(item, index=index, name=None)

        if not isinstance(item, dict):
            raise MediaUploadFailedError(index=index, name=None, reason="unsupported image item")

        name = item.get("name") if isinstance(item.get("name"), str) else None

        if "data" not in item:
            url = item.get("url") or item.get("publicUrl") or item.get("public_url")
            return _reference(url, index=index, name=name)

        try:
            payload, content_type = _decode_payload(item)
        except (ValueError, binascii.Error) as e:
            raise MediaUploadFailedError(index=index, name=name, reason=f"undecodable payload: {e}")

        ext = ALLOWED_IMAGE_TYPES.get((content_type or "").lower())
        if ext is None:
            raise MediaUploadFailedError(index=index, name=name, reason=f"unsupported content type {content_type!r}")
        if not payload:
            raise MediaUploadFailedError(index=index, name=name, reason="empty payload")

        key = f"{owner_id}/{int(time.time() * 1000)}-{index}-{_safe_name(name, index, ext)}"
        try:
            url = self.store.put_bytes(key=key, data=payload, content_type=content_type)
        except Exception as e:
            log.exception("upload failed: owner=%s index=%d", owner_id, index)
            raise MediaUploadFailedError(index=index, name=name, reason=str(e) or type(e).__name__)

        batch.uploaded_keys.append(key)
        if len(url) > MAX_REFERENCE_LENGTH:
            raise MediaUploadFailedError(index=index, name=name, reason="storage reference too long")
        return url
