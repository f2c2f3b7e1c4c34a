from __future__ import annotations
from functools import lru_cache
from pathlib import Path
from typing import Protocol

from listing_hub.core.config import settings


class ObjectStore(Protocol):
    def put_bytes(self, *, key: str, data: bytes, content_type: str | None = None) -> str: ...

    def delete(self, *, key: str) -> None: ...


class LocalObjectStore:
    """
    Filesystem-backed store. Objects are written under ``base_dir`` and served
    from ``public_base_url``.
    """

    def __init__(self, base_dir: str | Path, public_base_url: str):
        self.base = Path(base_dir)
        self.base.mkdir(parents=True, exist_ok=True)
        self.public_base_url = public_base_url.rstrip("/")

    def _path(self, key: str) -> Path:
        path = (self.base / key).resolve()
        if self.base.resolve() not in path.parents:
            raise ValueError(f"Storage key escapes base dir: {key}")
        return path

    def put_bytes(self, *, key: str, data: bytes, content_type: str | None = None) -> str:
        path = self._path(key)
        if path.exists():
            # no upsert: keys are unique per upload
            raise FileExistsError(key)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
        return f"{self.public_base_url}/{key}"

    def delete(self, *, key: str) -> None:
        self._path(key).unlink(missing_ok=True)


@lru_cache
def get_object_store() -> ObjectStore:
    return LocalObjectStore(settings.media_root, settings.media_base_url)
