"""
Object storage for submission files.

A bucket is a directory under ``STORAGE_BASE_DIR``; keys are slash-separated
relative paths inside it. Objects are never overwritten: uploading to an
existing key fails.
"""

import os
import tempfile
from functools import lru_cache
from pathlib import Path
from typing import Iterable, List, Optional
from urllib.parse import quote

from . import config
from .errors import StorageError
from .logging_config import get_logger

log = get_logger("storage")

PUBLIC_PREFIX = "/storage/v1/object/public"


def _resolve_base(base_dir: str) -> Path:
    base = Path(base_dir)
    try:
        base.mkdir(parents=True, exist_ok=True)
    except OSError:
        # fall back to tmp when the configured dir is not writable (e.g. CI)
        base = Path(tempfile.gettempdir()) / "portal_storage"
        base.mkdir(parents=True, exist_ok=True)
    return base.resolve()


class ObjectStorage:
    def __init__(self, base_dir: str, bucket: str, site_url: Optional[str] = None):
        self.base = _resolve_base(base_dir)
        self.bucket = bucket
        self.site_url = (site_url if site_url is not None else config.SITE_URL).rstrip("/")
        (self.base / bucket).mkdir(parents=True, exist_ok=True)

    def _path(self, key: str) -> Path:
        if not key or key.startswith("/") or "\\" in key:
            raise StorageError("Invalid key", code="invalid_key")
        root = (self.base / self.bucket).resolve()
        p = (root / key).resolve()
        if root not in p.parents:
            raise StorageError("Invalid key", code="invalid_key")
        return p

    def upload(self, key: str, data: bytes, content_type: Optional[str] = None) -> str:
        p = self._path(key)
        try:
            p.parent.mkdir(parents=True, exist_ok=True)
            with open(p, "xb") as f:
                f.write(data)
        except FileExistsError:
            raise StorageError("The resource already exists", code="duplicate")
        except OSError as e:
            raise StorageError(f"Failed to store object: {e.strerror or e}") from e
        log.debug("stored %s/%s (%d bytes, %s)", self.bucket, key, len(data), content_type)
        return key

    def get_public_url(self, key: str) -> str:
        return f"{self.site_url}{PUBLIC_PREFIX}/{quote(self.bucket)}/{quote(key)}"

    def open_path(self, key: str) -> Path:
        p = self._path(key)
        if not p.is_file():
            raise StorageError("Object not found", code="not_found")
        return p

    def remove(self, keys: Iterable[str]) -> List[str]:
        """Delete the given keys and return the ones that existed.

        Keys with no stored object are skipped.
        """
        paths = [(k, self._path(k)) for k in keys]
        removed = []
        for k, p in paths:
            try:
                os.remove(p)
            except FileNotFoundError:
                log.warning("remove: no object at %s/%s", self.bucket, k)
                continue
            except OSError as e:
                raise StorageError(f"Failed to remove object: {e.strerror or e}") from e
            removed.append(k)
        return removed


@lru_cache(maxsize=1)
def get_storage() -> ObjectStorage:
    return ObjectStorage(config.STORAGE_BASE_DIR, config.STORAGE_BUCKET)
