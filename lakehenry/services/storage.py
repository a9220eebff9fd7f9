"""Object store for uploaded photos and event posters."""

from __future__ import annotations

import hashlib
import json
import shutil
from dataclasses import dataclass
from pathlib import Path

from flask import current_app


ALLOWED_IMAGE_TYPES = {
    'image/jpeg': 'jpg',
    'image/png': 'png',
    'image/webp': 'webp',
    'image/gif': 'gif',
}
MAX_IMAGE_BYTES = 8 * 1024 * 1024

_META_SUFFIX = '.meta.json'


@dataclass(frozen=True)
class StoredObject:
    key: str
    body: bytes
    content_type: str
    etag: str


def extension_for(content_type: str) -> str:
    return ALLOWED_IMAGE_TYPES.get(content_type, 'bin')


class ObjectStore:
    """Bucket rooted at ``OBJECT_STORE_ROOT``.

    Keys are slash-separated (``pending/<id>.jpg``) and map onto files under
    the root; the content type lives in a sidecar metadata file. The store
    has no rename, so moves are copy-then-delete.
    """

    def init_app(self, app) -> None:
        root = Path(app.config.get('OBJECT_STORE_ROOT', 'instance/objects'))
        if not root.is_absolute():
            root = Path(app.root_path).parent / root
        app.config['OBJECT_STORE_ROOT'] = str(root)

    @property
    def root(self) -> Path:
        return Path(current_app.config['OBJECT_STORE_ROOT'])

    def _path_for(self, key: str) -> Path:
        if not key or key.startswith('/') or key.endswith(_META_SUFFIX):
            raise ValueError(f"Invalid object key: {key!r}")
        root = self.root.resolve()
        path = (root / key).resolve()
        # Security check: ensure path is within the bucket root
        if root not in path.parents:
            raise PermissionError('Attempted to access outside object store root')
        return path

    def put(self, key: str, body: bytes, content_type: str) -> None:
        path = self._path_for(key)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(body)
        meta = {'content_type': content_type, 'etag': hashlib.md5(body).hexdigest()}
        path.with_name(path.name + _META_SUFFIX).write_text(json.dumps(meta))

    def get(self, key: str) -> StoredObject | None:
        path = self._path_for(key)
        if not path.is_file():
            return None
        body = path.read_bytes()
        meta_path = path.with_name(path.name + _META_SUFFIX)
        meta = json.loads(meta_path.read_text()) if meta_path.exists() else {}
        return StoredObject(
            key=key,
            body=body,
            content_type=meta.get('content_type') or 'application/octet-stream',
            etag=meta.get('etag') or hashlib.md5(body).hexdigest(),
        )

    def exists(self, key: str) -> bool:
        return self._path_for(key).is_file()

    def copy(self, src_key: str, dst_key: str) -> bool:
        """Copy an object (and its metadata). Returns False if the source is missing."""
        src = self._path_for(src_key)
        if not src.is_file():
            return False
        dst = self._path_for(dst_key)
        dst.parent.mkdir(parents=True, exist_ok=True)
        shutil.copyfile(src, dst)
        src_meta = src.with_name(src.name + _META_SUFFIX)
        if src_meta.exists():
            shutil.copyfile(src_meta, dst.with_name(dst.name + _META_SUFFIX))
        return True

    def delete(self, key: str) -> None:
        path = self._path_for(key)
        path.unlink(missing_ok=True)
        path.with_name(path.name + _META_SUFFIX).unlink(missing_ok=True)

    def discard(self, key: str | None) -> None:
        """Best-effort delete used for cleanup; failures are logged only."""
        if not key:
            return
        try:
            self.delete(key)
        except Exception:
            current_app.logger.exception('Failed to delete object %s', key)


__all__ = [
    'ObjectStore',
    'StoredObject',
    'ALLOWED_IMAGE_TYPES',
    'MAX_IMAGE_BYTES',
    'extension_for',
]
