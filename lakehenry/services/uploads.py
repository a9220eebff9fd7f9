"""Validation of image uploads (photo submissions and event posters)."""

from __future__ import annotations

import os
from dataclasses import dataclass

from werkzeug.datastructures import FileStorage

from lakehenry.services.errors import InputError
from lakehenry.services.storage import ALLOWED_IMAGE_TYPES, MAX_IMAGE_BYTES


@dataclass(frozen=True)
class ImageUpload:
    body: bytes
    content_type: str


def _determine_size(file: FileStorage) -> int:
    stream = file.stream
    current = stream.tell()
    stream.seek(0, os.SEEK_END)
    size = stream.tell()
    stream.seek(current)
    return size


def read_image(file: FileStorage | None, *, back: str | None = None) -> ImageUpload:
    """Check presence, type and size of an uploaded image and read its bytes.

    Raises ``InputError`` with ``file``, ``type`` or ``size``.
    """
    if file is None or not isinstance(file, FileStorage) or not file.filename:
        raise InputError('file', back=back)

    content_type = (file.mimetype or '').lower()
    if content_type not in ALLOWED_IMAGE_TYPES:
        raise InputError('type', back=back)

    size = _determine_size(file)
    if size <= 0 or size > MAX_IMAGE_BYTES:
        raise InputError('size', back=back)

    file.stream.seek(0)
    return ImageUpload(body=file.stream.read(), content_type=content_type)


__all__ = ['ImageUpload', 'read_image']
