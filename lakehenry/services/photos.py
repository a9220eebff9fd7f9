"""Community photo queue: public submission and admin moderation."""

from __future__ import annotations

import uuid

from flask import current_app

from lakehenry.extensions import bucket, db
from lakehenry.models import Photo, PhotoStatus
from lakehenry.services import civil_time
from lakehenry.services.errors import ConflictError, NotFoundError, ServerError
from lakehenry.services.saga import Saga
from lakehenry.services.storage import StoredObject, extension_for
from lakehenry.services.uploads import ImageUpload

PENDING_PREFIX = 'pending/'
APPROVED_PREFIX = 'approved/'
PENDING_BACK = '/admin/photos/pending'
APPROVED_BACK = '/admin/photos/approved'


def submit_photo(
    image: ImageUpload,
    *,
    category: str,
    alt: str,
    title: str | None = None,
    caption: str | None = None,
    submitted_by: str | None = None,
) -> Photo:
    """Store the image under ``pending/`` and queue a pending row for review."""
    photo_id = str(uuid.uuid4())
    key = f'{PENDING_PREFIX}{photo_id}.{extension_for(image.content_type)}'

    with Saga('submit-photo') as saga:
        saga.step(
            'upload',
            lambda: bucket.put(key, image.body, image.content_type),
            compensate=lambda: bucket.delete(key),
        )

        photo = Photo(
            id=photo_id,
            status=PhotoStatus.PENDING,
            object_key=key,
            content_type=image.content_type,
            category=category,
            title=title,
            caption=caption,
            alt=alt,
            submitted_by=submitted_by,
        )

        def _insert():
            db.session.add(photo)
            db.session.commit()

        saga.step('insert-row', _insert)

    current_app.logger.info('Photo %s submitted (%s)', photo_id, category)
    return photo


def approved_key_for(pending_key: str) -> str:
    """Fresh ``approved/<token>-<name>`` key; each approval attempt writes its own object."""
    if not pending_key.startswith(PENDING_PREFIX):
        raise ServerError(back=PENDING_BACK, message=f'Unexpected key {pending_key}')
    name = pending_key[len(PENDING_PREFIX):]
    return f'{APPROVED_PREFIX}{uuid.uuid4().hex[:12]}-{name}'


def approve_photo(
    photo_id: str | None,
    *,
    alt: str,
    title: str | None = None,
    caption: str | None = None,
) -> Photo:
    """Move a pending photo to ``approved/`` and flip its status.

    The copy is made first, under a key unique to this attempt, then the
    row is updated only while it is still pending. When that update touches
    anything other than exactly one row this attempt's copy is deleted and
    the pending object is left as it was. The pending original is removed
    only after the row commits.
    """
    photo = db.session.get(Photo, photo_id) if photo_id else None
    if photo is None or photo.status != PhotoStatus.PENDING:
        raise NotFoundError(back=PENDING_BACK)

    src_key = photo.object_key
    dst_key = approved_key_for(src_key)

    def _copy():
        # A missing source leaves nothing of ours to undo
        if not bucket.copy(src_key, dst_key):
            raise NotFoundError(back=PENDING_BACK)

    with Saga('approve-photo') as saga:
        saga.step('copy', _copy, compensate=lambda: bucket.delete(dst_key))

        def _flip_status():
            result = db.session.execute(
                db.update(Photo)
                .where(Photo.id == photo_id, Photo.status == PhotoStatus.PENDING)
                .values(
                    status=PhotoStatus.APPROVED,
                    object_key=dst_key,
                    alt=alt,
                    title=title,
                    caption=caption,
                    approved_at=civil_time.now_utc(),
                )
            )
            if result.rowcount != 1:
                db.session.rollback()
                raise ConflictError('update', back=PENDING_BACK)
            db.session.commit()

        saga.step('update-row', _flip_status)

    bucket.discard(src_key)
    db.session.refresh(photo)
    current_app.logger.info('Photo %s approved', photo_id)
    return photo


def reject_photo(photo_id: str | None) -> None:
    photo = db.session.get(Photo, photo_id) if photo_id else None
    if photo is None:
        raise NotFoundError(back=PENDING_BACK)
    if photo.status != PhotoStatus.PENDING:
        raise ConflictError('conflict', back=PENDING_BACK)

    bucket.discard(photo.object_key)
    db.session.delete(photo)
    db.session.commit()
    current_app.logger.info('Photo %s rejected', photo_id)


def delete_approved_photo(photo_id: str | None) -> None:
    photo = db.session.get(Photo, photo_id) if photo_id else None
    if photo is None or photo.status != PhotoStatus.APPROVED:
        raise NotFoundError(back=APPROVED_BACK)

    bucket.discard(photo.object_key)
    db.session.delete(photo)
    db.session.commit()
    current_app.logger.info('Photo %s deleted', photo_id)


def photo_file(photo_id: str | None, status: PhotoStatus) -> StoredObject:
    """Bytes of a photo currently in ``status``; anything else is a 404."""
    photo = db.session.execute(
        db.select(Photo).where(Photo.id == photo_id, Photo.status == status)
    ).scalar_one_or_none() if photo_id else None
    if photo is None:
        raise NotFoundError()
    obj = bucket.get(photo.object_key)
    if obj is None:
        raise NotFoundError()
    return obj


def list_photos(status: PhotoStatus, category: str | None = None) -> list[Photo]:
    stmt = db.select(Photo).where(Photo.status == status)
    if category:
        stmt = stmt.where(Photo.category == category)
    order = Photo.approved_at.desc() if status == PhotoStatus.APPROVED else Photo.submitted_at.asc()
    return db.session.execute(stmt.order_by(order)).scalars().all()


__all__ = [
    'submit_photo',
    'approve_photo',
    'approved_key_for',
    'reject_photo',
    'delete_approved_photo',
    'photo_file',
    'list_photos',
]
