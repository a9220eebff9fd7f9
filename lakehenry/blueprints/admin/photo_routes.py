"""Admin API: photo moderation queue."""

from __future__ import annotations

from flask import Blueprint, request

from lakehenry.blueprints.common.responses import (
    NOSTORE,
    file_endpoint,
    form_endpoint,
    json_response,
    object_response,
    redirect_to,
    wants_json,
)
from lakehenry.forms.admin import ApprovePhotoForm
from lakehenry.models import PhotoStatus
from lakehenry.services import photos
from lakehenry.services.errors import InputError

admin_photos_bp = Blueprint("admin_photos", __name__)


def _done(back: str, ok: str):
    if wants_json():
        return json_response({'ok': True})
    return redirect_to(back, ok=ok)


def _photo_id() -> str:
    photo_id = (request.values.get('id') or '').strip()
    if not photo_id:
        raise InputError('input')
    return photo_id


@admin_photos_bp.post("/approve")
@form_endpoint(photos.PENDING_BACK)
def approve():
    form = ApprovePhotoForm()
    if not form.id.data:
        raise InputError('input')
    if not form.validate():
        raise InputError(form.first_error())

    photos.approve_photo(
        form.id.data,
        alt=form.alt.data,
        title=form.title.data,
        caption=form.caption.data,
    )
    return _done(photos.PENDING_BACK, 'approved')


@admin_photos_bp.post("/reject")
@form_endpoint(photos.PENDING_BACK)
def reject():
    photos.reject_photo(_photo_id())
    return _done(photos.PENDING_BACK, 'rejected')


@admin_photos_bp.post("/delete")
@form_endpoint(photos.APPROVED_BACK)
def delete():
    photos.delete_approved_photo(_photo_id())
    return _done(photos.APPROVED_BACK, 'deleted')


@admin_photos_bp.get("/file")
@file_endpoint
def pending_file():
    obj = photos.photo_file(_photo_id(), PhotoStatus.PENDING)
    return object_response(obj, NOSTORE['Cache-Control'])
