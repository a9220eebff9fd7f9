"""Back-office pages. The request gate has already checked the session."""

from __future__ import annotations

from flask import Blueprint, abort, render_template, request

from lakehenry.extensions import db
from lakehenry.forms.admin import EventForm
from lakehenry.models import Event, EventKind, PhotoStatus, PHOTO_CATEGORIES
from lakehenry.services import civil_time, donors, events, photos, raffle

admin_bp = Blueprint("admin", __name__)


def _flags() -> dict:
    return {'ok': request.args.get('ok'), 'err': request.args.get('err')}


@admin_bp.get("")
@admin_bp.get("/")
def dashboard():
    return render_template(
        "admin/index.html",
        pending_count=len(photos.list_photos(PhotoStatus.PENDING)),
        **_flags(),
    )


@admin_bp.get("/donors")
def donor_list():
    return render_template(
        "admin/donors.html",
        donors=donors.list_donors(),
        format_cents=donors.format_cents,
        **_flags(),
    )


@admin_bp.get("/events")
def event_list():
    return render_template(
        "admin/events.html",
        events=[events.serialize_event(event) for event in events.list_events()],
        **_flags(),
    )


@admin_bp.get("/events/new")
def event_new():
    form = EventForm(formdata=None)
    return render_template("admin/event_edit.html", form=form, event=None, kinds=list(EventKind), **_flags())


@admin_bp.get("/events/<event_id>")
def event_edit(event_id: str):
    event = db.session.get(Event, event_id)
    if event is None:
        abort(404)
    data = events.serialize_event(event)
    form = EventForm(
        formdata=None,
        id=event.id,
        title=event.title,
        kind=event.kind.value,
        status=event.status.value,
        is_tbd=event.is_tbd,
        date_start=data['dateStart'] or '',
        date_end=data['dateEnd'] or '',
        location=event.location,
        summary=event.summary,
        url=event.url,
        url_label=event.url_label,
    )
    return render_template("admin/event_edit.html", form=form, event=data, kinds=list(EventKind), **_flags())


@admin_bp.get("/photos/pending")
def pending_photos():
    return render_template(
        "admin/photos.html",
        photos=photos.list_photos(PhotoStatus.PENDING),
        status='pending',
        **_flags(),
    )


@admin_bp.get("/photos/approved")
def approved_photos():
    category = request.args.get('category')
    if category not in PHOTO_CATEGORIES:
        category = None
    return render_template(
        "admin/photos.html",
        photos=photos.list_photos(PhotoStatus.APPROVED, category),
        status='approved',
        categories=PHOTO_CATEGORIES,
        **_flags(),
    )


@admin_bp.get("/raffle")
def raffle_admin():
    month = request.args.get('month')
    if not civil_time.is_month_key(month):
        month = civil_time.current_month_key()
    return render_template(
        "admin/raffle.html",
        month=month,
        month_label=civil_time.month_label(month),
        winners=raffle.list_winners(month),
        title=raffle.month_title(month),
        live=raffle.get_live_config(),
        **_flags(),
    )
