"""Admin API: donors and events."""

from __future__ import annotations

from urllib.parse import quote

from flask import Blueprint, request

from lakehenry.blueprints.common.responses import (
    form_endpoint,
    json_response,
    redirect_to,
    wants_json,
)
from lakehenry.forms.admin import DonorForm, EventForm, PosterForm
from lakehenry.models import EventKind, EventStatus
from lakehenry.services import donors, events
from lakehenry.services.errors import InputError, NotFoundError
from lakehenry.services.uploads import read_image

admin_api_bp = Blueprint("admin_api", __name__)

DONORS_BACK = '/admin/donors'
EVENTS_BACK = '/admin/events'


def _done(back: str, ok: str, **extra):
    if wants_json():
        return json_response({'ok': True, **extra})
    return redirect_to(back, ok=ok)


def event_page(event_id: str) -> str:
    return f"{EVENTS_BACK}/{quote(event_id, safe='')}"


# Donors ---------------------------------------------------------------------

@admin_api_bp.post("/donors")
@form_endpoint(DONORS_BACK)
def create_donor():
    form = DonorForm()
    if not form.validate():
        raise InputError(form.first_error())

    amount_cents = donors.parse_amount_cents(form.amount.data)
    if amount_cents is None:
        raise InputError('amount')

    donor = donors.add_donor(
        name=form.name.data,
        amount_cents=amount_cents,
        display_name=form.displayName.data,
        in_memory_of=form.inMemoryOf.data,
    )
    return _done(DONORS_BACK, '1', id=donor.id)


@admin_api_bp.post("/donors/delete")
@form_endpoint(DONORS_BACK)
def delete_donor():
    donors.delete_donor(request.form.get('id'))
    return _done(DONORS_BACK, 'deleted')


# Events ---------------------------------------------------------------------

def _event_details(form: EventForm, previous_start=None) -> events.EventDetails:
    date_start, date_end = events.resolve_schedule(
        is_tbd=form.is_tbd.data,
        start_raw=form.date_start.data,
        end_raw=form.date_end.data,
        previous_start=previous_start,
    )
    return events.EventDetails(
        title=form.title.data,
        kind=EventKind(form.kind.data),
        status=EventStatus.PUBLISHED if form.published else EventStatus.DRAFT,
        is_tbd=bool(form.is_tbd.data),
        start_local=form.date_start.data,
        date_start=date_start,
        date_end=date_end,
        location=form.location.data,
        summary=form.summary.data,
        url=form.url.data,
        url_label=form.url_label.data,
    )


@admin_api_bp.post("/events/create")
@form_endpoint(f"{EVENTS_BACK}/new")
def create_event():
    form = EventForm()
    if not form.validate():
        raise InputError(form.first_error('invalid'))

    event = events.create_event(_event_details(form))
    return _done(event_page(event.id), 'created', id=event.id)


@admin_api_bp.post("/events/update")
@form_endpoint(EVENTS_BACK)
def update_event():
    form = EventForm()
    event_id = form.id.data
    if not event_id:
        raise NotFoundError()

    back = event_page(event_id)
    if not form.validate():
        raise InputError(form.first_error('invalid'), back=back)

    existing = events.get_event_or_404(event_id)
    try:
        details = _event_details(form, previous_start=existing.date_start)
    except InputError as exc:
        exc.back = back
        raise
    events.update_event(event_id, details)
    return _done(back, 'updated', id=event_id)


@admin_api_bp.post("/events/delete")
@form_endpoint(EVENTS_BACK)
def delete_event():
    events.delete_event((request.form.get('id') or '').strip())
    return _done(EVENTS_BACK, 'deleted')


@admin_api_bp.post("/events/toggle-status")
@form_endpoint(EVENTS_BACK)
def toggle_event_status():
    event_id = (request.form.get('id') or '').strip()
    if not event_id:
        raise NotFoundError()
    nxt = (request.form.get('next') or '').strip()
    status = EventStatus.PUBLISHED if nxt == EventStatus.PUBLISHED.value else EventStatus.DRAFT
    events.set_status(event_id, status)
    return _done(EVENTS_BACK, 'toggled', status=status.value)


@admin_api_bp.post("/events/poster")
@form_endpoint(EVENTS_BACK)
def upload_event_poster():
    form = PosterForm()
    event_id = form.id.data
    if not event_id:
        raise InputError('invalid')

    back = event_page(event_id)
    if not form.validate():
        raise InputError(form.first_error(), back=back)
    image = read_image(form.poster.data, back=back)

    key = events.attach_poster(
        event_id,
        body=image.body,
        content_type=image.content_type,
        alt=form.alt.data,
    )
    return _done(back, 'poster', posterKey=key)
