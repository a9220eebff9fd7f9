"""Event calendar: slug ids, schedule validation, posters and the month feed."""

from __future__ import annotations

import re
import time
from dataclasses import dataclass
from datetime import datetime

from flask import current_app

from lakehenry.extensions import bucket, db
from lakehenry.models import Event, EventKind, EventStatus
from lakehenry.services import civil_time
from lakehenry.services.errors import InputError, NotFoundError
from lakehenry.services.saga import Saga
from lakehenry.services.storage import StoredObject, extension_for

MAX_ID_ATTEMPTS = 30
EVENTS_BACK = '/admin/events'


def slugify(text: str) -> str:
    slug = (text or '').lower().strip()
    slug = re.sub(r'[\'"]', '', slug)
    slug = re.sub(r'[^a-z0-9]+', '-', slug)
    return slug.strip('-')[:80]


def base_event_id(title: str, start_local: str | None, is_tbd: bool) -> str:
    """``<YYYY-MM-DD>-<slug>`` from the local start date, or ``tbd-<slug>``."""
    prefix = 'tbd'
    if not is_tbd and start_local:
        match = re.match(r'^(\d{4}-\d{2}-\d{2})T', start_local)
        if match:
            prefix = match.group(1)
    return re.sub(r'-+', '-', f'{prefix}-{slugify(title)}').strip('-')


def generate_event_id(base: str) -> str:
    """First free id among ``base``, ``base-2`` ... ``base-30``."""
    candidate = base
    for n in range(2, MAX_ID_ATTEMPTS + 1):
        if db.session.get(Event, candidate) is None:
            return candidate
        candidate = f'{base}-{n}'
    if db.session.get(Event, candidate) is None:
        return candidate
    return f'{base}-{int(time.time() * 1000)}'


@dataclass
class EventDetails:
    """Validated event fields ready to persist."""

    title: str
    kind: EventKind
    status: EventStatus
    is_tbd: bool
    start_local: str | None
    date_start: datetime | None
    date_end: datetime | None
    location: str | None = None
    summary: str | None = None
    url: str | None = None
    url_label: str | None = None


def resolve_schedule(
    *,
    is_tbd: bool,
    start_raw: str | None,
    end_raw: str | None,
    previous_start: datetime | None = None,
) -> tuple[datetime | None, datetime | None]:
    """Validate local start/end strings and convert them to UTC.

    A start in the past is rejected unless it is unchanged from
    ``previous_start`` (editing an old event keeps working).
    """
    if is_tbd:
        return None, None
    if not start_raw:
        raise InputError('invalid')

    start = civil_time.local_to_utc(start_raw)
    if start is None:
        raise InputError('invalid')
    end = None
    if end_raw:
        end = civil_time.local_to_utc(end_raw)
        if end is None:
            raise InputError('invalid')
        if end < start:
            raise InputError('range')

    unchanged = previous_start is not None and civil_time.as_utc(previous_start) == start
    if not unchanged and start < civil_time.now_utc():
        raise InputError('past')
    return start, end


def _apply(event: Event, details: EventDetails) -> None:
    event.title = details.title
    event.kind = details.kind
    event.status = details.status
    event.is_tbd = details.is_tbd
    event.date_start = details.date_start
    event.date_end = details.date_end
    event.location = details.location
    event.summary = details.summary
    event.url = details.url
    event.url_label = details.url_label


def create_event(details: EventDetails) -> Event:
    event_id = generate_event_id(base_event_id(details.title, details.start_local, details.is_tbd))
    event = Event(id=event_id)
    _apply(event, details)
    db.session.add(event)
    db.session.commit()
    current_app.logger.info('Event %s created', event_id)
    return event


def get_event_or_404(event_id: str | None, back: str = EVENTS_BACK) -> Event:
    event = db.session.get(Event, event_id) if event_id else None
    if event is None:
        raise NotFoundError(back=back)
    return event


def update_event(event_id: str, details: EventDetails) -> Event:
    event = get_event_or_404(event_id)
    _apply(event, details)
    db.session.commit()
    current_app.logger.info('Event %s updated', event_id)
    return event


def delete_event(event_id: str | None) -> None:
    event = get_event_or_404(event_id)
    poster_key = event.poster_key
    db.session.delete(event)
    db.session.commit()
    bucket.discard(poster_key)
    current_app.logger.info('Event %s deleted', event_id)


def set_status(event_id: str | None, status: EventStatus) -> None:
    changed = db.session.execute(
        db.update(Event)
        .where(Event.id == event_id)
        .values(status=status, updated_at=civil_time.now_utc())
    ).rowcount
    db.session.commit()
    if not changed:
        raise NotFoundError(back=EVENTS_BACK)
    current_app.logger.info('Event %s is now %s', event_id, status.value)


def attach_poster(event_id: str, *, body: bytes, content_type: str, alt: str) -> str:
    """Upload a poster and point the event at it.

    The object is written first; if the row update fails a freshly created
    key is deleted again. An older poster under a different key is removed
    once the row points at the new one.
    """
    event = get_event_or_404(event_id)
    old_key = event.poster_key
    new_key = f'events/posters/{event.id}.{extension_for(content_type)}'

    with Saga('attach-poster') as saga:
        saga.step(
            'upload',
            lambda: bucket.put(new_key, body, content_type),
            # Overwriting the current key has nothing to undo
            compensate=(lambda: bucket.delete(new_key)) if new_key != old_key else None,
        )

        def _update_row():
            event.poster_key = new_key
            event.poster_alt = alt
            event.updated_at = civil_time.now_utc()
            db.session.commit()

        saga.step('update-row', _update_row)

    if old_key and old_key != new_key:
        bucket.discard(old_key)
    current_app.logger.info('Poster for event %s stored at %s', event_id, new_key)
    return new_key


def published_poster(event_id: str | None) -> StoredObject:
    event = db.session.execute(
        db.select(Event).where(Event.id == event_id, Event.status == EventStatus.PUBLISHED)
    ).scalar_one_or_none()
    if event is None or not event.poster_key:
        raise NotFoundError()
    obj = bucket.get(event.poster_key)
    if obj is None:
        raise NotFoundError()
    return obj


def serialize_event(event: Event) -> dict:
    return {
        'id': event.id,
        'title': event.title,
        'kind': event.kind.value,
        'status': event.status.value,
        'dateStart': civil_time.utc_to_local(event.date_start) if event.date_start else None,
        'dateEnd': civil_time.utc_to_local(event.date_end) if event.date_end else None,
        'dateStartUtc': civil_time.to_utc_iso(event.date_start),
        'dateEndUtc': civil_time.to_utc_iso(event.date_end),
        'isTbd': bool(event.is_tbd),
        'location': event.location,
        'summary': event.summary,
        'url': event.url,
        'urlLabel': event.url_label,
        'posterUrl': f'/api/events/poster?id={event.id}' if event.poster_key else None,
        'posterAlt': event.poster_alt,
    }


def _published_dated():
    return db.select(Event).where(
        Event.status == EventStatus.PUBLISHED,
        Event.is_tbd.is_(False),
        Event.date_start.is_not(None),
    )


def month_feed(requested: str | None) -> dict:
    """Published events for one Chicago-local month plus navigation keys.

    Selectable months are the current month plus every month holding a
    published, dated event (newest first). An unknown or missing ``month``
    falls back to the newest month with data.
    """
    current = civil_time.current_month_key()
    starts = db.session.execute(_published_dated().with_only_columns(Event.date_start)).scalars().all()
    active = sorted({civil_time.utc_to_month_key(start) for start in starts}, reverse=True)
    months = sorted(set(active) | {current}, reverse=True)

    month = (requested or '').strip()
    if not (civil_time.is_month_key(month) and month in months):
        month = active[0] if active else current

    idx = months.index(month)
    prev_key = months[idx + 1] if idx + 1 < len(months) else None
    next_key = months[idx - 1] if idx > 0 else None

    start, end = civil_time.month_bounds_utc(month)
    events = db.session.execute(
        _published_dated()
        .where(Event.date_start >= start, Event.date_start < end)
        .order_by(Event.date_start.asc(), Event.title.asc())
    ).scalars().all()

    return {
        'ok': True,
        'monthKey': month,
        'monthLabel': civil_time.month_label(month),
        'prevMonthKey': prev_key,
        'nextMonthKey': next_key,
        'monthEvents': [serialize_event(event) for event in events],
    }


def list_events() -> list[Event]:
    return db.session.execute(
        db.select(Event).order_by(Event.is_tbd.desc(), Event.date_start.desc(), Event.title.asc())
    ).scalars().all()


def upcoming_tbd() -> list[Event]:
    return db.session.execute(
        db.select(Event)
        .where(Event.status == EventStatus.PUBLISHED, Event.is_tbd.is_(True))
        .order_by(Event.title.asc())
    ).scalars().all()
