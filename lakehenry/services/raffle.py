"""Raffle winner ledger, per-month titles and the live-draw video config."""

from __future__ import annotations

import json
import re
from datetime import date
from urllib.parse import parse_qs, urlsplit

from flask import current_app

from lakehenry.config import site_settings
from lakehenry.extensions import db, kv
from lakehenry.models import RaffleMonth, RaffleWinner
from lakehenry.services import civil_time
from lakehenry.services.errors import InputError

LIVE_CONFIG_KEY = 'raffle_live'
FACEBOOK_HOSTS = {'facebook.com', 'm.facebook.com'}


def serialize_winner(winner: RaffleWinner) -> dict:
    return {
        'id': winner.id,
        'raffleKey': winner.raffle_key,
        'drawDate': winner.draw_date.isoformat(),
        'ticketNumber': winner.ticket_number,
        'name': winner.winner_name,
        'town': winner.town,
        'prize': winner.prize,
    }


def _winners_for(raffle_key: str) -> list[RaffleWinner]:
    return db.session.execute(
        db.select(RaffleWinner)
        .where(RaffleWinner.raffle_key == raffle_key)
        .order_by(RaffleWinner.draw_date.desc(), RaffleWinner.created_at.desc())
    ).scalars().all()


def list_winners(raffle_key: str | None) -> list[dict]:
    if not civil_time.is_month_key(raffle_key):
        raise InputError('raffleKey', message='raffleKey (YYYY-MM) required')
    return [serialize_winner(winner) for winner in _winners_for(raffle_key)]


def _text(payload: dict, field: str) -> str:
    value = payload.get(field)
    return '' if value is None else str(value).strip()


def add_winner(payload: dict) -> str:
    """Insert or replace one winner; returns its ``<month>-<date>-<ticket>`` id."""
    draw_date = _text(payload, 'drawDate')
    if not civil_time.is_real_iso_date(draw_date):
        raise InputError('drawDate', message='drawDate must be a valid YYYY-MM-DD date')

    try:
        ticket = int(_text(payload, 'ticketNumber'))
    except ValueError:
        ticket = 0
    if ticket <= 0:
        raise InputError('ticketNumber', message='ticketNumber must be a positive number')

    name = _text(payload, 'name')
    if len(name) < 2:
        raise InputError('name', message='name required')
    town = _text(payload, 'town')
    if len(town) < 2:
        raise InputError('town', message='town required')
    prize = _text(payload, 'prize') or None

    raffle_key = draw_date[:7]
    winner_id = re.sub(r'[^\w-]', '', f'{raffle_key}-{draw_date}-{ticket}')
    db.session.merge(RaffleWinner(
        id=winner_id,
        raffle_key=raffle_key,
        draw_date=date.fromisoformat(draw_date),
        ticket_number=ticket,
        winner_name=name,
        town=town,
        prize=prize,
    ))
    db.session.commit()
    current_app.logger.info('Raffle winner %s saved', winner_id)
    return winner_id


def delete_winner(payload: dict) -> None:
    winner_id = _text(payload, 'id')
    if not winner_id:
        raise InputError('id', message='Missing id')
    db.session.execute(db.delete(RaffleWinner).where(RaffleWinner.id == winner_id))
    db.session.commit()
    current_app.logger.info('Raffle winner %s deleted', winner_id)


def set_month_title(payload: dict) -> str | None:
    raffle_key = _text(payload, 'raffleKey')
    if not civil_time.is_month_key(raffle_key):
        raise InputError('raffleKey', message='raffleKey (YYYY-MM) required')
    title = _text(payload, 'title') or None
    db.session.merge(RaffleMonth(month_key=raffle_key, title=title))
    db.session.commit()
    current_app.logger.info('Raffle month %s title set', raffle_key)
    return title


def month_title(raffle_key: str) -> str | None:
    meta = db.session.get(RaffleMonth, raffle_key)
    return meta.title if meta and meta.title else None


def month_feed(requested: str | None) -> dict:
    """Winners for one raffle month plus month navigation.

    The default month is the current one when it has winners, otherwise the
    newest month that does.
    """
    current = civil_time.current_month_key()
    keys = db.session.execute(db.select(RaffleWinner.raffle_key).distinct()).scalars().all()
    active = sorted({key for key in keys if civil_time.is_month_key(key)}, reverse=True)
    months = sorted(set(active) | {current}, reverse=True)

    month = (requested or '').strip()
    if not (civil_time.is_month_key(month) and month in months):
        month = current if current in active else (active[0] if active else current)

    idx = months.index(month)
    return {
        'ok': True,
        'monthKey': month,
        'monthLabel': civil_time.month_label(month),
        'prevMonthKey': months[idx + 1] if idx + 1 < len(months) else None,
        'nextMonthKey': months[idx - 1] if idx > 0 else None,
        'raffleTitle': month_title(month),
        'winners': [serialize_winner(winner) for winner in _winners_for(month)],
        'months': [{'key': key, 'label': civil_time.month_label(key)} for key in months],
    }


def facebook_video_id(url: str) -> str | None:
    try:
        parts = urlsplit(url)
    except ValueError:
        return None
    host = (parts.hostname or '').lower()
    if host.startswith('www.'):
        host = host[4:]
    if parts.scheme not in ('http', 'https') or host not in FACEBOOK_HOSTS:
        return None

    match = re.search(r'/videos/(\d+)', parts.path)
    if match:
        return match.group(1)
    video = parse_qs(parts.query).get('v', [''])[0]
    return video if video.isdigit() else None


def normalize_video_url(url: str, page_id: str) -> str | None:
    video_id = facebook_video_id(url)
    if video_id is None:
        return None
    return f'https://www.facebook.com/{page_id}/videos/{video_id}/'


def get_live_config() -> dict:
    empty = {'latestVideoUrl': None, 'previousVideoUrl': None, 'updatedAt': None}
    raw = kv.get(LIVE_CONFIG_KEY)
    if not raw:
        return empty
    try:
        stored = json.loads(raw)
    except ValueError:
        current_app.logger.warning('Ignoring malformed %s record', LIVE_CONFIG_KEY)
        return empty
    if not isinstance(stored, dict):
        return empty
    return {
        field: stored.get(field) if isinstance(stored.get(field), str) else None
        for field in empty
    }


def save_live_config(latest_raw) -> dict:
    """Store a new latest video; the replaced one becomes ``previousVideoUrl``."""
    latest_raw = '' if latest_raw is None else str(latest_raw).strip()
    latest = None
    if latest_raw:
        latest = normalize_video_url(latest_raw, site_settings().facebook_page_id)
        if latest is None:
            raise InputError(
                'url',
                message=(
                    'Please paste a Facebook video URL (example: '
                    'https://www.facebook.com/<page>/videos/<id> or '
                    'https://www.facebook.com/watch/?v=<id>).'
                ),
            )

    existing = get_live_config()
    previous = existing['previousVideoUrl']
    if latest and existing['latestVideoUrl'] and existing['latestVideoUrl'] != latest:
        previous = existing['latestVideoUrl']

    config = {
        'latestVideoUrl': latest,
        'previousVideoUrl': previous,
        'updatedAt': civil_time.to_utc_iso(civil_time.now_utc()),
    }
    kv.put(LIVE_CONFIG_KEY, json.dumps(config))
    current_app.logger.info('Raffle live video updated')
    return config
