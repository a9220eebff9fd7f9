"""Admin API: raffle winners and the live-draw video link."""

from __future__ import annotations

from flask import Blueprint, request

from lakehenry.blueprints.common.responses import json_endpoint, json_response
from lakehenry.services import raffle
from lakehenry.services.errors import InputError

admin_raffle_bp = Blueprint("admin_raffle", __name__)


def _json_body() -> dict:
    body = request.get_json(silent=True)
    if not isinstance(body, dict):
        raise InputError('input', message='Invalid JSON')
    return body


@admin_raffle_bp.get("/winners")
@json_endpoint
def list_winners():
    raffle_key = (request.args.get('raffleKey') or '').strip()
    return json_response({'ok': True, 'winners': raffle.list_winners(raffle_key)})


@admin_raffle_bp.post("/winners")
@json_endpoint
def change_winners():
    body = _json_body()
    action = str(body.get('action') or 'add')

    if action == 'delete':
        raffle.delete_winner(body)
        return json_response({'ok': True})
    if action == 'setMeta':
        title = raffle.set_month_title(body)
        return json_response({'ok': True, 'title': title})
    if action != 'add':
        raise InputError('action', message=f'Unknown action {action}')

    winner_id = raffle.add_winner(body)
    return json_response({'ok': True, 'id': winner_id})


@admin_raffle_bp.get("/live")
@json_endpoint
def live_config():
    return json_response({'ok': True, 'config': raffle.get_live_config()})


@admin_raffle_bp.post("/live")
@json_endpoint
def save_live_config():
    body = _json_body()
    config = raffle.save_live_config(body.get('latestVideoUrl'))
    return json_response({'ok': True, 'config': config})
