"""Server-side admin sessions and the login failure counter.

Sessions are opaque random tokens held by the browser in the
``admin_session`` cookie; the authority lives in the key-value store under
``admin_sess:<token>`` and expires with the store's TTL. Deleting the record
revokes the session immediately.
"""

from __future__ import annotations

import hashlib
import hmac
import json
import secrets
from dataclasses import dataclass

from flask import current_app

from lakehenry.extensions import kv
from lakehenry.services import keyvalue

SESSION_COOKIE = 'admin_session'
LEGACY_COOKIE = 'admin_auth'
SESSION_PREFIX = 'admin_sess:'
SESSION_TTL_SECONDS = 8 * 60 * 60
ADMIN_ROLE = 'admin'

LOGIN_FAIL_PREFIX = 'login_fail:'
LOGIN_FAIL_LIMIT = 10
LOGIN_FAIL_WINDOW_SECONDS = 10 * 60


@dataclass(frozen=True)
class Authenticated:
    role: str
    session_id: str
    expires_at: float

    authenticated = True


@dataclass(frozen=True)
class Unauthenticated:
    reason: str

    authenticated = False


SessionState = Authenticated | Unauthenticated


def _session_key(session_id: str) -> str:
    return SESSION_PREFIX + session_id


def create_session(role: str = ADMIN_ROLE) -> Authenticated:
    """Mint a 256-bit session id and persist its record with the session TTL."""
    session_id = secrets.token_urlsafe(32)
    created = keyvalue.now()
    expires = created + SESSION_TTL_SECONDS
    record = {'role': role, 'createdAt': int(created * 1000), 'expiresAt': int(expires * 1000)}
    kv.put(_session_key(session_id), json.dumps(record), ttl=SESSION_TTL_SECONDS)
    return Authenticated(role=role, session_id=session_id, expires_at=expires)


def verify_session(session_id: str | None) -> SessionState:
    """Resolve a cookie value to a tagged session state.

    This is the only place that decides whether a request is authenticated;
    the request gate and any handler needing auth state call it.
    """
    if not session_id:
        return Unauthenticated('missing')

    try:
        raw = kv.get(_session_key(session_id))
    except Exception:
        current_app.logger.exception('Session store lookup failed')
        return Unauthenticated('store')

    if raw is None:
        return Unauthenticated('unknown')

    try:
        record = json.loads(raw)
    except ValueError:
        return Unauthenticated('malformed')
    if not isinstance(record, dict):
        return Unauthenticated('malformed')

    if record.get('role') != ADMIN_ROLE:
        return Unauthenticated('role')

    expires_ms = record.get('expiresAt')
    if not isinstance(expires_ms, (int, float)) or expires_ms / 1000 <= keyvalue.now():
        return Unauthenticated('expired')

    return Authenticated(role=ADMIN_ROLE, session_id=session_id, expires_at=expires_ms / 1000)


def delete_session(session_id: str | None) -> None:
    if session_id:
        kv.delete(_session_key(session_id))


class LoginThrottle:
    """Fixed-window failed-login counter keyed by client IP.

    The IP is HMAC'd with the app secret so raw addresses never land in the
    store. The window starts at the first failure and is not extended by
    later ones.
    """

    def __init__(self, secret: str, limit: int = LOGIN_FAIL_LIMIT, window: int = LOGIN_FAIL_WINDOW_SECONDS):
        self.secret = secret.encode()
        self.limit = limit
        self.window = window

    def _key(self, ip: str) -> str:
        digest = hmac.new(self.secret, ip.encode(), hashlib.sha256).hexdigest()
        return LOGIN_FAIL_PREFIX + digest[:32]

    def _state(self, ip: str) -> dict | None:
        raw = kv.get(self._key(ip))
        if not raw:
            return None
        try:
            state = json.loads(raw)
        except ValueError:
            return None
        if not isinstance(state, dict) or keyvalue.now() >= float(state.get('resetAt', 0)):
            return None
        return state

    def is_blocked(self, ip: str) -> bool:
        state = self._state(ip)
        return state is not None and int(state.get('n', 0)) >= self.limit

    def record_failure(self, ip: str) -> int:
        state = self._state(ip) or {'n': 0, 'resetAt': keyvalue.now() + self.window}
        state['n'] = int(state.get('n', 0)) + 1
        kv.put(self._key(ip), json.dumps(state), expire_at=float(state['resetAt']))
        return state['n']

    def reset(self, ip: str) -> None:
        kv.delete(self._key(ip))


__all__ = [
    'Authenticated',
    'Unauthenticated',
    'SessionState',
    'LoginThrottle',
    'create_session',
    'verify_session',
    'delete_session',
    'SESSION_COOKIE',
    'LEGACY_COOKIE',
    'SESSION_TTL_SECONDS',
]
