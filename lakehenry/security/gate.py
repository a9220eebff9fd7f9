"""Request gate for the admin surface.

Every request is classified by path. Public paths pass through untouched.
Admin API mutations must come from the site's own origin. Everything under
``/admin`` and ``/api/admin`` except the login/logout endpoints needs a live
server-side session.
"""

from __future__ import annotations

from urllib.parse import urlsplit

from flask import current_app, g, request

from lakehenry.blueprints.common.responses import json_response, redirect_to
from lakehenry.config import site_settings
from lakehenry.services.sessions import LEGACY_COOKIE, SESSION_COOKIE, verify_session

MUTATING_METHODS = frozenset({'POST', 'PUT', 'PATCH', 'DELETE'})
LOGIN_PATH = '/admin/login'
OPEN_ADMIN_PATHS = frozenset({
    '/admin/login',
    '/admin/login/',
    '/api/admin/login',
    '/admin/logout',
    '/api/admin/logout',
})

PUBLIC, ADMIN_UI, ADMIN_API = 'public', 'admin-ui', 'admin-api'


def classify(path: str) -> str:
    if path == '/api/admin' or path.startswith('/api/admin/'):
        return ADMIN_API
    if path == '/admin' or path.startswith('/admin/'):
        return ADMIN_UI
    return PUBLIC


def origin_of(url: str | None) -> str | None:
    if not url:
        return None
    try:
        parts = urlsplit(url)
    except ValueError:
        return None
    if not parts.scheme or not parts.netloc:
        return None
    return f'{parts.scheme}://{parts.netloc}'.lower()


def is_same_origin() -> bool:
    """``Origin`` (or the origin of ``Referer``) must be this site.

    Missing both headers fails closed.
    """
    claimed = origin_of(request.headers.get('Origin')) or origin_of(request.headers.get('Referer'))
    if not claimed:
        return False
    allowed = {origin_of(request.host_url)}
    site_origin = origin_of(site_settings().site_url)
    if site_origin:
        allowed.add(site_origin)
    return claimed in allowed


def login_redirect(err: str = 'auth', next_path: str | None = None):
    """302 to the login page, clearing the legacy cookie on the way."""
    if not next_path or next_path.startswith(LOGIN_PATH):
        next_path = '/admin'
    response = redirect_to(LOGIN_PATH, status=302, err=err, next=next_path)
    response.delete_cookie(LEGACY_COOKIE, path='/')
    return response


def _requested_path() -> str:
    query = request.query_string.decode('utf-8', 'replace')
    return f'{request.path}?{query}' if query else request.path


def init_gate(app) -> None:
    """Register the admin gate hooks with the Flask app."""

    @app.before_request
    def _admin_gate():
        area = classify(request.path)
        if area == PUBLIC:
            return None

        if area == ADMIN_API and request.method in MUTATING_METHODS and not is_same_origin():
            current_app.logger.warning('Cross-origin %s to %s rejected', request.method, request.path)
            return json_response({'ok': False, 'error': 'forbidden'}, 403)

        if request.path in OPEN_ADMIN_PATHS:
            return None

        state = verify_session(request.cookies.get(SESSION_COOKIE))
        if not state.authenticated:
            if area == ADMIN_API:
                response = json_response({'ok': False, 'error': 'unauthorized'}, 401)
                response.delete_cookie(LEGACY_COOKIE, path='/')
                return response
            err = 'server' if state.reason == 'store' else 'auth'
            return login_redirect(err, _requested_path())

        g.admin = state
        return None

    @app.after_request
    def _admin_headers(response):
        if classify(request.path) == ADMIN_UI and response.mimetype == 'text/html':
            response.headers['Cache-Control'] = 'no-store'
            response.headers['X-Robots-Tag'] = 'noindex, nofollow'
        return response


__all__ = ['init_gate', 'classify', 'is_same_origin', 'login_redirect', 'origin_of']
