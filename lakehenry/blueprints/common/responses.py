"""Response helpers shared by every handler.

Form posts answer with a 303 redirect carrying ``ok=<verb>`` or
``err=<reason>``; callers that send ``Accept: application/json`` get a JSON
body instead. Handlers raise ``ServiceError`` subclasses and the decorators
below turn them into one of the two shapes.
"""

from __future__ import annotations

from functools import wraps
from urllib.parse import urlencode

from flask import Response, current_app, jsonify, redirect, request

from lakehenry.extensions import db
from lakehenry.services.errors import ServiceError

NOSTORE = {'Cache-Control': 'no-store'}


def wants_json() -> bool:
    return 'application/json' in (request.headers.get('Accept') or '')


def with_query(path: str, **params) -> str:
    query = urlencode({key: value for key, value in params.items() if value is not None})
    if not query:
        return path
    return f"{path}{'&' if '?' in path else '?'}{query}"


def redirect_to(path: str, status: int = 303, **params) -> Response:
    response = redirect(with_query(path, **params), code=status)
    response.headers.update(NOSTORE)
    return response


def json_response(payload: dict, status: int = 200) -> Response:
    response = jsonify(payload)
    response.status_code = status
    response.headers.update(NOSTORE)
    return response


def options_response() -> Response:
    response = Response(status=204)
    response.headers['Access-Control-Allow-Methods'] = 'POST,OPTIONS'
    response.headers['Access-Control-Allow-Headers'] = 'content-type'
    response.headers.update(NOSTORE)
    return response


def object_response(obj, cache_control: str, *, etag: bool = False) -> Response:
    """Stream a stored object with its content type."""
    response = Response(obj.body, mimetype=obj.content_type)
    response.headers['Cache-Control'] = cache_control
    if etag:
        response.set_etag(obj.etag)
        response.make_conditional(request)
    return response


def error_response(code: str, status: int, back: str) -> Response:
    if wants_json():
        return json_response({'ok': False, 'error': code}, status)
    return redirect_to(back, err=code)


def _unexpected(view_name: str) -> None:
    db.session.rollback()
    current_app.logger.exception('Unhandled error in %s', view_name)


def form_endpoint(back: str):
    """Wrap a form-post view: service errors redirect to ``back`` (or the
    error's own ``back``) with ``err=<code>``; anything else becomes
    ``err=server`` after the session is rolled back and the error logged."""

    def decorator(view):
        @wraps(view)
        def wrapped(*args, **kwargs):
            try:
                return view(*args, **kwargs)
            except ServiceError as exc:
                return error_response(exc.code, exc.status, exc.back or back)
            except Exception:
                _unexpected(view.__name__)
                return error_response('server', 500, back)

        return wrapped

    return decorator


def json_endpoint(view):
    """Like ``form_endpoint`` but always answers JSON."""

    @wraps(view)
    def wrapped(*args, **kwargs):
        try:
            return view(*args, **kwargs)
        except ServiceError as exc:
            return json_response({'ok': False, 'error': exc.message or exc.code}, exc.status)
        except Exception:
            _unexpected(view.__name__)
            return json_response({'ok': False, 'error': 'server'}, 500)

    return wrapped


def file_endpoint(view):
    """Byte-serving views: any service error is a bare status code."""

    @wraps(view)
    def wrapped(*args, **kwargs):
        try:
            return view(*args, **kwargs)
        except ServiceError as exc:
            return Response('Not found' if exc.status == 404 else 'Error', status=exc.status, headers=NOSTORE)
        except Exception:
            _unexpected(view.__name__)
            return Response('Server error', status=500, headers=NOSTORE)

    return wrapped


__all__ = [
    'NOSTORE',
    'wants_json',
    'with_query',
    'redirect_to',
    'json_response',
    'options_response',
    'object_response',
    'error_response',
    'form_endpoint',
    'json_endpoint',
    'file_endpoint',
]
