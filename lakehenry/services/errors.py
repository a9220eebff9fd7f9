"""Exceptions raised by services and translated to responses by the endpoints."""

from __future__ import annotations


class ServiceError(Exception):
    status = 400
    code = 'input'

    def __init__(self, code: str | None = None, *, back: str | None = None, message: str | None = None):
        super().__init__(message or code or self.code)
        if code:
            self.code = code
        self.back = back
        self.message = message


class InputError(ServiceError):
    """Malformed or missing field; ``code`` becomes the ``err=`` flag."""


class NotFoundError(ServiceError):
    status = 404
    code = 'notfound'


class ConflictError(ServiceError):
    status = 409
    code = 'conflict'


class UnsupportedMediaError(ServiceError):
    status = 415
    code = 'input'


class UpstreamError(ServiceError):
    """A dependency (CAPTCHA verifier, email provider, store) failed."""

    status = 502
    code = 'server'


class ServerError(ServiceError):
    """Missing configuration or another fault on our side."""

    status = 500
    code = 'server'
