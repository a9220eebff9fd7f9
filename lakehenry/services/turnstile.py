"""Server-side verification of Cloudflare Turnstile CAPTCHA tokens."""

from __future__ import annotations

import requests
from flask import current_app

from lakehenry.config import SiteSettings

VERIFY_TIMEOUT_SECONDS = 10


def verify_token(settings: SiteSettings, token: str | None, remote_ip: str | None = None) -> bool:
    """Ask the siteverify endpoint whether ``token`` is valid.

    Any transport error, non-2xx answer or unreadable body counts as a
    failed verification.
    """
    if not settings.turnstile_secret or not token:
        return False

    payload = {'secret': settings.turnstile_secret, 'response': token}
    if remote_ip and remote_ip != 'unknown':
        payload['remoteip'] = remote_ip

    try:
        response = requests.post(
            settings.turnstile_verify_url,
            data=payload,
            timeout=VERIFY_TIMEOUT_SECONDS,
        )
    except requests.RequestException as exc:
        current_app.logger.warning('Turnstile verification request failed: %s', exc)
        return False

    if not response.ok:
        current_app.logger.warning('Turnstile verification returned HTTP %s', response.status_code)
        return False

    try:
        data = response.json()
    except ValueError:
        return False

    success = isinstance(data, dict) and data.get('success') is True
    if not success:
        current_app.logger.warning('Turnstile rejected token: %s', data.get('error-codes') if isinstance(data, dict) else data)
    return success
