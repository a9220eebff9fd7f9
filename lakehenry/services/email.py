"""Email service for contact-form inquiries (Resend HTTP API)."""

from __future__ import annotations

from datetime import datetime, timezone
from html import escape

import requests
from flask import current_app

from lakehenry.config import SiteSettings

SEND_TIMEOUT_SECONDS = 10


def build_inquiry_html(name: str, email: str, message: str) -> str:
    """HTML body for an inquiry; every user-supplied field is escaped."""
    body = escape(message).replace('\n', '<br>')
    sent = datetime.now(timezone.utc).isoformat(timespec='milliseconds').replace('+00:00', 'Z')
    return f"""
        <h2>Friends of Lake Henry</h2>
        <p><strong>Name:</strong> {escape(name)}</p>
        <p><strong>Email:</strong> {escape(email)}</p>
        <p><strong>Message:</strong><br>
          {body}
        </p>
        <hr>
        <p>Sent: {sent}</p>
    """


def send_inquiry(settings: SiteSettings, *, name: str, email: str, message: str) -> bool:
    """
    Deliver a contact-form inquiry to the organisation's inbox.

    Args:
        settings: Site settings holding the API key and addresses
        name: Sender's name (used in the subject)
        email: Sender's address, set as reply-to
        message: Free-text message

    Returns:
        True if the provider accepted the email, False otherwise
    """
    if not settings.email_configured:
        current_app.logger.warning("Email credentials not configured")
        return False

    payload = {
        'from': settings.from_email,
        'to': [settings.to_email],
        'subject': f"Inquiry from {name}",
        'html': build_inquiry_html(name, email, message),
        'reply_to': email,
    }

    try:
        response = requests.post(
            settings.resend_api_url,
            json=payload,
            headers={'Authorization': f"Bearer {settings.resend_api_key}"},
            timeout=SEND_TIMEOUT_SECONDS,
        )
    except requests.RequestException as e:
        current_app.logger.error(f"Failed to send email: {e}")
        return False

    if not response.ok:
        current_app.logger.error(f"Email provider returned HTTP {response.status_code}")
        return False

    current_app.logger.info("Inquiry email sent")
    return True
