"""WTForms definitions for the public and admin form posts."""

from __future__ import annotations

from flask_wtf import FlaskForm


def strip_filter(value):
    return value.strip() if isinstance(value, str) else value


def none_if_blank(value):
    if isinstance(value, str):
        value = value.strip()
    return value or None


class PlainForm(FlaskForm):
    """Form base without token CSRF.

    Admin mutations are protected by the same-origin guard in the request
    gate and public forms by the CAPTCHA, so no hidden token is rendered.
    """

    class Meta:
        csrf = False

    def first_error(self, default: str = 'input') -> str | None:
        """Return the error code of the first failing field (declaration order)."""
        for field in self:
            if field.errors:
                for message in field.errors:
                    if isinstance(message, str) and message.isidentifier():
                        return message
                return default
        return None
