import os
from dataclasses import dataclass
from typing import Mapping

from dotenv import load_dotenv

load_dotenv()


def _flag(name: str, default: str = 'false') -> bool:
    return os.getenv(name, default).lower() in ('1', 'true', 'yes')


class Config:
    # Provide a safe development fallback to avoid 500s when SECRET_KEY is missing.
    SECRET_KEY = os.getenv('SECRET_KEY') or 'dev-secret-key-change-me'
    DATABASE_URL = os.getenv('DATABASE_URL')
    SQLALCHEMY_DATABASE_URI = DATABASE_URL or 'sqlite:///lakehenry.db'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    MAX_CONTENT_LENGTH = 10 * 1024 * 1024

    # Hosted primitives: key-value cache and object store
    KV_URL = os.getenv('KV_URL') or os.getenv('REDIS_URL') or 'memory://'
    OBJECT_STORE_ROOT = os.getenv('OBJECT_STORE_ROOT', 'instance/objects')
    RATELIMIT_STORAGE_URI = os.getenv('RATELIMIT_STORAGE_URI', 'memory://')
    RATELIMIT_ENABLED = _flag('RATELIMIT_ENABLED', 'true')

    # Admin identity (single fixed account, never a user table)
    ADMIN_USERNAME = os.getenv('ADMIN_USERNAME', '')
    ADMIN_PASSWORD = os.getenv('ADMIN_PASSWORD', '')

    # Outbound integrations
    TURNSTILE_SECRET = os.getenv('TURNSTILE_SECRET', '')
    TURNSTILE_VERIFY_URL = os.getenv(
        'TURNSTILE_VERIFY_URL', 'https://challenges.cloudflare.com/turnstile/v0/siteverify'
    )
    RESEND_API_KEY = os.getenv('RESEND_API_KEY', '')
    RESEND_API_URL = os.getenv('RESEND_API_URL', 'https://api.resend.com/emails')
    FROM_EMAIL = os.getenv('FROM_EMAIL', '')
    TO_EMAIL = os.getenv('TO_EMAIL', '')

    SITE_URL = os.getenv('SITE_URL', 'https://friendsoflakehenry.com')
    FACEBOOK_PAGE_ID = os.getenv('FACEBOOK_PAGE_ID', '61552199315213')


@dataclass(frozen=True)
class SiteSettings:
    """Per-request view of the secrets and integration settings.

    Built from ``app.config`` and handed to services explicitly so that no
    handler reaches into ambient globals for credentials.
    """

    admin_username: str
    admin_password: str
    secret_key: str
    turnstile_secret: str
    turnstile_verify_url: str
    resend_api_key: str
    resend_api_url: str
    from_email: str
    to_email: str
    site_url: str
    facebook_page_id: str

    @classmethod
    def from_config(cls, config: Mapping) -> 'SiteSettings':
        return cls(
            admin_username=config.get('ADMIN_USERNAME') or '',
            admin_password=config.get('ADMIN_PASSWORD') or '',
            secret_key=config.get('SECRET_KEY') or '',
            turnstile_secret=config.get('TURNSTILE_SECRET') or '',
            turnstile_verify_url=config.get('TURNSTILE_VERIFY_URL') or Config.TURNSTILE_VERIFY_URL,
            resend_api_key=config.get('RESEND_API_KEY') or '',
            resend_api_url=config.get('RESEND_API_URL') or Config.RESEND_API_URL,
            from_email=config.get('FROM_EMAIL') or '',
            to_email=config.get('TO_EMAIL') or '',
            site_url=(config.get('SITE_URL') or '').rstrip('/'),
            facebook_page_id=config.get('FACEBOOK_PAGE_ID') or Config.FACEBOOK_PAGE_ID,
        )

    @property
    def admin_configured(self) -> bool:
        return bool(self.admin_username and self.admin_password and self.secret_key)

    @property
    def email_configured(self) -> bool:
        return bool(self.resend_api_key and self.from_email and self.to_email)


def site_settings() -> SiteSettings:
    """Settings for the active Flask application."""
    from flask import current_app

    return SiteSettings.from_config(current_app.config)
