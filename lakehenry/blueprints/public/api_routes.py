"""Public JSON and form endpoints under ``/api``."""

from __future__ import annotations

from flask import Blueprint, current_app, request

from lakehenry.blueprints.common.responses import (
    error_response,
    file_endpoint,
    form_endpoint,
    json_endpoint,
    json_response,
    object_response,
    options_response,
    redirect_to,
    wants_json,
)
from lakehenry.config import SiteSettings, site_settings
from lakehenry.extensions import limiter
from lakehenry.forms.public import ContactForm, PhotoSubmitForm
from lakehenry.models import PhotoStatus
from lakehenry.security.client import client_ip
from lakehenry.services import email, events, photos, raffle, turnstile
from lakehenry.services.errors import InputError, ServerError, UnsupportedMediaError, UpstreamError
from lakehenry.services.uploads import read_image

public_api_bp = Blueprint("public_api", __name__)

FORM_MIMETYPES = ('application/x-www-form-urlencoded', 'multipart/form-data')
CAPTCHA_FIELD = 'cf-turnstile-response'
CONTACT_BACK = '/contact'
PHOTO_SUBMIT_BACK = '/photos/submit'


def _captcha_token() -> str:
    return (request.form.get(CAPTCHA_FIELD) or '').strip()


def _verify_captcha() -> SiteSettings:
    """Token present, secret configured, and the verifier accepts the token."""
    token = _captcha_token()
    if not token:
        raise InputError('captcha')

    settings = site_settings()
    if not settings.turnstile_secret:
        current_app.logger.error("TURNSTILE_SECRET is not configured")
        raise ServerError(message='captcha not configured')
    if not turnstile.verify_token(settings, token, client_ip()):
        raise InputError('captcha')
    return settings


@public_api_bp.errorhandler(429)
def rate_limited(error):
    back = PHOTO_SUBMIT_BACK if request.endpoint == "public_api.submit_photo" else CONTACT_BACK
    current_app.logger.warning("Rate limit hit on %s from %s: %s", request.path, client_ip(), error.description)
    return error_response("rate", 429, back)


def _require_id() -> str:
    value = (request.args.get('id') or '').strip()
    if not value:
        raise InputError('input')
    return value


# Contact ---------------------------------------------------------------------

def _contact_sent():
    if wants_json():
        return json_response({'ok': True})
    return redirect_to(CONTACT_BACK, sent='1')


@public_api_bp.route("/contact", methods=["OPTIONS"])
def contact_preflight():
    return options_response()


@public_api_bp.post("/contact")
@limiter.limit("5 per 10 minutes")
@form_endpoint(CONTACT_BACK)
def contact():
    if request.mimetype not in FORM_MIMETYPES:
        raise UnsupportedMediaError('input')

    form = ContactForm()
    # Bots fill the hidden field; pretend it worked
    if form.company.data:
        return _contact_sent()
    if not form.validate():
        raise InputError('input')

    settings = _verify_captcha()

    if not email.send_inquiry(
        settings,
        name=form.name.data,
        email=form.email.data,
        message=form.message.data,
    ):
        raise UpstreamError('server')
    return _contact_sent()


# Photos ------------------------------------------------------------------------

@public_api_bp.post("/photos/submit")
@limiter.limit("10 per hour")
@form_endpoint(PHOTO_SUBMIT_BACK)
def submit_photo():
    form = PhotoSubmitForm()
    if form.company.data:
        return redirect_to('/photos', submitted='1')
    if not form.validate():
        raise InputError(form.first_error())
    image = read_image(form.photo.data)

    _verify_captcha()

    photo = photos.submit_photo(
        image,
        category=form.category.data,
        alt=form.alt.data,
        title=form.title.data,
        caption=form.caption.data,
        submitted_by=form.submittedBy.data,
    )
    if wants_json():
        return json_response({'ok': True, 'id': photo.id})
    return redirect_to('/photos', submitted='1')


@public_api_bp.get("/photos/file")
@file_endpoint
def photo_file():
    obj = photos.photo_file(_require_id(), PhotoStatus.APPROVED)
    return object_response(obj, 'public, max-age=3600')


# Month feeds -------------------------------------------------------------------

@public_api_bp.get("/events/month")
@json_endpoint
def events_month():
    return json_response(events.month_feed(request.args.get('month')))


@public_api_bp.get("/events/poster")
@file_endpoint
def event_poster():
    obj = events.published_poster(_require_id())
    return object_response(obj, 'public, max-age=86400', etag=True)


@public_api_bp.get("/raffle/month")
@json_endpoint
def raffle_month():
    return json_response(raffle.month_feed(request.args.get('month')))
