"""Public pages and the sitemap."""

from __future__ import annotations

from flask import Blueprint, Response, render_template, request
from markupsafe import escape

from lakehenry.config import site_settings
from lakehenry.models import PHOTO_CATEGORIES, PhotoStatus
from lakehenry.services import donors, events, photos, raffle

public_bp = Blueprint("public", __name__)

SITEMAP_PATHS = (
    "/",
    "/donate",
    "/donors",
    "/events",
    "/raffle",
    "/contact",
    "/photos",
    "/privacy",
    "/terms",
)


@public_bp.get("/")
def home():
    return render_template("public/home.html", upcoming=events.month_feed(None))


@public_bp.get("/donate")
def donate():
    return render_template("public/donate.html")


@public_bp.get("/donors")
def donor_wall():
    return render_template(
        "public/donors.html",
        donors=donors.list_donors(),
        format_cents=donors.format_cents,
    )


@public_bp.get("/events")
def event_calendar():
    return render_template(
        "public/events.html",
        feed=events.month_feed(request.args.get('month')),
        tbd=[events.serialize_event(event) for event in events.upcoming_tbd()],
    )


@public_bp.get("/raffle")
def raffle_results():
    return render_template(
        "public/raffle.html",
        feed=raffle.month_feed(request.args.get('month')),
        live=raffle.get_live_config(),
    )


@public_bp.get("/contact")
def contact():
    return render_template(
        "public/contact.html",
        sent=request.args.get('sent') == '1',
        err=request.args.get('err'),
    )


@public_bp.get("/photos")
def gallery():
    category = request.args.get('category')
    if category not in PHOTO_CATEGORIES:
        category = None
    return render_template(
        "public/photos.html",
        photos=photos.list_photos(PhotoStatus.APPROVED, category),
        categories=PHOTO_CATEGORIES,
        category=category,
        submitted=request.args.get('submitted') == '1',
    )


@public_bp.get("/photos/submit")
def photo_submit():
    return render_template(
        "public/photo_submit.html",
        categories=PHOTO_CATEGORIES,
        err=request.args.get('err'),
    )


@public_bp.get("/privacy")
def privacy():
    return render_template("public/privacy.html")


@public_bp.get("/terms")
def terms():
    return render_template("public/terms.html")


@public_bp.get("/sitemap.xml")
def sitemap():
    site = site_settings().site_url
    urls = ''.join(f'<url><loc>{escape(site + path)}</loc></url>' for path in SITEMAP_PATHS)
    body = (
        '<?xml version="1.0" encoding="UTF-8"?>'
        '<urlset xmlns="http://www.sitemaps.org/schemas/sitemap/0.9">'
        f'{urls}</urlset>'
    )
    return Response(
        body,
        mimetype='application/xml',
        headers={'Cache-Control': 'public, max-age=3600'},
    )
