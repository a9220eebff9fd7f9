"""Admin login and logout."""

from __future__ import annotations

import hmac

from flask import Blueprint, current_app, render_template, request

from lakehenry.blueprints.common.responses import redirect_to
from lakehenry.config import site_settings
from lakehenry.forms.admin import LoginForm
from lakehenry.security.client import client_ip
from lakehenry.services.sessions import (
    LEGACY_COOKIE,
    SESSION_COOKIE,
    SESSION_TTL_SECONDS,
    LoginThrottle,
    create_session,
    delete_session,
)

auth_bp = Blueprint("auth", __name__)

LOGIN_PAGE = '/admin/login'


def safe_next(value: str | None) -> str:
    """Only same-site admin paths are valid post-login destinations."""
    value = (value or '').strip()
    if value == '/admin' or (value.startswith('/admin/') and not value.startswith('//')):
        return value
    return '/admin'


def _matches(supplied: str, expected: str) -> bool:
    return hmac.compare_digest(supplied.encode(), expected.encode())


@auth_bp.get("/admin/login")
@auth_bp.get("/admin/login/")
def login_page():
    form = LoginForm(formdata=None, next=safe_next(request.args.get('next')))
    return render_template(
        "admin/login.html",
        form=form,
        err=request.args.get('err'),
        ok=request.args.get('ok'),
    )


@auth_bp.get("/admin/logout")
def logout_page():
    return render_template("admin/logout.html")


@auth_bp.post("/api/admin/login")
def login():
    form = LoginForm()
    next_path = safe_next(form.next.data)
    settings = site_settings()

    if not settings.admin_configured:
        current_app.logger.error("Admin login attempted but credentials are not configured")
        return redirect_to(LOGIN_PAGE, err='server', next=next_path)

    ip = client_ip()
    throttle = LoginThrottle(settings.secret_key)

    try:
        blocked = throttle.is_blocked(ip)
    except Exception:
        current_app.logger.exception("Login throttle lookup failed")
        return redirect_to(LOGIN_PAGE, err='server', next=next_path)

    username_ok = _matches(form.username.data or '', settings.admin_username)
    password_ok = _matches(form.password.data or '', settings.admin_password)

    if blocked or not (username_ok and password_ok):
        if not (username_ok and password_ok):
            try:
                throttle.record_failure(ip)
            except Exception:
                current_app.logger.exception("Could not record failed login")
        current_app.logger.warning("Rejected admin login")
        return redirect_to(LOGIN_PAGE, err='1', next=next_path)

    try:
        session = create_session()
        throttle.reset(ip)
    except Exception:
        current_app.logger.exception("Could not create admin session")
        return redirect_to(LOGIN_PAGE, err='server', next=next_path)

    current_app.logger.info("Admin signed in")
    response = redirect_to(next_path)
    response.set_cookie(
        SESSION_COOKIE,
        session.session_id,
        max_age=SESSION_TTL_SECONDS,
        path='/',
        secure=True,
        httponly=True,
        samesite='Strict',
    )
    response.delete_cookie(LEGACY_COOKIE, path='/')
    return response


@auth_bp.post("/api/admin/logout")
def logout():
    try:
        delete_session(request.cookies.get(SESSION_COOKIE))
    except Exception:
        current_app.logger.exception("Could not delete admin session record")

    response = redirect_to(LOGIN_PAGE, ok='logout')
    response.delete_cookie(SESSION_COOKIE, path='/', secure=True, httponly=True, samesite='Strict')
    response.delete_cookie(LEGACY_COOKIE, path='/')
    return response
