"""Application factory for the Friends of Lake Henry site."""

from __future__ import annotations

import os

from flask import Flask, render_template

from lakehenry.blueprints.admin import admin_api_bp, admin_bp, admin_photos_bp, admin_raffle_bp
from lakehenry.blueprints.auth import auth_bp
from lakehenry.blueprints.public import public_api_bp, public_bp
from lakehenry.config import Config
from lakehenry.extensions import bucket, db, kv, limiter
from lakehenry.security.config import (
    configure_security_headers,
    configure_secure_session,
    validate_input_length,
)
from lakehenry.security.gate import init_gate


def create_app(config_class=Config):
    """Create Flask application."""
    app = Flask(__name__, template_folder="templates")
    app.config.from_object(config_class)

    # Initialize Flask extensions
    db.init_app(app)
    kv.init_app(app)
    bucket.init_app(app)
    limiter.init_app(app)

    # The gate runs before any blueprint sees the request
    init_gate(app)

    # Configure security
    configure_security_headers(app)
    configure_secure_session(app)
    validate_input_length(app)

    # Ensure models are registered before create_all
    import lakehenry.models  # noqa: F401

    if os.getenv("FLASK_ENV") == "development":
        app.config["TEMPLATES_AUTO_RELOAD"] = True
        app.jinja_env.auto_reload = True

    # Register blueprints
    app.register_blueprint(auth_bp)
    app.register_blueprint(admin_bp, url_prefix='/admin')
    app.register_blueprint(admin_api_bp, url_prefix='/api/admin')
    app.register_blueprint(admin_photos_bp, url_prefix='/api/admin/photos')
    app.register_blueprint(admin_raffle_bp, url_prefix='/api/admin/raffle')
    app.register_blueprint(public_bp)
    app.register_blueprint(public_api_bp, url_prefix='/api')

    @app.errorhandler(404)
    def not_found(error):
        return render_template('404.html'), 404

    @app.errorhandler(500)
    def internal_error(error):
        return render_template('500.html'), 500

    # Register CLI commands
    from lakehenry.commands import register_commands
    register_commands(app)

    return app
