#!/usr/bin/env python3
"""Development server runner for the Lake Henry site."""

import os
import sys
from pathlib import Path

from dotenv import load_dotenv


def setup_environment():
    """Load .env and set development defaults."""
    project_root = Path(__file__).parent
    env_file = project_root / '.env'
    if env_file.exists():
        load_dotenv(env_file)
        print(f"✓ Loaded environment from {env_file}")
    else:
        print(f"⚠️ No .env file found at {env_file}")

    os.environ.setdefault('FLASK_ENV', 'development')
    os.environ.setdefault('FLASK_DEBUG', '1')
    # Local runs have no Redis unless one is configured
    os.environ.setdefault('KV_URL', 'memory://')


def initialize_database(app):
    """Create tables on first run."""
    from lakehenry.extensions import db

    with app.app_context():
        db.create_all()
    print("✓ Database tables ready")


def main():
    print("Friends of Lake Henry - Development Setup")
    print("=" * 60)
    setup_environment()

    from lakehenry import create_app

    app = create_app()
    initialize_database(app)

    if not app.config.get('ADMIN_USERNAME') or not app.config.get('ADMIN_PASSWORD'):
        print("⚠️ ADMIN_USERNAME / ADMIN_PASSWORD not set; the admin area will refuse logins")

    print("\n📱 Access the site at http://localhost:5000")
    print("🛠️ Demo events: flask --app lakehenry site seed-demo")
    print("⏹️ Press Ctrl+C to stop the server")
    print("=" * 60)

    try:
        app.run(host='0.0.0.0', port=5000, debug=True, use_reloader=True)
    except KeyboardInterrupt:
        print("\n\n🛑 Development server stopped by user")
        sys.exit(0)


if __name__ == "__main__":
    main()
