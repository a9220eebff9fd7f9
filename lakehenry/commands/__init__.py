"""CLI commands for the Lake Henry site."""

from .site import site_commands


def register_commands(app):
    """Register all CLI command groups with the Flask app."""
    app.cli.add_command(site_commands)
