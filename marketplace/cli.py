"""
Flask CLI commands.

Usage:
    flask --app wsgi create-admin admin@example.com 's3cret-pass'
"""

import click
from flask import Flask

from marketplace.services.base import ValidationError
from marketplace.services.profile_service import profile_service


def register_commands(app: Flask) -> None:
    """Attach the marketplace commands to app.cli."""

    @app.cli.command('create-admin')
    @click.argument('email')
    @click.argument('password')
    def create_admin(email: str, password: str):
        """Create an admin account, or promote an existing user to admin."""
        try:
            profile = profile_service.ensure_admin(email, password)
        except ValidationError as e:
            raise click.ClickException(e.message)
        click.echo(f"Admin ready: {profile.email}")
