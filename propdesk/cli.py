# propdesk/cli.py
import click

from .extensions import db
from .models import User, ROLE_MANAGER


def register_cli(app):
    @app.cli.command("init-db")
    def init_db():
        """Create all tables (use `flask db upgrade` for migrated databases)."""
        db.create_all()
        click.echo("Database tables created.")

    @app.cli.command("create-manager")
    @click.argument("email")
    @click.option("--password", prompt=True, hide_input=True, confirmation_prompt=True)
    @click.option("--name", default="Manager", show_default=True)
    def create_manager(email, password, name):
        """Create or update a verified manager account."""
        email = email.strip().lower()
        user = User.query.filter_by(email=email).first()
        if user is None:
            user = User(email=email, name=name)
            db.session.add(user)
            action = "Created"
        else:
            user.name = name
            action = "Updated"

        user.role = ROLE_MANAGER
        user.tenant_id = None
        user.is_active = True
        user.is_verified = True
        user.must_change_password = False
        user.set_password(password)
        db.session.commit()

        app.logger.info("%s manager %s", action, email)
        click.echo(f"{action} manager {email}")
