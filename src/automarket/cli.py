import click
from .extensions import db
from .models import User


def register_cli(app):
    @app.cli.command("create-admin")
    @click.argument("email")
    @click.option("--password", default=None, help="Required when the account does not exist yet.")
    @click.option("--name", default=None)
    def create_admin(email, password, name):
        """Promote EMAIL to admin, creating the account if needed."""
        email = email.strip()
        u = User.query.filter_by(email=email).first()
        if u:
            u.role = "admin"
            if name:
                u.name = name
            db.session.commit()
            click.echo(f"{email} is now an admin.")
            return

        if not password:
            raise click.UsageError("--password is required to create a new admin account.")
        u = User(email=email, name=name, role="admin")
        u.set_password(password)
        db.session.add(u)
        db.session.commit()
        click.echo(f"Admin {email} created (id={u.id}).")
