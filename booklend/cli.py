# booklend/cli.py
import click
from flask import current_app

from booklend.extensions import db


def register_cli(app):
    @app.cli.command("init-db")
    def init_db():
        """Create all tables (development; use `flask db upgrade` otherwise)."""
        db.create_all()
        click.echo("Tables created.")

    @app.cli.command("audit-inventory")
    @click.option("--repair", is_flag=True, help="Reconcile drifted books.")
    def audit_inventory(repair):
        """Check available == copies - open loans for every book."""
        from booklend.tasks.inventory_audit import run_inventory_audit

        summary = run_inventory_audit(current_app._get_current_object(), repair=repair)
        click.echo(f"checked={summary['checked']} drift={summary['drift']} repaired={summary['repaired']}")
