# Overview: Flask CLI command groups for bootstrap, inspection, and maintenance.

# backend/atelier/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to wsgi.py (PowerShell: $env:FLASK_APP="wsgi.py").
# - Use: python -m flask <group> <command> [options]
#
# System bootstrap/repair:
# - python -m flask system init
#   Idempotent bootstrap: creates tables and the default employees.
# - python -m flask system seed-defaults
#   Create the default employees only.
# - python -m flask system reset-db --yes
#   DEV/TEST only: drop and recreate all tables (deletes all data).
#
# Stock inspection/authoring:
# - python -m flask stock list --store boutique [--variant-id 3]
#   List stock entries for a store.
# - python -m flask stock set --variant-id 3 --store online --size 42 --quantity 10
#   Set an absolute stock level (creates the entry when missing).

import click
from flask.cli import with_appcontext

from .extensions import db
from .models import Employee, Store
from .services import stock_service
from .validation import ValidationError, NotFoundError

DEFAULT_EMPLOYEES = ("Abdulrahman", "Heba", "Hadeel")


@click.group('system')
def system_group():
    """System bootstrap and repair commands."""


def _seed_default_employees() -> int:
    existing = {name for (name,) in db.session.query(Employee.name).all()}
    created = 0
    for name in DEFAULT_EMPLOYEES:
        if name in existing:
            continue
        db.session.add(Employee(name=name))
        created += 1
    db.session.commit()
    return created


@system_group.command('init')
@with_appcontext
def init_system():
    """
    Initialize the store database: schema plus default employees.

    Safe to run repeatedly; existing rows are left alone.
    """
    click.echo("START Initializing Atelier...")
    db.create_all()
    click.echo("PASS Schema ready")

    created = _seed_default_employees()
    click.echo(f"PASS Default employees: {created} created, {len(DEFAULT_EMPLOYEES) - created} already present")


@system_group.command('seed-defaults')
@with_appcontext
def seed_defaults():
    """Create the default employees if missing."""
    created = _seed_default_employees()
    click.echo(f"PASS Created {created} employee(s)")


@system_group.command('reset-db')
@click.option('--yes', is_flag=True, help='Skip confirmation')
@with_appcontext
def reset_db(yes):
    """
    DANGER: Drop all tables and recreate schema.

    This will DELETE ALL DATA!
    """
    if not yes:
        click.confirm("WARN This will DELETE ALL DATA. Are you sure?", abort=True)

    click.echo("DELETE  Dropping all tables...")
    db.drop_all()

    click.echo("BUILD  Creating all tables...")
    db.create_all()

    click.echo("PASS Database reset complete. Run 'python -m flask system init' to initialize.")


@click.group('stock')
def stock_group():
    """Stock ledger inspection and authoring."""


@stock_group.command('list')
@click.option('--store', type=click.Choice([s.value for s in Store]), required=True, help='Store')
@click.option('--variant-id', type=int, default=None, help='Only this color variant')
@with_appcontext
def list_stock_cli(store, variant_id):
    """List stock entries for a store."""
    entries = stock_service.list_stock(store, variant_id=variant_id)
    if not entries:
        click.echo(f"No stock entries for {store}")
        return

    click.echo(f"{'COLOR':>6}  {'SIZE':>5}  {'QTY':>5}")
    for entry in entries:
        click.echo(f"{entry.product_color_id:>6}  {entry.size:>5}  {entry.quantity:>5}")
    click.echo(f"Total: {len(entries)} entr{'y' if len(entries) == 1 else 'ies'}")


@stock_group.command('set')
@click.option('--variant-id', type=int, required=True, help='Product color ID')
@click.option('--store', type=click.Choice([s.value for s in Store]), required=True, help='Store')
@click.option('--size', required=True, help='Size, e.g. 42')
@click.option('--quantity', type=int, required=True, help='Absolute quantity (>= 0)')
@with_appcontext
def set_stock_cli(variant_id, store, size, quantity):
    """Set an absolute stock level."""
    try:
        entry = stock_service.set_stock(variant_id, store, size, quantity)
    except (ValidationError, NotFoundError) as e:
        raise click.ClickException(str(e))

    click.echo(
        f"PASS color={entry.product_color_id} store={entry.store.value} "
        f"size={entry.size} quantity={entry.quantity}"
    )


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(system_group)
    app.cli.add_command(stock_group)
