# Overview: Flask CLI command groups for bootstrap and alert maintenance.

# backend/stockflow/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to wsgi.py (PowerShell: $env:FLASK_APP="wsgi.py").
# - Use: python -m flask <group> <command> [options]
#
# System bootstrap:
# - python -m flask stockflow init-db
#   Create all tables (development; use `flask db upgrade` for migrations).
# - python -m flask stockflow create-business --name "Acme Traders" --owner "A. Owner" --email admin@acme.local
#   Create a business with its admin user and default settings (prompts for password).
#
# Alerts:
# - python -m flask alerts regenerate --business-id 1
#   Re-classify every active product of a business and insert alerts where needed.
# - python -m flask alerts clear-resolved [--business-id 1]
#   Delete resolved alerts (all businesses when no id is given).

import click
from flask.cli import with_appcontext

from .errors import StockFlowError
from .extensions import db
from .models import Business, Product
from .schemas import RegisterInput
from .services import alert_service, auth_service


@click.group('stockflow')
def stockflow_group():
    """Database and tenant bootstrap commands."""


@stockflow_group.command('init-db')
@with_appcontext
def init_db():
    """Create all tables that do not exist yet."""
    db.create_all()
    click.echo("Database tables created.")


@stockflow_group.command('create-business')
@click.option('--name', 'business_name', required=True, help='Business name')
@click.option('--owner', 'owner_name', required=True, help='Owner (admin user) full name')
@click.option('--email', required=True, help='Admin email address')
@click.option('--password', prompt=True, hide_input=True, confirmation_prompt=True, help='Admin password')
@click.option('--currency', default='INR', show_default=True, help='Currency code')
@with_appcontext
def create_business_cli(business_name, owner_name, email, password, currency):
    """Create a business, its admin user and default settings."""
    try:
        data = RegisterInput.from_json({
            "businessName": business_name,
            "ownerName": owner_name,
            "email": email,
            "password": password,
            "currency": currency,
        })
        user, business, _token = auth_service.register_business(data)
    except StockFlowError as exc:
        raise click.ClickException(exc.message)

    click.echo(f"Created business #{business.id} '{business.business_name}' with admin {user.email}")


@click.group('alerts')
def alerts_group():
    """Stock alert maintenance."""


@alerts_group.command('regenerate')
@click.option('--business-id', type=int, required=True, help='Business ID')
@with_appcontext
def regenerate_alerts(business_id):
    """Classify every active product and insert alerts where a threshold is crossed."""
    if db.session.get(Business, business_id) is None:
        raise click.ClickException(f"Business {business_id} not found")

    product_ids = [
        product_id
        for (product_id,) in db.session.query(Product.id).filter(
            Product.business_id == business_id,
            Product.is_active.is_(True),
        )
    ]
    created = alert_service.generate_for_products(business_id=business_id, product_ids=product_ids)
    db.session.commit()
    click.echo(f"Checked {len(product_ids)} products, created {len(created)} alerts.")


@alerts_group.command('clear-resolved')
@click.option('--business-id', type=int, default=None, help='Limit to one business')
@with_appcontext
def clear_resolved_alerts(business_id):
    """Delete resolved alerts."""
    deleted = alert_service.purge_resolved(business_id=business_id)
    click.echo(f"Deleted {deleted} resolved alerts.")


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(stockflow_group)
    app.cli.add_command(alerts_group)
