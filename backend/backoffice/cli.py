# Overview: Flask CLI command groups for bootstrap, inspection, and maintenance.

# backend/backoffice/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to wsgi.py (PowerShell: $env:FLASK_APP="wsgi.py").
# - Use: python -m flask <group> <command> [options]
#
# System bootstrap/repair:
# - python -m flask system init-db
#   Create all tables that do not exist yet (use `flask db upgrade` for migrations).
# - python -m flask system reset-db --yes
#   DEV/TEST only: drop and recreate all tables (deletes all data).
# - python -m flask system seed-demo
#   Idempotent demo data: four state hubs, two products with regional stock, two logistics partners.
#
# Inventory inspection:
# - python -m flask inventory low-stock [--threshold 10]
#   List products whose central or any regional count is at or below the threshold.
#
# User inspection:
# - python -m flask users list [--status pending]
#   List registered users with role and approval status.

import click
from flask.cli import with_appcontext

from .extensions import db
from .models import Region, Product, LogisticsPartner, User, ApprovalStatus
from .services import inventory_service, products_service, region_service


DEMO_REGIONS = ["Lagos", "Abuja", "Kano", "Rivers"]

DEMO_PRODUCTS = [
    {
        "name": "Ginger Shot",
        "sku": "GS-250",
        "cost_price": 5000,
        "selling_price": 20000,
        "batch_number": "B-2024-01",
        "total_stock": 500,
        "allocations": {"Lagos": 120, "Abuja": 60},
    },
    {
        "name": "Turmeric Blend",
        "sku": "TB-500",
        "cost_price": 7000,
        "selling_price": 25000,
        "batch_number": "B-2024-02",
        "total_stock": 300,
        "allocations": {"Lagos": 40, "Kano": 25},
    },
]

DEMO_PARTNERS = [
    {"name": "Swift Riders", "region": "Lagos", "contact_person": "Tunde", "phone": "08030000001"},
    {"name": "Capital Express", "region": "Abuja", "contact_person": "Amina", "phone": "08030000002"},
]


@click.group('system')
def system_group():
    """System bootstrap and repair commands."""


@system_group.command('init-db')
@with_appcontext
def init_db():
    """Create all tables that do not exist yet."""
    db.create_all()
    click.echo("PASS Database tables created")


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
    click.echo("BUILD  Recreating tables...")
    db.create_all()
    click.echo("PASS Database reset complete")


@system_group.command('seed-demo')
@with_appcontext
def seed_demo():
    """
    Seed demo data. Safe to run repeatedly: existing regions, products
    (matched by SKU) and partners (matched by name) are left alone.

    Opening stock goes through the regular product/ledger services, so the
    movement log starts consistent with the counters.
    """
    click.echo("START Seeding demo data...")

    regions = {}
    for name in DEMO_REGIONS:
        region = db.session.query(Region).filter_by(name=name).first()
        if not region:
            region = region_service.create_region(payload={"name": name})
            click.echo(f"PASS Created region: {name}")
        regions[name] = region
    db.session.commit()

    for demo in DEMO_PRODUCTS:
        if db.session.query(Product).filter_by(sku=demo["sku"]).first():
            click.echo(f"SKIP Product exists: {demo['sku']}")
            continue
        payload = {k: v for k, v in demo.items() if k != "allocations"}
        payload["stock_per_state"] = {
            str(regions[name].id): qty for name, qty in demo["allocations"].items()
        }
        product = products_service.create_product(payload=payload)
        db.session.commit()
        click.echo(f"PASS Created product: {product.name} (central {product.total_stock})")

    for demo in DEMO_PARTNERS:
        if db.session.query(LogisticsPartner).filter_by(name=demo["name"]).first():
            continue
        region_service.create_logistics_partner(payload={
            "name": demo["name"],
            "region_id": regions[demo["region"]].id,
            "contact_person": demo["contact_person"],
            "phone": demo["phone"],
        })
        click.echo(f"PASS Created logistics partner: {demo['name']}")
    db.session.commit()

    click.echo("DONE Demo data ready")


@click.group('inventory')
def inventory_group():
    """Inventory inspection commands."""


@inventory_group.command('low-stock')
@click.option('--threshold', type=int, default=None, help="Override each product's own threshold")
@with_appcontext
def low_stock(threshold):
    """List products at or below their low-stock threshold."""
    products = inventory_service.list_low_stock(threshold)
    if not products:
        click.echo("PASS No low-stock products.")
        return

    regions = {r.id: r.name for r in db.session.query(Region).all()}

    click.echo("\n" + "="*80)
    click.echo(f"{'ID':<5} {'Name':<30} {'Central':<10} {'Regions'}")
    click.echo("="*80)
    for p in products:
        per_state = ", ".join(
            f"{regions.get(rid, rid)}={qty}" for rid, qty in sorted(p.stock_per_state.items())
        ) or "-"
        click.echo(f"{p.id:<5} {p.name:<30} {p.total_stock:<10} {per_state}")
    click.echo("="*80 + "\n")


@click.group('users')
def users_group():
    """User inspection commands."""


@users_group.command('list')
@click.option('--status', type=click.Choice(list(ApprovalStatus.ALL)), help='Filter by approval status')
@with_appcontext
def list_users(status):
    """List all users with role and approval status."""
    query = db.session.query(User)
    if status:
        query = query.filter_by(status=status)
    users = query.order_by(User.id.asc()).all()

    if not users:
        click.echo("No users found.")
        return

    click.echo("\n" + "="*80)
    click.echo(f"{'ID':<5} {'Name':<25} {'Email':<30} {'Role':<15} {'Status'}")
    click.echo("="*80)
    for u in users:
        flag = " (bootstrap)" if u.is_bootstrap else ""
        click.echo(f"{u.id:<5} {u.name:<25} {u.email:<30} {u.role:<15} {u.status}{flag}")
    click.echo("="*80 + "\n")


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(system_group)
    app.cli.add_command(inventory_group)
    app.cli.add_command(users_group)
