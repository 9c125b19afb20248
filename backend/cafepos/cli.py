# Overview: Flask CLI commands for database bootstrap, demo data and user creation.

# backend/cafepos/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to wsgi.py (PowerShell: $env:FLASK_APP="wsgi.py").
# - Use: python -m flask pos <command> [options]
#
# - python -m flask pos init-db [--drop --yes]
#   Create all tables (optionally drop them first). Prefer `flask db upgrade` in production.
# - python -m flask pos seed
#   Idempotent demo data: branches, users, categories, products and stock items.
# - python -m flask pos create-user --username kasa1 --password "Password123!" --branch-id 1
#   Create a staff user (prompts if options are omitted).

import click
from flask.cli import with_appcontext

from .extensions import db
from .models import Branch, Category, Product, StockItem, User
from .services.auth_service import create_user
from .validation import NotFoundError, ValidationError
from .time_utils import utcnow


DEFAULT_PASSWORD = "Password123!"

SEED_BRANCHES = [
    ("Merkez", "Cumhuriyet Cad. No:1"),
    ("Özgürlük", "Özgürlük Meydanı No:12"),
]

# (name, sort_order, shows_favorites, [(product, price)])
SEED_MENU = [
    ("Hızlı İşlemler", 0, True, []),
    ("Sıcak İçecekler", 10, False, [("Çay", 10), ("Türk Kahvesi", 35), ("Espresso", 25), ("Latte", 30)]),
    ("Soğuk İçecekler", 20, False, [("Limonata", 30), ("Ayran", 15), ("Su", 5)]),
    ("Yiyecekler", 30, False, [("Tost", 45), ("Simit", 15), ("Cheesecake", 60)]),
]


@click.group('pos')
def pos_group():
    """Cafe POS bootstrap commands."""


@pos_group.command('init-db')
@click.option('--drop', is_flag=True, help='Drop all tables first')
@click.option('--yes', is_flag=True, help='Skip confirmation')
@with_appcontext
def init_db(drop, yes):
    """
    Create the schema from the models.

    With --drop this DELETES ALL DATA.
    """
    if drop:
        if not yes:
            click.confirm("WARN This will DELETE ALL DATA. Are you sure?", abort=True)
        click.echo("DELETE  Dropping all tables...")
        db.drop_all()

    click.echo("BUILD  Creating all tables...")
    db.create_all()
    click.echo("PASS Database ready. Run 'python -m flask pos seed' for demo data.")


@pos_group.command('seed')
@with_appcontext
def seed():
    """
    Insert demo data. Safe to run repeatedly.

    Creates:
    - Branches: Merkez, Özgürlük
    - Users: admin (Merkez), kasa (Özgürlük); password "Password123!"
    - Categories with products, including the quick actions category
    - One stock item per product
    """
    branches = {}
    for name, address in SEED_BRANCHES:
        branch = db.session.query(Branch).filter_by(name=name).first()
        if not branch:
            branch = Branch(name=name, address=address)
            db.session.add(branch)
            db.session.flush()
            click.echo(f"PASS Created branch: {name}")
        branches[name] = branch
    db.session.commit()

    for username, branch_name, role in [("admin", "Merkez", "admin"), ("kasa", "Özgürlük", "cashier")]:
        if db.session.query(User).filter_by(username=username).first():
            click.echo(f"SKIP  User exists: {username}")
            continue
        create_user(username, DEFAULT_PASSWORD, branches[branch_name].id, role=role)
        click.echo(f"PASS Created user: {username} ({role}, {branch_name})")

    now = utcnow()
    for category_name, sort_order, shows_favorites, products in SEED_MENU:
        category = db.session.query(Category).filter_by(name=category_name).first()
        if not category:
            category = Category(name=category_name, sort_order=sort_order, shows_favorites=shows_favorites)
            db.session.add(category)
            db.session.flush()
            click.echo(f"PASS Created category: {category_name}")

        for product_name, price in products:
            product = db.session.query(Product).filter_by(name=product_name).first()
            if product:
                continue
            product = Product(name=product_name, price_cents=price * 100, category_id=category.id)
            db.session.add(product)
            db.session.flush()
            db.session.add(StockItem(
                product_id=product.id,
                name=product_name,
                quantity=100,
                minimum_quantity=10,
                branch_id=branches["Merkez"].id,
                created_at=now,
                updated_at=now,
            ))
    db.session.commit()

    click.echo("PASS Seed complete.")
    click.echo(f"WARN Default password for seeded users is '{DEFAULT_PASSWORD}'. Change it outside development.")


@pos_group.command('create-user')
@click.option('--username', prompt=True, help='Username')
@click.option('--password', prompt=True, hide_input=True, confirmation_prompt=True, help='Password')
@click.option('--branch-id', type=int, prompt=True, help='Branch ID')
@click.option('--role', type=click.Choice(['admin', 'manager', 'cashier']), default='cashier', help='Role')
@with_appcontext
def create_user_cli(username, password, branch_id, role):
    """
    Create a staff user.

    Password must be at least 8 characters.
    """
    try:
        user = create_user(username, password, branch_id, role=role)
    except (ValidationError, NotFoundError) as e:
        raise click.ClickException(str(e))
    click.echo(f"PASS Created user: {user.username} (ID: {user.id}, role: {user.role}, branch: {user.branch_id})")


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(pos_group)
