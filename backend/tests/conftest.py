"""
Pytest fixtures for cafepos backend tests.

Provides the test database setup, branch/user/catalog/table/stock fixtures
and the test client.
"""

import pytest
from cafepos import create_app
from cafepos.extensions import db
from cafepos.models import Branch, Category, Product, StockItem, Table, User
from cafepos.services.auth_service import hash_password
from cafepos.time_utils import utcnow


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
        'SQLALCHEMY_TRACK_MODIFICATIONS': False,
        'BCRYPT_ROUNDS': 4,
        'TABLE_SETTLEMENT_MODE': 'accumulate',
    })

    with app.app_context():
        db.create_all()
        yield app
        db.drop_all()


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def db_session(app):
    """Create fresh database for each test."""
    with app.app_context():
        # Clear all data but keep schema
        meta = db.metadata
        for table in reversed(meta.sorted_tables):
            db.session.execute(table.delete())
        db.session.commit()

        yield db.session

        # Cleanup after test
        db.session.rollback()


@pytest.fixture(scope='function')
def branch(db_session):
    """Create the main branch."""
    branch = Branch(name="Merkez", address="Cumhuriyet Cad. No:1")
    db_session.add(branch)
    db_session.commit()
    return branch


@pytest.fixture(scope='function')
def other_branch(db_session):
    """Create a second branch."""
    branch = Branch(name="Özgürlük")
    db_session.add(branch)
    db_session.commit()
    return branch


@pytest.fixture(scope='function')
def user(db_session, branch):
    """Create a cashier in the main branch."""
    user = User(
        username="kasa1",
        password_hash=hash_password("Password123!"),
        role="cashier",
        branch_id=branch.id,
    )
    db_session.add(user)
    db_session.commit()
    return user


@pytest.fixture(scope='function')
def other_user(db_session, other_branch):
    """Create a cashier in the second branch."""
    user = User(
        username="kasa2",
        password_hash=hash_password("Password123!"),
        role="cashier",
        branch_id=other_branch.id,
    )
    db_session.add(user)
    db_session.commit()
    return user


@pytest.fixture(scope='function')
def category(db_session):
    category = Category(name="Sıcak İçecekler", sort_order=10)
    db_session.add(category)
    db_session.commit()
    return category


@pytest.fixture(scope='function')
def quick_actions(db_session):
    """The category that lists a user's favourites."""
    category = Category(name="Hızlı İşlemler", sort_order=0, shows_favorites=True)
    db_session.add(category)
    db_session.commit()
    return category


@pytest.fixture(scope='function')
def espresso(db_session, category):
    product = Product(name="Espresso", price_cents=2500, category_id=category.id)
    db_session.add(product)
    db_session.commit()
    return product


@pytest.fixture(scope='function')
def latte(db_session, category):
    product = Product(name="Latte", price_cents=3000, category_id=category.id)
    db_session.add(product)
    db_session.commit()
    return product


@pytest.fixture(scope='function')
def open_table(db_session, user):
    """An open tab with a zero running total in the user's branch."""
    now = utcnow()
    table = Table(
        name="T1",
        status="open",
        opened_at=now,
        total_cents=0,
        opened_by_user_id=user.id,
        branch_id=user.branch_id,
        updated_at=now,
    )
    db_session.add(table)
    db_session.commit()
    return table


@pytest.fixture(scope='function')
def stock_item(db_session, branch):
    """Five on hand, minimum ten."""
    now = utcnow()
    item = StockItem(
        name="Süt",
        quantity=5,
        minimum_quantity=10,
        unit="litre",
        branch_id=branch.id,
        created_at=now,
        updated_at=now,
    )
    db_session.add(item)
    db_session.commit()
    return item
