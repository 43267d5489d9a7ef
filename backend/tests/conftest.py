"""
Pytest fixtures for back-office backend tests.

Provides an in-memory database, regions, a product with central stock,
one approved user per role, and identity-header helpers.
"""

import pytest
from backoffice import create_app
from backoffice.extensions import db
from backoffice.models import Region, Product, User, UserRole, ApprovalStatus


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
        'SQLALCHEMY_TRACK_MODIFICATIONS': False,
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
def lagos(db_session):
    region = Region(name="Lagos", whatsapp_group_link="https://chat.whatsapp.com/lagos")
    db_session.add(region)
    db_session.commit()
    return region


@pytest.fixture(scope='function')
def abuja(db_session):
    region = Region(name="Abuja")
    db_session.add(region)
    db_session.commit()
    return region


@pytest.fixture(scope='function')
def product(db_session):
    """Ginger Shot with 20 units in the central warehouse and no hub stock."""
    product = Product(
        name="Ginger Shot",
        sku="GS-250",
        cost_price=5000,
        selling_price=15000,
        total_stock=20,
        low_stock_threshold=5,
    )
    db_session.add(product)
    db_session.commit()
    return product


def _make_user(session, name, email, role, status=ApprovalStatus.APPROVED, region_id=None):
    user = User(
        name=name,
        email=email,
        role=role,
        region_id=region_id,
        status=status,
        is_approved=status == ApprovalStatus.APPROVED,
        is_bootstrap=False,
    )
    session.add(user)
    session.commit()
    return user


@pytest.fixture(scope='function')
def admin(db_session):
    return _make_user(db_session, "Ada Admin", "ada@example.com", UserRole.ADMIN)


@pytest.fixture(scope='function')
def manager(db_session, lagos):
    return _make_user(db_session, "Sade Manager", "sade@example.com", UserRole.STATE_MANAGER, region_id=lagos.id)


@pytest.fixture(scope='function')
def agent(db_session):
    return _make_user(db_session, "Tunde Agent", "tunde@example.com", UserRole.SALES_AGENT)


@pytest.fixture(scope='function')
def other_agent(db_session):
    return _make_user(db_session, "Kemi Agent", "kemi@example.com", UserRole.SALES_AGENT)


@pytest.fixture(scope='function')
def pending_user(db_session):
    return _make_user(
        db_session, "Pat Pending", "pat@example.com", UserRole.SALES_AGENT, status=ApprovalStatus.PENDING
    )


def auth_headers(user) -> dict:
    """Helper to create identity headers for a user."""
    return {'X-User-Id': str(user.id)}


def order_payload(region, product, quantity=2, **overrides) -> dict:
    """Helper to build a manual order body."""
    payload = {
        "customer_name": "Chioma Obi",
        "phone": "+234 803 555 0101",
        "address": "12 Admiralty Way, Lekki",
        "region_id": region.id,
        "items": [{"product_id": product.id, "quantity": quantity}],
    }
    payload.update(overrides)
    return payload
