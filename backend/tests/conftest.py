"""
Pytest fixtures for StockFlow backend tests.

Provides test database setup, two isolated businesses with admin and manager
users, products, and an authenticated test client helper.
"""

from decimal import Decimal

import pytest

from stockflow import create_app
from stockflow.extensions import db
from stockflow.models import Business, Product, Settings, User
from stockflow.services import session_service
from stockflow.services.auth_service import hash_password


PASSWORD = "Password123!"


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
        'SQLALCHEMY_TRACK_MODIFICATIONS': False,
        'BCRYPT_ROUNDS': 4,
        'JWT_SECRET': 'test-secret',
        'STOCKFLOW_WRITE_MODE': 'transactional',
        'STOCKFLOW_DEDUPLICATE_ALERTS': False,
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


@pytest.fixture(params=['transactional', 'compensating'])
def write_mode(request, app):
    """Run a test once per write mode, restoring the configured mode afterwards."""
    previous = app.config['STOCKFLOW_WRITE_MODE']
    app.config['STOCKFLOW_WRITE_MODE'] = request.param
    yield request.param
    app.config['STOCKFLOW_WRITE_MODE'] = previous


def _make_business(name: str, email_domain: str) -> Business:
    business = Business(
        business_name=name,
        owner_name=f"{name} Owner",
        email=f"owner@{email_domain}",
        currency="INR",
    )
    db.session.add(business)
    db.session.flush()
    db.session.add(Settings(
        business_id=business.id,
        bill_prefix="INV",
        low_stock_threshold_default=10,
        currency_symbol="₹",
    ))
    db.session.commit()
    return business


def _make_user(business: Business, email: str, role: str) -> User:
    user = User(
        business_id=business.id,
        full_name=email.split("@")[0].title(),
        email=email,
        password_hash=hash_password(PASSWORD),
        role=role,
        is_active=True,
    )
    db.session.add(user)
    db.session.commit()
    return user


@pytest.fixture(scope='function')
def business_a(db_session):
    """Create Business A."""
    return _make_business("Acme Traders", "acme.test")


@pytest.fixture(scope='function')
def business_b(db_session):
    """Create Business B."""
    return _make_business("Beta Stores", "beta.test")


@pytest.fixture(scope='function')
def admin_a(business_a):
    return _make_user(business_a, "admin@acme.test", "admin")


@pytest.fixture(scope='function')
def manager_a(business_a):
    return _make_user(business_a, "manager@acme.test", "manager")


@pytest.fixture(scope='function')
def admin_b(business_b):
    return _make_user(business_b, "admin@beta.test", "admin")


@pytest.fixture(scope='function')
def manager_b(business_b):
    return _make_user(business_b, "manager@beta.test", "manager")


def _make_product(business: Business, **overrides) -> Product:
    values = dict(
        business_id=business.id,
        product_name="Widget",
        sku="WID-001",
        barcode=None,
        unit="pcs",
        purchase_price=Decimal("60.00"),
        selling_price=Decimal("100.00"),
        current_stock=50,
        min_stock_level=10,
        max_stock_level=100,
        is_active=True,
    )
    values.update(overrides)
    product = Product(**values)
    db.session.add(product)
    db.session.commit()
    return product


@pytest.fixture(scope='function')
def make_product(db_session):
    """Factory: make_product(business, **column_overrides)."""
    return _make_product


@pytest.fixture(scope='function')
def product_a(business_a):
    """Create Product in Business A."""
    return _make_product(business_a, product_name="Product A", sku="PROD-A-001", barcode="8900000000011")


@pytest.fixture(scope='function')
def product_b(business_b):
    """Create Product in Business B."""
    return _make_product(business_b, product_name="Product B", sku="PROD-B-001", barcode="8900000000028")


def auth_headers(user: User) -> dict:
    """Helper to create Authorization headers for a user."""
    return {'Authorization': f'Bearer {session_service.issue_token(user)}'}


@pytest.fixture(scope='function')
def admin_headers(admin_a):
    return auth_headers(admin_a)


@pytest.fixture(scope='function')
def manager_headers(manager_a):
    return auth_headers(manager_a)


@pytest.fixture(scope='function')
def admin_b_headers(admin_b):
    return auth_headers(admin_b)


def current_stock(product_id: int) -> int:
    """Stock as committed in the database (bypasses the fixture session's identity map)."""
    db.session.expire_all()
    return db.session.get(Product, product_id).current_stock


def count(model) -> int:
    db.session.expire_all()
    return db.session.query(model).count()
