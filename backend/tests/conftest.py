"""
Pytest fixtures for Atelier backend tests.

Provides test database setup, catalog/stock fixtures, and test client.
"""

import pytest
from atelier import create_app
from atelier.context import RequestContext
from atelier.extensions import db
from atelier.models import Employee, Product, ProductColor, Store
from atelier.services import stock_service


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
def employee(db_session):
    emp = Employee(name="Heba")
    db_session.add(emp)
    db_session.commit()
    return emp


@pytest.fixture(scope='function')
def boutique_ctx(employee):
    return RequestContext(employee_id=employee.id, store=Store.BOUTIQUE)


@pytest.fixture(scope='function')
def online_ctx(employee):
    return RequestContext(employee_id=employee.id, store=Store.ONLINE)


@pytest.fixture(scope='function')
def make_product(db_session):
    """Factory: product with the given colors. Returns (product, {color_name: ProductColor})."""
    def _make(model_number="ABY-100", brand="Lamsa", product_type="Abaya",
              store_price_cents=50000, online_price_cents=45000, colors=("Black",)):
        product = Product(
            model_number=model_number,
            brand=brand,
            product_type=product_type,
            store_price_cents=store_price_cents,
            online_price_cents=online_price_cents,
        )
        db_session.add(product)
        db_session.flush()
        variants = {}
        for name in colors:
            color = ProductColor(product_id=product.id, color_name=name)
            db_session.add(color)
            variants[name] = color
        db_session.commit()
        return product, variants

    return _make


@pytest.fixture(scope='function')
def abaya(make_product):
    """Abaya ABY-100 in Black and Navy: 500.00 at the boutique, 450.00 online."""
    return make_product(colors=("Black", "Navy"))


@pytest.fixture(scope='function')
def black(abaya):
    return abaya[1]["Black"]


@pytest.fixture(scope='function')
def navy(abaya):
    return abaya[1]["Navy"]


@pytest.fixture(scope='function')
def stock(db_session):
    """Set a stock level through the ledger: stock(variant, store, size, qty)."""
    def _set(variant, store, size, quantity):
        return stock_service.set_stock(variant.id, store, size, quantity)

    return _set


@pytest.fixture(scope='function')
def on_hand(db_session):
    """Current quantity for (variant, store, size); 0 when no entry exists."""
    def _get(variant, store, size):
        return stock_service.get_quantity_on_hand(variant.id, store, size)

    return _get
