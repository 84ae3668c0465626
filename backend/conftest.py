"""Shared fixtures: in-memory SQLite, API client, and a small gas/cylinder catalog."""
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from gasledger.api.deps import get_db
from gasledger.db.init_db import init_db
from gasledger.db.session import make_engine
from gasledger.main import app
from gasledger.models import Customer, InventoryItem, Product, User


@pytest.fixture
def engine():
    engine = make_engine("sqlite://")
    init_db(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def client(session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


def add_product(db, name, category, stock=0, cylinder_size=None, full=None, empty=None, gas_stock=None):
    """Product plus its InventoryItem (skipped when no inventory counters are given)."""
    product = Product(
        name=name,
        category=category,
        cylinder_size=cylinder_size,
        cost_price=Decimal("10"),
        least_price=Decimal("12"),
        current_stock=stock,
    )
    db.add(product)
    db.flush()
    if full is not None or empty is not None or gas_stock is not None:
        db.add(
            InventoryItem(
                product_id=product.id,
                category=category,
                current_stock=gas_stock or 0,
                available_full=full or 0,
                available_empty=empty or 0,
                cylinder_size=cylinder_size,
            )
        )
    db.commit()
    return product


@pytest.fixture
def customer(db):
    c = Customer(name="Al Noor Restaurant", serial_number="CU-0001", phone="0501234567")
    db.add(c)
    db.commit()
    return c


@pytest.fixture
def catalog(db):
    """Gas-5kg (stock 20) and Cyl-5kg (10 full / 3 empty), as in the checkout example."""
    gas = add_product(db, "Gas-5kg", "gas", stock=20, cylinder_size="small", gas_stock=20)
    cylinder = add_product(db, "Cyl-5kg", "cylinder", stock=13, cylinder_size="small", full=10, empty=3)
    return {"gas": gas, "cylinder": cylinder}


@pytest.fixture
def users(db):
    admin = User(name="Admin", email="admin@example.com", role="admin")
    employee = User(name="Driver One", email="driver1@example.com", role="employee")
    db.add_all([admin, employee])
    db.commit()
    return {"admin": admin, "employee": employee}


def inventory_of(db, product_id):
    db.expire_all()
    return db.query(InventoryItem).filter(InventoryItem.product_id == product_id).first()


def product_stock(db, product_id):
    db.expire_all()
    return db.get(Product, product_id).current_stock
