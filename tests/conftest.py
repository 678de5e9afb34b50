"""
Pytest configuration and fixtures for the Market API tests.

The environment is set before any market module is imported: the engine and
the settings are built at import time.
"""
import os

os.environ["ENVIRONMENT"] = "development"
os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ["SECRET_KEY"] = "test-secret-key-for-unit-tests-only"
os.environ["PASSWORD_HASH_SCHEMES"] = "pbkdf2_sha256"
os.environ["LOG_LEVEL"] = "WARNING"

import pytest
from fastapi.testclient import TestClient

from market.db.base import Base
from market.db.session import SessionLocal, engine
from market.main import app
from market.models.product import Category, Product
from market.models.user import Role
from market.services.users import UserService


@pytest.fixture(autouse=True)
def tables():
    """Fresh schema for every test."""
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db():
    """
    Session for service-level tests.

    The in-memory database has a single shared connection, so API tests use
    the short-lived helpers below instead of keeping this session open.
    """
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client() -> TestClient:
    return TestClient(app)


def add_user(db, email="alice@example.com", password="secret123", username="alice", role=Role.customer):
    users = UserService(db)
    if role is Role.admin:
        return users.ensure_admin(email, password, username)
    return users.register(email, password, username)


def add_product(db, name="Widget", price=10.0, stock=5, category=None):
    product = Product(name=name, price=price, stock=stock, category=category)
    db.add(product)
    db.commit()
    return product


def add_category(db, name="Gadgets", description=None):
    category = Category(name=name, description=description)
    db.add(category)
    db.commit()
    return category


# --- helpers for API tests: each opens and closes its own session ------------

def seed_user(email="alice@example.com", password="secret123", username="alice", role=Role.customer) -> int:
    with SessionLocal() as session:
        return add_user(session, email, password, username, role).id


def seed_product(name="Widget", price=10.0, stock=5) -> int:
    with SessionLocal() as session:
        return add_product(session, name, price, stock).id


def stock_of(product_id: int) -> int:
    with SessionLocal() as session:
        return session.get(Product, product_id).stock


def login(client, email="alice@example.com", password="secret123") -> dict:
    response = client.post("/api/v1/login", json={"email": email, "password": password})
    assert response.status_code == 200, response.text
    token = response.json()["data"]["access_token"]
    return {"Authorization": f"Bearer {token}"}
