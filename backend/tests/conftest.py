"""
Pytest configuration and fixtures for backend tests.
"""

from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from rest_api.main import app
from rest_api.models import Base, Product, Restaurant, Table, User
from rest_api.repositories import SqlCommandRepository, clear_layout_cache
from rest_api.services.domain import CommandLifecycle, TableService
from rest_api.services.permissions import RoleAuthorizer
from shared.infrastructure.db import get_db
from tests.support import next_id


# SQLite in-memory database for testing
SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope="function")
def db_session():
    """
    Create a fresh database session for each test.
    Uses SQLite in-memory for isolation.
    """
    Base.metadata.create_all(bind=engine)
    clear_layout_cache()

    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)
        clear_layout_cache()


@pytest.fixture(scope="function")
def client(db_session):
    """
    Create a test client with database session override.

    The lifespan is not entered: tables come from db_session, not from
    the configured database.
    """
    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


# =============================================================================
# Seed fixtures
# =============================================================================


@pytest.fixture
def seed_restaurant(db_session):
    restaurant = Restaurant(id=next_id(), name="Test Restaurant", address="123 Test St")
    db_session.add(restaurant)
    db_session.commit()
    return restaurant


@pytest.fixture
def other_restaurant(db_session):
    restaurant = Restaurant(id=next_id(), name="Other Restaurant")
    db_session.add(restaurant)
    db_session.commit()
    return restaurant


def _add_user(db_session, role, restaurant_id, status="active"):
    uid = next_id()
    user = User(
        id=uid,
        name=f"Test {role}",
        email=f"{role}-{uid}@test.com",
        role=role,
        status=status,
        restaurant_id=restaurant_id,
    )
    db_session.add(user)
    db_session.commit()
    return user


@pytest.fixture
def seed_waiter(db_session, seed_restaurant):
    return _add_user(db_session, "waiter", seed_restaurant.id)


@pytest.fixture
def seed_manager(db_session, seed_restaurant):
    return _add_user(db_session, "manager", seed_restaurant.id)


@pytest.fixture
def seed_super_admin(db_session):
    return _add_user(db_session, "super_admin", None)


@pytest.fixture
def other_waiter(db_session, other_restaurant):
    return _add_user(db_session, "waiter", other_restaurant.id)


@pytest.fixture
def seed_tables(db_session, seed_restaurant):
    """Tables 1..6, all available, keyed by number."""
    tables = {}
    for number in range(1, 7):
        table = Table(id=next_id(), restaurant_id=seed_restaurant.id, number=number, capacity=4)
        db_session.add(table)
        tables[number] = table
    db_session.commit()
    return tables


@pytest.fixture
def seed_products(db_session, seed_restaurant):
    """Burger 25.00, soda 8.00 and fries 12.00, keyed by lowercase name."""
    products = {}
    for name, price, category in [
        ("Burger", Decimal("25.00"), "Burgers"),
        ("Soda", Decimal("8.00"), "Drinks"),
        ("Fries", Decimal("12.00"), "Sides"),
    ]:
        product = Product(
            id=next_id(),
            restaurant_id=seed_restaurant.id,
            name=name,
            price=price,
            category=category,
        )
        db_session.add(product)
        products[name.lower()] = product
    db_session.commit()
    return products


# =============================================================================
# Service fixtures
# =============================================================================


@pytest.fixture
def repository(db_session):
    return SqlCommandRepository(db_session)


@pytest.fixture
def lifecycle(repository):
    return CommandLifecycle(repository, RoleAuthorizer(repository))


@pytest.fixture
def table_service(repository):
    return TableService(repository, RoleAuthorizer(repository))
