"""
Seed data for development and testing.
Creates one demo restaurant with staff, tables and a small menu.
"""

from decimal import Decimal

from sqlalchemy.orm import Session
from sqlalchemy import select

from rest_api.models import Product, Restaurant, Table, User
from shared.config.constants import Roles
from shared.config.logging import get_logger, mask_email
from shared.infrastructure.db import safe_commit

logger = get_logger(__name__)


# =============================================================================
# Seed constants
# =============================================================================

DEMO_RESTAURANT_NAME = "Demo Restaurant"
DEMO_TABLE_COUNT = 6
DEFAULT_TABLE_CAPACITY = 4

DEMO_STAFF = [
    # (name, email, role, belongs to the demo restaurant)
    ("Root", "root@demo.com", Roles.SUPER_ADMIN, False),
    ("Ana Admin", "admin@demo.com", Roles.ADMIN, True),
    ("Marco Manager", "manager@demo.com", Roles.MANAGER, True),
    ("Wanda Waiter", "waiter@demo.com", Roles.WAITER, True),
]

DEMO_MENU = [
    # (name, description, price, category)
    ("Burger", "Beef burger with cheddar", Decimal("25.00"), "Burgers"),
    ("Veggie Burger", "Chickpea patty, tomato, lettuce", Decimal("23.50"), "Burgers"),
    ("Fries", "Hand cut, sea salt", Decimal("12.00"), "Sides"),
    ("Soda", "350ml can", Decimal("8.00"), "Drinks"),
    ("Fresh Juice", "Orange or passion fruit", Decimal("10.90"), "Drinks"),
    ("Brownie", "With vanilla ice cream", Decimal("15.75"), "Desserts"),
]


def seed(db: Session) -> Restaurant:
    """
    Seed the database with initial data.
    Idempotent: returns the existing demo restaurant when already seeded.
    """
    existing = db.scalar(
        select(Restaurant).where(Restaurant.name == DEMO_RESTAURANT_NAME).limit(1)
    )
    if existing is not None:
        logger.info("Database already seeded, skipping", restaurant_id=existing.id)
        return existing

    logger.info("Seeding database")

    # ==========================================================================
    # Restaurant
    # ==========================================================================
    restaurant = Restaurant(
        name=DEMO_RESTAURANT_NAME,
        address="Rua das Flores 100",
        phone="+55 11 5555-0100",
    )
    db.add(restaurant)
    db.flush()

    # ==========================================================================
    # Staff
    # ==========================================================================
    for name, email, role, scoped in DEMO_STAFF:
        db.add(
            User(
                name=name,
                email=email,
                role=role,
                restaurant_id=restaurant.id if scoped else None,
            )
        )
        logger.debug("Staff seeded", email=mask_email(email), role=role)

    # ==========================================================================
    # Tables
    # ==========================================================================
    for number in range(1, DEMO_TABLE_COUNT + 1):
        db.add(
            Table(
                restaurant_id=restaurant.id,
                number=number,
                capacity=DEFAULT_TABLE_CAPACITY,
            )
        )

    # ==========================================================================
    # Menu
    # ==========================================================================
    for name, description, price, category in DEMO_MENU:
        db.add(
            Product(
                restaurant_id=restaurant.id,
                name=name,
                description=description,
                price=price,
                category=category,
            )
        )

    safe_commit(db)
    logger.info(
        "Database seeded",
        restaurant_id=restaurant.id,
        staff=len(DEMO_STAFF),
        tables=DEMO_TABLE_COUNT,
        products=len(DEMO_MENU),
    )
    return restaurant
