"""
Shared test fixtures.

The storefront config refuses to import without DATABASE_URL and
ALLOWED_ORIGINS, so both are defaulted before any storefront module loads.
Database tests run against a throwaway SQLite file with the ``marketplace``
schema mapped away.
"""

from __future__ import annotations

import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("ALLOWED_ORIGINS", "http://localhost:3000")

from pathlib import Path
from typing import Generator

import pytest
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine

from storefront.config import SCHEMA
from storefront.db.writers.categories import insert_categories
from storefront.db.writers.listings import insert_listings
from storefront.models.base import Base
from storefront.models.categories import Category  # noqa: F401
from storefront.models.listings import Listing  # noqa: F401
from storefront.realtime.changes import ChangeFeed, change_feed
from tests.catalog import CATEGORIES, LISTINGS


@pytest.fixture(autouse=True)
def reset_change_feed() -> Generator[None, None, None]:
    """Drop subscriptions left on the global feed by a test."""
    yield
    change_feed.clear()


@pytest.fixture
def feed() -> ChangeFeed:
    """A private change feed."""
    return ChangeFeed()


@pytest.fixture
def db_engine(tmp_path: Path) -> Generator[Engine, None, None]:
    """
    Engine on an empty SQLite database with the marketplace tables created.
    """
    base_engine = create_engine(
        f"sqlite:///{tmp_path / 'storefront.db'}",
        connect_args={"check_same_thread": False},
    )
    test_engine = base_engine.execution_options(schema_translate_map={SCHEMA: None})
    Base.metadata.create_all(test_engine)

    yield test_engine

    base_engine.dispose()


@pytest.fixture
def seeded_engine(db_engine: Engine) -> Engine:
    """
    Engine whose database holds two categories and five listings.

    Newest first: Floor Lamp (unavailable), Brass Desk Lamp, Oak Dining Table,
    Noise Cancelling Headphones, 100% Cotton Tee (no category).
    """
    insert_categories(db_engine, CATEGORIES)
    insert_listings(db_engine, LISTINGS)
    return db_engine
