"""
FastAPI dependency injection providers.

Routes receive the engine, the change feed and the listing store through these
providers so tests can swap them with app.dependency_overrides.
"""

from __future__ import annotations

from typing import Generator

from fastapi import Depends
from sqlalchemy.engine import Engine

from storefront.db.engine import engine
from storefront.realtime.changes import ChangeFeed, change_feed
from storefront.services.store import ListingStore


def get_db_engine() -> Generator[Engine, None, None]:
    """
    Provide the database engine for dependency injection.

    Yields:
        Engine: SQLAlchemy database engine

    Testing Example:
        >>> from unittest.mock import Mock
        >>> from fastapi.testclient import TestClient
        >>>
        >>> mock_engine = Mock(spec=Engine)
        >>> app.dependency_overrides[get_db_engine] = lambda: mock_engine
        >>> client = TestClient(app)
    """
    yield engine


def get_change_feed() -> ChangeFeed:
    """Provide the process-wide change feed."""
    return change_feed


def get_listing_store(
    db_engine: Engine = Depends(get_db_engine),
    feed: ChangeFeed = Depends(get_change_feed),
) -> ListingStore:
    """
    Provide a ListingStore bound to the injected engine and change feed.

    Args:
        db_engine: Engine from get_db_engine()
        feed: Change feed from get_change_feed()

    Returns:
        ListingStore: Async store for the current request
    """
    return ListingStore(db_engine, feed)
