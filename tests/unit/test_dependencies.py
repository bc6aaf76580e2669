"""
Unit tests for FastAPI dependency injection.
"""

from __future__ import annotations

from unittest.mock import Mock

import pytest
from fastapi import Depends, FastAPI
from fastapi.testclient import TestClient
from sqlalchemy.engine import Engine

from storefront.dependencies import get_change_feed, get_db_engine, get_listing_store
from storefront.realtime.changes import ChangeFeed, change_feed
from storefront.services.store import ListingStore


@pytest.mark.unit
def test_get_db_engine_dependency() -> None:
    """Test that get_db_engine returns the engine instance."""
    engine = next(get_db_engine())

    assert isinstance(engine, Engine)


@pytest.mark.unit
def test_dependency_injection_provides_same_engine() -> None:
    """Multiple calls get the same engine singleton."""
    assert next(get_db_engine()) is next(get_db_engine())


@pytest.mark.unit
def test_get_change_feed_returns_global_feed() -> None:
    assert get_change_feed() is change_feed


@pytest.mark.unit
def test_listing_store_uses_overridden_engine() -> None:
    """The store is built from whatever engine and feed are injected."""
    app = FastAPI()
    mock_engine = Mock(spec=Engine)
    private_feed = ChangeFeed()
    captured: list[ListingStore] = []

    @app.get("/test")
    def test_endpoint(store: ListingStore = Depends(get_listing_store)) -> dict[str, bool]:
        """Test endpoint."""
        captured.append(store)
        return {"ok": True}

    app.dependency_overrides[get_db_engine] = lambda: mock_engine
    app.dependency_overrides[get_change_feed] = lambda: private_feed

    response = TestClient(app).get("/test")

    assert response.status_code == 200
    assert captured[0].engine is mock_engine
    assert captured[0].change_feed is private_feed
