"""
Fixtures for HTTP-level integration tests.
"""

from __future__ import annotations

from typing import Iterator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.engine import Engine

from storefront.dependencies import get_change_feed, get_db_engine
from storefront.main import app
from storefront.realtime.changes import ChangeFeed


@pytest.fixture
def client(seeded_engine: Engine, feed: ChangeFeed) -> Iterator[TestClient]:
    """
    TestClient whose routes use the seeded SQLite engine and a private feed.
    """
    app.dependency_overrides[get_db_engine] = lambda: seeded_engine
    app.dependency_overrides[get_change_feed] = lambda: feed

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()
