"""
Asyncio facade over the marketplace database.

Page renders and listing feeds run on the event loop; SQLAlchemy calls here are
blocking, so each one is pushed to a worker thread with asyncio.to_thread.
"""

from __future__ import annotations

import asyncio
from typing import Any, Callable, Optional, TypeVar, Union
from uuid import UUID

from sqlalchemy.engine import Engine

from storefront.db.readers.categories import fetch_categories
from storefront.db.readers.listings import fetch_listings, get_listing
from storefront.db.writers.listings import increment_views
from storefront.metrics import queries_total, query_duration, view_increments
from storefront.realtime.changes import ChangeFeed
from storefront.schemas.listings import CategoryOut, ListingOut

T = TypeVar("T")


class ListingStore:
    """
    Read/write access to listings and categories for async callers.

    Attributes:
        engine: SQLAlchemy engine used for every call
        change_feed: Receives change events for writes made through the store

    Example:
        >>> store = ListingStore(engine, change_feed)
        >>> listings = await store.list_listings(search="lamp")
        >>> await store.increment_views(listings[0].id)
    """

    def __init__(self, engine: Engine, change_feed: Optional[ChangeFeed] = None):
        self.engine = engine
        self.change_feed = change_feed

    def _read(self, resource: str, reader: Callable[..., T], *args: Any) -> T:
        with query_duration.labels(resource=resource).time():
            try:
                with self.engine.connect() as conn:
                    result = reader(conn, *args)
            except Exception:
                queries_total.labels(resource=resource, status="failure").inc()
                raise
        queries_total.labels(resource=resource, status="success").inc()
        return result

    async def list_listings(
        self,
        search: Optional[str] = None,
        category_id: Union[str, UUID, None] = None,
    ) -> list[ListingOut]:
        """
        Available listings matching the search term and category filter.

        Raises:
            ValueError: If category_id is neither "all" nor a UUID
        """
        return await asyncio.to_thread(self._read, "listings", fetch_listings, search, category_id)

    async def list_categories(self) -> list[CategoryOut]:
        """All categories, ordered by name."""
        return await asyncio.to_thread(self._read, "categories", fetch_categories)

    async def get_listing(self, listing_id: UUID) -> Optional[ListingOut]:
        """One listing by id, or None."""
        return await asyncio.to_thread(self._read, "listing", get_listing, listing_id)

    async def increment_views(self, listing_id: UUID) -> Optional[int]:
        """
        Record one view of a listing.

        Returns:
            Optional[int]: New view count, or None if the listing does not exist
        """
        try:
            with query_duration.labels(resource="views").time():
                views_count = await asyncio.to_thread(
                    increment_views, self.engine, listing_id, self.change_feed
                )
        except Exception:
            queries_total.labels(resource="views", status="failure").inc()
            view_increments.labels(status="failure").inc()
            raise

        queries_total.labels(resource="views", status="success").inc()
        view_increments.labels(status="success" if views_count is not None else "not_found").inc()
        return views_count

