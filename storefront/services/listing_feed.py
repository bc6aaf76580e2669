"""
Live view-model over the storefront listings.

A ListingFeed holds the current search term and category filter, the matching
listings, the category list and a loading flag, and keeps them in sync with
the database:

- activate() subscribes to listing changes and starts the first fetch
- set_filters() re-fetches when the search term or category changes
- every change event on the listings table triggers a full product re-fetch
- deactivate() releases the subscription and cancels in-flight fetches

Fetches are numbered. Only the most recently issued fetch may replace state or
clear the loading flag, so a slow superseded query can never overwrite the
results of a newer filter.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from types import TracebackType
from typing import Any, Callable, Coroutine, Optional, Union
from uuid import UUID

import structlog

from storefront.config import (
    CATEGORIES_ERROR_POLICY,
    LISTINGS_ERROR_POLICY,
    VIEWS_ERROR_POLICY,
    ErrorPolicy,
)
from storefront.db.readers.listings import ALL_CATEGORIES, normalize_search
from storefront.metrics import notices_shown, refetches, stale_fetches_discarded
from storefront.realtime.changes import ChangeEvent, ChangeFeed, Subscription
from storefront.schemas.listings import CategoryOut, ListingOut
from storefront.services.store import ListingStore

logger = structlog.get_logger(__name__)

LISTINGS_TABLE = "listings"


@dataclass(frozen=True)
class Notice:
    """A transient, user-visible message (rendered as a toast on the page)."""

    title: str
    description: str
    variant: str = "destructive"


class ListingFeed:
    """
    Listings and categories for one set of filters, kept current.

    Backend failures never propagate to the caller. They are logged and, when
    the resource's ErrorPolicy is NOTIFY, appended to ``notices``; previous
    results stay in place.

    Example:
        >>> async with ListingFeed(store, change_feed, search="lamp") as feed:
        ...     await feed.drain()
        ...     for listing in feed.products:
        ...         print(listing.title)
    """

    def __init__(
        self,
        store: ListingStore,
        change_feed: ChangeFeed,
        search: Optional[str] = None,
        category_id: Union[str, UUID, None] = ALL_CATEGORIES,
        listings_policy: ErrorPolicy = LISTINGS_ERROR_POLICY,
        categories_policy: ErrorPolicy = CATEGORIES_ERROR_POLICY,
        views_policy: ErrorPolicy = VIEWS_ERROR_POLICY,
    ):
        self.store = store
        self.change_feed = change_feed
        self.search = normalize_search(search)
        self.category_id = str(category_id) if category_id else ALL_CATEGORIES
        self.listings_policy = listings_policy
        self.categories_policy = categories_policy
        self.views_policy = views_policy

        self.products: list[ListingOut] = []
        self.categories: list[CategoryOut] = []
        self.loading = True
        self.notices: list[Notice] = []

        self._product_generation = 0
        self._category_generation = 0
        self._subscription: Optional[Subscription] = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._tasks: set[asyncio.Task[None]] = set()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @property
    def active(self) -> bool:
        return self._subscription is not None

    async def activate(self) -> None:
        """Subscribe to listing changes and start the initial fetches."""
        if self.active:
            return

        self._loop = asyncio.get_running_loop()
        self._subscription = self.change_feed.subscribe(LISTINGS_TABLE, self._on_change)
        logger.debug("listing_feed_activated", search=self.search, category_id=self.category_id)

        self._spawn(self.fetch_products, "mount")
        self._spawn(self.fetch_categories, "mount")

    async def deactivate(self) -> None:
        """Release the subscription and cancel fetches still in flight."""
        if self._subscription is not None:
            self._subscription.close()
            self._subscription = None

        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)

        self._loop = None
        logger.debug("listing_feed_deactivated", cancelled=len(tasks))

    async def __aenter__(self) -> ListingFeed:
        await self.activate()
        return self

    async def __aexit__(
        self,
        exc_type: Optional[type[BaseException]],
        exc: Optional[BaseException],
        tb: Optional[TracebackType],
    ) -> None:
        await self.deactivate()

    async def set_filters(
        self,
        search: Optional[str] = None,
        category_id: Union[str, UUID, None] = ALL_CATEGORIES,
    ) -> None:
        """
        Replace the search term and category filter.

        Both listings and categories are re-fetched when either value changed.

        Args:
            search: New free-text search term
            category_id: New category filter ("all" for none)
        """
        search = normalize_search(search)
        category = str(category_id) if category_id else ALL_CATEGORIES
        if search == self.search and category == self.category_id:
            return

        self.search = search
        self.category_id = category

        if self.active:
            self._spawn(self.fetch_products, "filters")
            self._spawn(self.fetch_categories, "filters")

    async def drain(self, timeout: Optional[float] = None) -> bool:
        """
        Wait until no fetch is in flight.

        Args:
            timeout: Seconds to wait at most (None waits indefinitely)

        Returns:
            bool: True if the feed settled, False on timeout
        """
        loop = asyncio.get_running_loop()
        deadline = None if timeout is None else loop.time() + timeout

        while True:
            # Let change callbacks queued with call_soon_threadsafe spawn their fetches
            await asyncio.sleep(0)
            if not self._tasks:
                return True

            remaining = None if deadline is None else deadline - loop.time()
            if remaining is not None and remaining <= 0:
                return False

            _, pending = await asyncio.wait(set(self._tasks), timeout=remaining)
            if pending:
                return False

    # ------------------------------------------------------------------
    # Fetching
    # ------------------------------------------------------------------

    async def fetch_products(self, trigger: str = "manual") -> None:
        """
        Fetch the listings for the current filters and replace ``products``.

        Args:
            trigger: Why the fetch happened (mount, filters, change, manual)
        """
        self._product_generation += 1
        generation = self._product_generation
        search, category_id = self.search, self.category_id

        self.loading = True
        refetches.labels(resource="products", trigger=trigger).inc()

        try:
            products = await self.store.list_listings(search=search, category_id=category_id)
        except Exception as e:
            if generation != self._product_generation:
                logger.info("stale_products_fetch_failed", generation=generation, error=str(e))
                return
            self.loading = False
            self._report_failure(
                "products_fetch_failed",
                "products",
                self.listings_policy,
                "Failed to fetch products",
                e,
            )
            return

        if generation != self._product_generation:
            stale_fetches_discarded.labels(resource="products").inc()
            logger.info(
                "stale_products_discarded",
                generation=generation,
                latest_generation=self._product_generation,
            )
            return

        self.products = products
        self.loading = False
        logger.debug(
            "products_fetched",
            count=len(products),
            search=search,
            category_id=category_id,
            trigger=trigger,
        )

    async def fetch_categories(self, trigger: str = "manual") -> None:
        """
        Fetch every category and replace ``categories``.

        Args:
            trigger: Why the fetch happened (mount, filters, manual)
        """
        self._category_generation += 1
        generation = self._category_generation
        refetches.labels(resource="categories", trigger=trigger).inc()

        try:
            categories = await self.store.list_categories()
        except Exception as e:
            if generation != self._category_generation:
                logger.info("stale_categories_fetch_failed", generation=generation, error=str(e))
                return
            self._report_failure(
                "categories_fetch_failed",
                "categories",
                self.categories_policy,
                "Failed to fetch categories",
                e,
            )
            return

        if generation != self._category_generation:
            stale_fetches_discarded.labels(resource="categories").inc()
            return

        self.categories = categories

    async def refetch(self) -> None:
        """Re-run the product query now."""
        await self.fetch_products("manual")

    async def increment_views(self, listing_id: UUID) -> Optional[int]:
        """
        Record one view of a listing.

        Args:
            listing_id: Listing primary key

        Returns:
            Optional[int]: The new count, or None if the listing is unknown or
            the write failed
        """
        try:
            return await self.store.increment_views(listing_id)
        except Exception as e:
            self._report_failure(
                "views_increment_failed",
                "views",
                self.views_policy,
                "Failed to record view",
                e,
                listing_id=str(listing_id),
            )
            return None

    def take_notices(self) -> list[Notice]:
        """Return pending notices and clear them."""
        notices, self.notices = self.notices, []
        return notices

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _report_failure(
        self,
        event: str,
        resource: str,
        policy: ErrorPolicy,
        description: str,
        error: Exception,
        **context: str,
    ) -> None:
        logger.error(event, error=str(error), error_type=type(error).__name__, **context)
        if policy is ErrorPolicy.NOTIFY:
            self.notices.append(Notice(title="Error", description=description))
            notices_shown.labels(resource=resource).inc()

    def _on_change(self, event: ChangeEvent) -> None:
        # Called on the publisher's thread
        loop = self._loop
        if loop is None or loop.is_closed():
            return
        logger.debug(
            "listing_change_received",
            change_type=event.change_type.value,
            record_id=event.record_id,
            source=event.source,
        )
        try:
            loop.call_soon_threadsafe(self._spawn, self.fetch_products, "change")
        except RuntimeError:
            # Loop closed between the check and the call
            return

    def _spawn(self, fetch: Callable[[str], Coroutine[Any, Any, None]], trigger: str) -> None:
        if not self.active:
            return
        task = asyncio.get_running_loop().create_task(fetch(trigger))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
