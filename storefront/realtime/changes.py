"""
In-process change feed for marketplace tables.

Writers in this service and the database webhook receiver publish a
ChangeEvent whenever a row is inserted, updated or deleted. Mounted
ListingFeeds subscribe to the ``listings`` table and re-fetch on every event.

Strategy:
- Subscriptions are held in a registry guarded by threading.Lock
- publish() snapshots the matching callbacks and invokes them outside the lock
- A failing callback is logged and does not stop delivery to the others
"""

from __future__ import annotations

import itertools
import threading
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

import structlog

from storefront.metrics import active_subscriptions, change_events

logger = structlog.get_logger(__name__)


class ChangeType(str, Enum):
    INSERT = "INSERT"
    UPDATE = "UPDATE"
    DELETE = "DELETE"


@dataclass(frozen=True)
class ChangeEvent:
    """
    A single row change on a marketplace table.

    Attributes:
        table: Table name without schema (e.g. "listings")
        change_type: INSERT, UPDATE or DELETE
        record_id: Primary key of the changed row, when known
        source: Where the event came from ("local" writes or "webhook")
    """

    table: str
    change_type: ChangeType
    record_id: Optional[str] = None
    source: str = "local"


ChangeCallback = Callable[[ChangeEvent], None]


class Subscription:
    """Handle returned by ChangeFeed.subscribe(); close() releases it."""

    def __init__(self, feed: ChangeFeed, subscription_id: int, table: str, callback: ChangeCallback):
        self.feed = feed
        self.id = subscription_id
        self.table = table
        self.callback = callback

    @property
    def active(self) -> bool:
        return self.feed.is_subscribed(self)

    def close(self) -> None:
        self.feed.unsubscribe(self)


class ChangeFeed:
    """
    Thread-safe publish/subscribe registry keyed by table name.

    Example:
        >>> feed = ChangeFeed()
        >>> sub = feed.subscribe("listings", lambda event: print(event.change_type.value))
        >>> feed.publish(ChangeEvent("listings", ChangeType.INSERT, "abc"))
        INSERT
        1
        >>> sub.close()
    """

    def __init__(self) -> None:
        self._subscriptions: dict[int, Subscription] = {}
        self._ids = itertools.count(1)
        self._lock = threading.Lock()

    def subscribe(self, table: str, callback: ChangeCallback) -> Subscription:
        """
        Register a callback for every change on ``table``.

        Args:
            table: Table name to watch
            callback: Called with each ChangeEvent, possibly from another thread

        Returns:
            Subscription: Handle used to unsubscribe
        """
        with self._lock:
            subscription = Subscription(self, next(self._ids), table, callback)
            self._subscriptions[subscription.id] = subscription
            active_subscriptions.set(len(self._subscriptions))

        logger.debug("change_feed_subscribed", table=table, subscription_id=subscription.id)
        return subscription

    def unsubscribe(self, subscription: Subscription) -> None:
        """
        Release a subscription. Releasing twice is a no-op.

        Args:
            subscription: Handle returned by subscribe()
        """
        with self._lock:
            removed = self._subscriptions.pop(subscription.id, None)
            active_subscriptions.set(len(self._subscriptions))

        if removed is not None:
            logger.debug(
                "change_feed_unsubscribed",
                table=subscription.table,
                subscription_id=subscription.id,
            )

    def is_subscribed(self, subscription: Subscription) -> bool:
        with self._lock:
            return subscription.id in self._subscriptions

    def publish(self, event: ChangeEvent) -> int:
        """
        Deliver an event to every subscriber of its table.

        Args:
            event: The change to broadcast

        Returns:
            int: Number of callbacks invoked
        """
        with self._lock:
            targets = [s for s in self._subscriptions.values() if s.table == event.table]

        change_events.labels(
            table=event.table, change_type=event.change_type.value, source=event.source
        ).inc()

        for subscription in targets:
            try:
                subscription.callback(event)
            except Exception as e:
                logger.exception(
                    "change_callback_failed",
                    table=event.table,
                    change_type=event.change_type.value,
                    subscription_id=subscription.id,
                    error=str(e),
                )

        return len(targets)

    def subscriber_count(self, table: Optional[str] = None) -> int:
        """
        Count live subscriptions, optionally for a single table.

        Args:
            table: Restrict the count to this table

        Returns:
            int: Number of subscriptions
        """
        with self._lock:
            if table is None:
                return len(self._subscriptions)
            return sum(1 for s in self._subscriptions.values() if s.table == table)

    def clear(self) -> None:
        """Drop every subscription (test isolation)."""
        with self._lock:
            self._subscriptions.clear()
            active_subscriptions.set(0)


# Global feed instance shared by writers, the webhook receiver and page renders
change_feed = ChangeFeed()
