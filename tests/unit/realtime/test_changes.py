"""
Unit tests for the in-process change feed.
"""

from __future__ import annotations

import threading

import pytest

from storefront.realtime.changes import ChangeEvent, ChangeFeed, ChangeType


@pytest.mark.unit
def test_publish_reaches_subscribers_of_the_table(feed: ChangeFeed) -> None:
    """Only callbacks registered for the event's table are called."""
    listings_events: list[ChangeEvent] = []
    category_events: list[ChangeEvent] = []
    feed.subscribe("listings", listings_events.append)
    feed.subscribe("categories", category_events.append)

    event = ChangeEvent("listings", ChangeType.INSERT, "abc")
    delivered = feed.publish(event)

    assert delivered == 1
    assert listings_events == [event]
    assert category_events == []


@pytest.mark.unit
def test_closed_subscription_receives_nothing(feed: ChangeFeed) -> None:
    received: list[ChangeEvent] = []
    subscription = feed.subscribe("listings", received.append)

    subscription.close()
    feed.publish(ChangeEvent("listings", ChangeType.UPDATE))

    assert received == []
    assert subscription.active is False
    assert feed.subscriber_count() == 0


@pytest.mark.unit
def test_unsubscribe_twice_is_noop(feed: ChangeFeed) -> None:
    subscription = feed.subscribe("listings", lambda event: None)

    subscription.close()
    subscription.close()

    assert feed.subscriber_count("listings") == 0


@pytest.mark.unit
def test_failing_callback_does_not_stop_delivery(feed: ChangeFeed) -> None:
    """A subscriber raising is logged; the others still get the event."""
    received: list[ChangeEvent] = []

    def broken(event: ChangeEvent) -> None:
        raise RuntimeError("boom")

    feed.subscribe("listings", broken)
    feed.subscribe("listings", received.append)

    delivered = feed.publish(ChangeEvent("listings", ChangeType.DELETE, "gone"))

    assert delivered == 2
    assert len(received) == 1


@pytest.mark.unit
def test_subscriber_count_by_table(feed: ChangeFeed) -> None:
    feed.subscribe("listings", lambda event: None)
    feed.subscribe("listings", lambda event: None)
    feed.subscribe("categories", lambda event: None)

    assert feed.subscriber_count() == 3
    assert feed.subscriber_count("listings") == 2
    assert feed.subscriber_count("orders") == 0

    feed.clear()
    assert feed.subscriber_count() == 0


@pytest.mark.unit
def test_publish_from_other_threads(feed: ChangeFeed) -> None:
    """Concurrent publishers deliver every event exactly once."""
    received: list[ChangeEvent] = []
    lock = threading.Lock()

    def collect(event: ChangeEvent) -> None:
        with lock:
            received.append(event)

    feed.subscribe("listings", collect)

    threads = [
        threading.Thread(
            target=feed.publish, args=(ChangeEvent("listings", ChangeType.UPDATE, str(i)),)
        )
        for i in range(20)
    ]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert sorted(int(e.record_id) for e in received) == list(range(20))
