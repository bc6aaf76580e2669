"""
Prometheus metrics for storefront queries, change notifications and page renders.

Metrics are exposed via the /metrics endpoint for scraping by Prometheus.

Metric Types:
    - Counter: Cumulative metrics that only increase (e.g., total queries)
    - Histogram: Observations bucketed by value (e.g., query latency)
    - Gauge: Point-in-time value that can go up or down (e.g., live subscriptions)

Example:
    >>> from storefront.metrics import query_duration, queries_total
    >>> with query_duration.labels(resource="listings").time():
    ...     rows = fetch_listings(conn, "lamp", None)
    >>> queries_total.labels(resource="listings", status="success").inc()
"""

from __future__ import annotations

from prometheus_client import Counter, Gauge, Histogram

# =============================================================================
# Query Metrics
# =============================================================================

queries_total = Counter(
    "storefront_queries_total",
    "Total number of backend queries (success and failure)",
    ["resource", "status"],
)
"""
Counter for backend queries.

Labels:
    resource: listings, categories, listing, views
    status: success or failure
"""

query_duration = Histogram(
    "storefront_query_duration_seconds",
    "Duration of backend queries in seconds",
    ["resource"],
    buckets=(0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, float("inf")),
)

view_increments = Counter(
    "storefront_view_increments_total",
    "Total view counter increments",
    ["status"],
)
"""
Counter for view increments.

Labels:
    status: success, not_found or failure
"""

# =============================================================================
# Change Feed Metrics
# =============================================================================

change_events = Counter(
    "storefront_change_events_total",
    "Total change notifications published to the change feed",
    ["table", "change_type", "source"],
)

active_subscriptions = Gauge(
    "storefront_active_subscriptions",
    "Number of live change feed subscriptions",
)

# =============================================================================
# Listing Feed Metrics
# =============================================================================

refetches = Counter(
    "storefront_refetches_total",
    "Total listing feed fetches by trigger",
    ["resource", "trigger"],
)
"""
Counter for feed fetches.

Labels:
    resource: products or categories
    trigger: mount, filters, change or manual
"""

stale_fetches_discarded = Counter(
    "storefront_stale_fetches_discarded_total",
    "Fetch results dropped because a newer fetch had been issued",
    ["resource"],
)

notices_shown = Counter(
    "storefront_notices_total",
    "User-visible error notices raised by the listing feed",
    ["resource"],
)
