import json
import uuid
from datetime import datetime
from decimal import Decimal
from typing import Any, Optional

import structlog
from sqlalchemy import select, update
from sqlalchemy.engine import Engine

from storefront.config import DEBUG
from storefront.db.readers.listings import get_views_count
from storefront.db.writers._upsert import upsert_rows
from storefront.models.listings import LISTING_CONDITIONS, Listing
from storefront.realtime.changes import ChangeEvent, ChangeFeed, ChangeType
from storefront.utils.datetime import utc_now

logger = structlog.get_logger(__name__)

REQUIRED_LISTING_KEYS = ("title", "price", "condition")

LISTING_ID_NAMESPACE = uuid.uuid5(uuid.NAMESPACE_URL, "storefront:listings")

# views_count is never overwritten by an upsert
UPSERT_COLUMNS = [
    "title",
    "description",
    "price",
    "condition",
    "brand",
    "location",
    "is_available",
    "images",
    "seller_id",
    "category_id",
    "updated_at",
]


def _optional_uuid(value: Any) -> Optional[uuid.UUID]:
    if value is None or isinstance(value, uuid.UUID):
        return value
    return uuid.UUID(str(value))


def _timestamp(value: Any, default: datetime) -> datetime:
    if not value:
        return default
    if isinstance(value, datetime):
        return value
    return datetime.fromisoformat(str(value))


def natural_listing_id(listing: dict[str, Any]) -> uuid.UUID:
    """
    Stable id for a listing that arrives without one.

    Derived from seller, title and the supplied created_at (if any), so
    loading the same file twice updates rows instead of duplicating them.
    """
    seller_id = _optional_uuid(listing.get("seller_id"))
    created_at = listing.get("created_at")
    if created_at:
        created_at = _timestamp(created_at, utc_now()).isoformat()
    key = f"{seller_id or ''}|{listing['title']}|{created_at or ''}"
    return uuid.uuid5(LISTING_ID_NAMESPACE, key)


def insert_listings(
    engine: Engine,
    data: list[dict[str, Any]],
    dry_run: bool = False,
    change_feed: Optional[ChangeFeed] = None,
) -> int:
    """
    Upsert listings into the database and announce each written row.

    Args:
        engine: SQLAlchemy Engine
        data: Listing dicts (title, price and condition required; a missing id
            is derived by natural_listing_id)
        dry_run: If True, skip DB writes and log only
        change_feed: Feed notified with INSERT/UPDATE events after commit

    Returns:
        int: Number of rows written
    """
    now = utc_now()
    rows_by_id: dict[uuid.UUID, dict[str, Any]] = {}

    for listing in data:
        missing = [key for key in REQUIRED_LISTING_KEYS if listing.get(key) in (None, "")]
        if missing:
            logger.warning("listing_skipped", reason="missing_fields", missing=missing)
            continue
        if listing["condition"] not in LISTING_CONDITIONS:
            logger.warning(
                "listing_skipped", reason="unknown_condition", condition=listing["condition"]
            )
            continue

        listing_id = _optional_uuid(listing.get("id")) or natural_listing_id(listing)
        # Last occurrence wins; one statement must not touch a row twice
        rows_by_id[listing_id] = {
            "id": listing_id,
            "title": listing["title"],
            "description": listing.get("description") or "",
            "price": Decimal(str(listing["price"])),
            "condition": listing["condition"],
            "brand": listing.get("brand"),
            "location": listing.get("location"),
            "is_available": listing.get("is_available", True),
            "images": list(listing.get("images") or []),
            "views_count": listing.get("views_count", 0),
            "seller_id": _optional_uuid(listing.get("seller_id")),
            "category_id": _optional_uuid(listing.get("category_id")),
            "created_at": _timestamp(listing.get("created_at"), now),
            "updated_at": now,
        }

    rows = list(rows_by_id.values())

    if dry_run:
        logger.info(f"[DRY RUN] Would upsert {len(rows)} listings")
        return 0

    if not rows:
        logger.info("No listings to upsert")
        return 0

    if DEBUG:
        logger.info(f"Sample listing to upsert {json.dumps(rows[0], default=str, indent=2)}")

    ids = [row["id"] for row in rows]
    with engine.begin() as conn:
        existing = set(conn.execute(select(Listing.id).where(Listing.id.in_(ids))).scalars())
        upsert_rows(
            conn=conn,
            table=Listing,
            rows=rows,
            conflict_column="id",
            update_columns=UPSERT_COLUMNS,
        )

    logger.info(f"Upserted {len(rows)} listings into DB")

    if change_feed is not None:
        for listing_id in ids:
            change_type = ChangeType.UPDATE if listing_id in existing else ChangeType.INSERT
            change_feed.publish(ChangeEvent("listings", change_type, str(listing_id)))

    return len(rows)


def increment_views(
    engine: Engine,
    listing_id: uuid.UUID,
    change_feed: Optional[ChangeFeed] = None,
) -> Optional[int]:
    """
    Atomically add one view to a listing.

    The increment happens inside the UPDATE statement, so concurrent viewers
    never overwrite each other's counts.

    Args:
        engine: SQLAlchemy Engine
        listing_id: Listing primary key
        change_feed: Feed notified with an UPDATE event after commit

    Returns:
        Optional[int]: The new view count, or None if the listing does not exist
    """
    with engine.begin() as conn:
        result = conn.execute(
            update(Listing)
            .where(Listing.id == listing_id)
            .values(views_count=Listing.views_count + 1)
        )
        if result.rowcount == 0:
            logger.warning("views_increment_unknown_listing", listing_id=str(listing_id))
            return None
        views_count = get_views_count(conn, listing_id)

    logger.debug("views_incremented", listing_id=str(listing_id), views_count=views_count)

    if change_feed is not None:
        change_feed.publish(ChangeEvent("listings", ChangeType.UPDATE, str(listing_id)))

    return views_count
