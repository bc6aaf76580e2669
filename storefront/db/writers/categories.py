import uuid
from typing import Any, Optional

import structlog
from sqlalchemy import select
from sqlalchemy.engine import Engine

from storefront.db.writers._upsert import upsert_rows
from storefront.models.categories import Category
from storefront.realtime.changes import ChangeEvent, ChangeFeed, ChangeType
from storefront.utils.datetime import utc_now

logger = structlog.get_logger(__name__)


def insert_categories(
    engine: Engine,
    data: list[dict[str, Any]],
    dry_run: bool = False,
    change_feed: Optional[ChangeFeed] = None,
) -> list[uuid.UUID]:
    """
    Upsert categories by id, or by name when a category carries no id.

    Re-running with the same input is safe: a category without an id is
    matched to the stored row of the same name and keeps that row's id.

    Args:
        engine (Engine): SQLAlchemy engine to open a transaction.
        data (list[dict[str, Any]]): Category dicts; ``name`` is required.
        dry_run (bool): If True, skip DB writes and log only.
        change_feed (Optional[ChangeFeed]): Notified once per written category.

    Returns:
        list[uuid.UUID]: One id per category with a name, in input order. In a
        dry run, categories without an id get a placeholder id.
    """
    now = utc_now()
    by_id: dict[uuid.UUID, dict[str, Any]] = {}
    by_name: dict[str, dict[str, Any]] = {}
    names: list[str] = []

    for category in data:
        name = category.get("name")
        if not name:
            logger.warning("Skipping category with missing name")
            continue

        names.append(name)
        category_id = category.get("id")
        row = {
            "id": uuid.UUID(str(category_id)) if category_id else uuid.uuid4(),
            "name": name,
            "description": category.get("description"),
            "created_at": now,
        }
        # Last occurrence wins; one statement must not touch a row twice
        if category_id:
            by_id[row["id"]] = row
        else:
            by_name[name] = row

    if not names:
        logger.info("No categories to upsert")
        return []

    if dry_run:
        logger.info(f"[DRY RUN] Would upsert {len(by_id) + len(by_name)} categories")
        planned = {row["name"]: row["id"] for row in [*by_name.values(), *by_id.values()]}
        return [planned[name] for name in names]

    with engine.begin() as conn:
        upsert_rows(
            conn=conn,
            table=Category,
            rows=list(by_id.values()),
            conflict_column="id",
            update_columns=["name", "description"],
        )
        upsert_rows(
            conn=conn,
            table=Category,
            rows=list(by_name.values()),
            conflict_column="name",
            update_columns=["description"],
        )
        stored = dict(
            conn.execute(
                select(Category.name, Category.id).where(Category.name.in_(set(names)))
            ).tuples()
        )

    logger.info("categories_upserted", count=len(stored))

    if change_feed is not None:
        for category_id in stored.values():
            change_feed.publish(ChangeEvent("categories", ChangeType.UPDATE, str(category_id)))

    return [stored[name] for name in names]
