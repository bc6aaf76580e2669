import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

import argparse
import json
import logging
from typing import Any, Optional

from sqlalchemy.engine import Engine

from storefront.db.engine import engine
from storefront.db.writers.categories import insert_categories
from storefront.db.writers.listings import insert_listings
from storefront.logging_config import setup_logging
from storefront.realtime.changes import change_feed

setup_logging()
logger = logging.getLogger(__name__)


def resolve_category_names(
    listings: list[dict[str, Any]], categories_by_name: dict[str, str]
) -> list[dict[str, Any]]:
    """
    Replace a listing's ``category`` name with the matching ``category_id``.

    Listings that already carry a category_id are left alone.
    """
    resolved = []
    for listing in listings:
        listing = dict(listing)
        name = listing.pop("category", None)
        if name and not listing.get("category_id"):
            if name not in categories_by_name:
                logger.warning("Unknown category %r for listing %r", name, listing.get("title"))
            listing["category_id"] = categories_by_name.get(name)
        resolved.append(listing)
    return resolved


def main(argv: Optional[list[str]] = None, db_engine: Engine = engine) -> None:
    """
    Load categories and listings from a JSON file into the marketplace schema.

    File format:
        {
            "categories": [{"name": "Electronics", "description": "..."}],
            "listings": [{"title": "...", "price": 12.5, "condition": "good",
                          "category": "Electronics", "images": ["a/1.jpg"]}]
        }

    Rows without ids are matched by category name and by listing seller,
    title and created_at, so the same file can be loaded again.
    """
    parser = argparse.ArgumentParser(description="Seed the storefront catalog")
    parser.add_argument("path", type=Path, help="JSON file with categories and listings")
    parser.add_argument("--dry-run", action="store_true", help="Log only, write nothing")
    args = parser.parse_args(argv)

    catalog = json.loads(args.path.read_text())
    categories = catalog.get("categories", [])
    listings = catalog.get("listings", [])

    logger.info("Seeding %s categories and %s listings from %s", len(categories), len(listings), args.path)

    try:
        category_ids = insert_categories(
            db_engine, categories, dry_run=args.dry_run, change_feed=change_feed
        )
        names = [c["name"] for c in categories if c.get("name")]
        categories_by_name = {name: str(cid) for name, cid in zip(names, category_ids)}

        written = insert_listings(
            db_engine,
            resolve_category_names(listings, categories_by_name),
            dry_run=args.dry_run,
            change_feed=change_feed,
        )
        logger.info("Seed completed: %s categories, %s listings", len(category_ids), written)
    except Exception:
        logger.exception("Seed failed for %s", args.path)
        raise


if __name__ == "__main__":
    main()
