"""
Integration tests for the listing and category readers.
"""

from __future__ import annotations

import uuid

import pytest
from sqlalchemy.engine import Engine

from storefront.db.readers.categories import fetch_categories
from storefront.db.readers.listings import (
    fetch_listings,
    get_listing,
    get_views_count,
    parse_category_filter,
)
from tests.catalog import (
    ELECTRONICS_ID,
    FURNITURE_ID,
    HEADPHONES_ID,
    LAMP_ID,
    SOLD_LAMP_ID,
    TABLE_ID,
    TEE_ID,
)


@pytest.mark.integration
def test_default_query_returns_available_listings_newest_first(seeded_engine: Engine) -> None:
    """Unavailable listings never appear; newest listing comes first."""
    with seeded_engine.connect() as conn:
        listings = fetch_listings(conn)

    assert [listing.id for listing in listings] == [LAMP_ID, TABLE_ID, HEADPHONES_ID, TEE_ID]
    assert all(listing.is_available for listing in listings)
    assert SOLD_LAMP_ID not in {listing.id for listing in listings}


@pytest.mark.integration
def test_listings_embed_category_name(seeded_engine: Engine) -> None:
    with seeded_engine.connect() as conn:
        by_id = {listing.id: listing for listing in fetch_listings(conn)}

    assert by_id[LAMP_ID].category_name == "Furniture"
    assert by_id[HEADPHONES_ID].category_name == "Electronics"
    assert by_id[TEE_ID].category_name is None


@pytest.mark.integration
@pytest.mark.parametrize("term", ["lamp", "LAMP", "LaMp", "  lamp  "])
def test_search_matches_title_or_description_case_insensitively(
    seeded_engine: Engine, term: str
) -> None:
    """The lamp is matched by title, the table by its description."""
    with seeded_engine.connect() as conn:
        listings = fetch_listings(conn, search=term)

    assert {listing.id for listing in listings} == {LAMP_ID, TABLE_ID}
    for listing in listings:
        haystack = f"{listing.title} {listing.description}".lower()
        assert "lamp" in haystack


@pytest.mark.integration
@pytest.mark.parametrize("term", [None, "", "   "])
def test_empty_search_applies_no_filter(seeded_engine: Engine, term: str) -> None:
    with seeded_engine.connect() as conn:
        assert len(fetch_listings(conn, search=term)) == 4


@pytest.mark.integration
def test_search_treats_wildcards_literally(seeded_engine: Engine) -> None:
    """'%' and '_' in a search term are matched as characters."""
    with seeded_engine.connect() as conn:
        percent = fetch_listings(conn, search="100%")
        underscore = fetch_listings(conn, search="_")

    assert [listing.id for listing in percent] == [TEE_ID]
    assert underscore == []


@pytest.mark.integration
def test_category_all_is_the_same_as_no_filter(seeded_engine: Engine) -> None:
    with seeded_engine.connect() as conn:
        everything = fetch_listings(conn, category_id="all")
        unfiltered = fetch_listings(conn, category_id=None)

    assert [listing.id for listing in everything] == [listing.id for listing in unfiltered]


@pytest.mark.integration
def test_category_filter(seeded_engine: Engine) -> None:
    with seeded_engine.connect() as conn:
        furniture = fetch_listings(conn, category_id=str(FURNITURE_ID))
        electronics = fetch_listings(conn, category_id=ELECTRONICS_ID)

    assert [listing.id for listing in furniture] == [LAMP_ID, TABLE_ID]
    assert [listing.id for listing in electronics] == [HEADPHONES_ID]


@pytest.mark.integration
def test_search_and_category_combine(seeded_engine: Engine) -> None:
    with seeded_engine.connect() as conn:
        listings = fetch_listings(conn, search="lamp", category_id=str(ELECTRONICS_ID))

    assert listings == []


@pytest.mark.integration
def test_invalid_category_raises(seeded_engine: Engine) -> None:
    with seeded_engine.connect() as conn:
        with pytest.raises(ValueError):
            fetch_listings(conn, category_id="not-a-uuid")


@pytest.mark.unit
def test_parse_category_filter() -> None:
    assert parse_category_filter(None) is None
    assert parse_category_filter("") is None
    assert parse_category_filter("all") is None
    assert parse_category_filter(str(FURNITURE_ID)) == FURNITURE_ID
    assert parse_category_filter(FURNITURE_ID) == FURNITURE_ID


@pytest.mark.integration
def test_listing_fields_round_trip(seeded_engine: Engine) -> None:
    """Prices, images and timestamps come back as written."""
    with seeded_engine.connect() as conn:
        lamp = get_listing(conn, LAMP_ID)
        table = get_listing(conn, TABLE_ID)

    assert lamp is not None and table is not None
    assert str(lamp.price) == "45.00"
    assert str(table.price) == "1234.50"
    assert lamp.images == ["lamps/brass-1.jpg", "lamps/brass-2.jpg"]
    assert table.images == []
    assert lamp.created_at.tzinfo is not None
    assert lamp.created_at.isoformat().startswith("2024-03-04T10:00:00")


@pytest.mark.integration
def test_get_listing_includes_unavailable(seeded_engine: Engine) -> None:
    with seeded_engine.connect() as conn:
        sold = get_listing(conn, SOLD_LAMP_ID)
        missing = get_listing(conn, uuid.uuid4())

    assert sold is not None and sold.is_available is False
    assert missing is None


@pytest.mark.integration
def test_get_views_count(seeded_engine: Engine) -> None:
    with seeded_engine.connect() as conn:
        assert get_views_count(conn, HEADPHONES_ID) == 5
        assert get_views_count(conn, LAMP_ID) == 0
        assert get_views_count(conn, uuid.uuid4()) is None


@pytest.mark.integration
def test_fetch_categories_ordered_by_name(seeded_engine: Engine) -> None:
    with seeded_engine.connect() as conn:
        categories = fetch_categories(conn)

    assert [c.name for c in categories] == ["Electronics", "Furniture"]
    assert categories[1].description == "Tables, chairs, lamps"
