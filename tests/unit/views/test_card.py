"""
Unit tests for the listing card view-model.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any

import pytest

from storefront.config import IMAGE_BASE_URL, PLACEHOLDER_IMAGE
from storefront.schemas.listings import ListingOut
from storefront.views.card import (
    DEFAULT_CONDITION_COLOR,
    NO_LOCATION,
    build_card,
    condition_color,
    condition_label,
    format_price,
    resolve_image_url,
)


def make_listing(**overrides: Any) -> ListingOut:
    """Build a ListingOut with sensible defaults."""
    values: dict[str, Any] = {
        "id": uuid.UUID("00000000-0000-0000-0000-000000000042"),
        "title": "Road Bike",
        "description": "Aluminium frame",
        "price": Decimal("250.00"),
        "condition": "good",
        "location": "Munich",
        "images": ["bikes/road.jpg"],
        "views_count": 7,
        "created_at": datetime(2024, 5, 1, tzinfo=timezone.utc),
        "category_name": "Sports",
    }
    values.update(overrides)
    return ListingOut(**values)


@pytest.mark.unit
def test_resolve_image_url_without_images_returns_placeholder() -> None:
    """Listings without images show the placeholder."""
    assert resolve_image_url([]) == PLACEHOLDER_IMAGE
    assert resolve_image_url(None) == PLACEHOLDER_IMAGE


@pytest.mark.unit
def test_resolve_image_url_uses_first_key_verbatim() -> None:
    """The first key is appended to the base URL without encoding."""
    url = resolve_image_url(["a b/1.jpg", "a b/2.jpg"], base_url="https://cdn.test/bucket/")

    assert url == "https://cdn.test/bucket/a b/1.jpg"


@pytest.mark.unit
def test_resolve_image_url_defaults_to_configured_base() -> None:
    """Without an explicit base, IMAGE_BASE_URL is used."""
    assert resolve_image_url(["x.png"]) == f"{IMAGE_BASE_URL}x.png"


@pytest.mark.unit
@pytest.mark.parametrize(
    "amount, expected",
    [
        (Decimal("0"), "$0.00"),
        (Decimal("1234.5"), "$1,234.50"),
        (Decimal("9.995"), "$10.00"),
        (1000000, "$1,000,000.00"),
        ("-3", "-$3.00"),
    ],
)
def test_format_price(amount: Any, expected: str) -> None:
    """Prices render as US dollars with grouping and two decimals."""
    assert format_price(amount) == expected


@pytest.mark.unit
def test_condition_colors() -> None:
    """Known conditions map to their badge colour, unknown ones to gray."""
    assert condition_color("new") == "#22c55e"
    assert condition_color("like_new") == "#4ade80"
    assert condition_color("good") == "#eab308"
    assert condition_color("fair") == "#f97316"
    assert condition_color("poor") == "#ef4444"
    assert condition_color("refurbished") == DEFAULT_CONDITION_COLOR


@pytest.mark.unit
def test_condition_label_replaces_underscore() -> None:
    """like_new is displayed as 'like new'."""
    assert condition_label("like_new") == "like new"
    assert condition_label("good") == "good"


@pytest.mark.unit
def test_build_card_fields() -> None:
    """A card carries every display-ready value of the listing."""
    card = build_card(make_listing())

    assert card.title == "Road Bike"
    assert card.href == "/product/00000000-0000-0000-0000-000000000042"
    assert card.image_url == f"{IMAGE_BASE_URL}bikes/road.jpg"
    assert card.fallback_image_url == PLACEHOLDER_IMAGE
    assert card.price == "$250.00"
    assert card.condition_label == "good"
    assert card.condition_color == "#eab308"
    assert card.location == "Munich"
    assert card.views == 7
    assert card.category_name == "Sports"


@pytest.mark.unit
def test_build_card_defaults_for_missing_values() -> None:
    """Missing location, images and views fall back to defaults."""
    card = build_card(
        make_listing(location=None, images=None, views_count=None, category_name=None)
    )

    assert card.location == NO_LOCATION
    assert card.image_url == PLACEHOLDER_IMAGE
    assert card.views == 0
    assert card.category_name is None
