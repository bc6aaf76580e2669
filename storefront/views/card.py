"""
Listing card view-model.

Everything here is a pure function of one ListingOut: no I/O and no state.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional, Union

from storefront.config import IMAGE_BASE_URL, PLACEHOLDER_IMAGE
from storefront.schemas.listings import Condition, ListingOut

NO_LOCATION = "Location not specified"

CONDITION_COLORS = {
    Condition.NEW: "#22c55e",  # green
    Condition.LIKE_NEW: "#4ade80",  # light green
    Condition.GOOD: "#eab308",  # yellow
    Condition.FAIR: "#f97316",  # orange
    Condition.POOR: "#ef4444",  # red
}
DEFAULT_CONDITION_COLOR = "#6b7280"  # gray

CENT = Decimal("0.01")


@dataclass(frozen=True)
class ListingCard:
    """Display-ready fields of one listing card."""

    listing_id: str
    title: str
    href: str
    image_url: str
    fallback_image_url: str
    price: str
    condition_label: str
    condition_color: str
    location: str
    views: int
    category_name: Optional[str]


def resolve_image_url(
    images: Optional[list[str]],
    base_url: str = IMAGE_BASE_URL,
    placeholder: str = PLACEHOLDER_IMAGE,
) -> str:
    """
    Turn the first image key of a listing into a fetchable URL.

    The key is appended to ``base_url`` verbatim. Whether the object exists is
    not checked; the rendered <img> falls back to the placeholder on error.

    Args:
        images: Ordered image object keys
        base_url: Public URL prefix of the image bucket
        placeholder: Path used when the listing has no image

    Returns:
        str: Image URL or the placeholder path

    Example:
        >>> resolve_image_url(["a/1.jpg"], base_url="https://cdn.example/")
        'https://cdn.example/a/1.jpg'
        >>> resolve_image_url([])
        '/placeholder.svg'
    """
    if images and images[0]:
        return f"{base_url}{images[0]}"
    return placeholder


def format_price(amount: Union[Decimal, int, float, str]) -> str:
    """
    Format an amount as US dollars, e.g. ``$1,234.50``.

    Example:
        >>> format_price(Decimal("1234.5"))
        '$1,234.50'
        >>> format_price(-3)
        '-$3.00'
    """
    value = Decimal(str(amount)).quantize(CENT, rounding=ROUND_HALF_UP)
    sign = "-" if value < 0 else ""
    return f"{sign}${abs(value):,.2f}"


def condition_color(condition: str) -> str:
    """Badge colour for a condition; unknown values get the neutral gray."""
    return CONDITION_COLORS.get(condition, DEFAULT_CONDITION_COLOR)


def condition_label(condition: str) -> str:
    """Human label for a condition (``like_new`` -> ``like new``)."""
    return condition.replace("_", " ", 1)


def detail_path(listing_id: object) -> str:
    """Route of the listing detail page."""
    return f"/product/{listing_id}"


def build_card(listing: ListingOut) -> ListingCard:
    """
    Build the card view-model of one listing.

    Args:
        listing: Listing as read from the database

    Returns:
        ListingCard: Values the card template renders as-is
    """
    return ListingCard(
        listing_id=str(listing.id),
        title=listing.title,
        href=detail_path(listing.id),
        image_url=resolve_image_url(listing.images),
        fallback_image_url=PLACEHOLDER_IMAGE,
        price=format_price(listing.price),
        condition_label=condition_label(listing.condition),
        condition_color=condition_color(listing.condition),
        location=listing.location or NO_LOCATION,
        views=listing.views_count or 0,
        category_name=listing.category_name,
    )
