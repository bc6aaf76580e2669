"""
Listing page view-model.

build_listing_page() decides which of the three mutually exclusive states the
grid is in (loading placeholders, empty message, or result cards) and derives
the heading, item badge and category selector.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Sequence
from urllib.parse import urlencode

from storefront.db.readers.listings import ALL_CATEGORIES, normalize_search
from storefront.schemas.listings import CategoryOut, ListingOut
from storefront.services.listing_feed import Notice
from storefront.views.card import ListingCard, build_card

PLACEHOLDER_COUNT = 8
ALL_CATEGORIES_LABEL = "All Categories"
EMPTY_SEARCH_MESSAGE = "No products found matching your search."
EMPTY_MESSAGE = "No products available yet."


class PageState(str, Enum):
    LOADING = "loading"
    EMPTY = "empty"
    RESULTS = "results"


@dataclass(frozen=True)
class CategoryOption:
    value: str
    label: str
    selected: bool
    href: str


@dataclass(frozen=True)
class ListingPage:
    """Everything the page template needs, already decided."""

    state: PageState
    search: Optional[str]
    selected_category: str
    heading: str
    badge: str
    category_options: list[CategoryOption]
    cards: list[ListingCard] = field(default_factory=list)
    placeholders: int = 0
    empty_message: Optional[str] = None
    notices: list[Notice] = field(default_factory=list)
    auto_refresh: bool = False


def item_badge(count: int) -> str:
    """``1 item`` / ``N items``."""
    return f"{count} {'item' if count == 1 else 'items'}"


def page_href(search: Optional[str], category: str) -> str:
    """Link to the listing page with the given filters."""
    params = {}
    if search:
        params["q"] = search
    if category and category != ALL_CATEGORIES:
        params["category"] = category
    return f"/?{urlencode(params)}" if params else "/"


def category_options(
    categories: Sequence[CategoryOut],
    selected: str,
    search: Optional[str],
) -> list[CategoryOption]:
    """The synthetic "all" option followed by every fetched category."""
    options = [
        CategoryOption(
            value=ALL_CATEGORIES,
            label=ALL_CATEGORIES_LABEL,
            selected=selected == ALL_CATEGORIES,
            href=page_href(search, ALL_CATEGORIES),
        )
    ]
    for category in categories:
        value = str(category.id)
        options.append(
            CategoryOption(
                value=value,
                label=category.name,
                selected=selected == value,
                href=page_href(search, value),
            )
        )
    return options


def build_listing_page(
    search: Optional[str],
    selected_category: Optional[str],
    products: Sequence[ListingOut],
    categories: Sequence[CategoryOut],
    loading: bool,
    notices: Sequence[Notice] = (),
) -> ListingPage:
    """
    Build the listing page view-model.

    Args:
        search: Current search term
        selected_category: Selected category id or "all"
        products: Current listing set
        categories: Current category set
        loading: True while the listing query is in flight
        notices: Pending user-visible notices

    Returns:
        ListingPage: Loading placeholders, an empty message or result cards
    """
    search = normalize_search(search)
    selected = selected_category or ALL_CATEGORIES
    heading = f'Search results for "{search}"' if search else "Latest Products"

    common = dict(
        search=search,
        selected_category=selected,
        heading=heading,
        badge=item_badge(len(products)),
        category_options=category_options(categories, selected, search),
        notices=list(notices),
    )

    if loading:
        return ListingPage(
            state=PageState.LOADING,
            placeholders=PLACEHOLDER_COUNT,
            auto_refresh=True,
            **common,
        )

    if not products:
        return ListingPage(
            state=PageState.EMPTY,
            empty_message=EMPTY_SEARCH_MESSAGE if search else EMPTY_MESSAGE,
            **common,
        )

    return ListingPage(
        state=PageState.RESULTS,
        cards=[build_card(listing) for listing in products],
        **common,
    )
