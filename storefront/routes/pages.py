"""Server-rendered storefront pages."""

from typing import Optional

import structlog
from fastapi import APIRouter, Depends, Query
from fastapi.responses import HTMLResponse, Response

from storefront.config import PAGE_RENDER_TIMEOUT
from storefront.db.readers.listings import ALL_CATEGORIES
from storefront.dependencies import get_change_feed, get_listing_store
from storefront.realtime.changes import ChangeFeed
from storefront.services.listing_feed import ListingFeed
from storefront.services.store import ListingStore
from storefront.views.page import build_listing_page
from storefront.views.templates import PLACEHOLDER_SVG, render_listing_page

logger = structlog.get_logger(__name__)
router = APIRouter()


@router.get("/", response_class=HTMLResponse)
async def listing_page(
    q: Optional[str] = Query(None, description="Search term"),
    category: Optional[str] = Query(ALL_CATEGORIES, description='Category id or "all"'),
    store: ListingStore = Depends(get_listing_store),
    feed: ChangeFeed = Depends(get_change_feed),
) -> HTMLResponse:
    """
    Render the listing page for the given filters.

    The feed gets PAGE_RENDER_TIMEOUT seconds to load. When it has not settled
    by then, the loading placeholders are served with an auto-refresh.

    Args:
        q: Free-text search term
        category: Category filter
        store: Injected ListingStore
        feed: Injected change feed

    Returns:
        HTMLResponse: The rendered page
    """
    async with ListingFeed(store, feed, search=q, category_id=category) as listing_feed:
        settled = await listing_feed.drain(timeout=PAGE_RENDER_TIMEOUT)
        if not settled:
            logger.warning("page_render_timeout", timeout=PAGE_RENDER_TIMEOUT, search=q)

        page = build_listing_page(
            search=listing_feed.search,
            selected_category=listing_feed.category_id,
            products=listing_feed.products,
            categories=listing_feed.categories,
            loading=listing_feed.loading,
            notices=listing_feed.take_notices(),
        )

    logger.info("page_rendered", state=page.state.value, items=len(page.cards))
    return HTMLResponse(content=render_listing_page(page))


@router.get("/placeholder.svg", include_in_schema=False)
def placeholder_image() -> Response:
    """Neutral image shown for listings without (or with broken) images."""
    return Response(
        content=PLACEHOLDER_SVG,
        media_type="image/svg+xml",
        headers={"Cache-Control": "public, max-age=86400"},
    )
