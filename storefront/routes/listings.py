"""JSON API over storefront listings and categories."""

from typing import Optional
from uuid import UUID

import structlog
from fastapi import APIRouter, Depends, HTTPException, Query, status

from storefront.db.readers.listings import ALL_CATEGORIES, parse_category_filter
from storefront.dependencies import get_listing_store
from storefront.schemas.listings import CategoryOut, ListingOut, ViewCountOut
from storefront.services.store import ListingStore

logger = structlog.get_logger(__name__)
router = APIRouter()


def validate_category_or_422(category: Optional[str]) -> Optional[UUID]:
    """
    Parse a category selector value or raise 422.

    Args:
        category: "all", a category UUID, or None

    Returns:
        Optional[UUID]: None when no category filter applies
    """
    try:
        return parse_category_filter(category)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"Invalid category id: {category}",
        ) from None


@router.get("/listings", response_model=list[ListingOut])
async def list_listings(
    q: Optional[str] = Query(None, description="Case-insensitive title/description search"),
    category: Optional[str] = Query(ALL_CATEGORIES, description='Category id or "all"'),
    store: ListingStore = Depends(get_listing_store),
) -> list[ListingOut]:
    """
    Available listings, newest first.

    Args:
        q: Free-text search term
        category: Category filter
        store: Injected ListingStore

    Returns:
        list[ListingOut]: Matching listings with their category name
    """
    try:
        category_id = validate_category_or_422(category)
        listings = await store.list_listings(search=q, category_id=category_id)
        logger.info("listings_served", count=len(listings), search=q, category=category)
        return listings

    except HTTPException:
        raise
    except Exception as e:
        logger.exception("listings_fetch_failed", error=str(e))
        raise HTTPException(status_code=500, detail="Failed to fetch products")


@router.get("/categories", response_model=list[CategoryOut])
async def list_categories(
    store: ListingStore = Depends(get_listing_store),
) -> list[CategoryOut]:
    """All categories ordered by name."""
    try:
        return await store.list_categories()
    except Exception as e:
        logger.exception("categories_fetch_failed", error=str(e))
        raise HTTPException(status_code=500, detail="Failed to fetch categories")


@router.get("/listings/{listing_id}", response_model=ListingOut)
async def get_listing(
    listing_id: UUID,
    store: ListingStore = Depends(get_listing_store),
) -> ListingOut:
    """
    One listing by id, whether or not it is still available.

    Raises:
        HTTPException: 404 if the listing does not exist
    """
    try:
        listing = await store.get_listing(listing_id)
        if listing is None:
            raise HTTPException(status_code=404, detail="Listing not found")
        return listing

    except HTTPException:
        raise
    except Exception as e:
        logger.exception("listing_fetch_failed", listing_id=str(listing_id), error=str(e))
        raise HTTPException(status_code=500, detail="Failed to fetch product")


@router.post("/listings/{listing_id}/views", response_model=ViewCountOut)
async def record_view(
    listing_id: UUID,
    store: ListingStore = Depends(get_listing_store),
) -> ViewCountOut:
    """
    Add one view to a listing and return the new count.

    Raises:
        HTTPException: 404 if the listing does not exist
    """
    try:
        views_count = await store.increment_views(listing_id)
        if views_count is None:
            raise HTTPException(status_code=404, detail="Listing not found")
        return ViewCountOut(id=listing_id, views_count=views_count)

    except HTTPException:
        raise
    except Exception as e:
        logger.exception("views_increment_failed", listing_id=str(listing_id), error=str(e))
        raise HTTPException(status_code=500, detail="Failed to record view")
