from typing import Any, Optional, Union
from uuid import UUID

from sqlalchemy import Select, or_, select
from sqlalchemy.engine import Connection

from storefront.models.categories import Category
from storefront.models.listings import Listing
from storefront.schemas.listings import ListingOut

# Category selector value meaning "no category filter"
ALL_CATEGORIES = "all"


def normalize_search(term: Optional[str]) -> Optional[str]:
    """
    Trim a free-text search term; blank terms mean "no text filter".

    Args:
        term: Raw search box contents

    Returns:
        Optional[str]: The trimmed term, or None when nothing is left
    """
    if term is None:
        return None
    term = term.strip()
    return term or None


def parse_category_filter(category_id: Union[str, UUID, None]) -> Optional[UUID]:
    """
    Turn a category selector value into a category id.

    Args:
        category_id: Category UUID, its string form, None or "all"

    Returns:
        Optional[UUID]: None when no category filter applies

    Raises:
        ValueError: If the value is neither "all" nor a valid UUID
    """
    if category_id is None or category_id == "" or category_id == ALL_CATEGORIES:
        return None
    if isinstance(category_id, UUID):
        return category_id
    return UUID(category_id)


def build_listings_query(
    search: Optional[str] = None,
    category_id: Union[str, UUID, None] = None,
) -> Select[Any]:
    """
    Build the storefront listing query.

    Only available listings are returned, newest first, each with the name of
    its category (if any). A search term matches title OR description
    case-insensitively as a literal substring.

    Args:
        search: Free-text search term
        category_id: Category filter; None or "all" means every category

    Returns:
        Select: Query yielding listing columns plus category_name
    """
    query = (
        select(Listing.__table__, Category.name.label("category_name"))
        .outerjoin(Category, Category.id == Listing.category_id)
        .where(Listing.is_available.is_(True))
        .order_by(Listing.created_at.desc(), Listing.id)
    )

    term = normalize_search(search)
    if term:
        query = query.where(
            or_(
                Listing.title.icontains(term, autoescape=True),
                Listing.description.icontains(term, autoescape=True),
            )
        )

    category_uuid = parse_category_filter(category_id)
    if category_uuid is not None:
        query = query.where(Listing.category_id == category_uuid)

    return query


def _to_listing_out(row: Any) -> ListingOut:
    return ListingOut.model_validate(dict(row))


def fetch_listings(
    conn: Connection,
    search: Optional[str] = None,
    category_id: Union[str, UUID, None] = None,
) -> list[ListingOut]:
    """
    Run the storefront listing query.

    Args:
        conn (Connection): An active SQLAlchemy database connection.
        search (Optional[str]): Free-text search term.
        category_id (Union[str, UUID, None]): Category filter or "all".

    Returns:
        list[ListingOut]: Matching available listings, newest first.
    """
    query = build_listings_query(search, category_id)
    rows = conn.execute(query).mappings().all()
    return [_to_listing_out(row) for row in rows]


def get_listing(conn: Connection, listing_id: UUID) -> Optional[ListingOut]:
    """
    Point read of one listing, regardless of availability.

    Args:
        conn (Connection): An active SQLAlchemy database connection.
        listing_id (UUID): Listing primary key.

    Returns:
        Optional[ListingOut]: The listing, or None if it does not exist.
    """
    row = conn.execute(
        select(Listing.__table__, Category.name.label("category_name"))
        .outerjoin(Category, Category.id == Listing.category_id)
        .where(Listing.id == listing_id)
    ).mappings().first()
    return _to_listing_out(row) if row is not None else None


def get_views_count(conn: Connection, listing_id: UUID) -> Optional[int]:
    """
    Read the current view counter of a listing.

    Args:
        conn (Connection): An active SQLAlchemy database connection.
        listing_id (UUID): Listing primary key.

    Returns:
        Optional[int]: The counter, or None if the listing does not exist.
    """
    result = conn.execute(select(Listing.views_count).where(Listing.id == listing_id))
    row = result.fetchone()
    return row[0] if row else None
