from sqlalchemy import select
from sqlalchemy.engine import Connection

from storefront.models.categories import Category
from storefront.schemas.listings import CategoryOut


def fetch_categories(conn: Connection) -> list[CategoryOut]:
    """
    Fetch every category, ordered by name.

    Args:
        conn (Connection): An active SQLAlchemy database connection.

    Returns:
        list[CategoryOut]: All categories for the category selector.
    """
    result = conn.execute(
        select(Category.id, Category.name, Category.description).order_by(Category.name)
    )
    return [CategoryOut.model_validate(dict(row)) for row in result.mappings()]
