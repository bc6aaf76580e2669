"""
SQLAlchemy engine singleton for the marketplace database.

Pool settings target a hosted Postgres instance shared by many page renders.
SQLite URLs (local development and tests) use SQLAlchemy's default pool, since
the SQLite pools do not accept the overflow settings.
"""

from typing import Any, Optional

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine

from storefront.config import DATABASE_URL

if not DATABASE_URL:
    raise RuntimeError("DATABASE_URL is not set.")


def engine_options(url: str) -> dict[str, Any]:
    """
    Return create_engine() keyword arguments appropriate for the given URL.

    Args:
        url: SQLAlchemy database URL

    Returns:
        dict: Pool options for server databases, empty for SQLite
    """
    if url.startswith("sqlite"):
        return {}
    return {
        "pool_size": 10,
        "max_overflow": 20,
        "pool_pre_ping": True,  # Detect connections dropped by the hosted service
        "pool_recycle": 1800,
    }


engine: Engine = create_engine(DATABASE_URL, echo=False, **engine_options(DATABASE_URL))


def check_engine_health(db_engine: Optional[Engine] = None) -> bool:
    """
    Check if the database is reachable.

    Used by the /ready endpoint before the service accepts traffic.

    Args:
        db_engine: Engine to probe (defaults to the module singleton)

    Returns:
        bool: True if a trivial query succeeds, False otherwise
    """
    try:
        with (db_engine or engine).connect() as conn:
            conn.execute(text("SELECT 1"))
        return True
    except Exception:
        return False
