"""
Dialect-aware upsert helper shared by the listings and categories writers.

Postgres (production) and SQLite (local development and tests) both support
``INSERT ... ON CONFLICT DO UPDATE``; SQLAlchemy exposes it through a
dialect-specific insert() construct, chosen here from the connection.
"""

from typing import Any

from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.engine import Connection

_INSERTS = {
    "postgresql": pg_insert,
    "sqlite": sqlite_insert,
}


def upsert_rows(
    conn: Connection,
    table: type,
    rows: list[dict[str, Any]],
    conflict_column: str,
    update_columns: list[str],
) -> None:
    """
    Insert rows, updating ``update_columns`` when the conflict key exists.

    Args:
        conn: Active database connection (within transaction)
        table: SQLAlchemy ORM table class (e.g., Listing, Category)
        rows: List of row dicts to upsert
        conflict_column: Column name for ON CONFLICT (usually "id")
        update_columns: Columns overwritten from the incoming row on conflict

    Raises:
        NotImplementedError: For dialects without ON CONFLICT support

    Example:
        >>> with engine.begin() as conn:
        ...     upsert_rows(
        ...         conn=conn,
        ...         table=Category,
        ...         rows=[{"id": uuid4(), "name": "Books"}],
        ...         conflict_column="id",
        ...         update_columns=["name"],
        ...     )
    """
    if not rows:
        return

    insert = _INSERTS.get(conn.dialect.name)
    if insert is None:
        raise NotImplementedError(f"Upsert is not supported on {conn.dialect.name}")

    stmt = insert(table).values(rows)
    stmt = stmt.on_conflict_do_update(
        index_elements=[conflict_column],
        set_={col: getattr(stmt.excluded, col) for col in update_columns},
    )

    conn.execute(stmt)
