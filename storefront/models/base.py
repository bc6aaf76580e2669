from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """
    Base class for the marketplace ORM models.

    Both tables live in the ``marketplace`` schema; tests map that schema away
    with ``schema_translate_map`` so the same metadata works on SQLite.
    """

    pass
