"""UTC datetime utilities."""

from datetime import datetime, timezone


def utc_now() -> datetime:
    """
    Return current UTC time as timezone-aware datetime.

    Use this for every timestamp written to the listings and categories
    tables instead of datetime.now() or datetime.utcnow().

    Returns:
        Timezone-aware datetime in UTC
    """
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """
    Attach UTC to a naive timestamp read back from the database.

    SQLite drops tzinfo on round trip; Postgres returns aware values, which are
    converted to UTC so listings sort and serialize consistently.

    Example:
        >>> as_utc(datetime(2024, 1, 1)).tzinfo
        datetime.timezone.utc
    """
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)
