import uuid

from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    Uuid,
    text,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.sql import func

from storefront.config import SCHEMA
from storefront.models.base import Base
from storefront.schemas.listings import Condition

LISTING_CONDITIONS = tuple(c.value for c in Condition)


class Listing(Base):
    """
    ORM model for a sellable second-hand item.

    ``images`` holds the ordered object keys of the listing photos in the
    storage bucket; the first key is the card thumbnail. ``views_count`` is
    only changed through the atomic increment in db.writers.listings.
    """

    __tablename__ = "listings"
    __table_args__ = (
        CheckConstraint(
            "condition IN ({})".format(", ".join(f"'{c}'" for c in LISTING_CONDITIONS)),
            name="ck_listings_condition",
        ),
        CheckConstraint("views_count >= 0", name="ck_listings_views_count"),
        {"schema": SCHEMA},
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=False, server_default="")
    price = Column(Numeric(10, 2), nullable=False)
    condition = Column(String(20), nullable=False)
    brand = Column(String(100), nullable=True)
    location = Column(String(200), nullable=True)
    is_available = Column(Boolean, nullable=False, server_default=text("TRUE"), index=True)
    images = Column(JSON().with_variant(JSONB, "postgresql"), nullable=False, default=list)
    views_count = Column(Integer, nullable=False, server_default=text("0"), default=0)
    seller_id = Column(Uuid, nullable=True, index=True)  # Owned by the auth service
    category_id = Column(
        Uuid,
        ForeignKey(f"{SCHEMA}.categories.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    created_at = Column(
        DateTime(timezone=True), server_default=func.now(), nullable=False, index=True
    )
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )
