"""SQLAlchemy model for listing categories."""

import uuid

from sqlalchemy import Column, DateTime, String, Text, Uuid
from sqlalchemy.sql import func

from storefront.config import SCHEMA
from storefront.models.base import Base


class Category(Base):
    """
    ORM model for a named grouping of listings.

    Categories are managed by the hosting service's dashboard; this service
    only reads them to build the category selector.
    """

    __tablename__ = "categories"
    __table_args__ = {"schema": SCHEMA}

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    name = Column(String(100), nullable=False, unique=True)
    description = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
