from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from storefront.utils.datetime import as_utc


class Condition(str, Enum):
    """Wear state of a listing, best to worst."""

    NEW = "new"
    LIKE_NEW = "like_new"
    GOOD = "good"
    FAIR = "fair"
    POOR = "poor"


class CategoryOut(BaseModel):
    """
    Schema for a category as shown in the category selector.
    """

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    description: Optional[str] = None


class ListingOut(BaseModel):
    """
    Schema for a listing read from the marketplace database.

    ``condition`` stays a plain string so rows written by other clients with an
    unknown value still render (with the neutral badge colour).
    """

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    title: str
    description: str = ""
    price: Decimal
    condition: str
    brand: Optional[str] = None
    location: Optional[str] = None
    is_available: bool = True
    images: list[str] = Field(default_factory=list)
    views_count: int = 0
    created_at: datetime
    seller_id: Optional[UUID] = None
    category_id: Optional[UUID] = None
    category_name: Optional[str] = Field(None, description="Embedded category name (outer join)")

    @field_validator("images", mode="before")
    @classmethod
    def _images_default(cls, value: Optional[list[str]]) -> list[str]:
        return value or []

    @field_validator("views_count", mode="before")
    @classmethod
    def _views_default(cls, value: Optional[int]) -> int:
        return value or 0

    @field_validator("created_at")
    @classmethod
    def _created_at_utc(cls, value: datetime) -> datetime:
        return as_utc(value)


class ViewCountOut(BaseModel):
    """
    Schema returned after a view has been recorded.
    """

    id: UUID
    views_count: int
