"""Product schemas."""

from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field


class ImageRef(BaseModel):
    """Either an existing image ``id`` or a ``url`` for a new image row.

    A descriptor with neither is rejected by the product service with a
    ValidationError.
    """

    id: Optional[int] = None
    url: Optional[str] = Field(None, max_length=500)


class ProductBase(BaseModel):
    """Product base schema."""

    name: str = Field(..., max_length=200)
    stock: int = Field(0, ge=0)
    price: Decimal = Field(Decimal("0"), ge=0, max_digits=12, decimal_places=2)


class ProductCreate(ProductBase):
    """Product create schema.

    Every category, car model and brand id must exist or nothing is written.
    """

    enterprise_id: int
    category_ids: List[int] = []
    car_model_ids: List[int] = []
    brand_ids: List[int] = []
    images: List[ImageRef] = []


class ProductUpdate(BaseModel):
    """Product update schema."""

    name: Optional[str] = Field(None, max_length=200)
    stock: Optional[int] = Field(None, ge=0)
    price: Optional[Decimal] = Field(None, ge=0, max_digits=12, decimal_places=2)
    enterprise_id: Optional[int] = None
