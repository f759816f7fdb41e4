"""Products and the shared lookup rows they reference."""

from decimal import Decimal
from typing import Optional

from sqlalchemy import ForeignKey, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from marketplace.config.database import Base
from marketplace.models.base import BaseModel, TimestampMixin


class Product(BaseModel):
    """Product listed by an enterprise."""

    __tablename__ = "products"

    name: Mapped[str] = mapped_column(String(200), nullable=False)
    stock: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    price: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=0, nullable=False)
    enterprise_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("enterprise_accounts.id", ondelete="CASCADE"),
        nullable=True,
        index=True,
    )


class Category(BaseModel):
    __tablename__ = "categories"

    name: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)


class CarModel(BaseModel):
    __tablename__ = "car_models"

    name: Mapped[str] = mapped_column(String(100), nullable=False)


class Brand(BaseModel):
    __tablename__ = "brands"

    name: Mapped[str] = mapped_column(String(100), nullable=False)


class Image(BaseModel):
    __tablename__ = "images"

    url: Mapped[str] = mapped_column(String(500), nullable=False)


# ============ Product associations (N:M) ============
class ProductCategory(Base, TimestampMixin):
    __tablename__ = "product_categories"

    product_id: Mapped[int] = mapped_column(
        ForeignKey("products.id", ondelete="CASCADE"), primary_key=True
    )
    category_id: Mapped[int] = mapped_column(
        ForeignKey("categories.id", ondelete="CASCADE"), primary_key=True, index=True
    )


class ProductCarModel(Base, TimestampMixin):
    __tablename__ = "product_car_models"

    product_id: Mapped[int] = mapped_column(
        ForeignKey("products.id", ondelete="CASCADE"), primary_key=True
    )
    car_model_id: Mapped[int] = mapped_column(
        ForeignKey("car_models.id", ondelete="CASCADE"), primary_key=True, index=True
    )


class ProductBrand(Base, TimestampMixin):
    __tablename__ = "product_brands"

    product_id: Mapped[int] = mapped_column(
        ForeignKey("products.id", ondelete="CASCADE"), primary_key=True
    )
    brand_id: Mapped[int] = mapped_column(
        ForeignKey("brands.id", ondelete="CASCADE"), primary_key=True, index=True
    )


class ProductImage(Base, TimestampMixin):
    __tablename__ = "product_images"

    product_id: Mapped[int] = mapped_column(
        ForeignKey("products.id", ondelete="CASCADE"), primary_key=True
    )
    image_id: Mapped[int] = mapped_column(
        ForeignKey("images.id", ondelete="CASCADE"), primary_key=True, index=True
    )
