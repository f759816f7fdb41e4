"""Product endpoints."""

from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from marketplace.config.database import get_db
from marketplace.schemas.product import ImageRef, ProductCreate, ProductUpdate
from marketplace.schemas.snapshot import AuditLogEntryResponse, ProductSnapshot
from marketplace.services import audit, products
from marketplace.services.audit import EntityKind

router = APIRouter()


@router.post("", response_model=ProductSnapshot, response_model_exclude_unset=True)
async def create_product(data: ProductCreate, db: AsyncSession = Depends(get_db)):
    """Create a product with categories, car models, brands and images."""
    return await products.create_product(db, data)


@router.get("/{product_id}", response_model=ProductSnapshot, response_model_exclude_unset=True)
async def get_product(product_id: int, db: AsyncSession = Depends(get_db)):
    return await products.get_product(db, product_id)


@router.patch("/{product_id}", response_model=ProductSnapshot, response_model_exclude_unset=True)
async def update_product(product_id: int, data: ProductUpdate, db: AsyncSession = Depends(get_db)):
    return await products.update_product(db, product_id, data)


@router.delete("/{product_id}", response_model=ProductSnapshot, response_model_exclude_unset=True)
async def delete_product(product_id: int, db: AsyncSession = Depends(get_db)):
    """Delete product; returns its last state."""
    return await products.delete_product(db, product_id)


# ============ Images ============
@router.post("/{product_id}/images", response_model=ProductSnapshot, response_model_exclude_unset=True)
async def add_image(product_id: int, data: ImageRef, db: AsyncSession = Depends(get_db)):
    """Attach an image by id, or create one from a url."""
    return await products.add_product_image(db, product_id, data)


@router.delete(
    "/{product_id}/images/{image_id}",
    response_model=ProductSnapshot,
    response_model_exclude_unset=True,
)
async def remove_image(product_id: int, image_id: int, db: AsyncSession = Depends(get_db)):
    return await products.remove_product_image(db, product_id, image_id)


# ============ Categories ============
@router.post(
    "/{product_id}/categories/{category_id}",
    response_model=ProductSnapshot,
    response_model_exclude_unset=True,
)
async def add_category(product_id: int, category_id: int, db: AsyncSession = Depends(get_db)):
    return await products.add_product_category(db, product_id, category_id)


@router.delete(
    "/{product_id}/categories/{category_id}",
    response_model=ProductSnapshot,
    response_model_exclude_unset=True,
)
async def remove_category(product_id: int, category_id: int, db: AsyncSession = Depends(get_db)):
    return await products.remove_product_category(db, product_id, category_id)


# ============ Car models ============
@router.post(
    "/{product_id}/car-models/{car_model_id}",
    response_model=ProductSnapshot,
    response_model_exclude_unset=True,
)
async def add_car_model(product_id: int, car_model_id: int, db: AsyncSession = Depends(get_db)):
    return await products.add_product_car_model(db, product_id, car_model_id)


@router.delete(
    "/{product_id}/car-models/{car_model_id}",
    response_model=ProductSnapshot,
    response_model_exclude_unset=True,
)
async def remove_car_model(product_id: int, car_model_id: int, db: AsyncSession = Depends(get_db)):
    return await products.remove_product_car_model(db, product_id, car_model_id)


# ============ Brands ============
@router.post(
    "/{product_id}/brands/{brand_id}",
    response_model=ProductSnapshot,
    response_model_exclude_unset=True,
)
async def add_brand(product_id: int, brand_id: int, db: AsyncSession = Depends(get_db)):
    return await products.add_product_brand(db, product_id, brand_id)


@router.delete(
    "/{product_id}/brands/{brand_id}",
    response_model=ProductSnapshot,
    response_model_exclude_unset=True,
)
async def remove_brand(product_id: int, brand_id: int, db: AsyncSession = Depends(get_db)):
    return await products.remove_product_brand(db, product_id, brand_id)


@router.get("/{product_id}/history", response_model=List[AuditLogEntryResponse])
async def product_history(product_id: int, db: AsyncSession = Depends(get_db)):
    """Audit history of a product, oldest first."""
    return await audit.history(db, EntityKind.PRODUCT, product_id)
