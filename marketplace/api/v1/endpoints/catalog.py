"""Public catalog endpoints."""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from marketplace.config.database import get_db
from marketplace.schemas.snapshot import CatalogEnterpriseView, CatalogItem
from marketplace.services import catalog

router = APIRouter()


@router.get("", response_model=List[CatalogItem], response_model_exclude_unset=True)
async def list_catalog(db: AsyncSession = Depends(get_db)):
    """All publishable products."""
    return await catalog.catalog_all(db)


@router.get(
    "/category/{category_id}",
    response_model=List[CatalogItem],
    response_model_exclude_unset=True,
)
async def list_by_category(
    category_id: int,
    limit: Optional[int] = Query(None, ge=0),
    db: AsyncSession = Depends(get_db),
):
    """Publishable products of a category, optionally limited."""
    if limit is None:
        return await catalog.catalog_by_category(db, category_id)
    return await catalog.catalog_n_by_category(db, category_id, limit)


@router.get(
    "/enterprise/{enterprise_id}",
    response_model=CatalogEnterpriseView,
    response_model_exclude_unset=True,
)
async def list_by_enterprise(enterprise_id: int, db: AsyncSession = Depends(get_db)):
    """Enterprise storefront with its publishable products."""
    return await catalog.catalog_by_enterprise(db, enterprise_id)


@router.get("/{product_id}", response_model=CatalogItem, response_model_exclude_unset=True)
async def get_catalog_item(product_id: int, db: AsyncSession = Depends(get_db)):
    return await catalog.catalog_by_id(db, product_id)
