"""Catalog publisher: read-only views over publishable products.

A product is publishable when it belongs to an existing enterprise, has
exactly one image, and at least one category, car model and brand. Product
listings are ordered by product id and share the ``CatalogItem`` shape.
"""

from typing import List, Optional

from sqlalchemy import and_, exists, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from marketplace.config.settings import settings
from marketplace.core.exceptions import NotFoundError, ValidationError
from marketplace.models import (
    EnterpriseAccount,
    Product,
    ProductBrand,
    ProductCarModel,
    ProductCategory,
    ProductImage,
)
from marketplace.schemas.snapshot import (
    CatalogEnterpriseView,
    CatalogItem,
    EnterpriseSnapshot,
    ProductSnapshot,
)
from marketplace.services import snapshots

PRODUCT_FIELDS = {"id", "name", "stock", "price", "enterprise_id"}


def publishable():
    """WHERE clause selecting publishable products."""
    image_count = (
        select(func.count())
        .select_from(ProductImage)
        .where(ProductImage.product_id == Product.id)
        .scalar_subquery()
    )
    return and_(
        Product.enterprise_id.is_not(None),
        exists().where(EnterpriseAccount.id == Product.enterprise_id),
        image_count == 1,
        exists().where(ProductCategory.product_id == Product.id),
        exists().where(ProductCarModel.product_id == Product.id),
        exists().where(ProductBrand.product_id == Product.id),
    )


async def _item(db: AsyncSession, product_id: int, with_enterprise: bool = True) -> CatalogItem:
    view = await snapshots.product(db, product_id)
    fields = {
        "product": ProductSnapshot(**view.model_dump(include=PRODUCT_FIELDS)),
        "categories": view.categories,
        "car_models": view.car_models,
        "brands": view.brands,
        "image": view.images[0],
    }
    if with_enterprise:
        fields["enterprise"] = view.enterprise
    return CatalogItem(**fields)


async def _items(db: AsyncSession, query, with_enterprise: bool = True) -> List[CatalogItem]:
    product_ids = (await db.execute(query)).scalars().all()
    return [await _item(db, product_id, with_enterprise) for product_id in product_ids]


def _base_query():
    return select(Product.id).where(publishable()).order_by(Product.id)


async def catalog_all(db: AsyncSession) -> List[CatalogItem]:
    return await _items(db, _base_query())


async def catalog_by_id(db: AsyncSession, product_id: int) -> CatalogItem:
    query = _base_query().where(Product.id == product_id)
    found = (await db.execute(query)).scalar_one_or_none()
    if found is None:
        raise NotFoundError(detail=f"Product {product_id} is not in the catalog")
    return await _item(db, found)


def _in_category(category_id: int):
    return exists().where(
        ProductCategory.product_id == Product.id,
        ProductCategory.category_id == category_id,
    )


async def catalog_by_category(db: AsyncSession, category_id: int) -> List[CatalogItem]:
    return await _items(db, _base_query().where(_in_category(category_id)))


async def catalog_n_by_category(
    db: AsyncSession,
    category_id: int,
    limit: Optional[int] = None,
) -> List[CatalogItem]:
    """At most ``limit`` publishable products of a category.

    No limit means ``catalog_max_limit``; larger values are capped to it.
    """
    if limit is not None and limit < 0:
        raise ValidationError(detail="limit must not be negative")
    cap = settings.catalog_max_limit
    limit = cap if limit is None else min(limit, cap)
    query = _base_query().where(_in_category(category_id)).limit(limit)
    return await _items(db, query)


async def catalog_by_enterprise(db: AsyncSession, enterprise_id: int) -> CatalogEnterpriseView:
    """Storefront of one enterprise: owner, enterprise, links and products.

    Products leave out the enterprise reference the other views embed.
    """
    enterprise = await snapshots.enterprise(db, enterprise_id, include={"external_links"})
    owner = None
    if enterprise.account_id is not None:
        owner = await snapshots.account(db, enterprise.account_id, include=())

    items = await _items(
        db,
        _base_query().where(Product.enterprise_id == enterprise_id),
        with_enterprise=False,
    )
    return CatalogEnterpriseView(
        account=owner,
        enterprise=EnterpriseSnapshot(
            **enterprise.model_dump(exclude_unset=True, exclude={"external_links"})
        ),
        external_links=enterprise.external_links,
        products=items,
    )
