"""Product mutations and product relation maintenance.

Relation operations return, and log, the product fields plus the one
collection they touched.
"""

import logging
from typing import Iterable

from sqlalchemy.ext.asyncio import AsyncSession

from marketplace.core.exceptions import NotFoundError, ValidationError
from marketplace.models import Brand, CarModel, Category, EnterpriseAccount, Image, Product
from marketplace.schemas.product import ImageRef, ProductCreate, ProductUpdate
from marketplace.schemas.snapshot import ProductSnapshot
from marketplace.services import audit, cascade, relation_ledger, snapshots
from marketplace.services.audit import EntityKind
from marketplace.services.lookup import existing_ids, require, require_exists
from marketplace.services.relation_ledger import Relation
from marketplace.services.unit_of_work import atomic

logger = logging.getLogger(__name__)

# relation -> (lookup model, snapshot collection)
PRODUCT_RELATIONS = {
    relation_ledger.PRODUCT_CATEGORY: (Category, "categories"),
    relation_ledger.PRODUCT_CAR_MODEL: (CarModel, "car_models"),
    relation_ledger.PRODUCT_BRAND: (Brand, "brands"),
    relation_ledger.PRODUCT_IMAGE: (Image, "images"),
}


async def _attach_all(db: AsyncSession, relation: Relation, product_id: int, ids: Iterable[int]) -> None:
    """Link every id or raise NotFoundError naming the first unknown one."""
    model, _ = PRODUCT_RELATIONS[relation]
    ids = list(dict.fromkeys(ids))
    known = await existing_ids(db, model, ids)
    missing = [i for i in ids if i not in known]
    if missing:
        raise NotFoundError(
            detail=f"{relation.label} {missing[0]} not found",
            payload={"missing_ids": missing},
        )
    for target_id in ids:
        await relation_ledger.add(db, relation, product_id, target_id)


async def _resolve_image(db: AsyncSession, ref: ImageRef) -> int:
    """Id of an existing image, or of a new row created from ``ref.url``."""
    if ref.id is not None:
        await require_exists(db, Image, ref.id, "Image")
        return ref.id
    if ref.url:
        image = Image(url=ref.url)
        db.add(image)
        await db.flush()
        logger.debug(f"Image {image.id} created from url")
        return image.id
    raise ValidationError(detail="Image needs either an id or a url")


@atomic
async def create_product(db: AsyncSession, data: ProductCreate) -> ProductSnapshot:
    """Create a product with all its relations in one unit.

    Any unknown reference aborts the whole operation, product row included.
    """
    await require_exists(db, EnterpriseAccount, data.enterprise_id, "Enterprise")

    product = Product(
        name=data.name,
        stock=data.stock,
        price=data.price,
        enterprise_id=data.enterprise_id,
    )
    db.add(product)
    await db.flush()

    await _attach_all(db, relation_ledger.PRODUCT_CATEGORY, product.id, data.category_ids)
    await _attach_all(db, relation_ledger.PRODUCT_CAR_MODEL, product.id, data.car_model_ids)
    await _attach_all(db, relation_ledger.PRODUCT_BRAND, product.id, data.brand_ids)
    for ref in data.images:
        image_id = await _resolve_image(db, ref)
        await relation_ledger.add(db, relation_ledger.PRODUCT_IMAGE, product.id, image_id)

    snapshot = await snapshots.product(db, product.id)
    await audit.log(db, EntityKind.PRODUCT, product.id, "created", snapshot)
    return snapshot


async def get_product(db: AsyncSession, product_id: int) -> ProductSnapshot:
    return await snapshots.product(db, product_id)


@atomic
async def update_product(db: AsyncSession, product_id: int, data: ProductUpdate) -> ProductSnapshot:
    product = await require(db, Product, product_id, "Product")
    changes = data.model_dump(exclude_unset=True)

    if changes.get("enterprise_id") is not None:
        await require_exists(db, EnterpriseAccount, changes["enterprise_id"], "Enterprise")

    for field, value in changes.items():
        if value is not None:
            setattr(product, field, value)
    await db.flush()

    snapshot = await snapshots.product(db, product_id, include={"enterprise"})
    await audit.log(db, EntityKind.PRODUCT, product_id, "updated", snapshot)
    return snapshot


@atomic
async def delete_product(db: AsyncSession, product_id: int) -> ProductSnapshot:
    """Delete a product, its saves and its relation rows."""
    snapshot, _ = await cascade.delete_product_cascade(db, product_id)
    return snapshot


# ============ Relations ============
async def _link(db: AsyncSession, relation: Relation, product_id: int, target_id: int, action: str) -> ProductSnapshot:
    model, collection = PRODUCT_RELATIONS[relation]
    await require_exists(db, Product, product_id, "Product")
    await require_exists(db, model, target_id, relation.label)

    await relation_ledger.add(db, relation, product_id, target_id)

    snapshot = await snapshots.product(db, product_id, include={collection})
    await audit.log(db, EntityKind.PRODUCT, product_id, action, snapshot)
    return snapshot


async def _unlink(db: AsyncSession, relation: Relation, product_id: int, target_id: int, action: str) -> ProductSnapshot:
    _, collection = PRODUCT_RELATIONS[relation]
    await require_exists(db, Product, product_id, "Product")

    await relation_ledger.remove(db, relation, product_id, target_id)

    snapshot = await snapshots.product(db, product_id, include={collection})
    await audit.log(db, EntityKind.PRODUCT, product_id, action, snapshot)
    return snapshot


@atomic
async def add_product_image(db: AsyncSession, product_id: int, ref: ImageRef) -> ProductSnapshot:
    """Attach an existing image by id, or a new one by url."""
    await require_exists(db, Product, product_id, "Product")
    image_id = await _resolve_image(db, ref)
    return await _link(db, relation_ledger.PRODUCT_IMAGE, product_id, image_id, "image_added")


@atomic
async def remove_product_image(db: AsyncSession, product_id: int, image_id: int) -> ProductSnapshot:
    return await _unlink(db, relation_ledger.PRODUCT_IMAGE, product_id, image_id, "image_removed")


@atomic
async def add_product_category(db: AsyncSession, product_id: int, category_id: int) -> ProductSnapshot:
    return await _link(db, relation_ledger.PRODUCT_CATEGORY, product_id, category_id, "category_added")


@atomic
async def remove_product_category(db: AsyncSession, product_id: int, category_id: int) -> ProductSnapshot:
    return await _unlink(db, relation_ledger.PRODUCT_CATEGORY, product_id, category_id, "category_removed")


@atomic
async def add_product_car_model(db: AsyncSession, product_id: int, car_model_id: int) -> ProductSnapshot:
    return await _link(db, relation_ledger.PRODUCT_CAR_MODEL, product_id, car_model_id, "car_model_added")


@atomic
async def remove_product_car_model(db: AsyncSession, product_id: int, car_model_id: int) -> ProductSnapshot:
    return await _unlink(db, relation_ledger.PRODUCT_CAR_MODEL, product_id, car_model_id, "car_model_removed")


@atomic
async def add_product_brand(db: AsyncSession, product_id: int, brand_id: int) -> ProductSnapshot:
    return await _link(db, relation_ledger.PRODUCT_BRAND, product_id, brand_id, "brand_added")


@atomic
async def remove_product_brand(db: AsyncSession, product_id: int, brand_id: int) -> ProductSnapshot:
    return await _unlink(db, relation_ledger.PRODUCT_BRAND, product_id, brand_id, "brand_removed")
