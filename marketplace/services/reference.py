"""Lookup rows referenced by accounts and products.

Reference data is not audited; these operations only guard uniqueness and
keep join tables free of dangling ids.
"""

import logging
from typing import List, Type

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from marketplace.core.exceptions import ConflictError, NotFoundError
from marketplace.models import Brand, CarModel, Category, Role
from marketplace.schemas.reference import ReferenceCreate
from marketplace.services import relation_ledger
from marketplace.services.relation_ledger import Relation
from marketplace.services.unit_of_work import atomic

logger = logging.getLogger(__name__)


async def _create(db: AsyncSession, model: Type, data: ReferenceCreate, unique: bool):
    if unique:
        existing = await db.execute(select(model.id).where(model.name == data.name))
        if existing.scalar_one_or_none() is not None:
            raise ConflictError(detail=f"{model.__name__} '{data.name}' already exists")

    row = model(name=data.name)
    db.add(row)
    await db.flush()
    logger.info(f"{model.__name__} {row.id} created")
    return row


async def _list(db: AsyncSession, model: Type) -> List:
    result = await db.execute(select(model).order_by(model.id))
    return list(result.scalars().all())


async def _delete(db: AsyncSession, model: Type, relation: Relation, row_id: int) -> None:
    """Drop a lookup row together with every product link to it."""
    await db.execute(
        delete(relation.model)
        .where(relation.target_column() == row_id)
        .execution_options(synchronize_session=False)
    )
    result = await db.execute(
        delete(model)
        .where(model.id == row_id)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        raise NotFoundError(detail=f"{relation.label} {row_id} not found")
    logger.info(f"{model.__name__} {row_id} deleted")


# ============ Roles ============
@atomic
async def create_role(db: AsyncSession, data: ReferenceCreate) -> Role:
    return await _create(db, Role, data, unique=True)


async def list_roles(db: AsyncSession) -> List[Role]:
    return await _list(db, Role)


# ============ Categories ============
@atomic
async def create_category(db: AsyncSession, data: ReferenceCreate) -> Category:
    return await _create(db, Category, data, unique=True)


async def list_categories(db: AsyncSession) -> List[Category]:
    return await _list(db, Category)


# ============ Car models ============
@atomic
async def create_car_model(db: AsyncSession, data: ReferenceCreate) -> CarModel:
    return await _create(db, CarModel, data, unique=False)


async def list_car_models(db: AsyncSession) -> List[CarModel]:
    return await _list(db, CarModel)


@atomic
async def delete_car_model(db: AsyncSession, car_model_id: int) -> None:
    await _delete(db, CarModel, relation_ledger.PRODUCT_CAR_MODEL, car_model_id)


# ============ Brands ============
@atomic
async def create_brand(db: AsyncSession, data: ReferenceCreate) -> Brand:
    return await _create(db, Brand, data, unique=False)


async def list_brands(db: AsyncSession) -> List[Brand]:
    return await _list(db, Brand)


@atomic
async def delete_brand(db: AsyncSession, brand_id: int) -> None:
    await _delete(db, Brand, relation_ledger.PRODUCT_BRAND, brand_id)
