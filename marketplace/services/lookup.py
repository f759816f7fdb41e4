"""Existence checks shared by the mutation services."""

from typing import Iterable, Type, TypeVar

from sqlalchemy import exists, select
from sqlalchemy.ext.asyncio import AsyncSession

from marketplace.core.exceptions import NotFoundError

M = TypeVar("M")


async def require(db: AsyncSession, model: Type[M], entity_id: int, label: str) -> M:
    """Load a row fresh from the store or raise NotFoundError."""
    entity = await db.get(model, entity_id, populate_existing=True)
    if entity is None:
        raise NotFoundError(detail=f"{label} {entity_id} not found")
    return entity


async def row_exists(db: AsyncSession, model, entity_id: int) -> bool:
    result = await db.execute(select(exists().where(model.id == entity_id)))
    return bool(result.scalar())


async def require_exists(db: AsyncSession, model, entity_id: int, label: str) -> None:
    if not await row_exists(db, model, entity_id):
        raise NotFoundError(detail=f"{label} {entity_id} not found")


async def existing_ids(db: AsyncSession, model, ids: Iterable[int]) -> set:
    """Subset of ``ids`` that reference existing rows."""
    ids = set(ids)
    if not ids:
        return set()
    result = await db.execute(select(model.id).where(model.id.in_(ids)))
    return set(result.scalars().all())
