"""Idempotent add/remove for every many-to-many join table.

Adds are ``INSERT ... ON CONFLICT DO NOTHING`` so two writers racing on the
same pair both succeed and leave exactly one row, with no application lock.
Removes delete exactly one pair and raise NotFoundError when it was absent;
callers write their audit entry only after ``remove`` returns.
"""

from dataclasses import dataclass
from typing import Type

from sqlalchemy import delete, exists, insert, select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession

from marketplace.config.database import Base
from marketplace.core.exceptions import NotFoundError
from marketplace.models import (
    AccountRole,
    AccountSave,
    ProductBrand,
    ProductCarModel,
    ProductCategory,
    ProductImage,
)


@dataclass(frozen=True)
class Relation:
    """A join table and the names of its two key columns."""

    name: str
    model: Type[Base]
    owner_key: str
    target_key: str
    label: str

    def owner_column(self):
        return getattr(self.model, self.owner_key)

    def target_column(self):
        return getattr(self.model, self.target_key)


ACCOUNT_ROLE = Relation("account_role", AccountRole, "account_id", "role_id", "Role")
ACCOUNT_SAVE = Relation("account_save", AccountSave, "account_id", "product_id", "Saved product")
PRODUCT_CATEGORY = Relation("product_category", ProductCategory, "product_id", "category_id", "Category")
PRODUCT_CAR_MODEL = Relation("product_car_model", ProductCarModel, "product_id", "car_model_id", "Car model")
PRODUCT_BRAND = Relation("product_brand", ProductBrand, "product_id", "brand_id", "Brand")
PRODUCT_IMAGE = Relation("product_image", ProductImage, "product_id", "image_id", "Image")


def _insert_ignore(db: AsyncSession, relation: Relation):
    dialect = db.get_bind().dialect.name
    if dialect == "postgresql":
        return postgresql.insert(relation.model).on_conflict_do_nothing()
    if dialect == "sqlite":
        return sqlite.insert(relation.model).on_conflict_do_nothing()
    return None


async def contains(db: AsyncSession, relation: Relation, owner_id: int, target_id: int) -> bool:
    """Whether the pair is currently linked."""
    result = await db.execute(
        select(
            exists().where(
                relation.owner_column() == owner_id,
                relation.target_column() == target_id,
            )
        )
    )
    return bool(result.scalar())


async def add(db: AsyncSession, relation: Relation, owner_id: int, target_id: int) -> None:
    """Link the pair; a pair that is already linked is left as is."""
    values = {relation.owner_key: owner_id, relation.target_key: target_id}
    stmt = _insert_ignore(db, relation)
    if stmt is not None:
        await db.execute(stmt.values(**values))
        return

    # Other backends: check, then insert inside the caller's transaction
    if not await contains(db, relation, owner_id, target_id):
        await db.execute(insert(relation.model).values(**values))


async def remove(db: AsyncSession, relation: Relation, owner_id: int, target_id: int) -> None:
    """Unlink exactly this pair or raise NotFoundError."""
    result = await db.execute(
        delete(relation.model)
        .where(
            relation.owner_column() == owner_id,
            relation.target_column() == target_id,
        )
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        raise NotFoundError(
            detail=f"{relation.label} {target_id} is not linked to {owner_id}",
        )


async def clear(db: AsyncSession, relation: Relation, owner_id: int) -> int:
    """Drop every pair of one owner; used by the cascade guard."""
    result = await db.execute(
        delete(relation.model)
        .where(relation.owner_column() == owner_id)
        .execution_options(synchronize_session=False)
    )
    return result.rowcount
