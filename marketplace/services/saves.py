"""Saved products ("favourites") of an account."""

from typing import List

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from marketplace.models import Account, AccountSave, Product
from marketplace.schemas.snapshot import ProductSnapshot, SaveSnapshot
from marketplace.services import audit, relation_ledger, snapshots
from marketplace.services.audit import EntityKind
from marketplace.services.lookup import require_exists
from marketplace.services.unit_of_work import atomic


@atomic
async def save_product(db: AsyncSession, account_id: int, product_id: int) -> SaveSnapshot:
    """Save a product for an account; saving it again is a no-op write."""
    await require_exists(db, Account, account_id, "Account")
    await require_exists(db, Product, product_id, "Product")

    await relation_ledger.add(db, relation_ledger.ACCOUNT_SAVE, account_id, product_id)

    snapshot = await snapshots.save(db, account_id, product_id)
    await audit.log(db, EntityKind.SAVE, account_id, "save_created", snapshot, product_id=product_id)
    return snapshot


@atomic
async def unsave_product(db: AsyncSession, account_id: int, product_id: int) -> SaveSnapshot:
    await require_exists(db, Account, account_id, "Account")

    # Snapshot first: the product view is taken while the save still exists
    snapshot = await snapshots.save(db, account_id, product_id)
    await relation_ledger.remove(db, relation_ledger.ACCOUNT_SAVE, account_id, product_id)

    await audit.log(db, EntityKind.SAVE, account_id, "save_deleted", snapshot, product_id=product_id)
    return snapshot


async def get_saved_products(db: AsyncSession, account_id: int) -> List[ProductSnapshot]:
    await require_exists(db, Account, account_id, "Account")
    product_ids = (await db.execute(
        select(AccountSave.product_id)
        .where(AccountSave.account_id == account_id)
        .order_by(AccountSave.product_id)
    )).scalars().all()
    return [await snapshots.product(db, product_id) for product_id in product_ids]
