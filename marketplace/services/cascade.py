"""Cascade guard: snapshot, log, then delete children before the parent.

These routines run inside the caller's unit of work and never commit. The
``deleted`` entry is written before anything is removed, so its snapshot is
the pre-deletion state including every relation. Children that are audited
entities themselves (products of an enterprise, saves) go through their own
path and get their own log rows.
"""

import logging

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from marketplace.models import (
    Account,
    AccountSave,
    EnterpriseAccount,
    ExternalLink,
    Product,
)
from marketplace.services import audit, relation_ledger, snapshots
from marketplace.services.audit import EntityKind

logger = logging.getLogger(__name__)


async def _delete_saves(db: AsyncSession, where) -> int:
    """Remove save rows matching ``where``, logging ``save_deleted`` for each."""
    pairs = (await db.execute(
        select(AccountSave.account_id, AccountSave.product_id)
        .where(where)
        .order_by(AccountSave.account_id, AccountSave.product_id)
    )).all()
    for account_id, product_id in pairs:
        snapshot = await snapshots.save(db, account_id, product_id)
        await relation_ledger.remove(db, relation_ledger.ACCOUNT_SAVE, account_id, product_id)
        await audit.log(
            db, EntityKind.SAVE, account_id, "save_deleted", snapshot,
            product_id=product_id,
        )
    return len(pairs)


async def delete_product_cascade(db: AsyncSession, product_id: int):
    snapshot = await snapshots.product(db, product_id)
    entry = await audit.log_deletion(db, EntityKind.PRODUCT, product_id, snapshot)

    await _delete_saves(db, AccountSave.product_id == product_id)
    for relation in (
        relation_ledger.PRODUCT_CATEGORY,
        relation_ledger.PRODUCT_CAR_MODEL,
        relation_ledger.PRODUCT_BRAND,
        relation_ledger.PRODUCT_IMAGE,
    ):
        await relation_ledger.clear(db, relation, product_id)

    await db.execute(
        delete(Product)
        .where(Product.id == product_id)
        .execution_options(synchronize_session=False)
    )
    logger.info(f"Product {product_id} deleted", extra={"entity_kind": "product", "entity_id": product_id})
    return snapshot, entry


async def delete_enterprise_cascade(db: AsyncSession, enterprise_id: int):
    snapshot = await snapshots.enterprise(db, enterprise_id)
    entry = await audit.log_deletion(db, EntityKind.ENTERPRISE, enterprise_id, snapshot)

    for item in snapshot.products:
        await delete_product_cascade(db, item.id)

    await db.execute(
        delete(ExternalLink)
        .where(ExternalLink.enterprise_id == enterprise_id)
        .execution_options(synchronize_session=False)
    )
    await db.execute(
        delete(EnterpriseAccount)
        .where(EnterpriseAccount.id == enterprise_id)
        .execution_options(synchronize_session=False)
    )
    logger.info(
        f"Enterprise {enterprise_id} deleted with {len(snapshot.products)} products",
        extra={"entity_kind": "enterprise", "entity_id": enterprise_id},
    )
    return snapshot, entry


async def delete_account_cascade(db: AsyncSession, account_id: int):
    snapshot = await snapshots.account(db, account_id)
    entry = await audit.log_deletion(db, EntityKind.ACCOUNT, account_id, snapshot)

    owned = await db.scalar(
        select(EnterpriseAccount.id).where(EnterpriseAccount.account_id == account_id)
    )
    if owned is not None:
        await delete_enterprise_cascade(db, owned)

    await _delete_saves(db, AccountSave.account_id == account_id)
    await relation_ledger.clear(db, relation_ledger.ACCOUNT_ROLE, account_id)

    await db.execute(
        delete(Account)
        .where(Account.id == account_id)
        .execution_options(synchronize_session=False)
    )
    logger.info(f"Account {account_id} deleted", extra={"entity_kind": "account", "entity_id": account_id})
    return snapshot, entry
