"""Account mutations."""

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from marketplace.core.exceptions import ConflictError
from marketplace.models import Account, Role
from marketplace.schemas.account import AccountCreate, AccountUpdate
from marketplace.schemas.snapshot import AccountSnapshot
from marketplace.services import audit, cascade, relation_ledger, snapshots
from marketplace.services.audit import EntityKind
from marketplace.services.lookup import existing_ids, require, require_exists
from marketplace.services.unit_of_work import atomic

logger = logging.getLogger(__name__)


async def _check_unique(db: AsyncSession, username=None, email=None, exclude_id=None):
    if username is not None:
        query = select(Account.id).where(Account.username == username)
        if exclude_id is not None:
            query = query.where(Account.id != exclude_id)
        if (await db.execute(query)).scalar_one_or_none() is not None:
            raise ConflictError(detail="Username already exists")

    if email is not None:
        query = select(Account.id).where(Account.email == email)
        if exclude_id is not None:
            query = query.where(Account.id != exclude_id)
        if (await db.execute(query)).scalar_one_or_none() is not None:
            raise ConflictError(detail="Email already exists")


async def insert_account(db: AsyncSession, data: AccountCreate) -> AccountSnapshot:
    """Create an account and attach the known roles among ``data.role_ids``.

    Runs inside the caller's unit of work and never commits.
    """
    await _check_unique(db, username=data.username, email=data.email)

    account = Account(
        username=data.username,
        email=data.email,
        password_hash=data.password_hash,
        phone=data.phone,
    )
    db.add(account)
    await db.flush()

    role_ids = await existing_ids(db, Role, data.role_ids)
    dropped = set(data.role_ids) - role_ids
    if dropped:
        logger.warning(f"Account {account.id}: ignoring unknown roles {sorted(dropped)}")
    for role_id in sorted(role_ids):
        await relation_ledger.add(db, relation_ledger.ACCOUNT_ROLE, account.id, role_id)

    snapshot = await snapshots.account(db, account.id, include={"roles"})
    await audit.log(db, EntityKind.ACCOUNT, account.id, "created", snapshot)
    return snapshot


@atomic
async def create_account(db: AsyncSession, data: AccountCreate) -> AccountSnapshot:
    return await insert_account(db, data)


async def get_account(db: AsyncSession, account_id: int) -> AccountSnapshot:
    return await snapshots.account(db, account_id)


@atomic
async def update_account(db: AsyncSession, account_id: int, data: AccountUpdate) -> AccountSnapshot:
    """Merge the set fields of ``data`` into the account."""
    account = await require(db, Account, account_id, "Account")
    changes = data.model_dump(exclude_unset=True)

    # Check for duplicates
    await _check_unique(
        db,
        username=changes.get("username"),
        email=changes.get("email"),
        exclude_id=account_id,
    )

    for field, value in changes.items():
        if value is not None:
            setattr(account, field, value)
    await db.flush()

    snapshot = await snapshots.account(db, account_id, include={"roles"})
    await audit.log(db, EntityKind.ACCOUNT, account_id, "updated", snapshot)
    return snapshot


@atomic
async def delete_account(db: AsyncSession, account_id: int) -> AccountSnapshot:
    """Delete an account with its owned enterprise, saves and role links."""
    snapshot, _ = await cascade.delete_account_cascade(db, account_id)
    return snapshot


@atomic
async def add_role_to_account(db: AsyncSession, account_id: int, role_id: int) -> AccountSnapshot:
    await require_exists(db, Account, account_id, "Account")
    await require_exists(db, Role, role_id, "Role")

    await relation_ledger.add(db, relation_ledger.ACCOUNT_ROLE, account_id, role_id)

    snapshot = await snapshots.account(db, account_id, include={"roles"})
    await audit.log(db, EntityKind.ACCOUNT, account_id, "role_added", snapshot)
    return snapshot


@atomic
async def remove_role_from_account(db: AsyncSession, account_id: int, role_id: int) -> AccountSnapshot:
    await require_exists(db, Account, account_id, "Account")

    await relation_ledger.remove(db, relation_ledger.ACCOUNT_ROLE, account_id, role_id)

    snapshot = await snapshots.account(db, account_id, include={"roles"})
    await audit.log(db, EntityKind.ACCOUNT, account_id, "role_removed", snapshot)
    return snapshot
