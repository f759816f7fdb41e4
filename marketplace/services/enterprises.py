"""Enterprise account and external link mutations."""

from typing import Optional

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from marketplace.core.exceptions import ConflictError, NotFoundError
from marketplace.models import Account, EnterpriseAccount, ExternalLink
from marketplace.schemas.enterprise import (
    EnterpriseCreate,
    EnterpriseUpdate,
    ExternalLinkCreate,
    ExternalLinkUpdate,
    RegisterEnterprise,
)
from marketplace.schemas.snapshot import EnterpriseSnapshot, RegistrationSnapshot
from marketplace.services import accounts, audit, cascade, snapshots
from marketplace.services.audit import EntityKind
from marketplace.services.lookup import require, require_exists
from marketplace.services.unit_of_work import atomic

LINK_VIEW = {"external_links"}


async def _check_owner(db: AsyncSession, account_id: Optional[int], exclude_id: Optional[int] = None) -> None:
    """The owner must exist and must not own another enterprise."""
    if account_id is None:
        return
    await require_exists(db, Account, account_id, "Account")

    query = select(EnterpriseAccount.id).where(EnterpriseAccount.account_id == account_id)
    if exclude_id is not None:
        query = query.where(EnterpriseAccount.id != exclude_id)
    if (await db.execute(query)).scalar_one_or_none() is not None:
        raise ConflictError(detail=f"Account {account_id} already owns an enterprise")


async def _check_tax_id(db: AsyncSession, tax_id: Optional[str], exclude_id: Optional[int] = None) -> None:
    if tax_id is None:
        return
    query = select(EnterpriseAccount.id).where(EnterpriseAccount.tax_id == tax_id)
    if exclude_id is not None:
        query = query.where(EnterpriseAccount.id != exclude_id)
    if (await db.execute(query)).scalar_one_or_none() is not None:
        raise ConflictError(detail="Tax id already registered")


async def insert_enterprise(db: AsyncSession, data: EnterpriseCreate) -> EnterpriseSnapshot:
    """Create an enterprise together with its initial external links.

    Runs inside the caller's unit of work and never commits.
    """
    await _check_owner(db, data.account_id)
    await _check_tax_id(db, data.tax_id)

    enterprise = EnterpriseAccount(**data.model_dump(exclude={"links"}))
    db.add(enterprise)
    await db.flush()

    for link in data.links:
        db.add(ExternalLink(name=link.name, url=link.url, enterprise_id=enterprise.id))

    snapshot = await snapshots.enterprise(db, enterprise.id, include=LINK_VIEW)
    await audit.log(db, EntityKind.ENTERPRISE, enterprise.id, "created", snapshot)
    return snapshot


@atomic
async def create_enterprise(db: AsyncSession, data: EnterpriseCreate) -> EnterpriseSnapshot:
    return await insert_enterprise(db, data)


@atomic
async def register_enterprise_account(db: AsyncSession, data: RegisterEnterprise) -> RegistrationSnapshot:
    """Create an account and the enterprise it owns as one unit.

    Both get their own ``created`` entry; a failure on either side, such as a
    taken tax id, leaves neither behind.
    """
    user = await accounts.insert_account(db, data.account)
    enterprise = await insert_enterprise(
        db, EnterpriseCreate(**data.enterprise.model_dump(), account_id=user.id),
    )
    return RegistrationSnapshot(user=user, enterprise=enterprise)


async def get_enterprise(db: AsyncSession, enterprise_id: int) -> EnterpriseSnapshot:
    return await snapshots.enterprise(db, enterprise_id)


@atomic
async def update_enterprise(
    db: AsyncSession,
    enterprise_id: int,
    data: EnterpriseUpdate,
) -> EnterpriseSnapshot:
    enterprise = await require(db, EnterpriseAccount, enterprise_id, "Enterprise")
    changes = data.model_dump(exclude_unset=True)

    if changes.get("account_id") is not None:
        await _check_owner(db, changes["account_id"], exclude_id=enterprise_id)
    await _check_tax_id(db, changes.get("tax_id"), exclude_id=enterprise_id)

    for field, value in changes.items():
        # description and account_id may be cleared explicitly
        if value is not None or field in ("description", "account_id"):
            setattr(enterprise, field, value)
    await db.flush()

    snapshot = await snapshots.enterprise(db, enterprise_id, include=LINK_VIEW)
    await audit.log(db, EntityKind.ENTERPRISE, enterprise_id, "updated", snapshot)
    return snapshot


@atomic
async def delete_enterprise(db: AsyncSession, enterprise_id: int) -> EnterpriseSnapshot:
    """Delete an enterprise, its products and its external links."""
    snapshot, _ = await cascade.delete_enterprise_cascade(db, enterprise_id)
    return snapshot


# ============ External links ============
@atomic
async def add_external_link(
    db: AsyncSession,
    enterprise_id: int,
    data: ExternalLinkCreate,
) -> EnterpriseSnapshot:
    await require_exists(db, EnterpriseAccount, enterprise_id, "Enterprise")

    db.add(ExternalLink(name=data.name, url=data.url, enterprise_id=enterprise_id))

    snapshot = await snapshots.enterprise(db, enterprise_id, include=LINK_VIEW)
    await audit.log(db, EntityKind.ENTERPRISE, enterprise_id, "external_link_added", snapshot)
    return snapshot


async def _owning_enterprise(db: AsyncSession, link_id: int) -> int:
    enterprise_id = await db.scalar(
        select(ExternalLink.enterprise_id).where(ExternalLink.id == link_id)
    )
    if enterprise_id is None:
        raise NotFoundError(detail=f"External link {link_id} not found")
    return enterprise_id


@atomic
async def remove_external_link(db: AsyncSession, link_id: int) -> EnterpriseSnapshot:
    enterprise_id = await _owning_enterprise(db, link_id)

    await db.execute(
        delete(ExternalLink)
        .where(ExternalLink.id == link_id)
        .execution_options(synchronize_session=False)
    )

    snapshot = await snapshots.enterprise(db, enterprise_id, include=LINK_VIEW)
    await audit.log(db, EntityKind.ENTERPRISE, enterprise_id, "external_link_removed", snapshot)
    return snapshot


@atomic
async def update_external_link(
    db: AsyncSession,
    link_id: int,
    data: ExternalLinkUpdate,
) -> EnterpriseSnapshot:
    link = await require(db, ExternalLink, link_id, "External link")
    enterprise_id = link.enterprise_id

    for field, value in data.model_dump(exclude_unset=True).items():
        if value is not None:
            setattr(link, field, value)
    await db.flush()

    snapshot = await snapshots.enterprise(db, enterprise_id, include=LINK_VIEW)
    await audit.log(db, EntityKind.ENTERPRISE, enterprise_id, "external_link_updated", snapshot)
    return snapshot
