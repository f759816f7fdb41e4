"""Audit log writer: the single path that appends history rows.

Every mutation operation calls ``log`` as its last step, inside the same unit
of work as the mutation, so a failed log write rolls the mutation back and a
failed mutation leaves no log row behind.
"""

import logging
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from sqlalchemy import exists, select
from sqlalchemy.ext.asyncio import AsyncSession

from marketplace.config.settings import settings
from marketplace.models import AccountLog, EnterpriseLog, ProductLog, SaveLog
from marketplace.schemas.snapshot import SnapshotModel

logger = logging.getLogger(__name__)


class EntityKind(str, Enum):
    """Audited entity kinds, one log table each."""

    ACCOUNT = "account"
    ENTERPRISE = "enterprise"
    PRODUCT = "product"
    SAVE = "save"


class DeleteAuditPolicy(str, Enum):
    """When a ``deleted`` row is written for a removed entity."""

    ALWAYS = "always"
    IF_NO_HISTORY = "if_no_history"


LOG_MODELS = {
    EntityKind.ACCOUNT: AccountLog,
    EntityKind.ENTERPRISE: EnterpriseLog,
    EntityKind.PRODUCT: ProductLog,
    EntityKind.SAVE: SaveLog,
}

Snapshot = Union[SnapshotModel, Dict[str, Any], None]


def _payload(snapshot: Snapshot) -> Optional[Dict[str, Any]]:
    if isinstance(snapshot, SnapshotModel):
        return snapshot.to_payload()
    return snapshot


async def log(
    db: AsyncSession,
    kind: EntityKind,
    subject_id: int,
    action: str,
    snapshot: Snapshot,
    **extra: Any,
):
    """Append one row to the kind's log table."""
    kind = EntityKind(kind)
    model = LOG_MODELS[kind]
    entry = model(
        subject_id=subject_id,
        action=action,
        snapshot=_payload(snapshot),
        **extra,
    )
    db.add(entry)
    await db.flush()
    logger.info(
        f"{kind.value} {subject_id} {action}",
        extra={"entity_kind": kind.value, "entity_id": subject_id, "action": action},
    )
    return entry


async def has_history(db: AsyncSession, kind: EntityKind, subject_id: int) -> bool:
    """Whether any row with a non-null snapshot exists for the subject."""
    model = LOG_MODELS[EntityKind(kind)]
    result = await db.execute(
        select(
            exists().where(
                model.subject_id == subject_id,
                model.snapshot.is_not(None),
            )
        )
    )
    return bool(result.scalar())


async def log_deletion(
    db: AsyncSession,
    kind: EntityKind,
    subject_id: int,
    snapshot: Snapshot,
    policy: Optional[DeleteAuditPolicy] = None,
):
    """Write the ``deleted`` row according to the delete-audit policy.

    Returns the entry, or None when the policy suppressed it.
    """
    kind = EntityKind(kind)
    policy = DeleteAuditPolicy(policy or settings.delete_audit_policy)
    if policy is DeleteAuditPolicy.IF_NO_HISTORY and await has_history(db, kind, subject_id):
        logger.debug(f"{kind.value} {subject_id} has history, deleted entry skipped")
        return None
    return await log(db, kind, subject_id, "deleted", snapshot)


async def history(db: AsyncSession, kind: EntityKind, subject_id: int) -> List:
    """All rows for one subject, oldest first."""
    model = LOG_MODELS[EntityKind(kind)]
    result = await db.execute(
        select(model).where(model.subject_id == subject_id).order_by(model.id)
    )
    return list(result.scalars().all())
