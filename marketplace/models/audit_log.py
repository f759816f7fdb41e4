"""Append-only audit log tables, one per audited entity kind.

Rows are written by ``marketplace.services.audit`` and never updated or
deleted. Subject ids are plain integers, not foreign keys: the history of a
deleted entity must outlive it.
"""

from datetime import datetime, timezone
from typing import Any, Dict, Optional

from sqlalchemy import JSON, DateTime, Integer, String, event, func
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from marketplace.config.database import Base


SnapshotType = JSON(none_as_null=True).with_variant(JSONB(none_as_null=True), "postgresql")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AuditLogMixin:
    """Columns shared by every audit log table."""

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    subject_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    action: Mapped[str] = mapped_column(String(50), nullable=False)
    snapshot: Mapped[Optional[Dict[str, Any]]] = mapped_column(SnapshotType, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=_utcnow,
        server_default=func.now(),
        nullable=False,
    )


class AccountLog(Base, AuditLogMixin):
    __tablename__ = "account_log"


class EnterpriseLog(Base, AuditLogMixin):
    __tablename__ = "enterprise_log"


class ProductLog(Base, AuditLogMixin):
    __tablename__ = "product_log"


class SaveLog(Base, AuditLogMixin):
    """Save/unsave history; subject_id is the account."""

    __tablename__ = "account_save_log"

    product_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)


class AppendOnlyViolation(RuntimeError):
    """Raised when code tries to rewrite audit history through the ORM."""


def _forbid_update(mapper, connection, target):
    raise AppendOnlyViolation(f"{target.__tablename__} rows are append-only; updates are not allowed")


def _forbid_delete(mapper, connection, target):
    raise AppendOnlyViolation(f"{target.__tablename__} rows are append-only; deletions are not allowed")


for _log_model in (AccountLog, EnterpriseLog, ProductLog, SaveLog):
    event.listen(_log_model, "before_update", _forbid_update)
    event.listen(_log_model, "before_delete", _forbid_delete)
