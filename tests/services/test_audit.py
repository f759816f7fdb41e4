"""Audit log writer: append-only rows, delete-audit policy, history order."""

import pytest

from conftest import count_rows
from marketplace.config.settings import settings
from marketplace.models import AccountLog, AppendOnlyViolation, ProductLog
from marketplace.services import audit, products
from marketplace.services.audit import DeleteAuditPolicy, EntityKind


async def test_log_accepts_plain_dict_snapshot(test_db):
    entry = await audit.log(test_db, EntityKind.ACCOUNT, 7, "created", {"id": 7})
    await test_db.commit()

    assert entry.id is not None
    [stored] = await audit.history(test_db, EntityKind.ACCOUNT, 7)
    assert stored.snapshot == {"id": 7}


async def test_history_is_oldest_first_and_per_subject(test_db):
    for action in ("created", "updated", "deleted"):
        await audit.log(test_db, EntityKind.PRODUCT, 1, action, {"id": 1})
    await audit.log(test_db, EntityKind.PRODUCT, 2, "created", {"id": 2})

    history = await audit.history(test_db, EntityKind.PRODUCT, 1)

    assert [e.action for e in history] == ["created", "updated", "deleted"]


async def test_log_rows_cannot_be_updated(test_db):
    entry = await audit.log(test_db, EntityKind.ACCOUNT, 1, "created", {"id": 1})
    await test_db.commit()

    entry.action = "tampered"
    with pytest.raises(AppendOnlyViolation):
        await test_db.flush()
    await test_db.rollback()


async def test_log_rows_cannot_be_deleted(test_db):
    entry = await audit.log(test_db, EntityKind.ACCOUNT, 1, "created", {"id": 1})
    await test_db.commit()

    await test_db.delete(entry)
    with pytest.raises(AppendOnlyViolation):
        await test_db.flush()
    await test_db.rollback()

    assert await count_rows(test_db, AccountLog) == 1


async def test_if_no_history_writes_deleted_for_unlogged_subject(test_db):
    entry = await audit.log_deletion(
        test_db, EntityKind.PRODUCT, 5, {"id": 5}, policy=DeleteAuditPolicy.IF_NO_HISTORY,
    )

    assert entry is not None
    assert entry.action == "deleted"


async def test_if_no_history_ignores_rows_without_snapshot(test_db):
    await audit.log(test_db, EntityKind.PRODUCT, 5, "created", None)

    entry = await audit.log_deletion(
        test_db, EntityKind.PRODUCT, 5, {"id": 5}, policy=DeleteAuditPolicy.IF_NO_HISTORY,
    )

    assert entry is not None


async def test_if_no_history_policy_suppresses_deleted_row(test_db, product, monkeypatch):
    monkeypatch.setattr(settings, "delete_audit_policy", "if_no_history")

    await products.delete_product(test_db, product.id)

    actions = [e.action for e in await audit.history(test_db, EntityKind.PRODUCT, product.id)]
    assert actions == ["created"]


async def test_always_policy_writes_deleted_row(test_db, product):
    await products.delete_product(test_db, product.id)

    assert await count_rows(
        test_db, ProductLog, ProductLog.subject_id == product.id, ProductLog.action == "deleted",
    ) == 1
