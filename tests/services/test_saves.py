"""Saved products: idempotent save, strict unsave, save log rows."""

import pytest

from conftest import count_rows
from marketplace.core.exceptions import NotFoundError
from marketplace.models import AccountSave, SaveLog
from marketplace.services import audit, saves
from marketplace.services.audit import EntityKind


async def test_save_twice_keeps_one_row_and_logs_twice(test_db, account, product):
    await saves.save_product(test_db, account.id, product.id)
    snapshot = await saves.save_product(test_db, account.id, product.id)

    assert snapshot.account.id == account.id
    assert snapshot.product.id == product.id
    assert await count_rows(test_db, AccountSave) == 1

    entries = await audit.history(test_db, EntityKind.SAVE, account.id)
    assert [e.action for e in entries] == ["save_created", "save_created"]
    assert all(e.product_id == product.id for e in entries)
    assert entries[0].snapshot["product"]["name"] == "Oil filter"
    assert "categories" not in entries[0].snapshot["product"]


async def test_save_missing_product_raises(test_db, account):
    with pytest.raises(NotFoundError):
        await saves.save_product(test_db, account.id, 31)

    assert await count_rows(test_db, SaveLog) == 0


async def test_unsave_logs_save_deleted(test_db, account, product):
    await saves.save_product(test_db, account.id, product.id)

    await saves.unsave_product(test_db, account.id, product.id)

    assert await count_rows(test_db, AccountSave) == 0
    assert await count_rows(test_db, SaveLog, SaveLog.action == "save_deleted") == 1


async def test_unsave_missing_pair_raises_without_logging(test_db, account, product):
    with pytest.raises(NotFoundError):
        await saves.unsave_product(test_db, account.id, product.id)

    assert await count_rows(test_db, SaveLog) == 0


async def test_get_saved_products(test_db, account, product):
    assert await saves.get_saved_products(test_db, account.id) == []

    await saves.save_product(test_db, account.id, product.id)

    [saved] = await saves.get_saved_products(test_db, account.id)
    assert saved.id == product.id
    assert saved.categories[0].name == "Engine"
