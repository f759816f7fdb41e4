"""Account mutations: uniqueness, merge updates, role links, cascading delete.

Invariants:
    - Unknown role ids on create are dropped, known ones attached
    - Every successful mutation writes exactly one account_log row
    - Adding the same role twice keeps one join row but logs twice
    - Removing a role that is not linked raises before any log write
"""

import pytest

from conftest import account_data, count_rows, enterprise_data, product_data
from marketplace.core.exceptions import ConflictError, NotFoundError
from marketplace.models import (
    Account,
    AccountLog,
    AccountRole,
    AccountSave,
    EnterpriseAccount,
    EnterpriseLog,
    Product,
    ProductLog,
    SaveLog,
)
from marketplace.schemas.account import AccountUpdate
from marketplace.services import accounts, enterprises, products, saves


async def test_create_account_drops_unknown_roles(test_db, lookups):
    snapshot = await accounts.create_account(
        test_db, account_data(role_ids=[lookups.roles[0], 999]),
    )

    assert [r.id for r in snapshot.roles] == [lookups.roles[0]]
    assert await count_rows(test_db, AccountRole) == 1


async def test_create_account_logs_created_with_roles_only(test_db, account):
    rows = (await test_db.execute(AccountLog.__table__.select())).all()

    assert len(rows) == 1
    assert rows[0].action == "created"
    assert rows[0].snapshot["username"] == "seller"
    assert rows[0].snapshot["roles"] == [{"id": 2, "name": "seller"}]
    assert "saved_products" not in rows[0].snapshot


async def test_create_account_rejects_duplicate_username(test_db, account):
    with pytest.raises(ConflictError):
        await accounts.create_account(test_db, account_data(email="other@example.com"))

    assert await count_rows(test_db, Account) == 1
    assert await count_rows(test_db, AccountLog) == 1


async def test_create_account_rejects_duplicate_email(test_db, account):
    with pytest.raises(ConflictError):
        await accounts.create_account(test_db, account_data(username="other"))


async def test_get_account_includes_roles_and_saves(test_db, account):
    snapshot = await accounts.get_account(test_db, account.id)

    assert snapshot.username == "seller"
    assert [r.name for r in snapshot.roles] == ["seller"]
    assert snapshot.saved_products == []


async def test_get_missing_account_raises_not_found(test_db):
    with pytest.raises(NotFoundError):
        await accounts.get_account(test_db, 42)


async def test_update_account_keeps_unset_fields(test_db, account):
    snapshot = await accounts.update_account(
        test_db, account.id, AccountUpdate(phone="+5699999999"),
    )

    assert snapshot.phone == "+5699999999"
    assert snapshot.username == "seller"
    assert snapshot.email == "seller@example.com"

    actions = [r.action for r in (await test_db.execute(
        AccountLog.__table__.select().order_by(AccountLog.id)
    )).all()]
    assert actions == ["created", "updated"]


async def test_update_account_rejects_taken_email(test_db, account):
    other = await accounts.create_account(
        test_db, account_data(username="buyer", email="buyer@example.com"),
    )

    with pytest.raises(ConflictError):
        await accounts.update_account(test_db, other.id, AccountUpdate(email="seller@example.com"))

    unchanged = await accounts.get_account(test_db, other.id)
    assert unchanged.email == "buyer@example.com"


async def test_update_account_allows_own_username(test_db, account):
    snapshot = await accounts.update_account(
        test_db, account.id, AccountUpdate(username="seller", phone="+1"),
    )
    assert snapshot.phone == "+1"


async def test_add_role_twice_keeps_one_link_and_logs_twice(test_db, account, lookups):
    await accounts.add_role_to_account(test_db, account.id, lookups.roles[0])
    snapshot = await accounts.add_role_to_account(test_db, account.id, lookups.roles[0])

    assert [r.id for r in snapshot.roles] == lookups.roles
    assert await count_rows(
        test_db, AccountRole,
        AccountRole.account_id == account.id, AccountRole.role_id == lookups.roles[0],
    ) == 1
    assert await count_rows(test_db, AccountLog, AccountLog.action == "role_added") == 2


async def test_add_unknown_role_raises_not_found(test_db, account):
    with pytest.raises(NotFoundError):
        await accounts.add_role_to_account(test_db, account.id, 999)

    assert await count_rows(test_db, AccountLog) == 1


async def test_remove_role_logs_role_removed(test_db, account, lookups):
    snapshot = await accounts.remove_role_from_account(test_db, account.id, lookups.roles[1])

    assert snapshot.roles == []
    assert await count_rows(test_db, AccountLog, AccountLog.action == "role_removed") == 1


async def test_remove_unlinked_role_raises_without_logging(test_db, account, lookups):
    with pytest.raises(NotFoundError):
        await accounts.remove_role_from_account(test_db, account.id, lookups.roles[0])

    assert await count_rows(test_db, AccountLog) == 1


async def test_delete_account_cascades_through_enterprise_and_saves(test_db, lookups):
    seller = await accounts.create_account(test_db, account_data())
    buyer = await accounts.create_account(
        test_db, account_data(username="buyer", email="buyer@example.com", role_ids=lookups.roles),
    )
    shop = await enterprises.create_enterprise(test_db, enterprise_data(account_id=seller.id))
    item = await products.create_product(test_db, product_data(shop.id, lookups))
    await saves.save_product(test_db, buyer.id, item.id)
    await saves.save_product(test_db, seller.id, item.id)

    snapshot = await accounts.delete_account(test_db, seller.id)

    assert snapshot.id == seller.id
    assert [p.id for p in snapshot.saved_products] == [item.id]
    assert await count_rows(test_db, Account) == 1
    assert await count_rows(test_db, EnterpriseAccount) == 0
    assert await count_rows(test_db, Product) == 0
    assert await count_rows(test_db, AccountSave) == 0
    assert await count_rows(test_db, EnterpriseLog, EnterpriseLog.action == "deleted") == 1
    assert await count_rows(test_db, ProductLog, ProductLog.action == "deleted") == 1
    assert await count_rows(test_db, SaveLog, SaveLog.action == "save_deleted") == 2

    deleted = (await test_db.execute(
        AccountLog.__table__.select().where(
            AccountLog.subject_id == seller.id, AccountLog.action == "deleted",
        )
    )).one()
    assert deleted.snapshot["saved_products"] == [{"id": item.id, "name": "Oil filter"}]


async def test_delete_account_removes_role_links(test_db, account):
    await accounts.delete_account(test_db, account.id)

    assert await count_rows(test_db, AccountRole) == 0
    assert await count_rows(test_db, AccountLog, AccountLog.action == "deleted") == 1


async def test_delete_missing_account_raises_not_found(test_db):
    with pytest.raises(NotFoundError):
        await accounts.delete_account(test_db, 5)
