"""Product mutations: strict references, images, relation operations.

Invariants:
    - An unknown category/car-model/brand id rolls back the product row too
    - Relation operations log the product plus only the touched collection
    - Deleting a product removes its saves, each with its own save_deleted row
"""

from decimal import Decimal

import pytest

from conftest import account_data, count_rows, product_data
from marketplace.core.exceptions import NotFoundError, ValidationError
from marketplace.models import (
    AccountSave,
    Image,
    Product,
    ProductCategory,
    ProductImage,
    ProductLog,
    SaveLog,
)
from marketplace.schemas.product import ImageRef, ProductUpdate
from marketplace.services import accounts, audit, products, saves
from marketplace.services.audit import EntityKind


async def test_create_product_snapshot(test_db, product, enterprise, lookups):
    assert product.name == "Oil filter"
    assert product.price == Decimal("12.50")
    assert [c.id for c in product.categories] == [lookups.categories[0]]
    assert [m.id for m in product.car_models] == [lookups.car_models[0]]
    assert [b.id for b in product.brands] == [lookups.brands[0]]
    assert [i.url for i in product.images] == ["https://img.example/1.png"]
    assert product.enterprise.id == enterprise.id
    assert product.enterprise.name == "seller"


async def test_create_product_logs_every_relation(test_db, product):
    [entry] = await audit.history(test_db, EntityKind.PRODUCT, product.id)

    assert entry.action == "created"
    for key in ("categories", "car_models", "brands", "images", "enterprise"):
        assert key in entry.snapshot
    assert entry.snapshot["images"] == [{"id": 1, "url": "https://img.example/1.png"}]


async def test_logged_price_keeps_exact_decimal(test_db, product):
    await products.update_product(test_db, product.id, ProductUpdate(price=Decimal("1234567.89")))

    entries = await audit.history(test_db, EntityKind.PRODUCT, product.id)

    assert [e.snapshot["price"] for e in entries] == ["12.50", "1234567.89"]


@pytest.mark.parametrize("field", ["category_ids", "car_model_ids", "brand_ids"])
async def test_unknown_reference_rolls_back_product(test_db, enterprise, lookups, field):
    data = product_data(enterprise.id, lookups, **{field: [lookups.categories[0], 404]})

    with pytest.raises(NotFoundError) as exc:
        await products.create_product(test_db, data)

    assert exc.value.payload == {"missing_ids": [404]}
    assert await count_rows(test_db, Product) == 0
    assert await count_rows(test_db, ProductCategory) == 0
    assert await count_rows(test_db, ProductLog) == 0


async def test_create_product_for_missing_enterprise(test_db, lookups):
    with pytest.raises(NotFoundError):
        await products.create_product(test_db, product_data(12, lookups))


async def test_image_without_id_or_url_is_rejected(test_db, enterprise, lookups):
    data = product_data(enterprise.id, lookups, images=[ImageRef()])

    with pytest.raises(ValidationError):
        await products.create_product(test_db, data)

    assert await count_rows(test_db, Product) == 0


async def test_image_by_id_reuses_row(test_db, product, enterprise, lookups):
    image_id = product.images[0].id

    other = await products.create_product(
        test_db, product_data(enterprise.id, lookups, name="Twin", images=[ImageRef(id=image_id)]),
    )

    assert [i.id for i in other.images] == [image_id]
    assert await count_rows(test_db, Image) == 1


async def test_create_product_with_two_categories(test_db, enterprise, lookups):
    snapshot = await products.create_product(
        test_db, product_data(enterprise.id, lookups, category_ids=list(reversed(lookups.categories))),
    )

    assert [c.id for c in snapshot.categories] == sorted(lookups.categories)


async def test_update_product_merges(test_db, product):
    snapshot = await products.update_product(
        test_db, product.id, ProductUpdate(stock=3),
    )

    assert snapshot.stock == 3
    assert snapshot.name == "Oil filter"
    assert snapshot.price == Decimal("12.50")

    snapshot = await products.update_product(
        test_db, product.id, ProductUpdate(price=Decimal("9.99")),
    )
    assert snapshot.price == Decimal("9.99")
    assert snapshot.stock == 3


async def test_update_product_to_missing_enterprise(test_db, product):
    with pytest.raises(NotFoundError):
        await products.update_product(test_db, product.id, ProductUpdate(enterprise_id=50, stock=1))

    current = await products.get_product(test_db, product.id)
    assert current.stock == 10
    assert await count_rows(test_db, ProductLog, ProductLog.action == "updated") == 0


async def test_add_category_twice(test_db, product, lookups):
    await products.add_product_category(test_db, product.id, lookups.categories[1])
    snapshot = await products.add_product_category(test_db, product.id, lookups.categories[1])

    assert [c.id for c in snapshot.categories] == lookups.categories
    assert await count_rows(
        test_db, ProductCategory, ProductCategory.category_id == lookups.categories[1],
    ) == 1

    entries = await audit.history(test_db, EntityKind.PRODUCT, product.id)
    assert [e.action for e in entries] == ["created", "category_added", "category_added"]
    assert "categories" in entries[-1].snapshot
    assert "brands" not in entries[-1].snapshot


async def test_add_missing_brand_raises(test_db, product):
    with pytest.raises(NotFoundError):
        await products.add_product_brand(test_db, product.id, 77)


async def test_remove_unlinked_relation_writes_no_log(test_db, product, lookups):
    with pytest.raises(NotFoundError):
        await products.remove_product_car_model(test_db, product.id, lookups.car_models[1])

    assert await count_rows(test_db, ProductLog) == 1


@pytest.mark.parametrize(
    "add, remove, attr, action",
    [
        (products.add_product_car_model, products.remove_product_car_model, "car_models", "car_model"),
        (products.add_product_brand, products.remove_product_brand, "brands", "brand"),
    ],
)
async def test_relation_add_and_remove(test_db, product, lookups, add, remove, attr, action):
    target = getattr(lookups, attr)[1]

    added = await add(test_db, product.id, target)
    assert target in [item.id for item in getattr(added, attr)]

    removed = await remove(test_db, product.id, target)
    assert target not in [item.id for item in getattr(removed, attr)]

    actions = [e.action for e in await audit.history(test_db, EntityKind.PRODUCT, product.id)]
    assert actions[-2:] == [f"{action}_added", f"{action}_removed"]


async def test_add_and_remove_image(test_db, product):
    added = await products.add_product_image(test_db, product.id, ImageRef(url="https://img.example/2.png"))
    assert len(added.images) == 2

    removed = await products.remove_product_image(test_db, product.id, added.images[-1].id)
    assert len(removed.images) == 1
    assert await count_rows(test_db, ProductImage) == 1


async def test_delete_product_removes_saves(test_db, product, account):
    buyer = await accounts.create_account(
        test_db, account_data(username="buyer", email="buyer@example.com"),
    )
    await saves.save_product(test_db, buyer.id, product.id)

    snapshot = await products.delete_product(test_db, product.id)

    assert snapshot.id == product.id
    assert await count_rows(test_db, Product) == 0
    assert await count_rows(test_db, AccountSave) == 0
    assert await count_rows(test_db, ProductCategory) == 0
    assert await count_rows(test_db, SaveLog, SaveLog.action == "save_deleted") == 1

    deleted = (await audit.history(test_db, EntityKind.PRODUCT, product.id))[-1]
    assert deleted.action == "deleted"
    assert deleted.snapshot["categories"] == [{"id": 1, "name": "Engine"}]


async def test_delete_missing_product_raises(test_db):
    with pytest.raises(NotFoundError):
        await products.delete_product(test_db, 8)
