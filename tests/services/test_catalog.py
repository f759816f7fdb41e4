"""Catalog publisher: publish predicate and the shared item shape.

Invariants:
    - Only products with an enterprise, exactly one image and at least one
      category, car model and brand are listed
    - Every view returns the same CatalogItem shape with a single image
"""

import pytest
from sqlalchemy import update

from conftest import enterprise_data, product_data
from marketplace.config.settings import settings
from marketplace.core.exceptions import NotFoundError, ValidationError
from marketplace.models import Product
from marketplace.schemas.product import ImageRef
from marketplace.services import catalog, enterprises, products


async def test_catalog_lists_publishable_product(test_db, product, enterprise):
    [item] = await catalog.catalog_all(test_db)

    assert item.product.id == product.id
    assert item.image.url == "https://img.example/1.png"
    assert item.enterprise.id == enterprise.id
    assert item.enterprise.tax_id == "76.111.111-1"
    assert "categories" not in item.to_payload()["product"]


@pytest.mark.parametrize(
    "overrides",
    [
        {"images": []},
        {"images": [ImageRef(url="https://a.example"), ImageRef(url="https://b.example")]},
        {"category_ids": []},
        {"car_model_ids": []},
        {"brand_ids": []},
    ],
)
async def test_incomplete_products_are_not_published(test_db, enterprise, lookups, overrides):
    draft = await products.create_product(
        test_db, product_data(enterprise.id, lookups, name="Draft", **overrides),
    )

    assert await catalog.catalog_all(test_db) == []
    with pytest.raises(NotFoundError):
        await catalog.catalog_by_id(test_db, draft.id)


async def test_catalog_by_id_returns_all_categories(test_db, enterprise, lookups):
    created = await products.create_product(
        test_db, product_data(enterprise.id, lookups, category_ids=lookups.categories),
    )

    item = await catalog.catalog_by_id(test_db, created.id)

    assert {c.id for c in item.categories} == set(lookups.categories)


async def test_catalog_by_id_missing_product(test_db):
    with pytest.raises(NotFoundError):
        await catalog.catalog_by_id(test_db, 1)


async def test_catalog_by_category(test_db, enterprise, lookups):
    engine_part = await products.create_product(test_db, product_data(enterprise.id, lookups))
    brake_part = await products.create_product(
        test_db, product_data(enterprise.id, lookups, name="Pads", category_ids=[lookups.categories[1]]),
    )

    engine_items = await catalog.catalog_by_category(test_db, lookups.categories[0])
    brake_items = await catalog.catalog_by_category(test_db, lookups.categories[1])

    assert [i.product.id for i in engine_items] == [engine_part.id]
    assert [i.product.id for i in brake_items] == [brake_part.id]


async def test_catalog_n_by_category_limits_and_orders(test_db, enterprise, lookups, monkeypatch):
    created = [
        await products.create_product(test_db, product_data(enterprise.id, lookups, name=f"Part {n}"))
        for n in range(3)
    ]

    items = await catalog.catalog_n_by_category(test_db, lookups.categories[0], 2)
    assert [i.product.id for i in items] == [p.id for p in created[:2]]

    monkeypatch.setattr(settings, "catalog_max_limit", 1)
    capped = await catalog.catalog_n_by_category(test_db, lookups.categories[0], 50)
    assert len(capped) == 1


async def test_catalog_n_by_category_rejects_negative_limit(test_db):
    with pytest.raises(ValidationError):
        await catalog.catalog_n_by_category(test_db, 1, -1)


async def test_catalog_by_enterprise(test_db, product, enterprise, lookups):
    other = await enterprises.create_enterprise(test_db, enterprise_data(tax_id="76.999.999-9"))
    await products.create_product(test_db, product_data(other.id, lookups, name="Elsewhere"))

    view = await catalog.catalog_by_enterprise(test_db, enterprise.id)

    assert [i.product.id for i in view.products] == [product.id]
    assert "enterprise" not in view.products[0].to_payload()
    assert len(await catalog.catalog_all(test_db)) == 2


async def test_catalog_by_enterprise_header(test_db, product, enterprise, account):
    payload = (await catalog.catalog_by_enterprise(test_db, enterprise.id)).to_payload()

    assert payload["account"] == {
        "id": account.id,
        "username": "seller",
        "email": "seller@example.com",
        "phone": "+5600000000",
    }
    assert payload["enterprise"]["tax_id"] == "76.111.111-1"
    assert payload["enterprise"]["name"] == "seller"
    assert "external_links" not in payload["enterprise"]
    assert "products" not in payload["enterprise"]
    assert [link["name"] for link in payload["external_links"]] == ["Website", "Instagram"]


async def test_catalog_by_enterprise_without_owner_or_products(test_db):
    storefront = await enterprises.create_enterprise(test_db, enterprise_data())

    view = await catalog.catalog_by_enterprise(test_db, storefront.id)

    assert view.account is None
    assert view.to_payload()["account"] is None
    assert view.external_links == []
    assert view.products == []


async def test_catalog_by_enterprise_missing_enterprise(test_db):
    with pytest.raises(NotFoundError):
        await catalog.catalog_by_enterprise(test_db, 999)


async def test_product_without_enterprise_is_not_published(test_db, product):
    await test_db.execute(
        update(Product).where(Product.id == product.id).values(enterprise_id=None)
    )
    await test_db.commit()

    assert await catalog.catalog_all(test_db) == []
