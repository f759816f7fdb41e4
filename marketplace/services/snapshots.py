"""Snapshot assembler: one typed builder per audited entity kind.

Each builder takes the set of relation kinds to include. Every requested
relation is rendered as a list ordered by related id, empty when nothing is
linked. Builders flush the session first so they observe the caller's own
pending writes, which is what lets the cascade guard capture children before
it deletes them.
"""

from typing import FrozenSet, Iterable, List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from marketplace.models import (
    Account,
    AccountRole,
    AccountSave,
    Brand,
    CarModel,
    Category,
    EnterpriseAccount,
    ExternalLink,
    Image,
    Product,
    ProductBrand,
    ProductCarModel,
    ProductCategory,
    ProductImage,
    Role,
)
from marketplace.schemas.snapshot import (
    AccountSnapshot,
    EnterpriseRef,
    EnterpriseSnapshot,
    ProductSnapshot,
    RelatedItem,
    SaveSnapshot,
)
from marketplace.services.lookup import require

ACCOUNT_RELATIONS: FrozenSet[str] = frozenset({"roles", "saved_products"})
ENTERPRISE_RELATIONS: FrozenSet[str] = frozenset({"external_links", "products"})
PRODUCT_RELATIONS: FrozenSet[str] = frozenset(
    {"categories", "car_models", "brands", "images", "enterprise"}
)


def _check_kinds(include: Iterable[str], allowed: FrozenSet[str]) -> FrozenSet[str]:
    include = frozenset(include)
    unknown = include - allowed
    if unknown:
        raise ValueError(f"Unknown relation kinds: {sorted(unknown)}")
    return include


async def _named(db: AsyncSession, stmt) -> List[RelatedItem]:
    rows = (await db.execute(stmt)).all()
    return [RelatedItem(id=row[0], name=row[1]) for row in rows]


# ============ Account ============
async def account(
    db: AsyncSession,
    account_id: int,
    include: Iterable[str] = ACCOUNT_RELATIONS,
) -> AccountSnapshot:
    include = _check_kinds(include, ACCOUNT_RELATIONS)
    await db.flush()
    row = await require(db, Account, account_id, "Account")

    fields = {
        "id": row.id,
        "username": row.username,
        "email": row.email,
        "phone": row.phone,
    }
    if "roles" in include:
        fields["roles"] = await _named(
            db,
            select(Role.id, Role.name)
            .join(AccountRole, AccountRole.role_id == Role.id)
            .where(AccountRole.account_id == account_id)
            .order_by(Role.id),
        )
    if "saved_products" in include:
        fields["saved_products"] = await _named(
            db,
            select(Product.id, Product.name)
            .join(AccountSave, AccountSave.product_id == Product.id)
            .where(AccountSave.account_id == account_id)
            .order_by(Product.id),
        )
    return AccountSnapshot(**fields)


# ============ Enterprise ============
async def _display_name(db: AsyncSession, enterprise: EnterpriseAccount) -> str:
    """Owner's username, else the representative's name."""
    if enterprise.account_id is not None:
        username = await db.scalar(
            select(Account.username).where(Account.id == enterprise.account_id)
        )
        if username:
            return username
    return enterprise.representative_name


async def enterprise(
    db: AsyncSession,
    enterprise_id: int,
    include: Iterable[str] = ENTERPRISE_RELATIONS,
) -> EnterpriseSnapshot:
    include = _check_kinds(include, ENTERPRISE_RELATIONS)
    await db.flush()
    row = await require(db, EnterpriseAccount, enterprise_id, "Enterprise")

    fields = {
        "id": row.id,
        "tax_id": row.tax_id,
        "address": row.address,
        "description": row.description,
        "representative_name": row.representative_name,
        "representative_id": row.representative_id,
        "enabled": row.enabled,
        "account_id": row.account_id,
        "name": await _display_name(db, row),
    }
    if "external_links" in include:
        rows = (await db.execute(
            select(ExternalLink.id, ExternalLink.name, ExternalLink.url)
            .where(ExternalLink.enterprise_id == enterprise_id)
            .order_by(ExternalLink.id)
        )).all()
        fields["external_links"] = [
            RelatedItem(id=r.id, name=r.name, url=r.url) for r in rows
        ]
    if "products" in include:
        fields["products"] = await _named(
            db,
            select(Product.id, Product.name)
            .where(Product.enterprise_id == enterprise_id)
            .order_by(Product.id),
        )
    return EnterpriseSnapshot(**fields)


async def enterprise_ref(db: AsyncSession, enterprise_id: Optional[int]) -> Optional[EnterpriseRef]:
    if enterprise_id is None:
        return None
    row = await db.get(EnterpriseAccount, enterprise_id, populate_existing=True)
    if row is None:
        return None
    return EnterpriseRef(id=row.id, tax_id=row.tax_id, name=await _display_name(db, row))


# ============ Product ============
async def product(
    db: AsyncSession,
    product_id: int,
    include: Iterable[str] = PRODUCT_RELATIONS,
) -> ProductSnapshot:
    include = _check_kinds(include, PRODUCT_RELATIONS)
    await db.flush()
    row = await require(db, Product, product_id, "Product")

    fields = {
        "id": row.id,
        "name": row.name,
        "stock": row.stock,
        "price": row.price,
        "enterprise_id": row.enterprise_id,
    }
    if "categories" in include:
        fields["categories"] = await _named(
            db,
            select(Category.id, Category.name)
            .join(ProductCategory, ProductCategory.category_id == Category.id)
            .where(ProductCategory.product_id == product_id)
            .order_by(Category.id),
        )
    if "car_models" in include:
        fields["car_models"] = await _named(
            db,
            select(CarModel.id, CarModel.name)
            .join(ProductCarModel, ProductCarModel.car_model_id == CarModel.id)
            .where(ProductCarModel.product_id == product_id)
            .order_by(CarModel.id),
        )
    if "brands" in include:
        fields["brands"] = await _named(
            db,
            select(Brand.id, Brand.name)
            .join(ProductBrand, ProductBrand.brand_id == Brand.id)
            .where(ProductBrand.product_id == product_id)
            .order_by(Brand.id),
        )
    if "images" in include:
        rows = (await db.execute(
            select(Image.id, Image.url)
            .join(ProductImage, ProductImage.image_id == Image.id)
            .where(ProductImage.product_id == product_id)
            .order_by(Image.id)
        )).all()
        fields["images"] = [RelatedItem(id=r.id, url=r.url) for r in rows]
    if "enterprise" in include:
        fields["enterprise"] = await enterprise_ref(db, row.enterprise_id)
    return ProductSnapshot(**fields)


# ============ Save ============
async def save(db: AsyncSession, account_id: int, product_id: int) -> SaveSnapshot:
    return SaveSnapshot(
        account=await account(db, account_id, include=()),
        product=await product(db, product_id, include=()),
    )
