"""Seed data initialization script for the marketplace.

Goes through the mutation services so every seeded entity also gets its
``created`` audit entry.
"""

import asyncio
import sys
from decimal import Decimal
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from sqlalchemy import select

from marketplace.config.database import AsyncSessionLocal
from marketplace.models import Account, Category, EnterpriseAccount, Product, Role
from marketplace.schemas.account import AccountCreate
from marketplace.schemas.enterprise import EnterpriseDetails, ExternalLinkCreate, RegisterEnterprise
from marketplace.schemas.product import ImageRef, ProductCreate
from marketplace.schemas.reference import ReferenceCreate
from marketplace.services import enterprises, products, reference


async def seed_reference():
    """Create roles, categories, car models and brands."""
    async with AsyncSessionLocal() as db:
        result = await db.execute(select(Role).limit(1))
        if result.scalar_one_or_none():
            print("Reference data already exists, skipping...")
            return

        for name in ("buyer", "seller", "admin"):
            await reference.create_role(db, ReferenceCreate(name=name))
        for name in ("Engine", "Suspension", "Brakes", "Transmission", "Bodywork"):
            await reference.create_category(db, ReferenceCreate(name=name))
        for name in ("Toyota Corolla", "Nissan Sentra", "Honda Civic"):
            await reference.create_car_model(db, ReferenceCreate(name=name))
        for name in ("Generic 1", "Generic 2"):
            await reference.create_brand(db, ReferenceCreate(name=name))
        print("Created 3 roles, 5 categories, 3 car models, 2 brands")


async def seed_seller():
    """Create a seller account that owns one enterprise."""
    async with AsyncSessionLocal() as db:
        result = await db.execute(select(Account).where(Account.username == "autoparts"))
        if result.scalar_one_or_none():
            print("Seller account already exists, skipping...")
            return

        seller_role = (await db.execute(select(Role.id).where(Role.name == "seller"))).scalar_one()
        await enterprises.register_enterprise_account(
            db,
            RegisterEnterprise(
                account=AccountCreate(
                    username="autoparts",
                    email="contact@autoparts.example",
                    phone="+10000000000",
                    # Placeholder; real credentials are issued by the auth service
                    password_hash="$2b$12$seededhashnotforproductionuse000000000000000000000000",
                    role_ids=[seller_role],
                ),
                enterprise=EnterpriseDetails(
                    tax_id="76.000.000-0",
                    address="1 Main Street",
                    description="Spare parts for every car",
                    representative_name="Sam Doe",
                    representative_id="12.345.678-9",
                    enabled=True,
                    links=[ExternalLinkCreate(name="Website", url="https://autoparts.example")],
                ),
            ),
        )
        print("Created seller account: autoparts, with one enterprise")


async def seed_products():
    """Create a handful of publishable products."""
    async with AsyncSessionLocal() as db:
        result = await db.execute(select(Product).limit(1))
        if result.scalar_one_or_none():
            print("Products already exist, skipping...")
            return

        account = (await db.execute(select(Account).where(Account.username == "autoparts"))).scalar_one()
        enterprise = (await db.execute(
            select(EnterpriseAccount).where(EnterpriseAccount.account_id == account.id)
        )).scalar_one_or_none()
        if enterprise is None:
            print("Seller enterprise not found, run seed_seller first")
            return
        categories = {
            c.name: c.id for c in (await db.execute(select(Category))).scalars().all()
        }

        items = [
            ("Oil filter", 50, "12.90", "Engine"),
            ("Brake pads", 100, "34.50", "Brakes"),
            ("Front shock absorber", 30, "89.00", "Suspension"),
            ("Bumper", 20, "150.00", "Bodywork"),
            ("Gearbox", 10, "1200.00", "Transmission"),
        ]
        for i, (name, stock, price, category) in enumerate(items, start=1):
            await products.create_product(
                db,
                ProductCreate(
                    name=name,
                    stock=stock,
                    price=Decimal(price),
                    enterprise_id=enterprise.id,
                    category_ids=[categories[category]],
                    car_model_ids=[1, 2],
                    brand_ids=[1 + i % 2],
                    images=[ImageRef(url=f"https://picsum.photos/200?random={i}")],
                ),
            )
        print(f"Created {len(items)} products")


async def main():
    """Run all seed functions."""
    print("=" * 50)
    print("Marketplace Seed Data Initialization")
    print("=" * 50)

    await seed_reference()
    await seed_seller()
    await seed_products()

    print("=" * 50)
    print("Seed data initialization completed!")
    print("=" * 50)


if __name__ == "__main__":
    asyncio.run(main())
