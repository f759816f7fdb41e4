#!/usr/bin/env python3
"""
Create every table straight from the SQLAlchemy metadata.

Handy for local databases; production schemas go through alembic.
"""

import asyncio
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from sqlalchemy import text
from sqlalchemy.ext.asyncio import create_async_engine

from marketplace.config.database import Base, engine_options
from marketplace.config.settings import settings
import marketplace.models  # noqa: F401


async def create_tables():
    """Create all database tables."""
    print(f"Connecting to: {settings.database_url[:50]}...")

    engine = create_async_engine(
        settings.database_url,
        echo=True,
        **engine_options(settings.database_url),
    )

    async with engine.begin() as conn:
        if settings.database_schema:
            print(f"\n[1/2] Ensuring schema {settings.database_schema} exists...")
            await conn.execute(text(f"CREATE SCHEMA IF NOT EXISTS {settings.database_schema}"))

        print("\n[2/2] Creating tables...")
        await conn.run_sync(Base.metadata.create_all)

    await engine.dispose()
    print("\nAll tables created")


if __name__ == "__main__":
    asyncio.run(create_tables())
