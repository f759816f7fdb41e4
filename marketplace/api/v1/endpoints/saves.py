"""Saved product endpoints, nested under an account."""

from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from marketplace.config.database import get_db
from marketplace.schemas.snapshot import AuditLogEntryResponse, ProductSnapshot, SaveSnapshot
from marketplace.services import audit, saves
from marketplace.services.audit import EntityKind

router = APIRouter()


@router.get("/{account_id}/saved", response_model=List[ProductSnapshot], response_model_exclude_unset=True)
async def list_saved(account_id: int, db: AsyncSession = Depends(get_db)):
    """Products saved by an account."""
    return await saves.get_saved_products(db, account_id)


@router.post(
    "/{account_id}/saved/{product_id}",
    response_model=SaveSnapshot,
    response_model_exclude_unset=True,
)
async def save_product(account_id: int, product_id: int, db: AsyncSession = Depends(get_db)):
    return await saves.save_product(db, account_id, product_id)


@router.delete(
    "/{account_id}/saved/{product_id}",
    response_model=SaveSnapshot,
    response_model_exclude_unset=True,
)
async def unsave_product(account_id: int, product_id: int, db: AsyncSession = Depends(get_db)):
    return await saves.unsave_product(db, account_id, product_id)


@router.get("/{account_id}/saved-history", response_model=List[AuditLogEntryResponse])
async def save_history(account_id: int, db: AsyncSession = Depends(get_db)):
    """Save and unsave events of an account, oldest first."""
    return await audit.history(db, EntityKind.SAVE, account_id)
