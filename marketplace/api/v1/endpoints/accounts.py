"""Account management endpoints."""

from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from marketplace.config.database import get_db
from marketplace.schemas.account import AccountCreate, AccountUpdate
from marketplace.schemas.snapshot import AccountSnapshot, AuditLogEntryResponse
from marketplace.services import accounts, audit
from marketplace.services.audit import EntityKind

router = APIRouter()


@router.post("", response_model=AccountSnapshot, response_model_exclude_unset=True)
async def create_account(data: AccountCreate, db: AsyncSession = Depends(get_db)):
    """Create a new account with its initial roles."""
    return await accounts.create_account(db, data)


@router.get("/{account_id}", response_model=AccountSnapshot, response_model_exclude_unset=True)
async def get_account(account_id: int, db: AsyncSession = Depends(get_db)):
    """Get account by ID with roles and saved products."""
    return await accounts.get_account(db, account_id)


@router.patch("/{account_id}", response_model=AccountSnapshot, response_model_exclude_unset=True)
async def update_account(account_id: int, data: AccountUpdate, db: AsyncSession = Depends(get_db)):
    """Update account."""
    return await accounts.update_account(db, account_id, data)


@router.delete("/{account_id}", response_model=AccountSnapshot, response_model_exclude_unset=True)
async def delete_account(account_id: int, db: AsyncSession = Depends(get_db)):
    """Delete account, its enterprise and its saves; returns the last state."""
    return await accounts.delete_account(db, account_id)


@router.post(
    "/{account_id}/roles/{role_id}",
    response_model=AccountSnapshot,
    response_model_exclude_unset=True,
)
async def add_role(account_id: int, role_id: int, db: AsyncSession = Depends(get_db)):
    """Assign role to account."""
    return await accounts.add_role_to_account(db, account_id, role_id)


@router.delete(
    "/{account_id}/roles/{role_id}",
    response_model=AccountSnapshot,
    response_model_exclude_unset=True,
)
async def remove_role(account_id: int, role_id: int, db: AsyncSession = Depends(get_db)):
    """Revoke role from account."""
    return await accounts.remove_role_from_account(db, account_id, role_id)


@router.get("/{account_id}/history", response_model=List[AuditLogEntryResponse])
async def account_history(account_id: int, db: AsyncSession = Depends(get_db)):
    """Audit history of an account, oldest first."""
    return await audit.history(db, EntityKind.ACCOUNT, account_id)
