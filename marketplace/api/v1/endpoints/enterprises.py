"""Enterprise account endpoints."""

from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from marketplace.config.database import get_db
from marketplace.schemas.enterprise import (
    EnterpriseCreate,
    EnterpriseUpdate,
    ExternalLinkCreate,
    RegisterEnterprise,
)
from marketplace.schemas.snapshot import (
    AuditLogEntryResponse,
    EnterpriseSnapshot,
    RegistrationSnapshot,
)
from marketplace.services import audit, enterprises
from marketplace.services.audit import EntityKind

router = APIRouter()


@router.post("", response_model=EnterpriseSnapshot, response_model_exclude_unset=True)
async def create_enterprise(data: EnterpriseCreate, db: AsyncSession = Depends(get_db)):
    """Create a new enterprise with its external links."""
    return await enterprises.create_enterprise(db, data)


@router.post("/register", response_model=RegistrationSnapshot, response_model_exclude_unset=True)
async def register_enterprise_account(data: RegisterEnterprise, db: AsyncSession = Depends(get_db)):
    """Register a seller: a new account and the enterprise it owns."""
    return await enterprises.register_enterprise_account(db, data)


@router.get("/{enterprise_id}", response_model=EnterpriseSnapshot, response_model_exclude_unset=True)
async def get_enterprise(enterprise_id: int, db: AsyncSession = Depends(get_db)):
    """Get enterprise by ID with links and products."""
    return await enterprises.get_enterprise(db, enterprise_id)


@router.patch("/{enterprise_id}", response_model=EnterpriseSnapshot, response_model_exclude_unset=True)
async def update_enterprise(
    enterprise_id: int,
    data: EnterpriseUpdate,
    db: AsyncSession = Depends(get_db),
):
    """Update enterprise."""
    return await enterprises.update_enterprise(db, enterprise_id, data)


@router.delete("/{enterprise_id}", response_model=EnterpriseSnapshot, response_model_exclude_unset=True)
async def delete_enterprise(enterprise_id: int, db: AsyncSession = Depends(get_db)):
    """Delete enterprise together with its products and links."""
    return await enterprises.delete_enterprise(db, enterprise_id)


@router.post(
    "/{enterprise_id}/links",
    response_model=EnterpriseSnapshot,
    response_model_exclude_unset=True,
)
async def add_external_link(
    enterprise_id: int,
    data: ExternalLinkCreate,
    db: AsyncSession = Depends(get_db),
):
    """Publish a new external link."""
    return await enterprises.add_external_link(db, enterprise_id, data)


@router.get("/{enterprise_id}/history", response_model=List[AuditLogEntryResponse])
async def enterprise_history(enterprise_id: int, db: AsyncSession = Depends(get_db)):
    """Audit history of an enterprise, oldest first."""
    return await audit.history(db, EntityKind.ENTERPRISE, enterprise_id)
