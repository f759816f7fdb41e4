"""External link endpoints addressed by link id."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from marketplace.config.database import get_db
from marketplace.schemas.enterprise import ExternalLinkUpdate
from marketplace.schemas.snapshot import EnterpriseSnapshot
from marketplace.services import enterprises

router = APIRouter()


@router.patch("/{link_id}", response_model=EnterpriseSnapshot, response_model_exclude_unset=True)
async def update_external_link(link_id: int, data: ExternalLinkUpdate, db: AsyncSession = Depends(get_db)):
    return await enterprises.update_external_link(db, link_id, data)


@router.delete("/{link_id}", response_model=EnterpriseSnapshot, response_model_exclude_unset=True)
async def remove_external_link(link_id: int, db: AsyncSession = Depends(get_db)):
    return await enterprises.remove_external_link(db, link_id)
