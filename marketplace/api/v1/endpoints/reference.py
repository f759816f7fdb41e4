"""Lookup data endpoints: roles, categories, car models and brands."""

from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from marketplace.config.database import get_db
from marketplace.schemas.common import MessageResponse
from marketplace.schemas.reference import ReferenceCreate, ReferenceResponse
from marketplace.services import reference

router = APIRouter()


# ============ Roles ============
@router.get("/roles", response_model=List[ReferenceResponse])
async def list_roles(db: AsyncSession = Depends(get_db)):
    return await reference.list_roles(db)


@router.post("/roles", response_model=ReferenceResponse)
async def create_role(data: ReferenceCreate, db: AsyncSession = Depends(get_db)):
    return await reference.create_role(db, data)


# ============ Categories ============
@router.get("/categories", response_model=List[ReferenceResponse])
async def list_categories(db: AsyncSession = Depends(get_db)):
    return await reference.list_categories(db)


@router.post("/categories", response_model=ReferenceResponse)
async def create_category(data: ReferenceCreate, db: AsyncSession = Depends(get_db)):
    return await reference.create_category(db, data)


# ============ Car models ============
@router.get("/car-models", response_model=List[ReferenceResponse])
async def list_car_models(db: AsyncSession = Depends(get_db)):
    return await reference.list_car_models(db)


@router.post("/car-models", response_model=ReferenceResponse)
async def create_car_model(data: ReferenceCreate, db: AsyncSession = Depends(get_db)):
    return await reference.create_car_model(db, data)


@router.delete("/car-models/{car_model_id}", response_model=MessageResponse)
async def delete_car_model(car_model_id: int, db: AsyncSession = Depends(get_db)):
    """Delete a car model and unlink it from every product."""
    await reference.delete_car_model(db, car_model_id)
    return MessageResponse(message="Car model deleted")


# ============ Brands ============
@router.get("/brands", response_model=List[ReferenceResponse])
async def list_brands(db: AsyncSession = Depends(get_db)):
    return await reference.list_brands(db)


@router.post("/brands", response_model=ReferenceResponse)
async def create_brand(data: ReferenceCreate, db: AsyncSession = Depends(get_db)):
    return await reference.create_brand(db, data)


@router.delete("/brands/{brand_id}", response_model=MessageResponse)
async def delete_brand(brand_id: int, db: AsyncSession = Depends(get_db)):
    """Delete a brand and unlink it from every product."""
    await reference.delete_brand(db, brand_id)
    return MessageResponse(message="Brand deleted")
