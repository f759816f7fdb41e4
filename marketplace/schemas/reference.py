"""Schemas for the shared lookup rows (roles, categories, car models, brands)."""

from pydantic import BaseModel, ConfigDict, Field


class ReferenceCreate(BaseModel):
    """Create schema for any name-only lookup row."""

    name: str = Field(..., min_length=1, max_length=100)


class ReferenceResponse(BaseModel):
    """Lookup row response."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
