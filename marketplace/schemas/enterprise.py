"""Enterprise account schemas."""

from typing import List, Optional

from pydantic import BaseModel, Field

from marketplace.schemas.account import AccountCreate


# ============ External links ============
class ExternalLinkCreate(BaseModel):
    """External link create schema."""

    name: str = Field(..., max_length=100)
    url: str = Field(..., max_length=500)


class ExternalLinkUpdate(BaseModel):
    """External link update schema."""

    name: Optional[str] = Field(None, max_length=100)
    url: Optional[str] = Field(None, max_length=500)


# ============ Enterprise ============
class EnterpriseBase(BaseModel):
    """Enterprise base schema."""

    tax_id: str = Field(..., max_length=50)
    address: str = Field(..., max_length=255)
    description: Optional[str] = None
    representative_name: str = Field(..., max_length=100)
    representative_id: str = Field(..., max_length=50)


class EnterpriseDetails(EnterpriseBase):
    """Enterprise fields without an owner; links are created in the same unit."""

    enabled: bool = False
    links: List[ExternalLinkCreate] = []


class EnterpriseCreate(EnterpriseDetails):
    """Enterprise create schema."""

    account_id: Optional[int] = None


class RegisterEnterprise(BaseModel):
    """A new account and the enterprise it will own."""

    account: AccountCreate
    enterprise: EnterpriseDetails


class EnterpriseUpdate(BaseModel):
    """Enterprise update schema."""

    tax_id: Optional[str] = Field(None, max_length=50)
    address: Optional[str] = Field(None, max_length=255)
    description: Optional[str] = None
    representative_name: Optional[str] = Field(None, max_length=100)
    representative_id: Optional[str] = Field(None, max_length=50)
    enabled: Optional[bool] = None
    account_id: Optional[int] = None
