"""Account schemas."""

from typing import List, Optional

from pydantic import BaseModel, Field


class AccountBase(BaseModel):
    """Account base schema."""

    username: str = Field(..., min_length=3, max_length=50)
    email: str = Field(..., max_length=100)
    phone: str = Field(..., max_length=20)


class AccountCreate(AccountBase):
    """Account create schema.

    Role ids that do not reference an existing role are dropped, not rejected.
    """

    password_hash: str = Field(..., min_length=1, max_length=255)
    role_ids: List[int] = []


class AccountUpdate(BaseModel):
    """Account update schema; unset fields are left untouched."""

    username: Optional[str] = Field(None, min_length=3, max_length=50)
    email: Optional[str] = Field(None, max_length=100)
    phone: Optional[str] = Field(None, max_length=20)
    password_hash: Optional[str] = Field(None, min_length=1, max_length=255)
