"""Enterprise accounts and their external links."""

from typing import Optional

from sqlalchemy import Boolean, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from marketplace.models.base import BaseModel


class EnterpriseAccount(BaseModel):
    """Seller profile, optionally owned by one Account."""

    __tablename__ = "enterprise_accounts"

    tax_id: Mapped[str] = mapped_column(String(50), unique=True, nullable=False)
    address: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    representative_name: Mapped[str] = mapped_column(String(100), nullable=False)
    representative_id: Mapped[str] = mapped_column(String(50), nullable=False)
    enabled: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    # An account owns at most one enterprise
    account_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("accounts.id", ondelete="CASCADE"),
        unique=True,
        nullable=True,
    )


class ExternalLink(BaseModel):
    """Website or social link published by an enterprise."""

    __tablename__ = "external_links"

    name: Mapped[str] = mapped_column(String(100), nullable=False)
    url: Mapped[str] = mapped_column(String(500), nullable=False)
    enterprise_id: Mapped[int] = mapped_column(
        ForeignKey("enterprise_accounts.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
