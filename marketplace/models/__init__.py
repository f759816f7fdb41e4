"""Database models module."""

from marketplace.models.base import BaseModel, TimestampMixin
from marketplace.models.account import Account, Role, AccountRole, AccountSave
from marketplace.models.enterprise import EnterpriseAccount, ExternalLink
from marketplace.models.product import (
    Product,
    Category,
    CarModel,
    Brand,
    Image,
    ProductCategory,
    ProductCarModel,
    ProductBrand,
    ProductImage,
)
from marketplace.models.audit_log import (
    AccountLog,
    EnterpriseLog,
    ProductLog,
    SaveLog,
    AppendOnlyViolation,
)

__all__ = [
    "BaseModel",
    "TimestampMixin",
    "Account",
    "Role",
    "AccountRole",
    "AccountSave",
    "EnterpriseAccount",
    "ExternalLink",
    "Product",
    "Category",
    "CarModel",
    "Brand",
    "Image",
    "ProductCategory",
    "ProductCarModel",
    "ProductBrand",
    "ProductImage",
    "AccountLog",
    "EnterpriseLog",
    "ProductLog",
    "SaveLog",
    "AppendOnlyViolation",
]
