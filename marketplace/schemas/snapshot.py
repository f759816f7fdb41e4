"""Snapshot views: one entity plus a chosen subset of its related collections.

Relation fields default to ``None`` meaning "not requested". The assembler
always passes a list (possibly empty) for every requested relation, and
``to_payload`` drops unset fields, so audit payloads and API responses carry
exactly the requested collections and never a null collection.
"""

from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict


class SnapshotModel(BaseModel):
    """Base for every snapshot view."""

    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", exclude_unset=True)


class RelatedItem(SnapshotModel):
    """``{id, name}``, ``{id, url}`` or, for external links, both."""

    id: int
    name: Optional[str] = None
    url: Optional[str] = None


class EnterpriseRef(SnapshotModel):
    """Short enterprise reference embedded in product views."""

    id: int
    tax_id: str
    name: str


class AccountSnapshot(SnapshotModel):
    id: int
    username: str
    email: str
    phone: str
    roles: Optional[List[RelatedItem]] = None
    saved_products: Optional[List[RelatedItem]] = None


class EnterpriseSnapshot(SnapshotModel):
    id: int
    tax_id: str
    address: str
    description: Optional[str] = None
    representative_name: str
    representative_id: str
    enabled: bool
    account_id: Optional[int] = None
    # Owner username, falling back to the representative name
    name: str
    external_links: Optional[List[RelatedItem]] = None
    products: Optional[List[RelatedItem]] = None


class ProductSnapshot(SnapshotModel):
    id: int
    name: str
    stock: int
    # Serialized as a string in audit payloads and JSON responses
    price: Decimal
    enterprise_id: Optional[int] = None
    categories: Optional[List[RelatedItem]] = None
    car_models: Optional[List[RelatedItem]] = None
    brands: Optional[List[RelatedItem]] = None
    images: Optional[List[RelatedItem]] = None
    enterprise: Optional[EnterpriseRef] = None


class SaveSnapshot(SnapshotModel):
    """Payload of a save/unsave event."""

    account: AccountSnapshot
    product: ProductSnapshot


class CatalogItem(SnapshotModel):
    """Publishable product as shown in every catalog view.

    The publish predicate guarantees exactly one image, so list and
    single-item views share this shape.
    """

    product: ProductSnapshot
    categories: List[RelatedItem]
    car_models: List[RelatedItem]
    brands: List[RelatedItem]
    image: RelatedItem
    # Left unset inside an enterprise's own catalog view
    enterprise: Optional[EnterpriseRef] = None


class CatalogEnterpriseView(SnapshotModel):
    """An enterprise storefront: owner, enterprise, links and its catalog."""

    account: Optional[AccountSnapshot] = None
    enterprise: EnterpriseSnapshot
    external_links: List[RelatedItem]
    products: List[CatalogItem]


class RegistrationSnapshot(SnapshotModel):
    """Result of registering an account together with its enterprise."""

    user: AccountSnapshot
    enterprise: EnterpriseSnapshot


class AuditLogEntryResponse(BaseModel):
    """One row of an entity's audit history."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    subject_id: int
    action: str
    snapshot: Optional[Dict[str, Any]] = None
    created_at: datetime
    product_id: Optional[int] = None
