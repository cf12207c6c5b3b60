from __future__ import annotations

from decimal import Decimal, InvalidOperation
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from catalog_sync.shared.helpers import extract_numeric_gid


class SourceImage(BaseModel):
    """Product image as exported by Shopify"""

    id: Optional[str] = None
    url: str
    alt: Optional[str] = None


class SourceOption(BaseModel):
    """Option definition declared on a product (name plus allowed values)"""

    name: str
    values: List[str] = Field(default_factory=list)


class CollectionRef(BaseModel):
    """Collection membership of a product"""

    id: str
    title: Optional[str] = None
    handle: Optional[str] = None

    @property
    def external_id(self) -> Optional[str]:
        return extract_numeric_gid(self.id)


class SourceVariant(BaseModel):
    id: str
    title: Optional[str] = None
    sku: Optional[str] = None
    price: Optional[str] = None  # kept as the decimal string Shopify sends
    inventory_quantity: Optional[int] = None
    selected_options: Dict[str, str] = Field(default_factory=dict)
    metafields: Dict[str, str] = Field(default_factory=dict)

    @property
    def price_amount(self) -> Optional[Decimal]:
        if self.price is None:
            return None
        try:
            return Decimal(self.price)
        except InvalidOperation:
            return None


class SourceProduct(BaseModel):
    id: str
    title: str
    handle: Optional[str] = None
    status: Optional[str] = None
    description: Optional[str] = None
    options: List[SourceOption] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list)
    metafields: Dict[str, str] = Field(default_factory=dict)
    images: List[SourceImage] = Field(default_factory=list)
    variants: List[SourceVariant] = Field(default_factory=list)
    collections: List[CollectionRef] = Field(default_factory=list)

    @property
    def external_id(self) -> Optional[str]:
        return extract_numeric_gid(self.id)


class SourceCollection(BaseModel):
    """Collection used as a category correlation key"""

    id: str
    title: str
    handle: Optional[str] = None
    description: Optional[str] = None
    product_ids: List[str] = Field(default_factory=list)

    @property
    def external_id(self) -> Optional[str]:
        return extract_numeric_gid(self.id)
