"""Pydantic schemas for catalog endpoints."""

from decimal import Decimal
from typing import Optional

from pydantic import BaseModel


class FeatureDefinitionResponse(BaseModel):
    id: str
    key: str
    name: str
    description: Optional[str] = None
    category: str
    addon_price: Optional[Decimal] = None
    sort_order: int
    is_active: bool

    model_config = {"from_attributes": True}


class VerticalResponse(BaseModel):
    id: str
    name: str
    slug: str
    description: Optional[str] = None
    sort_order: int

    model_config = {"from_attributes": True}


class PackageFeatureResponse(BaseModel):
    key: str
    category: str
    enabled: bool


class PackageResponse(BaseModel):
    id: str
    vertical_id: Optional[str] = None
    name: str
    slug: str
    tier: str
    base_price: Decimal
    annual_price: Optional[Decimal] = None
    default_member_limit: Optional[int] = None
    default_user_limit: Optional[int] = None
    features: list[PackageFeatureResponse] = []
