"""Pydantic schemas for club assignment endpoints."""

from datetime import datetime
from decimal import Decimal
from typing import Any, Optional

from pydantic import BaseModel, Field


class ClubCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    slug: str = Field(..., min_length=1, max_length=100, pattern=r"^[a-z0-9]([a-z0-9-]*[a-z0-9])?$")
    subscription_tier: str = "STARTER"
    features: dict[str, Any] = Field(default_factory=dict)


class ClubResponse(BaseModel):
    id: str
    name: str
    slug: str
    subscription_tier: str
    features: dict[str, Any]
    created_at: datetime

    model_config = {"from_attributes": True}


class ClubPackageAssign(BaseModel):
    package_id: str
    member_limit_override: Optional[int] = Field(default=None, ge=0)
    user_limit_override: Optional[int] = Field(default=None, ge=0)
    custom_price_override: Optional[Decimal] = Field(default=None, ge=0)
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None


class ClubPackageResponse(BaseModel):
    id: str
    club_id: str
    package_id: str
    member_limit_override: Optional[int] = None
    user_limit_override: Optional[int] = None
    custom_price_override: Optional[Decimal] = None
    start_date: datetime
    end_date: Optional[datetime] = None

    model_config = {"from_attributes": True}


class ClubAddonCreate(BaseModel):
    feature_key: str = Field(..., min_length=1, max_length=100)
    price_override: Optional[Decimal] = Field(default=None, ge=0)


class ClubAddonResponse(BaseModel):
    id: str
    club_id: str
    feature_key: str
    price_override: Optional[Decimal] = None
    start_date: datetime
    end_date: Optional[datetime] = None
