"""Pydantic schemas for feature flag endpoints."""

from pydantic import BaseModel

from club_entitlements.flags.entitlements import EntitlementResult


class FeatureFlagsResponse(BaseModel):
    modules: dict[str, bool]
    features: dict[str, bool]
    operational: dict[str, bool]

    @classmethod
    def from_result(cls, result: EntitlementResult) -> "FeatureFlagsResponse":
        return cls(**result.to_dict())


class FlagCheckResponse(BaseModel):
    club_id: str
    path: str
    enabled: bool


class OperationalFlagUpdate(BaseModel):
    enabled: bool


class TierDefaultsResponse(BaseModel):
    tier: str
    flags: FeatureFlagsResponse


class ClubFlagsResponse(BaseModel):
    club_id: str
    club_name: str
    subscription_tier: str
    resolution: str
    package_slug: str | None = None
    flags: FeatureFlagsResponse
    has_operational_overrides: bool
