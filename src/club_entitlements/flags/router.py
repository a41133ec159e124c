"""Feature flag API router."""

from fastapi import APIRouter, Depends, HTTPException, Query

from club_entitlements.common.exceptions import ClubNotFoundError, InvalidFlagKeyError
from club_entitlements.common.security import require_api_key
from club_entitlements.flags.schemas import (
    ClubFlagsResponse,
    FeatureFlagsResponse,
    FlagCheckResponse,
    OperationalFlagUpdate,
    TierDefaultsResponse,
)

router = APIRouter()


def _get_service():
    from club_entitlements.deps import get_flag_service
    return get_flag_service()


def _get_assignments():
    from club_entitlements.deps import get_assignment_service
    return get_assignment_service()


def _get_db():
    from club_entitlements.deps import get_db
    return get_db()


@router.get("/clubs/{club_id}/feature-flags", response_model=FeatureFlagsResponse)
async def get_feature_flags(club_id: str, _=Depends(require_api_key)):
    svc = _get_service()
    db = _get_db()
    async with db.get_session() as session:
        flags = await svc.get_feature_flags(session, club_id)
        return FeatureFlagsResponse.from_result(flags)


@router.get("/clubs/{club_id}/feature-flags/check", response_model=FlagCheckResponse)
async def check_feature_flag(
    club_id: str,
    path: str = Query(..., min_length=1, examples=["features.golfLottery"]),
    _=Depends(require_api_key),
):
    svc = _get_service()
    db = _get_db()
    async with db.get_session() as session:
        enabled = await svc.is_enabled(session, club_id, path)
        return FlagCheckResponse(club_id=club_id, path=path, enabled=enabled)


@router.put(
    "/clubs/{club_id}/feature-flags/operational/{key}",
    response_model=FeatureFlagsResponse,
)
async def update_operational_flag(
    club_id: str, key: str, body: OperationalFlagUpdate, _=Depends(require_api_key),
):
    svc = _get_assignments()
    db = _get_db()
    try:
        async with db.get_session() as session:
            flags = await svc.update_operational_flag(session, club_id, key, body.enabled)
            return FeatureFlagsResponse.from_result(flags)
    except InvalidFlagKeyError as e:
        raise HTTPException(status_code=400, detail=e.message)
    except ClubNotFoundError as e:
        raise HTTPException(status_code=404, detail=e.message)


@router.get("/feature-flags/tiers", response_model=list[TierDefaultsResponse])
async def list_tier_defaults(_=Depends(require_api_key)):
    svc = _get_service()
    return [
        TierDefaultsResponse(
            tier=entry["tier"],
            flags=FeatureFlagsResponse.from_result(entry["flags"]),
        )
        for entry in svc.get_tier_defaults()
    ]


@router.get("/feature-flags/clubs", response_model=list[ClubFlagsResponse])
async def list_clubs_with_flags(_=Depends(require_api_key)):
    svc = _get_service()
    db = _get_db()
    async with db.get_session() as session:
        summaries = await svc.list_clubs_with_flags(session)
        return [
            ClubFlagsResponse(
                club_id=s.club_id,
                club_name=s.club_name,
                subscription_tier=s.subscription_tier,
                resolution=s.resolution,
                package_slug=s.package_slug,
                flags=FeatureFlagsResponse.from_result(s.flags),
                has_operational_overrides=s.has_operational_overrides,
            )
            for s in summaries
        ]
