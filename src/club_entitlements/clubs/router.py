"""Club assignment API router."""

from fastapi import APIRouter, Depends, HTTPException

from club_entitlements.common.exceptions import (
    AssignmentConflictError,
    ClubNotFoundError,
    EntitlementsError,
    FeatureNotFoundError,
    InvalidFlagKeyError,
    PackageNotFoundError,
)
from club_entitlements.common.security import require_api_key
from club_entitlements.clubs.schemas import (
    ClubAddonCreate,
    ClubAddonResponse,
    ClubCreate,
    ClubPackageAssign,
    ClubPackageResponse,
    ClubResponse,
)

router = APIRouter(prefix="/clubs", tags=["clubs"])


def _get_service():
    from club_entitlements.deps import get_assignment_service
    return get_assignment_service()


def _get_db():
    from club_entitlements.deps import get_db
    return get_db()


def _http_error(e: EntitlementsError) -> HTTPException:
    if isinstance(e, AssignmentConflictError):
        return HTTPException(status_code=409, detail=e.message)
    if isinstance(e, InvalidFlagKeyError):
        return HTTPException(status_code=400, detail=e.message)
    if isinstance(e, (ClubNotFoundError, PackageNotFoundError, FeatureNotFoundError)):
        return HTTPException(status_code=404, detail=e.message)
    return HTTPException(status_code=400, detail=e.message)


@router.post("", response_model=ClubResponse, status_code=201)
async def create_club(body: ClubCreate, _=Depends(require_api_key)):
    svc = _get_service()
    db = _get_db()
    async with db.get_session() as session:
        club = await svc.create_club(
            session,
            name=body.name,
            slug=body.slug,
            subscription_tier=body.subscription_tier,
            features=body.features,
        )
        return ClubResponse.model_validate(club)


@router.get("/{club_id}", response_model=ClubResponse)
async def get_club(club_id: str, _=Depends(require_api_key)):
    svc = _get_service()
    db = _get_db()
    async with db.get_session() as session:
        club = await svc.get_club(session, club_id)
        if club is None:
            raise HTTPException(status_code=404, detail="Club not found")
        return ClubResponse.model_validate(club)


@router.put("/{club_id}/package", response_model=ClubPackageResponse, status_code=201)
async def assign_package(
    club_id: str, body: ClubPackageAssign, _=Depends(require_api_key),
):
    svc = _get_service()
    db = _get_db()
    try:
        async with db.get_session() as session:
            club_package = await svc.assign_package(
                session, club_id, body.package_id,
                member_limit_override=body.member_limit_override,
                user_limit_override=body.user_limit_override,
                custom_price_override=body.custom_price_override,
                start_date=body.start_date,
                end_date=body.end_date,
            )
            return ClubPackageResponse.model_validate(club_package)
    except EntitlementsError as e:
        raise _http_error(e)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))


@router.delete("/{club_id}/package", response_model=ClubPackageResponse)
async def end_package(club_id: str, _=Depends(require_api_key)):
    svc = _get_service()
    db = _get_db()
    try:
        async with db.get_session() as session:
            club_package = await svc.end_package(session, club_id)
            return ClubPackageResponse.model_validate(club_package)
    except EntitlementsError as e:
        raise _http_error(e)


@router.post("/{club_id}/addons", response_model=ClubAddonResponse, status_code=201)
async def add_addon(club_id: str, body: ClubAddonCreate, _=Depends(require_api_key)):
    svc = _get_service()
    db = _get_db()
    try:
        async with db.get_session() as session:
            addon = await svc.add_addon(
                session, club_id, body.feature_key, price_override=body.price_override,
            )
            return ClubAddonResponse(
                id=addon.id,
                club_id=addon.club_id,
                feature_key=body.feature_key,
                price_override=addon.price_override,
                start_date=addon.start_date,
                end_date=addon.end_date,
            )
    except EntitlementsError as e:
        raise _http_error(e)


@router.delete("/{club_id}/addons/{feature_key}", response_model=ClubAddonResponse)
async def remove_addon(club_id: str, feature_key: str, _=Depends(require_api_key)):
    svc = _get_service()
    db = _get_db()
    try:
        async with db.get_session() as session:
            addon = await svc.remove_addon(session, club_id, feature_key)
            return ClubAddonResponse(
                id=addon.id,
                club_id=addon.club_id,
                feature_key=feature_key,
                price_override=addon.price_override,
                start_date=addon.start_date,
                end_date=addon.end_date,
            )
    except EntitlementsError as e:
        raise _http_error(e)
