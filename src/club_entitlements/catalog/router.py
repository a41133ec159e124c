"""Catalog API router (read-only)."""

from fastapi import APIRouter, Depends, HTTPException, Query

from club_entitlements.catalog.schemas import (
    FeatureDefinitionResponse,
    PackageFeatureResponse,
    PackageResponse,
    VerticalResponse,
)
from club_entitlements.common.security import require_api_key

router = APIRouter(prefix="/catalog", tags=["catalog"])


def _get_service():
    from club_entitlements.deps import get_catalog_service
    return get_catalog_service()


def _get_db():
    from club_entitlements.deps import get_db
    return get_db()


def _package_response(package) -> PackageResponse:
    return PackageResponse(
        id=package.id,
        vertical_id=package.vertical_id,
        name=package.name,
        slug=package.slug,
        tier=package.tier,
        base_price=package.base_price,
        annual_price=package.annual_price,
        default_member_limit=package.default_member_limit,
        default_user_limit=package.default_user_limit,
        features=[
            PackageFeatureResponse(
                key=pf.feature_definition.key,
                category=pf.feature_definition.category,
                enabled=pf.enabled,
            )
            for pf in sorted(
                package.features,
                key=lambda pf: (pf.feature_definition.category, pf.feature_definition.sort_order),
            )
        ],
    )


@router.get("/features", response_model=list[FeatureDefinitionResponse])
async def list_feature_definitions(
    category: str | None = Query(None),
    _=Depends(require_api_key),
):
    svc = _get_service()
    db = _get_db()
    try:
        async with db.get_session() as session:
            definitions = await svc.list_feature_definitions(session, category)
            return [FeatureDefinitionResponse.model_validate(d) for d in definitions]
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.get("/verticals", response_model=list[VerticalResponse])
async def list_verticals(_=Depends(require_api_key)):
    svc = _get_service()
    db = _get_db()
    async with db.get_session() as session:
        verticals = await svc.list_verticals(session)
        return [VerticalResponse.model_validate(v) for v in verticals]


@router.get("/packages", response_model=list[PackageResponse])
async def list_packages(
    vertical_id: str | None = Query(None),
    _=Depends(require_api_key),
):
    svc = _get_service()
    db = _get_db()
    async with db.get_session() as session:
        packages = await svc.list_packages(session, vertical_id)
        return [_package_response(p) for p in packages]


@router.get("/packages/{package_id}", response_model=PackageResponse)
async def get_package(package_id: str, _=Depends(require_api_key)):
    svc = _get_service()
    db = _get_db()
    async with db.get_session() as session:
        package = await svc.get_package(session, package_id)
        if package is None:
            raise HTTPException(status_code=404, detail="Package not found")
        return _package_response(package)
