"""Read-only catalog queries: feature definitions, verticals, packages."""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from club_entitlements.catalog.models import (
    FEATURE_CATEGORIES,
    FeatureDefinitionModel,
    PackageFeatureModel,
    PackageModel,
    VerticalModel,
)


class CatalogService:
    """Catalog reads. Catalog writes belong to the platform admin tooling."""

    async def list_feature_definitions(
        self, session: AsyncSession, category: str | None = None,
    ) -> list[FeatureDefinitionModel]:
        query = select(FeatureDefinitionModel).where(FeatureDefinitionModel.is_active == True)
        if category is not None:
            category = category.upper()
            if category not in FEATURE_CATEGORIES:
                raise ValueError(
                    f"Unknown category: {category}. Must be one of {', '.join(FEATURE_CATEGORIES)}"
                )
            query = query.where(FeatureDefinitionModel.category == category)
        query = query.order_by(FeatureDefinitionModel.category, FeatureDefinitionModel.sort_order)
        result = await session.execute(query)
        return list(result.scalars().all())

    async def get_feature_definition_by_key(
        self, session: AsyncSession, key: str,
    ) -> FeatureDefinitionModel | None:
        result = await session.execute(
            select(FeatureDefinitionModel).where(FeatureDefinitionModel.key == key)
        )
        return result.scalar_one_or_none()

    async def list_verticals(self, session: AsyncSession) -> list[VerticalModel]:
        result = await session.execute(
            select(VerticalModel)
            .where(VerticalModel.is_active == True)
            .order_by(VerticalModel.sort_order)
        )
        return list(result.scalars().all())

    async def list_packages(
        self, session: AsyncSession, vertical_id: str | None = None,
    ) -> list[PackageModel]:
        query = (
            select(PackageModel)
            .where(PackageModel.is_active == True)
            .options(
                selectinload(PackageModel.features).selectinload(
                    PackageFeatureModel.feature_definition
                )
            )
            .order_by(PackageModel.vertical_id, PackageModel.sort_order)
        )
        if vertical_id is not None:
            query = query.where(PackageModel.vertical_id == vertical_id)
        result = await session.execute(query)
        return list(result.scalars().all())

    async def get_package(
        self, session: AsyncSession, package_id: str,
    ) -> PackageModel | None:
        result = await session.execute(
            select(PackageModel)
            .where(PackageModel.id == package_id)
            .options(
                selectinload(PackageModel.features).selectinload(
                    PackageFeatureModel.feature_definition
                )
            )
        )
        return result.scalar_one_or_none()
