"""SQLAlchemy models for the shared package catalog."""

from decimal import Decimal
from typing import Optional

from sqlalchemy import Boolean, ForeignKey, Integer, Numeric, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from club_entitlements.common.models import Base, TimestampMixin, generate_uuid

# FeatureDefinition.category values
CATEGORY_MODULE = "MODULE"
CATEGORY_FEATURE = "FEATURE"
CATEGORY_OPERATIONAL = "OPERATIONAL"
FEATURE_CATEGORIES = (CATEGORY_MODULE, CATEGORY_FEATURE, CATEGORY_OPERATIONAL)


class FeatureDefinitionModel(Base, TimestampMixin):
    __tablename__ = "feature_definitions"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_uuid)
    key: Mapped[str] = mapped_column(String(100), unique=True, nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    category: Mapped[str] = mapped_column(String(20), nullable=False, index=True)
    addon_price: Mapped[Decimal | None] = mapped_column(Numeric(10, 2), nullable=True)
    sort_order: Mapped[int] = mapped_column(Integer, default=0)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)


class VerticalModel(Base, TimestampMixin):
    __tablename__ = "verticals"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_uuid)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    slug: Mapped[str] = mapped_column(String(100), unique=True, nullable=False, index=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    sort_order: Mapped[int] = mapped_column(Integer, default=0)

    packages: Mapped[list["PackageModel"]] = relationship(back_populates="vertical")


class PackageModel(Base, TimestampMixin):
    __tablename__ = "packages"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_uuid)
    vertical_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("verticals.id"), nullable=True, index=True
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    slug: Mapped[str] = mapped_column(String(100), unique=True, nullable=False, index=True)
    tier: Mapped[str] = mapped_column(String(20), nullable=False)
    base_price: Mapped[Decimal] = mapped_column(Numeric(10, 2), default=0)
    annual_price: Mapped[Decimal | None] = mapped_column(Numeric(10, 2), nullable=True)
    default_member_limit: Mapped[int | None] = mapped_column(Integer, nullable=True)
    default_user_limit: Mapped[int | None] = mapped_column(Integer, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    sort_order: Mapped[int] = mapped_column(Integer, default=0)

    vertical: Mapped[Optional["VerticalModel"]] = relationship(back_populates="packages")
    features: Mapped[list["PackageFeatureModel"]] = relationship(back_populates="package")


class PackageFeatureModel(Base, TimestampMixin):
    __tablename__ = "package_features"
    __table_args__ = (
        UniqueConstraint(
            "package_id", "feature_definition_id", name="uq_package_feature"
        ),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_uuid)
    package_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("packages.id"), nullable=False, index=True
    )
    feature_definition_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("feature_definitions.id"), nullable=False
    )
    enabled: Mapped[bool] = mapped_column(Boolean, default=False)

    package: Mapped["PackageModel"] = relationship(back_populates="features")
    feature_definition: Mapped["FeatureDefinitionModel"] = relationship()
