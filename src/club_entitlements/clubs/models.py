"""SQLAlchemy models for clubs and their package assignments."""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import JSON, Boolean, DateTime, ForeignKey, Integer, Numeric, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from club_entitlements.catalog.models import FeatureDefinitionModel, PackageModel
from club_entitlements.common.models import Base, TimestampMixin, generate_uuid, utcnow


class ClubModel(Base, TimestampMixin):
    __tablename__ = "clubs"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_uuid)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    slug: Mapped[str] = mapped_column(String(100), unique=True, nullable=False, index=True)
    # Legacy subscription data, read only when the club has no package
    subscription_tier: Mapped[str] = mapped_column(String(50), default="STARTER")
    features: Mapped[dict] = mapped_column(JSON, default=dict)


class ClubPackageModel(Base, TimestampMixin):
    __tablename__ = "club_packages"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_uuid)
    club_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("clubs.id"), nullable=False, index=True
    )
    package_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("packages.id"), nullable=False
    )
    member_limit_override: Mapped[int | None] = mapped_column(Integer, nullable=True)
    user_limit_override: Mapped[int | None] = mapped_column(Integer, nullable=True)
    custom_price_override: Mapped[Decimal | None] = mapped_column(Numeric(10, 2), nullable=True)
    start_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    end_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    package: Mapped["PackageModel"] = relationship()


class ClubAddonModel(Base, TimestampMixin):
    __tablename__ = "club_addons"
    __table_args__ = (
        UniqueConstraint("club_id", "feature_definition_id", name="uq_club_addon"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_uuid)
    club_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("clubs.id"), nullable=False, index=True
    )
    feature_definition_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("feature_definitions.id"), nullable=False
    )
    price_override: Mapped[Decimal | None] = mapped_column(Numeric(10, 2), nullable=True)
    start_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    end_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    feature_definition: Mapped["FeatureDefinitionModel"] = relationship()


class ClubOperationalFlagModel(Base, TimestampMixin):
    """Sparse override table: a row exists only when the value is not the default."""

    __tablename__ = "club_operational_flags"
    __table_args__ = (
        UniqueConstraint(
            "club_id", "feature_definition_id", name="uq_club_operational_flag"
        ),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_uuid)
    club_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("clubs.id"), nullable=False, index=True
    )
    feature_definition_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("feature_definitions.id"), nullable=False
    )
    enabled: Mapped[bool] = mapped_column(Boolean, nullable=False)

    feature_definition: Mapped["FeatureDefinitionModel"] = relationship()
