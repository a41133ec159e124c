"""Seed definitions for the package catalog.

Used by ``scripts/seed_catalog.py`` and by tests that need a realistic
catalog. Every vertical gets Starter, Pro and Enterprise packages built from
the tier feature sets below, plus an empty Custom package.
"""

from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from club_entitlements.catalog.models import (
    CATEGORY_FEATURE,
    CATEGORY_MODULE,
    CATEGORY_OPERATIONAL,
    FeatureDefinitionModel,
    PackageFeatureModel,
    PackageModel,
    VerticalModel,
)

# ── Feature definitions ──
MODULE_SEEDS = [
    {"key": "golf", "name": "Golf Management", "description": "Tee sheet, courses, carts, caddies, scoring", "sort_order": 1},
    {"key": "bookings", "name": "Facility Bookings", "description": "Facility reservations, calendar, equipment", "sort_order": 2},
    {"key": "billing", "name": "Billing & Invoicing", "description": "Invoices, payments, AR, autopay", "sort_order": 3},
    {"key": "marketing", "name": "Marketing & Campaigns", "description": "Email campaigns, audiences, AI content", "sort_order": 4},
    {"key": "pos", "name": "Point of Sale", "description": "POS terminals, outlets, cash management", "sort_order": 5},
    {"key": "reports", "name": "Reports & Analytics", "description": "Dashboards, custom reports, data export", "sort_order": 6},
]

FEATURE_SEEDS = [
    {"key": "golfLottery", "name": "Golf Lottery", "description": "Tee time lottery system for high-demand slots", "addon_price": 99, "sort_order": 1},
    {"key": "memberWindows", "name": "Member Booking Windows", "description": "Priority booking windows by membership type", "addon_price": 49, "sort_order": 2},
    {"key": "aiDynamicPricing", "name": "AI Dynamic Pricing", "description": "AI-powered demand-based tee time pricing", "addon_price": 199, "sort_order": 3},
    {"key": "automatedFlows", "name": "Automated Workflows", "description": "Automated email flows, triggers, sequences", "addon_price": 149, "sort_order": 4},
    {"key": "memberPricing", "name": "Member-Specific Pricing", "description": "Custom pricing tiers per membership type", "addon_price": 79, "sort_order": 5},
    {"key": "houseAccounts", "name": "House Accounts", "description": "Member charge accounts with monthly billing", "addon_price": 99, "sort_order": 6},
    {"key": "whiteLabelApp", "name": "White-Label App", "description": "Custom-branded member mobile app", "addon_price": 299, "sort_order": 7},
    {"key": "customDomain", "name": "Custom Domain", "description": "Custom domain for member portal", "addon_price": 49, "sort_order": 8},
]

OPERATIONAL_SEEDS = [
    {"key": "maintenanceMode", "name": "Maintenance Mode", "description": "Toggle club into maintenance mode", "sort_order": 1},
    {"key": "newMemberRegistration", "name": "New Member Registration", "description": "Allow new member applications", "sort_order": 2},
    {"key": "onlineBooking", "name": "Online Booking", "description": "Allow online facility/tee time booking", "sort_order": 3},
    {"key": "emailCampaigns", "name": "Email Campaigns", "description": "Enable email campaign sending", "sort_order": 4},
]

SEEDS_BY_CATEGORY = {
    CATEGORY_MODULE: MODULE_SEEDS,
    CATEGORY_FEATURE: FEATURE_SEEDS,
    CATEGORY_OPERATIONAL: OPERATIONAL_SEEDS,
}

# ── Verticals ──
VERTICAL_SEEDS = [
    {"slug": "golf", "name": "Golf Club", "description": "Full-service golf clubs with courses, pro shops, and dining", "sort_order": 1},
    {"slug": "spa", "name": "Spa & Wellness", "description": "Spa and wellness centers with treatment rooms and fitness", "sort_order": 2},
    {"slug": "sports", "name": "Sports Club", "description": "Multi-sport clubs with courts, pools, and fitness facilities", "sort_order": 3},
    {"slug": "private", "name": "Private Club", "description": "Exclusive private membership clubs with dining and social events", "sort_order": 4},
]

# ── Tier -> enabled feature keys ──
_ALL_MODULES = frozenset(seed["key"] for seed in MODULE_SEEDS)

TIER_FEATURE_SETS: dict[str, frozenset[str]] = {
    "STARTER": _ALL_MODULES,
    "PRO": _ALL_MODULES | {
        "golfLottery", "memberWindows", "automatedFlows", "memberPricing", "houseAccounts",
    },
    "ENTERPRISE": _ALL_MODULES | {seed["key"] for seed in FEATURE_SEEDS},
}

PACKAGE_TIER_SEEDS: list[dict[str, Any]] = [
    {"tier": "STARTER", "label": "Starter", "base_price": 2999, "annual_price": 29990, "member_limit": 500, "user_limit": 5},
    {"tier": "PRO", "label": "Pro", "base_price": 7999, "annual_price": 79990, "member_limit": 2000, "user_limit": 20},
    {"tier": "ENTERPRISE", "label": "Enterprise", "base_price": 19999, "annual_price": 199990, "member_limit": None, "user_limit": None},
]

# Legacy subscription tier -> package tier used when migrating clubs
LEGACY_TO_PACKAGE_TIER = {
    "STARTER": "STARTER",
    "PROFESSIONAL": "PRO",
    "ENTERPRISE": "ENTERPRISE",
}


def package_slug(vertical_slug: str, tier: str) -> str:
    """Slug of the seeded package for a vertical and package tier."""
    return f"{vertical_slug}-{tier.lower()}"


async def apply_catalog_seeds(session: AsyncSession) -> dict[str, dict[str, str]]:
    """Idempotently insert the seeded catalog.

    Returns ``{"features": {key: id}, "packages": {slug: id}}``.
    """
    feature_ids: dict[str, str] = {}
    for category, seeds in SEEDS_BY_CATEGORY.items():
        for seed in seeds:
            result = await session.execute(
                select(FeatureDefinitionModel).where(FeatureDefinitionModel.key == seed["key"])
            )
            definition = result.scalar_one_or_none()
            if definition is None:
                definition = FeatureDefinitionModel(category=category, is_active=True, **seed)
                session.add(definition)
                await session.flush()
            feature_ids[definition.key] = definition.id

    package_ids: dict[str, str] = {}
    wired_keys = [seed["key"] for seed in MODULE_SEEDS + FEATURE_SEEDS]
    for vertical_seed in VERTICAL_SEEDS:
        result = await session.execute(
            select(VerticalModel).where(VerticalModel.slug == vertical_seed["slug"])
        )
        vertical = result.scalar_one_or_none()
        if vertical is None:
            vertical = VerticalModel(is_active=True, **vertical_seed)
            session.add(vertical)
            await session.flush()

        tier_rows = PACKAGE_TIER_SEEDS + [
            {"tier": "CUSTOM", "label": "Custom", "base_price": 0, "annual_price": None,
             "member_limit": None, "user_limit": None},
        ]
        for sort_order, config in enumerate(tier_rows, start=1):
            slug = package_slug(vertical.slug, config["tier"])
            result = await session.execute(select(PackageModel).where(PackageModel.slug == slug))
            package = result.scalar_one_or_none()
            if package is not None:
                package_ids[slug] = package.id
                continue

            package = PackageModel(
                vertical_id=vertical.id,
                name=f"{vertical.name} {config['label']}",
                slug=slug,
                tier=config["tier"],
                base_price=config["base_price"],
                annual_price=config["annual_price"],
                default_member_limit=config["member_limit"],
                default_user_limit=config["user_limit"],
                is_active=True,
                sort_order=sort_order,
            )
            session.add(package)
            await session.flush()
            package_ids[slug] = package.id

            # Custom packages start empty and are configured per club
            enabled_keys = TIER_FEATURE_SETS.get(config["tier"])
            if enabled_keys is None:
                continue
            for key in wired_keys:
                session.add(PackageFeatureModel(
                    package_id=package.id,
                    feature_definition_id=feature_ids[key],
                    enabled=key in enabled_keys,
                ))
            await session.flush()

    return {"features": feature_ids, "packages": package_ids}
