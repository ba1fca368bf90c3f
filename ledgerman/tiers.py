"""Tier policy: thresholds, progression and benefits. Pure functions, no I/O."""

from django.db import models
from django.utils.translation import gettext_lazy as _


class Tier(models.TextChoices):
    """Membership tiers, lowest to highest."""

    BRONZE = "bronze", _("Bronze")
    SILVER = "silver", _("Silver")
    GOLD = "gold", _("Gold")
    PLATINUM = "platinum", _("Platinum")


# Minimum lifetime points per tier, ascending
TIER_THRESHOLDS: list[tuple[Tier, int]] = [
    (Tier.BRONZE, 0),
    (Tier.SILVER, 500),
    (Tier.GOLD, 2000),
    (Tier.PLATINUM, 5000),
]

# Benefits each tier adds on top of the ones below it
_TIER_OWN_BENEFITS: dict[Tier, list[str]] = {
    Tier.BRONZE: [
        "Earn 1 point per dollar spent",
        "Access to community features",
        "Personalized skincare recommendations",
    ],
    Tier.SILVER: [
        "Earn 1.25 points per dollar spent",
        "Early access to new features",
        "Priority customer support",
    ],
    Tier.GOLD: [
        "Earn 1.5 points per dollar spent",
        "Exclusive product discounts",
        "Free shipping on all orders",
        "Beta feature access",
    ],
    Tier.PLATINUM: [
        "Earn 2 points per dollar spent",
        "VIP customer support",
        "Exclusive events and webinars",
        "Premium content access",
        "Personal skincare consultant",
    ],
}


def tier_for(lifetime_points: int) -> Tier:
    """Tier earned by a lifetime points total."""
    if lifetime_points < 0:
        raise ValueError("lifetime_points cannot be negative")
    current = Tier.BRONZE
    for tier, minimum in TIER_THRESHOLDS:
        if lifetime_points >= minimum:
            current = tier
    return current


def _as_tier(tier: Tier | str) -> Tier:
    """Accept Tier members or their values in any case ("Gold", "gold")."""
    return Tier(str(tier).lower())


def threshold(tier: Tier | str) -> int:
    """Lifetime points required to reach ``tier``."""
    return dict(TIER_THRESHOLDS)[_as_tier(tier)]


def next_tier(tier: Tier | str) -> Tier | None:
    """Tier above ``tier``, or None at the top."""
    order = [t for t, _minimum in TIER_THRESHOLDS]
    index = order.index(_as_tier(tier))
    if index + 1 < len(order):
        return order[index + 1]
    return None


def points_to_next_tier(account) -> int:
    """
    Lifetime points still needed to reach the next tier.

    Works on anything exposing ``lifetime_points`` (AccountInfo or the
    PointsAccount model). The tier is derived from lifetime points, never
    read from the stored column. Returns 0 at Platinum.
    """
    upcoming = next_tier(tier_for(account.lifetime_points))
    if upcoming is None:
        return 0
    return threshold(upcoming) - account.lifetime_points


def tier_benefits(tier: Tier | str) -> list[str]:
    """Cumulative benefits: lower tiers' benefits first, then the tier's own."""
    target = _as_tier(tier)
    benefits: list[str] = []
    for current, _minimum in TIER_THRESHOLDS:
        benefits.extend(_TIER_OWN_BENEFITS[current])
        if current == target:
            break
    return benefits
