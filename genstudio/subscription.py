"""
Subscription tiers and monthly generation quota.

Two tiers are offered. ``free`` allows 10 generations per calendar month
and image-only features; ``pro`` is unlimited and unlocks video,
HD quality and background removal. Usage resets on the first day of
the following month.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional

FREE = "free"
PRO = "pro"

SUBSCRIPTION_LIMITS: Dict[str, Dict[str, Any]] = {
    FREE: {
        "generations_per_month": 10,
        "max_reference_images": 3,
        "features": {
            "image_generation": True,
            "video_generation": False,
            "style_presets": True,
            "image_editing": True,
            "ai_assistant": True,
            "priority_support": False,
            "hd_quality": False,
            "background_removal": False,
            "advanced_body_editing": False,
            "pro_filters": False,
        },
    },
    PRO: {
        "generations_per_month": None,
        "max_reference_images": 5,
        "features": {
            "image_generation": True,
            "video_generation": True,
            "style_presets": True,
            "image_editing": True,
            "ai_assistant": True,
            "priority_support": True,
            "hd_quality": True,
            "background_removal": True,
            "advanced_body_editing": True,
            "pro_filters": True,
        },
    },
}


@dataclass
class SubscriptionStatus:
    """Current tier and usage counters.

    Attributes:
        tier: ``"free"`` or ``"pro"``.
        generations_used: Generations consumed in the current period.
        generations_limit: Monthly allowance (None means unlimited).
        reset_date: When ``generations_used`` returns to zero.
    """

    tier: str
    generations_used: int
    generations_limit: Optional[int]
    reset_date: datetime

    def to_dict(self) -> Dict[str, Any]:
        return {
            "tier": self.tier,
            "generations_used": self.generations_used,
            "generations_limit": self.generations_limit,
            "reset_date": self.reset_date.isoformat(),
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "SubscriptionStatus":
        return cls(
            tier=d["tier"],
            generations_used=int(d.get("generations_used", 0)),
            generations_limit=d.get("generations_limit"),
            reset_date=datetime.fromisoformat(d["reset_date"]),
        )


def usage_percentage(used: int, limit: Optional[int]) -> int:
    """Percentage of the allowance consumed, capped at 100 (0 if unlimited)."""
    if limit is None:
        return 0
    if limit <= 0:
        return 100
    # round half up
    return min(100, int(used / limit * 100 + 0.5))


def can_generate(status: SubscriptionStatus, count: int = 1) -> bool:
    """Whether ``count`` more generations fit in the current allowance."""
    if status.tier == PRO:
        return True
    return status.generations_used + count <= (status.generations_limit or 0)


def remaining_generations(status: SubscriptionStatus) -> Optional[int]:
    if status.tier == PRO:
        return None
    return max(0, (status.generations_limit or 0) - status.generations_used)


def should_show_upgrade_prompt(status: SubscriptionStatus) -> bool:
    if status.tier == PRO:
        return False
    return usage_percentage(status.generations_used, status.generations_limit) >= 80


def has_feature(status: SubscriptionStatus, feature: str) -> bool:
    """Check a tier feature flag (unknown features are treated as disabled)."""
    return bool(SUBSCRIPTION_LIMITS[status.tier]["features"].get(feature, False))


def reset_date_string(reset_date: datetime) -> str:
    """Format like ``"Nov 1, 2026"``."""
    return f"{reset_date.strftime('%b')} {reset_date.day}, {reset_date.year}"


def next_reset_date(now: Optional[datetime] = None) -> datetime:
    """First day of the month following ``now``."""
    now = now or datetime.now()
    if now.month == 12:
        return datetime(now.year + 1, 1, 1)
    return datetime(now.year, now.month + 1, 1)


def initialize_subscription(now: Optional[datetime] = None) -> SubscriptionStatus:
    return SubscriptionStatus(
        tier=FREE,
        generations_used=0,
        generations_limit=SUBSCRIPTION_LIMITS[FREE]["generations_per_month"],
        reset_date=next_reset_date(now),
    )


def reset_monthly_usage(
    status: SubscriptionStatus, now: Optional[datetime] = None
) -> SubscriptionStatus:
    """Zero the usage counter once the reset date has passed."""
    now = now or datetime.now()
    if now >= status.reset_date:
        return SubscriptionStatus(
            tier=status.tier,
            generations_used=0,
            generations_limit=status.generations_limit,
            reset_date=next_reset_date(now),
        )
    return status


def upgrade(status: SubscriptionStatus) -> SubscriptionStatus:
    """Move to the pro tier, keeping the usage counters."""
    return SubscriptionStatus(
        tier=PRO,
        generations_used=status.generations_used,
        generations_limit=SUBSCRIPTION_LIMITS[PRO]["generations_per_month"],
        reset_date=status.reset_date,
    )


def record_generations(status: SubscriptionStatus, count: int = 1) -> SubscriptionStatus:
    return SubscriptionStatus(
        tier=status.tier,
        generations_used=status.generations_used + count,
        generations_limit=status.generations_limit,
        reset_date=status.reset_date,
    )
