"""
Spending limits, alerts and transaction history.

A :class:`SpendingLimit` caps spend over a calendar period (day, week
starting Sunday, month, year). Limits with ``block_on_exceed`` deny any
charge that would push spend past the cap. Alerts fire when spend crosses
an absolute threshold or a percentage of a limit, and re-fire according
to their frequency.

All operations return new records; nothing is mutated in place.
"""

from __future__ import annotations

import uuid
from dataclasses import asdict, dataclass, field, replace
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional, Tuple

PERIODS = ("daily", "weekly", "monthly", "yearly")
FREQUENCIES = ("once", "daily", "weekly", "always")
CATEGORIES = ("subscription", "generation", "addon", "overage")


def _new_id(prefix: str) -> str:
    return f"{prefix}-{uuid.uuid4().hex[:12]}"


def _dt(value: Optional[str]) -> Optional[datetime]:
    return datetime.fromisoformat(value) if value else None


@dataclass
class SpendingAlert:
    id: str
    name: str
    threshold: float
    percentage: Optional[float] = None
    frequency: str = "once"
    channels: List[str] = field(default_factory=lambda: ["email"])
    enabled: bool = True
    last_triggered: Optional[datetime] = None
    trigger_count: int = 0

    def to_dict(self) -> Dict[str, Any]:
        d = asdict(self)
        d["last_triggered"] = self.last_triggered.isoformat() if self.last_triggered else None
        return d

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "SpendingAlert":
        d = dict(d)
        d["last_triggered"] = _dt(d.get("last_triggered"))
        return cls(**d)


@dataclass
class SpendingLimit:
    id: str
    amount: float
    period: str
    current_spend: float
    start_date: datetime
    reset_date: datetime
    enabled: bool = True
    block_on_exceed: bool = True
    alerts: List[SpendingAlert] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "amount": self.amount,
            "period": self.period,
            "current_spend": self.current_spend,
            "start_date": self.start_date.isoformat(),
            "reset_date": self.reset_date.isoformat(),
            "enabled": self.enabled,
            "block_on_exceed": self.block_on_exceed,
            "alerts": [a.to_dict() for a in self.alerts],
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "SpendingLimit":
        d = dict(d)
        d["start_date"] = _dt(d["start_date"])
        d["reset_date"] = _dt(d["reset_date"])
        d["alerts"] = [SpendingAlert.from_dict(a) for a in d.get("alerts", [])]
        return cls(**d)


@dataclass
class SpendingHistory:
    id: str
    date: datetime
    amount: float
    description: str
    category: str
    status: str = "completed"

    def to_dict(self) -> Dict[str, Any]:
        d = asdict(self)
        d["date"] = self.date.isoformat()
        return d

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "SpendingHistory":
        d = dict(d)
        d["date"] = _dt(d["date"])
        return cls(**d)


@dataclass
class SpendingLimitsConfig:
    limits: List[SpendingLimit] = field(default_factory=list)
    global_alerts: List[SpendingAlert] = field(default_factory=list)
    history: List[SpendingHistory] = field(default_factory=list)
    total_spend_this_month: float = 0.0
    total_spend_this_year: float = 0.0
    notifications_enabled: bool = True

    def to_dict(self) -> Dict[str, Any]:
        return {
            "limits": [lim.to_dict() for lim in self.limits],
            "global_alerts": [a.to_dict() for a in self.global_alerts],
            "history": [h.to_dict() for h in self.history],
            "total_spend_this_month": self.total_spend_this_month,
            "total_spend_this_year": self.total_spend_this_year,
            "notifications_enabled": self.notifications_enabled,
        }

    @classmethod
    def from_dict(cls, d: Optional[Dict[str, Any]]) -> "SpendingLimitsConfig":
        if not d:
            return cls()
        return cls(
            limits=[SpendingLimit.from_dict(x) for x in d.get("limits", [])],
            global_alerts=[SpendingAlert.from_dict(x) for x in d.get("global_alerts", [])],
            history=[SpendingHistory.from_dict(x) for x in d.get("history", [])],
            total_spend_this_month=d.get("total_spend_this_month", 0.0),
            total_spend_this_year=d.get("total_spend_this_year", 0.0),
            notifications_enabled=d.get("notifications_enabled", True),
        )


# ── Periods ──────────────────────────────────────────────────────────────────


def period_dates(period: str, now: Optional[datetime] = None) -> Tuple[datetime, datetime]:
    """Return ``(start, reset)`` of the calendar period containing ``now``."""
    now = now or datetime.now()
    today = datetime(now.year, now.month, now.day)

    if period == "daily":
        return today, today + timedelta(days=1)
    if period == "weekly":
        # weeks start on Sunday
        start = today - timedelta(days=(today.weekday() + 1) % 7)
        return start, start + timedelta(days=7)
    if period == "monthly":
        start = datetime(now.year, now.month, 1)
        if now.month == 12:
            return start, datetime(now.year + 1, 1, 1)
        return start, datetime(now.year, now.month + 1, 1)
    if period == "yearly":
        return datetime(now.year, 1, 1), datetime(now.year + 1, 1, 1)

    raise ValueError(f"Unknown period '{period}'. Supported: {list(PERIODS)}")


def format_period(period: str) -> str:
    return period[:1].upper() + period[1:]


def period_days_remaining(reset_date: datetime, now: Optional[datetime] = None) -> int:
    now = now or datetime.now()
    seconds = (reset_date - now).total_seconds()
    days = -(-seconds // 86400)  # ceil
    return max(0, int(days))


# ── Builders ─────────────────────────────────────────────────────────────────


def create_spending_limit(
    amount: float,
    period: str,
    block_on_exceed: bool = True,
    now: Optional[datetime] = None,
) -> SpendingLimit:
    start, reset = period_dates(period, now)
    return SpendingLimit(
        id=_new_id("limit"),
        amount=amount,
        period=period,
        current_spend=0.0,
        start_date=start,
        reset_date=reset,
        block_on_exceed=block_on_exceed,
    )


def create_spending_alert(
    name: str,
    threshold: float,
    percentage: Optional[float] = None,
) -> SpendingAlert:
    return SpendingAlert(
        id=_new_id("alert"),
        name=name,
        threshold=threshold,
        percentage=percentage,
    )


# ── Limit checks ─────────────────────────────────────────────────────────────


def should_reset_limit(limit: SpendingLimit, now: Optional[datetime] = None) -> bool:
    return (now or datetime.now()) >= limit.reset_date


def reset_spending_limit(limit: SpendingLimit, now: Optional[datetime] = None) -> SpendingLimit:
    start, reset = period_dates(limit.period, now)
    return replace(
        limit,
        current_spend=0.0,
        start_date=start,
        reset_date=reset,
        alerts=[replace(a, last_triggered=None, trigger_count=0) for a in limit.alerts],
    )


def check_and_reset_limits(
    limits: List[SpendingLimit], now: Optional[datetime] = None
) -> List[SpendingLimit]:
    return [
        reset_spending_limit(lim, now) if should_reset_limit(lim, now) else lim
        for lim in limits
    ]


def spending_percentage(current_spend: float, limit: float) -> int:
    if limit == 0:
        return 0
    return min(100, int(current_spend / limit * 100 + 0.5))


def is_limit_exceeded(limit: SpendingLimit) -> bool:
    return limit.current_spend >= limit.amount


def is_approaching_limit(limit: SpendingLimit, threshold: float = 80) -> bool:
    pct = spending_percentage(limit.current_spend, limit.amount)
    return threshold <= pct < 100


def can_spend(limits: List[SpendingLimit], amount: float) -> Tuple[bool, Optional[str]]:
    """Check whether a charge of ``amount`` is allowed by every blocking limit.

    Returns:
        ``(allowed, reason)``; ``reason`` names the first limit that blocks.
    """
    for limit in limits:
        if not limit.enabled:
            continue
        if limit.block_on_exceed and limit.current_spend + amount > limit.amount:
            return False, (
                f"This transaction would exceed your {limit.period} "
                f"spending limit of ${limit.amount:.2f}"
            )
    return True, None


# ── Alerts ───────────────────────────────────────────────────────────────────

_REFIRE_AFTER = {
    "daily": timedelta(days=1),
    "weekly": timedelta(days=7),
}


def should_trigger_alert(
    alert: SpendingAlert,
    current_spend: float,
    limit_amount: Optional[float] = None,
    now: Optional[datetime] = None,
) -> bool:
    """Decide whether ``alert`` fires at ``current_spend``.

    Percentage alerts are measured against ``limit_amount`` when one is
    given; otherwise the absolute ``threshold`` applies.
    """
    if not alert.enabled:
        return False

    if alert.percentage is not None and limit_amount is not None:
        met = spending_percentage(current_spend, limit_amount) >= alert.percentage
    else:
        met = current_spend >= alert.threshold

    if not met:
        return False
    if alert.last_triggered is None:
        return True

    if alert.frequency == "always":
        return True
    if alert.frequency in _REFIRE_AFTER:
        elapsed = (now or datetime.now()) - alert.last_triggered
        return elapsed >= _REFIRE_AFTER[alert.frequency]
    return False


def refresh_period_totals(
    config: SpendingLimitsConfig, now: Optional[datetime] = None
) -> SpendingLimitsConfig:
    """Recompute month/year totals from completed history.

    Global alerts track monthly spend; any last triggered before the current
    month are re-armed.
    """
    now = now or datetime.now()
    month_start, _ = period_dates("monthly", now)
    year_start, _ = period_dates("yearly", now)

    completed = [h for h in config.history if h.status == "completed"]
    alerts = [
        replace(a, last_triggered=None, trigger_count=0)
        if a.last_triggered is not None and a.last_triggered < month_start
        else a
        for a in config.global_alerts
    ]
    return replace(
        config,
        global_alerts=alerts,
        total_spend_this_month=sum((h.amount for h in completed if h.date >= month_start), 0.0),
        total_spend_this_year=sum((h.amount for h in completed if h.date >= year_start), 0.0),
    )


def _fire(alerts: List[SpendingAlert], spend: float, limit_amount, now):
    updated, fired = [], []
    for alert in alerts:
        if should_trigger_alert(alert, spend, limit_amount, now):
            alert = replace(alert, last_triggered=now, trigger_count=alert.trigger_count + 1)
            fired.append(alert)
        updated.append(alert)
    return updated, fired


def add_spending_transaction(
    config: SpendingLimitsConfig,
    amount: float,
    description: str,
    category: str,
    now: Optional[datetime] = None,
) -> Tuple[SpendingLimitsConfig, List[SpendingAlert]]:
    """Record a charge, update every enabled limit and evaluate alerts.

    Due limit resets and the month/year totals are applied first, as of
    ``now``.

    Returns:
        The updated configuration and the alerts that fired.
    """
    if category not in CATEGORIES:
        raise ValueError(f"Unknown category '{category}'. Supported: {list(CATEGORIES)}")

    now = now or datetime.now()
    config = refresh_period_totals(config, now)
    config = replace(config, limits=check_and_reset_limits(config.limits, now))
    transaction = SpendingHistory(
        id=_new_id("txn"),
        date=now,
        amount=amount,
        description=description,
        category=category,
    )

    triggered: List[SpendingAlert] = []
    limits = []
    for limit in config.limits:
        if not limit.enabled:
            limits.append(limit)
            continue
        new_spend = limit.current_spend + amount
        alerts, fired = _fire(limit.alerts, new_spend, limit.amount, now)
        triggered.extend(fired)
        limits.append(replace(limit, current_spend=new_spend, alerts=alerts))

    global_alerts, fired = _fire(
        config.global_alerts, config.total_spend_this_month + amount, None, now
    )
    triggered.extend(fired)

    updated = replace(
        config,
        limits=limits,
        global_alerts=global_alerts,
        history=[transaction] + config.history,
        total_spend_this_month=config.total_spend_this_month + amount,
        total_spend_this_year=config.total_spend_this_year + amount,
    )
    return updated, triggered
