"""
Vendor Trust Engine - Trust Snapshot Models

Plain dataclasses handed to the pure engine functions. They are read from
VendorProfileDB rows and never written back directly; every mutation goes
through ProfileStore.
"""

from __future__ import annotations
from dataclasses import dataclass, field, asdict
from datetime import datetime
from typing import Dict, List, Optional, Any

from .db_models import GoalType, TrustTier


DEFAULT_TRUST_SCORE = 70
DEFAULT_TRUST_TIER = TrustTier.NEW_OR_IMPROVING.value


# =============================================================================
# RECOVERY GOALS
# =============================================================================

@dataclass
class RecoveryGoal:
    """One measurable remediation target inside a recovery program."""
    goal_type: GoalType
    description: str
    target_value: float
    current_value: float
    completed: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "goal_type": self.goal_type.value,
            "description": self.description,
            "target_value": self.target_value,
            "current_value": self.current_value,
            "completed": self.completed,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RecoveryGoal":
        # Rows written by the mobile client use camelCase keys
        goal_type = data.get("goal_type", data.get("goalType"))
        description = data.get("description", data.get("goalDescription", ""))
        target = data.get("target_value", data.get("targetValue", 0))
        current = data.get("current_value", data.get("currentValue", 0))
        return cls(
            goal_type=GoalType(goal_type),
            description=description,
            target_value=target,
            current_value=current,
            completed=bool(data.get("completed", False)),
        )


# =============================================================================
# PROFILE SNAPSHOT
# =============================================================================

@dataclass
class VendorTrustProfile:
    """Read-only snapshot of a vendor's persisted trust state."""
    vendor_id: str
    trust_score: int = DEFAULT_TRUST_SCORE
    trust_tier: str = DEFAULT_TRUST_TIER
    verified_vendor: bool = False
    orders_fulfilled: int = 0
    disputes_count: int = 0
    warnings_count: int = 0
    positive_reviews: int = 0
    acknowledged_latest_policies: bool = False
    trust_recovery_active: bool = False
    trust_recovery_start: Optional[datetime] = None
    trust_recovery_goals: List[RecoveryGoal] = field(default_factory=list)
    trust_recovery_progress: float = 0.0
    trust_recovery_completed: bool = False
    trust_score_last_drop_reason: Optional[str] = None
    last_update: Optional[datetime] = None
    shop_name: Optional[str] = None
    version: int = 1

    @classmethod
    def from_row(cls, row) -> "VendorTrustProfile":
        """Build a snapshot from a VendorProfileDB row (or any row-like object)."""

        def _or(value, default):
            return default if value is None else value

        return cls(
            vendor_id=row.id,
            trust_score=_or(row.trust_score, DEFAULT_TRUST_SCORE),
            trust_tier=_or(row.trust_tier, DEFAULT_TRUST_TIER),
            verified_vendor=bool(row.verified_vendor),
            orders_fulfilled=_or(row.orders_fulfilled, 0),
            disputes_count=_or(row.disputes_count, 0),
            warnings_count=_or(row.warnings_count, 0),
            positive_reviews=_or(row.positive_reviews, 0),
            acknowledged_latest_policies=bool(row.acknowledged_latest_policies),
            trust_recovery_active=bool(row.trust_recovery_active),
            trust_recovery_start=row.trust_recovery_start,
            trust_recovery_goals=[RecoveryGoal.from_dict(g) for g in (row.trust_recovery_goals or [])],
            trust_recovery_progress=float(_or(row.trust_recovery_progress, 0.0)),
            trust_recovery_completed=bool(row.trust_recovery_completed),
            trust_score_last_drop_reason=row.trust_score_last_drop_reason,
            last_update=row.last_trust_score_update,
            shop_name=row.shop_name,
            version=_or(row.version, 1),
        )

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["trust_recovery_goals"] = [g.to_dict() for g in self.trust_recovery_goals]
        for key in ("trust_recovery_start", "last_update"):
            value = data[key]
            data[key] = value.isoformat() if value else None
        return data


# =============================================================================
# DERIVED VIEWS
# =============================================================================

@dataclass(frozen=True)
class ScoreMaxima:
    fulfillment: int = 35
    review: int = 25
    dispute: int = 15
    policy: int = 15
    warning: int = 10

    def total(self) -> int:
        return self.fulfillment + self.review + self.dispute + self.policy + self.warning


@dataclass(frozen=True)
class ScoreBreakdown:
    """Per-category display estimate. Never the authoritative score."""
    fulfillment_points: int = 0
    review_points: int = 0
    dispute_points: int = 0
    policy_points: int = 0
    warning_points: int = 0
    max_points: ScoreMaxima = field(default_factory=ScoreMaxima)

    @property
    def total(self) -> int:
        return (
            self.fulfillment_points
            + self.review_points
            + self.dispute_points
            + self.policy_points
            + self.warning_points
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "fulfillment_points": self.fulfillment_points,
            "review_points": self.review_points,
            "dispute_points": self.dispute_points,
            "policy_points": self.policy_points,
            "warning_points": self.warning_points,
            "total": self.total,
            "max_points": asdict(self.max_points),
        }


@dataclass(frozen=True)
class TierAffordance:
    """Display affordances derived from the stored tier and score."""
    tier: Optional[TrustTier]
    label: str
    badge_text: str
    color: str
    icon: str
    tooltip: str
    show_badge: bool
    can_request_verification: bool
    recovery_recommended: bool

    @property
    def is_known_tier(self) -> bool:
        return self.tier is not None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "tier": self.tier.value if self.tier else None,
            "label": self.label,
            "badge_text": self.badge_text,
            "color": self.color,
            "icon": self.icon,
            "tooltip": self.tooltip,
            "show_badge": self.show_badge,
            "can_request_verification": self.can_request_verification,
            "recovery_recommended": self.recovery_recommended,
        }
