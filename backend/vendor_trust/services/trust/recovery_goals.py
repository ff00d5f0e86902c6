"""
Recovery Goal Generator

Turns a profile snapshot into the ordered list of remediation goals for a
recovery program. Each GoalType has exactly one rule; the rules run in a fixed
order and every deficiency found contributes its goals.

An empty result means no recovery is needed, not an error.
"""
from typing import Callable, Dict, List

from ...models.db_models import GoalType
from ...models.trust import RecoveryGoal, VendorTrustProfile


MIN_FULFILLED_ORDERS = 5
MIN_POSITIVE_REVIEWS = 3
DISPUTE_FREE_DAYS = 30
REPORT_FREE_DAYS = 30


def _orders_goals(profile: VendorTrustProfile) -> List[RecoveryGoal]:
    if profile.orders_fulfilled >= MIN_FULFILLED_ORDERS:
        return []
    return [RecoveryGoal(
        goal_type=GoalType.ORDERS,
        description=f"Complete {MIN_FULFILLED_ORDERS} on-time orders",
        target_value=MIN_FULFILLED_ORDERS,
        current_value=profile.orders_fulfilled,
    )]


def _disputes_goals(profile: VendorTrustProfile) -> List[RecoveryGoal]:
    if profile.disputes_count <= 0:
        return []
    return [RecoveryGoal(
        goal_type=GoalType.DISPUTES,
        description="Resolve all open disputes",
        target_value=0,
        current_value=profile.disputes_count,
    )]


def _dispute_free_goals(profile: VendorTrustProfile) -> List[RecoveryGoal]:
    # Paired with the disputes goal
    if profile.disputes_count <= 0:
        return []
    return [RecoveryGoal(
        goal_type=GoalType.DISPUTE_FREE,
        description=f"Maintain {DISPUTE_FREE_DAYS} days dispute-free",
        target_value=DISPUTE_FREE_DAYS,
        current_value=0,
    )]


def _reviews_goals(profile: VendorTrustProfile) -> List[RecoveryGoal]:
    if profile.positive_reviews >= MIN_POSITIVE_REVIEWS:
        return []
    return [RecoveryGoal(
        goal_type=GoalType.REVIEWS,
        description=f"Achieve {MIN_POSITIVE_REVIEWS} new 4★+ reviews",
        target_value=MIN_POSITIVE_REVIEWS,
        current_value=profile.positive_reviews,
    )]


def _policies_goals(profile: VendorTrustProfile) -> List[RecoveryGoal]:
    if profile.acknowledged_latest_policies:
        return []
    return [RecoveryGoal(
        goal_type=GoalType.POLICIES,
        description="Re-acknowledge all active policies",
        target_value=1,
        current_value=0,
    )]


def _warnings_goals(profile: VendorTrustProfile) -> List[RecoveryGoal]:
    if profile.warnings_count <= 0:
        return []
    return [RecoveryGoal(
        goal_type=GoalType.WARNINGS,
        description=f"Zero new reports in {REPORT_FREE_DAYS} days",
        target_value=REPORT_FREE_DAYS,
        current_value=0,
    )]


# Insertion order is the output order
GOAL_RULES: Dict[GoalType, Callable[[VendorTrustProfile], List[RecoveryGoal]]] = {
    GoalType.ORDERS: _orders_goals,
    GoalType.DISPUTES: _disputes_goals,
    GoalType.DISPUTE_FREE: _dispute_free_goals,
    GoalType.REVIEWS: _reviews_goals,
    GoalType.POLICIES: _policies_goals,
    GoalType.WARNINGS: _warnings_goals,
}

_missing = set(GoalType) - set(GOAL_RULES)
if _missing:
    raise RuntimeError(f"No recovery goal rule for: {sorted(g.value for g in _missing)}")


def generate_recovery_goals(profile: VendorTrustProfile) -> List[RecoveryGoal]:
    """
    Build a fresh goal list for the profile.

    Always a full replacement: existing goals on the profile are ignored.
    """
    goals: List[RecoveryGoal] = []
    for rule in GOAL_RULES.values():
        goals.extend(rule(profile))
    return goals
