"""
Score Breakdown Estimator

Per-category point estimate shown next to the trust score. This is a display
aid only: the authoritative score comes from the recalculation service and
this estimate is never persisted.

Both ratios divide by max(orders_fulfilled, 1), i.e. by fulfilled orders
rather than orders received. Fulfillment is therefore always 0 or the full
35, and disputes are scaled against fulfilled volume. Kept as-is so the
estimate matches what vendors already see.
"""
import math
from typing import Optional

from ...models.trust import ScoreBreakdown, ScoreMaxima, VendorTrustProfile


MAX_POINTS = ScoreMaxima(
    fulfillment=35,
    review=25,
    dispute=15,
    policy=15,
    warning=10,
)

REVIEW_POINTS_WITH_POSITIVE = 25
REVIEW_POINTS_BASELINE = 15
POINTS_PER_WARNING = 2


def _round_half_up(value: float) -> int:
    """Round .5 away from zero for positives (2.5 -> 3), matching client rounding."""
    return int(math.floor(value + 0.5))


def estimate_breakdown(profile: Optional[VendorTrustProfile]) -> ScoreBreakdown:
    """
    Estimate the five score components for a profile snapshot.

    Returns the zero breakdown (with maxima) when no profile is loaded.
    """
    if profile is None:
        return ScoreBreakdown(max_points=MAX_POINTS)

    total_orders = max(profile.orders_fulfilled, 1)

    fulfillment_rate = profile.orders_fulfilled / total_orders
    fulfillment_points = _round_half_up(fulfillment_rate * MAX_POINTS.fulfillment)

    if profile.positive_reviews > 0:
        review_points = REVIEW_POINTS_WITH_POSITIVE
    else:
        review_points = REVIEW_POINTS_BASELINE

    dispute_ratio = profile.disputes_count / total_orders
    dispute_points = max(0, _round_half_up((1 - dispute_ratio) * MAX_POINTS.dispute))

    policy_points = MAX_POINTS.policy if profile.acknowledged_latest_policies else 0

    warning_points = max(0, MAX_POINTS.warning - profile.warnings_count * POINTS_PER_WARNING)

    return ScoreBreakdown(
        fulfillment_points=fulfillment_points,
        review_points=review_points,
        dispute_points=dispute_points,
        policy_points=policy_points,
        warning_points=warning_points,
        max_points=MAX_POINTS,
    )
