"""
Tests for the Recovery Goal Generator and Progress Tracker.

Covers:
1. Fixed goal order and thresholds
2. Empty list when no deficiency applies
3. Idempotence on an unchanged profile
4. Progress = 100 * completed / total over the whole list
5. Out-of-range goal indexes are rejected without mutation
"""
from dataclasses import replace

import pytest

from vendor_trust.models.db_models import GoalType
from vendor_trust.models.trust import RecoveryGoal, VendorTrustProfile
from vendor_trust.services.trust import InvalidGoalIndexError
from vendor_trust.services.trust.recovery_goals import GOAL_RULES, generate_recovery_goals
from vendor_trust.services.trust.progress_tracker import apply_goal_update, compute_progress


def _struggling_vendor(**overrides):
    fields = dict(
        orders_fulfilled=0,
        disputes_count=2,
        positive_reviews=1,
        acknowledged_latest_policies=False,
        warnings_count=1,
    )
    fields.update(overrides)
    return VendorTrustProfile(vendor_id="v-1", **fields)


def _healthy_vendor():
    return VendorTrustProfile(
        vendor_id="v-2",
        orders_fulfilled=10,
        disputes_count=0,
        positive_reviews=5,
        acknowledged_latest_policies=True,
        warnings_count=0,
    )


# =============================================================================
# TEST: GENERATOR
# =============================================================================

class TestGenerateRecoveryGoals:

    def test_every_deficiency_in_fixed_order(self):
        goals = generate_recovery_goals(_struggling_vendor())

        assert [g.goal_type for g in goals] == [
            GoalType.ORDERS,
            GoalType.DISPUTES,
            GoalType.DISPUTE_FREE,
            GoalType.REVIEWS,
            GoalType.POLICIES,
            GoalType.WARNINGS,
        ]

    def test_goal_targets_and_current_values(self):
        goals = generate_recovery_goals(_struggling_vendor())
        by_type = {g.goal_type: g for g in goals}

        assert (by_type[GoalType.ORDERS].target_value, by_type[GoalType.ORDERS].current_value) == (5, 0)
        assert (by_type[GoalType.DISPUTES].target_value, by_type[GoalType.DISPUTES].current_value) == (0, 2)
        assert (by_type[GoalType.DISPUTE_FREE].target_value, by_type[GoalType.DISPUTE_FREE].current_value) == (30, 0)
        assert (by_type[GoalType.REVIEWS].target_value, by_type[GoalType.REVIEWS].current_value) == (3, 1)
        assert (by_type[GoalType.POLICIES].target_value, by_type[GoalType.POLICIES].current_value) == (1, 0)
        assert (by_type[GoalType.WARNINGS].target_value, by_type[GoalType.WARNINGS].current_value) == (30, 0)

    def test_descriptions(self):
        goals = generate_recovery_goals(_struggling_vendor())
        assert [g.description for g in goals] == [
            "Complete 5 on-time orders",
            "Resolve all open disputes",
            "Maintain 30 days dispute-free",
            "Achieve 3 new 4★+ reviews",
            "Re-acknowledge all active policies",
            "Zero new reports in 30 days",
        ]

    def test_new_goals_start_incomplete(self):
        assert not any(g.completed for g in generate_recovery_goals(_struggling_vendor()))

    def test_healthy_vendor_gets_no_goals(self):
        assert generate_recovery_goals(_healthy_vendor()) == []

    def test_thresholds_are_exclusive(self):
        goals = generate_recovery_goals(_struggling_vendor(
            orders_fulfilled=5, disputes_count=0, positive_reviews=3,
            acknowledged_latest_policies=True, warnings_count=0,
        ))
        assert goals == []

        goals = generate_recovery_goals(_struggling_vendor(
            orders_fulfilled=4, disputes_count=0, positive_reviews=2,
            acknowledged_latest_policies=True, warnings_count=0,
        ))
        assert [g.goal_type for g in goals] == [GoalType.ORDERS, GoalType.REVIEWS]

    def test_idempotent_on_unchanged_profile(self):
        profile = _struggling_vendor()
        assert generate_recovery_goals(profile) == generate_recovery_goals(profile)

    def test_existing_goals_are_ignored(self):
        """Generation is a full replacement, never additive."""
        profile = _struggling_vendor(trust_recovery_goals=[
            RecoveryGoal(GoalType.ORDERS, "old goal", 99, 50, False),
        ])
        goals = generate_recovery_goals(profile)
        assert len(goals) == 6
        assert all(g.description != "old goal" for g in goals)

    def test_every_goal_type_has_a_rule(self):
        assert set(GOAL_RULES) == set(GoalType)


# =============================================================================
# TEST: PROGRESS TRACKER
# =============================================================================

class TestProgressTracker:

    def test_empty_list_has_zero_progress(self):
        assert compute_progress([]) == 0.0

    def test_progress_counts_whole_list(self):
        goals = generate_recovery_goals(_struggling_vendor())
        goals[3] = replace(goals[3], completed=True)
        goals[4] = replace(goals[4], completed=True)
        assert compute_progress(goals) == pytest.approx(100 * 2 / 6)

    def test_update_marks_goal_complete_at_target(self):
        goals = generate_recovery_goals(_struggling_vendor())

        updated, progress = apply_goal_update(goals, 0, 5)

        assert updated[0].current_value == 5
        assert updated[0].completed is True
        assert progress == pytest.approx(100 / 6)

    def test_update_below_target_stays_incomplete(self):
        goals = generate_recovery_goals(_struggling_vendor())
        updated, progress = apply_goal_update(goals, 3, 2)

        assert updated[3].completed is False
        assert progress == 0.0

    def test_update_can_uncomplete_a_goal(self):
        goals = generate_recovery_goals(_struggling_vendor())
        goals, _ = apply_goal_update(goals, 0, 5)
        goals, progress = apply_goal_update(goals, 0, 3)

        assert goals[0].completed is False
        assert progress == 0.0

    def test_resolving_disputes_completes_dispute_goal(self):
        goals = generate_recovery_goals(_struggling_vendor())
        updated, _ = apply_goal_update(goals, 1, 0)
        assert updated[1].completed is True

    def test_all_goals_complete_gives_100(self):
        goals = generate_recovery_goals(_struggling_vendor())
        for index, goal in enumerate(goals):
            goals, progress = apply_goal_update(goals, index, goal.target_value)
        assert progress == 100.0

    def test_input_list_not_mutated(self):
        goals = generate_recovery_goals(_struggling_vendor())
        snapshot = list(goals)

        apply_goal_update(goals, 0, 5)

        assert goals == snapshot
        assert goals[0].current_value == 0

    @pytest.mark.parametrize("index", [-1, 6, 100])
    def test_out_of_range_index_rejected(self, index):
        goals = generate_recovery_goals(_struggling_vendor())
        snapshot = list(goals)

        with pytest.raises(InvalidGoalIndexError):
            apply_goal_update(goals, index, 1)

        assert goals == snapshot

    def test_any_index_rejected_for_empty_list(self):
        with pytest.raises(InvalidGoalIndexError):
            apply_goal_update([], 0, 1)

    def test_invalid_index_is_a_value_error(self):
        with pytest.raises(ValueError):
            apply_goal_update([], 0, 1)
