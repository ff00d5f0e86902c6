"""
Tests for the recovery state machine and snapshot models.
"""
from datetime import datetime
from types import SimpleNamespace

import pytest

from vendor_trust.models.db_models import GoalType
from vendor_trust.models.trust import RecoveryGoal, VendorTrustProfile
from vendor_trust.services.trust.recovery_state import (
    RecoveryState, derive_recovery_state, flags_for, can_transition,
    next_states, completion_offered,
)


class TestRecoveryState:

    @pytest.mark.parametrize("active,completed,expected", [
        (False, False, RecoveryState.INITIAL),
        (True, False, RecoveryState.ACTIVE),
        (False, True, RecoveryState.COMPLETED),
        (True, True, RecoveryState.COMPLETED),
    ])
    def test_derive_from_flags(self, active, completed, expected):
        assert derive_recovery_state(active, completed) is expected

    def test_completed_flags_are_mutually_exclusive(self):
        assert flags_for(RecoveryState.COMPLETED) == (False, True)
        assert flags_for(RecoveryState.ACTIVE) == (True, False)
        assert flags_for(RecoveryState.INITIAL) == (False, False)

    def test_completion_reachable_from_every_state(self):
        for state in RecoveryState:
            allowed, _ = can_transition(state, RecoveryState.COMPLETED)
            assert allowed, state

    def test_active_cannot_fall_back_to_initial(self):
        allowed, reason = can_transition(RecoveryState.ACTIVE, RecoveryState.INITIAL)
        assert not allowed
        assert "RECOVERY_ACTIVE" in reason

    def test_new_drop_can_reactivate_after_completion(self):
        assert RecoveryState.ACTIVE in next_states(RecoveryState.COMPLETED)

    def test_completion_offered_only_when_active_and_full(self):
        assert completion_offered(True, False, 100.0) is True
        assert completion_offered(True, False, 99.9) is False
        assert completion_offered(False, False, 100.0) is False
        assert completion_offered(False, True, 100.0) is False


class TestSnapshotModels:

    def _row(self, **fields):
        defaults = dict(
            id="v-1",
            shop_name="Shop",
            trust_score=None,
            trust_tier=None,
            verified_vendor=None,
            orders_fulfilled=None,
            disputes_count=None,
            warnings_count=None,
            positive_reviews=None,
            acknowledged_latest_policies=None,
            trust_recovery_active=None,
            trust_recovery_start=None,
            trust_recovery_goals=None,
            trust_recovery_progress=None,
            trust_recovery_completed=None,
            trust_score_last_drop_reason=None,
            last_trust_score_update=None,
            version=None,
        )
        defaults.update(fields)
        return SimpleNamespace(**defaults)

    def test_null_columns_fall_back_to_defaults(self):
        profile = VendorTrustProfile.from_row(self._row())

        assert profile.trust_score == 70
        assert profile.trust_tier == "New or Improving"
        assert profile.verified_vendor is False
        assert profile.trust_recovery_goals == []
        assert profile.trust_recovery_progress == 0.0
        assert profile.version == 1

    def test_zero_score_is_kept(self):
        assert VendorTrustProfile.from_row(self._row(trust_score=0)).trust_score == 0

    def test_camel_case_goals_are_read(self):
        row = self._row(trust_recovery_goals=[{
            "goalType": "reviews",
            "goalDescription": "Achieve 3 new 4★+ reviews",
            "targetValue": 3,
            "currentValue": 1,
            "completed": False,
        }])
        goal = VendorTrustProfile.from_row(row).trust_recovery_goals[0]

        assert goal.goal_type is GoalType.REVIEWS
        assert goal.description == "Achieve 3 new 4★+ reviews"
        assert (goal.target_value, goal.current_value) == (3, 1)

    def test_goal_dict_round_trip(self):
        goal = RecoveryGoal(GoalType.POLICIES, "Re-acknowledge all active policies", 1, 0)
        assert RecoveryGoal.from_dict(goal.to_dict()) == goal

    def test_unknown_goal_type_rejected(self):
        with pytest.raises(ValueError):
            RecoveryGoal.from_dict({"goal_type": "vibes", "target_value": 1, "current_value": 0})

    def test_profile_to_dict_serializes_timestamps_and_goals(self):
        started = datetime(2026, 3, 1, 12, 0, 0)
        profile = VendorTrustProfile(
            vendor_id="v-1",
            trust_recovery_start=started,
            trust_recovery_goals=[RecoveryGoal(GoalType.ORDERS, "Complete 5 on-time orders", 5, 2)],
        )
        data = profile.to_dict()

        assert data["trust_recovery_start"] == "2026-03-01T12:00:00"
        assert data["last_update"] is None
        assert data["trust_recovery_goals"][0]["goal_type"] == "orders"
