"""
Trust Profile Service

Orchestration layer for the trust engine. Loads vendor trust profiles from the
store, exposes the pure engine functions for display, and runs the fixed set
of mutating actions.

ACTION MODEL:
- VENDOR: generate_recovery_goals, update_goal_progress, complete_recovery,
  request_verification
- ADMIN: recalculate_score, set_verification, add_warning

Every action:
1. Reads a fresh snapshot (the cached copy is never trusted across actions)
2. Validates synchronously; validation errors make no external call
3. Writes through ProfileStore with the snapshot's version (compare-and-swap)
4. Commits once on success, rolls back on any failure
5. Reloads the cached profile afterwards, success or failure (dropped only if
   that reload fails too)

The vendor id is always an explicit argument; there is no ambient
"current vendor".
"""
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional
import logging
import os

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ...models.db_models import TrustActionType, ActorType, TrustTier, TrustActionDB
from ...models.trust import (
    RecoveryGoal, ScoreBreakdown, TierAffordance, VendorTrustProfile,
)
from .errors import (
    ExternalServiceError, RecoveryNotCompletableError, TrustEngineError, VerificationNotEligibleError,
)
from .profile_store import ProfileStore
from .progress_tracker import apply_goal_update
from .recalculation import DatabaseRecalculationService, ScoreRecalculationService
from .recovery_goals import generate_recovery_goals
from .recovery_state import (
    RecoveryState, completion_offered, derive_recovery_state, flags_for,
)
from .score_breakdown import estimate_breakdown
from .tier_classifier import classify_profile, verification_ineligibility_reason

logger = logging.getLogger(__name__)

# When true, complete_recovery refuses to run below 100% progress
REQUIRE_FULL_PROGRESS = os.getenv(
    "TRUST_RECOVERY_REQUIRE_FULL_PROGRESS", "false"
).lower() in ("1", "true", "yes")


class TrustProfileService:
    """Coordinator for one request's worth of trust engine work."""

    def __init__(
        self,
        db_session: Session,
        recalculator: Optional[ScoreRecalculationService] = None,
        store: Optional[ProfileStore] = None,
        require_full_progress: bool = REQUIRE_FULL_PROGRESS,
    ):
        self.db = db_session
        self.store = store or ProfileStore(db_session)
        self.recalculator = recalculator or DatabaseRecalculationService(db_session)
        self.require_full_progress = require_full_progress
        self._profiles: Dict[str, VendorTrustProfile] = {}

    # =========================================================================
    # READS
    # =========================================================================

    def load_profile(self, vendor_id: str) -> VendorTrustProfile:
        """Fetch the persisted profile and replace the cached copy."""
        profile = self.store.read_profile(vendor_id)
        self._profiles[vendor_id] = profile
        return profile

    def get_cached_profile(self, vendor_id: str) -> Optional[VendorTrustProfile]:
        return self._profiles.get(vendor_id)

    def get_breakdown(self, vendor_id: str) -> ScoreBreakdown:
        """Display estimate for the loaded profile; zero breakdown if none is loaded."""
        return estimate_breakdown(self._profiles.get(vendor_id))

    def get_tier_affordance(self, vendor_id: str) -> TierAffordance:
        return classify_profile(self._loaded(vendor_id))

    def get_recovery_state(self, vendor_id: str) -> RecoveryState:
        profile = self._loaded(vendor_id)
        return derive_recovery_state(profile.trust_recovery_active, profile.trust_recovery_completed)

    def get_trust_overview(self, vendor_id: str) -> Dict[str, Any]:
        """Everything the trust dashboard shows, from one fresh read."""
        profile = self.load_profile(vendor_id)
        state = derive_recovery_state(profile.trust_recovery_active, profile.trust_recovery_completed)
        return {
            "profile": profile.to_dict(),
            "tier": classify_profile(profile).to_dict(),
            "breakdown": estimate_breakdown(profile).to_dict(),
            "recovery": {
                "state": state.value,
                "progress": profile.trust_recovery_progress,
                "goal_count": len(profile.trust_recovery_goals),
                "completion_offered": completion_offered(
                    profile.trust_recovery_active,
                    profile.trust_recovery_completed,
                    profile.trust_recovery_progress,
                ),
            },
        }

    def list_profiles(
        self,
        tier: Optional[TrustTier] = None,
        recovery_only: bool = False,
        search: Optional[str] = None,
    ) -> List[VendorTrustProfile]:
        return self.store.list_profiles(tier=tier, recovery_only=recovery_only, search=search)

    def trust_stats(self) -> Dict[str, int]:
        return self.store.trust_stats()

    def list_actions(self, vendor_id: str, limit: int = 50) -> List[TrustActionDB]:
        self._loaded(vendor_id)
        return self.store.list_actions(vendor_id, limit=limit)

    # =========================================================================
    # VENDOR ACTIONS
    # =========================================================================

    def generate_recovery_goals(self, vendor_id: str) -> List[RecoveryGoal]:
        """
        Replace the vendor's goal list with a freshly generated one.

        Returns the new list; an empty list means no recovery is needed. Does not
        touch trust_recovery_active.
        """
        profile = self.load_profile(vendor_id)
        goals = generate_recovery_goals(profile)

        with self._action("generate_recovery_goals", vendor_id):
            self.store.write_goals(vendor_id, goals, profile.version)
            self.store.record_action(
                vendor_id,
                TrustActionType.RECOVERY_GOALS_GENERATED,
                ActorType.VENDOR,
                metadata={"goal_types": [goal.goal_type.value for goal in goals]},
            )

        if not goals:
            logger.info(f"No recovery goals needed for vendor {vendor_id}")
        else:
            logger.info(f"Generated {len(goals)} recovery goals for vendor {vendor_id}")
        return goals

    def update_goal_progress(self, vendor_id: str, goal_index: int, new_value: float) -> VendorTrustProfile:
        """
        Set one goal's current value and persist the recomputed progress.

        Does not complete the recovery program, even at 100%.
        """
        profile = self.load_profile(vendor_id)
        goals, progress = apply_goal_update(profile.trust_recovery_goals, goal_index, new_value)

        with self._action("update_goal_progress", vendor_id):
            self.store.write_goals_and_progress(vendor_id, goals, progress, profile.version)

        logger.info(
            f"Recovery goal {goal_index} updated for vendor {vendor_id}: progress {progress:.1f}%"
        )
        return self._profiles[vendor_id]

    def complete_recovery(self, vendor_id: str) -> VendorTrustProfile:
        """
        Refresh the authoritative score, then mark recovery completed.

        Both calls run in one transaction; if either fails nothing is kept.
        """
        profile = self.load_profile(vendor_id)
        if self.require_full_progress and profile.trust_recovery_progress < 100:
            logger.warning(
                f"Recovery completion rejected for vendor {vendor_id}: "
                f"progress {profile.trust_recovery_progress:.1f}%"
            )
            raise RecoveryNotCompletableError(vendor_id, profile.trust_recovery_progress)

        active, completed = flags_for(RecoveryState.COMPLETED)
        with self._action("complete_recovery", vendor_id):
            self.recalculator.recalculate(vendor_id)
            self.store.write_recovery_flags(vendor_id, active, completed, profile.version)
            self.store.record_action(
                vendor_id,
                TrustActionType.RECOVERY_COMPLETED,
                ActorType.VENDOR,
                metadata={"progress": profile.trust_recovery_progress},
            )

        logger.info(f"Recovery completed for vendor {vendor_id}")
        return self._profiles[vendor_id]

    def request_verification(self, vendor_id: str, requested_by: Optional[str] = None) -> str:
        """
        Queue a verification request for human review.

        Does not change verified_vendor. Returns the audit entry id.
        """
        profile = self.load_profile(vendor_id)
        reason = verification_ineligibility_reason(profile.trust_score, profile.verified_vendor)
        if reason is not None:
            logger.warning(f"Verification request rejected for vendor {vendor_id}: {reason}")
            raise VerificationNotEligibleError(vendor_id, reason)

        with self._action("request_verification", vendor_id):
            action_id = self.store.record_action(
                vendor_id,
                TrustActionType.VERIFICATION_REQUESTED,
                ActorType.VENDOR,
                notes="Vendor requested verification badge",
                actor_user_id=requested_by,
                metadata={"trust_score": profile.trust_score},
            )

        logger.info(f"Verification request submitted for vendor {vendor_id}")
        return action_id

    # =========================================================================
    # ADMIN ACTIONS
    # =========================================================================

    def recalculate_score(self, vendor_id: str, admin_id: Optional[str] = None) -> VendorTrustProfile:
        self.load_profile(vendor_id)
        with self._action("recalculate_score", vendor_id):
            self.recalculator.recalculate(vendor_id)
            self.store.record_action(
                vendor_id,
                TrustActionType.SCORE_RECALCULATED,
                ActorType.ADMIN,
                notes="Admin triggered recalculation",
                actor_user_id=admin_id,
            )
        return self._profiles[vendor_id]

    def set_verification(
        self,
        vendor_id: str,
        verified: bool,
        admin_id: Optional[str] = None,
    ) -> VendorTrustProfile:
        """Grant or revoke the verified badge (human review outcome)."""
        profile = self.load_profile(vendor_id)
        action_type = (
            TrustActionType.VERIFICATION_GRANTED if verified else TrustActionType.VERIFICATION_REVOKED
        )
        with self._action("set_verification", vendor_id):
            self.store.set_verified(vendor_id, verified, profile.version)
            self.store.record_action(
                vendor_id,
                action_type,
                ActorType.ADMIN,
                notes=f"Admin {'granted' if verified else 'revoked'} verification",
                actor_user_id=admin_id,
            )

        logger.info(f"Verification {'granted' if verified else 'revoked'} for vendor {vendor_id}")
        return self._profiles[vendor_id]

    def add_warning(
        self,
        vendor_id: str,
        admin_id: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> VendorTrustProfile:
        """Increment the warning count and recalculate in the same transaction."""
        profile = self.load_profile(vendor_id)
        with self._action("add_warning", vendor_id):
            self.store.increment_warnings(vendor_id, profile.version)
            self.store.record_action(
                vendor_id,
                TrustActionType.WARNING_ADDED,
                ActorType.ADMIN,
                notes=notes or "Admin added warning",
                actor_user_id=admin_id,
            )
            self.recalculator.recalculate(vendor_id)

        logger.info(f"Warning added for vendor {vendor_id}")
        return self._profiles[vendor_id]

    # =========================================================================
    # HELPERS
    # =========================================================================

    def _loaded(self, vendor_id: str) -> VendorTrustProfile:
        profile = self._profiles.get(vendor_id)
        if profile is None:
            profile = self.load_profile(vendor_id)
        return profile

    @contextmanager
    def _action(self, operation: str, vendor_id: str) -> Iterator[None]:
        """Unit of work for one mutating action."""
        try:
            yield
            self.db.commit()
        except SQLAlchemyError as e:
            self._abort(vendor_id)
            logger.error(f"{operation} failed for vendor {vendor_id}: {e}")
            raise ExternalServiceError(operation, vendor_id, e) from e
        except Exception:
            self._abort(vendor_id)
            logger.error(f"{operation} failed for vendor {vendor_id}")
            raise

        self.load_profile(vendor_id)

    def _abort(self, vendor_id: str) -> None:
        """Roll back, then refresh the cached profile from the store."""
        self.db.rollback()
        try:
            self.load_profile(vendor_id)
        except TrustEngineError as e:
            self._profiles.pop(vendor_id, None)
            logger.warning(f"Could not refresh vendor {vendor_id} after failed action: {e}")
