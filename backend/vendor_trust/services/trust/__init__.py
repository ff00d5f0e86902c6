"""
Vendor Trust & Reputation Engine

Pure functions:
- estimate_breakdown: profile -> per-category display estimate
- classify_tier / classify_profile: stored tier -> badge and action affordances
- generate_recovery_goals: profile -> ordered remediation goals
- apply_goal_update / compute_progress: goal list -> recomputed progress

Boundaries and orchestration:
- ProfileStore: compare-and-swap persistence of vendor trust profiles
- DatabaseRecalculationService: invokes the authoritative score procedure
- TrustProfileService: runs vendor and admin actions against the above
"""

from .errors import (
    TrustEngineError,
    TrustValidationError,
    ProfileNotFoundError,
    InvalidGoalIndexError,
    VerificationNotEligibleError,
    RecoveryNotCompletableError,
    ExternalServiceError,
    ConcurrentModificationError,
)
from .score_breakdown import estimate_breakdown
from .tier_classifier import classify_tier, classify_profile, can_request_verification
from .recovery_goals import generate_recovery_goals
from .progress_tracker import apply_goal_update, compute_progress
from .recovery_state import RecoveryState, derive_recovery_state
from .profile_store import ProfileStore
from .recalculation import DatabaseRecalculationService, ScoreRecalculationService
from .trust_service import TrustProfileService

__all__ = [
    'TrustEngineError',
    'TrustValidationError',
    'ProfileNotFoundError',
    'InvalidGoalIndexError',
    'VerificationNotEligibleError',
    'RecoveryNotCompletableError',
    'ExternalServiceError',
    'ConcurrentModificationError',
    'estimate_breakdown',
    'classify_tier',
    'classify_profile',
    'can_request_verification',
    'generate_recovery_goals',
    'apply_goal_update',
    'compute_progress',
    'RecoveryState',
    'derive_recovery_state',
    'ProfileStore',
    'DatabaseRecalculationService',
    'ScoreRecalculationService',
    'TrustProfileService',
]
