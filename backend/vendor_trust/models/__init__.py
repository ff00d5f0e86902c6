"""Vendor Trust Engine - Data Models"""
from .db_models import (
    # Enums
    TrustTier, GoalType, TrustActionType, ActorType,
    # ORM
    UserDB, VendorProfileDB, TrustActionDB,
)
from .trust import (
    RecoveryGoal, VendorTrustProfile, ScoreMaxima, ScoreBreakdown, TierAffordance,
)

__all__ = [
    "TrustTier", "GoalType", "TrustActionType", "ActorType",
    "UserDB", "VendorProfileDB", "TrustActionDB",
    "RecoveryGoal", "VendorTrustProfile", "ScoreMaxima", "ScoreBreakdown", "TierAffordance",
]
