"""
Vendor Trust Engine - SQLAlchemy ORM Models
PostgreSQL database models for persistent storage
"""
from datetime import datetime
from enum import Enum
from sqlalchemy import Column, String, Integer, Float, DateTime, Text, JSON, ForeignKey, Enum as SQLEnum, Boolean
from sqlalchemy.orm import relationship
from ..database import Base


# =============================================================================
# ENUMS FOR TRUST/REPUTATION SYSTEM
# =============================================================================

class TrustTier(str, Enum):
    """
    Tier labels written by the recalculation service.

    Values are the exact strings stored in vendor_profiles.trust_tier.
    """
    TRUSTED_VENDOR = "Trusted Vendor"
    VERIFIED_AND_RELIABLE = "Verified & Reliable"
    NEW_OR_IMPROVING = "New or Improving"
    UNDER_REVIEW = "Under Review"


class GoalType(str, Enum):
    """Recovery goal categories."""
    ORDERS = "orders"
    DISPUTES = "disputes"
    DISPUTE_FREE = "dispute_free"
    REVIEWS = "reviews"
    POLICIES = "policies"
    WARNINGS = "warnings"


class TrustActionType(str, Enum):
    """Events recorded in the trust audit trail."""
    VERIFICATION_REQUESTED = "verification_requested"
    VERIFICATION_GRANTED = "verification_granted"
    VERIFICATION_REVOKED = "verification_revoked"
    WARNING_ADDED = "warning_added"
    SCORE_RECALCULATED = "score_recalculated"
    RECOVERY_GOALS_GENERATED = "recovery_goals_generated"
    RECOVERY_COMPLETED = "recovery_completed"


class ActorType(str, Enum):
    """Actor types for the trust audit trail."""
    VENDOR = "VENDOR"
    ADMIN = "ADMIN"
    SYSTEM = "SYSTEM"


def _enum_values(enum_cls):
    return [member.value for member in enum_cls]


class UserDB(Base):
    """User account. Vendors own exactly one vendor profile; admins own none."""
    __tablename__ = "users"

    id = Column(String(36), primary_key=True)  # UUID
    email = Column(String(255), unique=True, nullable=False, index=True)
    username = Column(String(100), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    role = Column(String(20), nullable=False, default="vendor")  # vendor | admin
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    vendor_profile = relationship("VendorProfileDB", back_populates="owner", uselist=False)


class VendorProfileDB(Base):
    """
    Vendor profile with trust/reputation state.

    Counters (orders, disputes, reviews, warnings) are maintained by other
    subsystems. trust_score / trust_tier / last_trust_score_update are written
    only by the recalculation procedure. Every write through ProfileStore
    bumps `version`.
    """
    __tablename__ = "vendor_profiles"

    id = Column(String(36), primary_key=True)  # UUID
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=True, index=True)
    shop_name = Column(String(255), nullable=True)

    # ==========================================================================
    # AUTHORITATIVE SCORE (written by recalculation service)
    # ==========================================================================
    trust_score = Column(Integer, nullable=False, default=70)
    trust_tier = Column(String(50), nullable=False, default=TrustTier.NEW_OR_IMPROVING.value)
    last_trust_score_update = Column(DateTime, nullable=True)
    trust_score_last_drop_reason = Column(Text, nullable=True)

    # Admin-granted only
    verified_vendor = Column(Boolean, nullable=False, default=False)

    # ==========================================================================
    # ACTIVITY SIGNALS (maintained by other subsystems)
    # ==========================================================================
    orders_fulfilled = Column(Integer, nullable=False, default=0)
    disputes_count = Column(Integer, nullable=False, default=0)
    warnings_count = Column(Integer, nullable=False, default=0)
    positive_reviews = Column(Integer, nullable=False, default=0)
    acknowledged_latest_policies = Column(Boolean, nullable=False, default=False)

    # ==========================================================================
    # RECOVERY PROGRAM
    # ==========================================================================
    trust_recovery_active = Column(Boolean, nullable=False, default=False)
    trust_recovery_start = Column(DateTime, nullable=True)
    # Format: [{"goal_type": "...", "description": "...", "target_value": 5,
    #           "current_value": 0, "completed": false}]
    trust_recovery_goals = Column(JSON, nullable=False, default=list)
    trust_recovery_goals_generated_at = Column(DateTime, nullable=True)
    trust_recovery_progress = Column(Float, nullable=False, default=0.0)
    trust_recovery_completed = Column(Boolean, nullable=False, default=False)

    # Compare-and-swap token
    version = Column(Integer, nullable=False, default=1)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    owner = relationship("UserDB", back_populates="vendor_profile")
    trust_actions = relationship("TrustActionDB", back_populates="vendor", cascade="all, delete-orphan")


class TrustActionDB(Base):
    """
    Append-only trail of trust events (verification requests, admin actions).
    Verification requests are picked up here for human review.
    """
    __tablename__ = "trust_admin_actions"

    id = Column(String(36), primary_key=True)  # UUID
    vendor_id = Column(String(36), ForeignKey("vendor_profiles.id", ondelete="CASCADE"), nullable=False, index=True)

    # Stored by value, e.g. "verification_requested"
    action_type = Column(SQLEnum(TrustActionType, values_callable=_enum_values, native_enum=False, length=50), nullable=False)
    actor = Column(SQLEnum(ActorType, values_callable=_enum_values, native_enum=False, length=20), nullable=False)
    actor_user_id = Column(String(36), nullable=True)
    notes = Column(Text, nullable=True)

    # Event Metadata (renamed from 'metadata' which is reserved in SQLAlchemy)
    event_metadata = Column(JSON, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    # Relationships
    vendor = relationship("VendorProfileDB", back_populates="trust_actions")
