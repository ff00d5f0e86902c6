"""
Profile Store

Persistence boundary for vendor trust profiles. The store is the single source
of truth; callers hold VendorTrustProfile snapshots and pass back the
snapshot's `version` with every write.

Each profile write is one conditional UPDATE:

    UPDATE vendor_profiles SET ..., version = version + 1
    WHERE id = :vendor_id AND version = :expected_version

Zero matched rows means another writer (admin action, another device) got
there first, and ConcurrentModificationError is raised. Nothing is committed
here; the caller owns the transaction.
"""
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence
from uuid import uuid4
import logging

from sqlalchemy import update, func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ...models.db_models import (
    VendorProfileDB, TrustActionDB, TrustActionType, ActorType, TrustTier,
)
from ...models.trust import RecoveryGoal, VendorTrustProfile, DEFAULT_TRUST_SCORE
from .errors import ProfileNotFoundError, ExternalServiceError, ConcurrentModificationError
from .progress_tracker import compute_progress

logger = logging.getLogger(__name__)


class ProfileStore:
    """SQLAlchemy-backed profile store with compare-and-swap writes."""

    def __init__(self, db_session: Session):
        self.db = db_session

    # =========================================================================
    # READS
    # =========================================================================

    def read_profile(self, vendor_id: str) -> VendorTrustProfile:
        """Read the persisted profile, bypassing any identity-map copy."""
        try:
            row = (
                self.db.query(VendorProfileDB)
                .populate_existing()
                .filter(VendorProfileDB.id == vendor_id)
                .first()
            )
        except SQLAlchemyError as e:
            raise ExternalServiceError("read_profile", vendor_id, e) from e

        if row is None:
            raise ProfileNotFoundError(vendor_id)
        return VendorTrustProfile.from_row(row)

    def list_profiles(
        self,
        tier: Optional[TrustTier] = None,
        recovery_only: bool = False,
        search: Optional[str] = None,
    ) -> List[VendorTrustProfile]:
        """
        All profiles ordered by trust score, highest first.

        `search` is a case-insensitive substring match on shop_name.
        """
        query = self.db.query(VendorProfileDB)
        if search:
            query = query.filter(VendorProfileDB.shop_name.ilike(f"%{search}%"))
        if tier is not None:
            query = query.filter(VendorProfileDB.trust_tier == tier.value)
        if recovery_only:
            query = query.filter(VendorProfileDB.trust_recovery_active.is_(True))

        try:
            rows = query.order_by(VendorProfileDB.trust_score.desc(), VendorProfileDB.id).all()
        except SQLAlchemyError as e:
            raise ExternalServiceError("list_profiles", "*", e) from e
        return [VendorTrustProfile.from_row(row) for row in rows]

    def trust_stats(self) -> Dict[str, int]:
        """Aggregate counts for the admin console."""
        try:
            total = self.db.query(func.count(VendorProfileDB.id)).scalar() or 0
            trusted = self.db.query(func.count(VendorProfileDB.id)).filter(
                VendorProfileDB.trust_tier == TrustTier.TRUSTED_VENDOR.value
            ).scalar() or 0
            verified = self.db.query(func.count(VendorProfileDB.id)).filter(
                VendorProfileDB.verified_vendor.is_(True)
            ).scalar() or 0
            in_recovery = self.db.query(func.count(VendorProfileDB.id)).filter(
                VendorProfileDB.trust_recovery_active.is_(True)
            ).scalar() or 0
            under_review = self.db.query(func.count(VendorProfileDB.id)).filter(
                VendorProfileDB.trust_tier == TrustTier.UNDER_REVIEW.value
            ).scalar() or 0
        except SQLAlchemyError as e:
            raise ExternalServiceError("trust_stats", "*", e) from e

        return {
            "total": total,
            "trusted": trusted,
            "verified": verified,
            "in_recovery": in_recovery,
            "under_review": under_review,
        }

    def list_actions(self, vendor_id: str, limit: int = 50) -> List[TrustActionDB]:
        try:
            return (
                self.db.query(TrustActionDB)
                .filter(TrustActionDB.vendor_id == vendor_id)
                .order_by(TrustActionDB.created_at.desc())
                .limit(limit)
                .all()
            )
        except (SQLAlchemyError, LookupError) as e:
            # LookupError: a stored action_type this engine does not know
            raise ExternalServiceError("list_actions", vendor_id, e) from e

    # =========================================================================
    # CREATION (onboarding / seeding)
    # =========================================================================

    def create_profile(
        self,
        vendor_id: Optional[str] = None,
        shop_name: Optional[str] = None,
        user_id: Optional[str] = None,
    ) -> VendorTrustProfile:
        """Add a profile with default trust state. Flushed, not committed."""
        row = VendorProfileDB(
            id=vendor_id or str(uuid4()),
            user_id=user_id,
            shop_name=shop_name,
            trust_score=DEFAULT_TRUST_SCORE,
            trust_tier=TrustTier.NEW_OR_IMPROVING.value,
            verified_vendor=False,
            orders_fulfilled=0,
            disputes_count=0,
            warnings_count=0,
            positive_reviews=0,
            acknowledged_latest_policies=False,
            trust_recovery_active=False,
            trust_recovery_goals=[],
            trust_recovery_progress=0.0,
            trust_recovery_completed=False,
            version=1,
        )
        self.db.add(row)
        try:
            self.db.flush()
        except SQLAlchemyError as e:
            raise ExternalServiceError("create_profile", row.id, e) from e
        return VendorTrustProfile.from_row(row)

    # =========================================================================
    # CONDITIONAL WRITES
    # =========================================================================

    def write_goals(
        self,
        vendor_id: str,
        goals: Sequence[RecoveryGoal],
        expected_version: int,
    ) -> int:
        """
        Replace the goal list wholesale.

        Progress is reset to the value implied by the new list so the
        progress/goals invariant holds after every write.
        """
        return self._conditional_update(
            "write_goals",
            vendor_id,
            expected_version,
            {
                "trust_recovery_goals": [goal.to_dict() for goal in goals],
                "trust_recovery_progress": compute_progress(goals),
                "trust_recovery_goals_generated_at": datetime.utcnow(),
            },
        )

    def write_goals_and_progress(
        self,
        vendor_id: str,
        goals: Sequence[RecoveryGoal],
        progress: float,
        expected_version: int,
    ) -> int:
        return self._conditional_update(
            "write_goals_and_progress",
            vendor_id,
            expected_version,
            {
                "trust_recovery_goals": [goal.to_dict() for goal in goals],
                "trust_recovery_progress": progress,
            },
        )

    def write_recovery_flags(
        self,
        vendor_id: str,
        active: bool,
        completed: bool,
        expected_version: int,
    ) -> int:
        values: Dict[str, Any] = {
            "trust_recovery_active": active,
            "trust_recovery_completed": completed,
        }
        if not active:
            values["trust_recovery_start"] = None
        return self._conditional_update("write_recovery_flags", vendor_id, expected_version, values)

    def set_verified(self, vendor_id: str, verified: bool, expected_version: int) -> int:
        return self._conditional_update(
            "set_verified", vendor_id, expected_version, {"verified_vendor": verified}
        )

    def increment_warnings(self, vendor_id: str, expected_version: int) -> int:
        return self._conditional_update(
            "increment_warnings",
            vendor_id,
            expected_version,
            {"warnings_count": VendorProfileDB.warnings_count + 1},
        )

    def record_action(
        self,
        vendor_id: str,
        action_type: TrustActionType,
        actor: ActorType,
        notes: Optional[str] = None,
        actor_user_id: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> str:
        """Append an audit trail entry. Returns the entry id."""
        entry = TrustActionDB(
            id=str(uuid4()),
            vendor_id=vendor_id,
            action_type=action_type,
            actor=actor,
            actor_user_id=actor_user_id,
            notes=notes,
            event_metadata=metadata,
        )
        self.db.add(entry)
        try:
            self.db.flush()
        except SQLAlchemyError as e:
            raise ExternalServiceError("record_action", vendor_id, e) from e
        return entry.id

    def _conditional_update(
        self,
        operation: str,
        vendor_id: str,
        expected_version: int,
        values: Dict[str, Any],
    ) -> int:
        """Apply `values` only if the row is still at `expected_version`. Returns the new version."""
        stmt = (
            update(VendorProfileDB)
            .where(VendorProfileDB.id == vendor_id)
            .where(VendorProfileDB.version == expected_version)
            .values(version=VendorProfileDB.version + 1, updated_at=datetime.utcnow(), **values)
            .execution_options(synchronize_session=False)
        )
        try:
            result = self.db.execute(stmt)
        except SQLAlchemyError as e:
            raise ExternalServiceError(operation, vendor_id, e) from e

        if result.rowcount == 0:
            exists = self.db.query(VendorProfileDB.id).filter(VendorProfileDB.id == vendor_id).first()
            if exists is None:
                raise ProfileNotFoundError(vendor_id)
            logger.warning(
                f"{operation} rejected for vendor {vendor_id}: version {expected_version} is stale"
            )
            raise ConcurrentModificationError(vendor_id, expected_version)

        return expected_version + 1
