"""
Vendor Trust API Routes

Vendor-facing endpoints for the trust dashboard: score overview, breakdown,
recovery program actions, and verification requests. The vendor id is always
taken from the path and checked against the caller.
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from ..database import get_db
from ..auth import require_vendor_access
from ..models.db_models import UserDB
from ..services.trust import (
    TrustProfileService, TrustEngineError, ProfileNotFoundError, InvalidGoalIndexError,
    VerificationNotEligibleError, RecoveryNotCompletableError, ConcurrentModificationError,
    ExternalServiceError,
)


router = APIRouter(prefix="/vendors/{vendor_id}/trust", tags=["trust"])


def get_trust_service(db: Session = Depends(get_db)) -> TrustProfileService:
    """Dependency - one service (and profile cache) per request."""
    return TrustProfileService(db)


def trust_http_exception(error: TrustEngineError) -> HTTPException:
    """Translate an engine error into the matching HTTP error."""
    if isinstance(error, ProfileNotFoundError):
        code = status.HTTP_404_NOT_FOUND
    elif isinstance(error, InvalidGoalIndexError):
        code = status.HTTP_400_BAD_REQUEST
    elif isinstance(error, (VerificationNotEligibleError, RecoveryNotCompletableError)):
        code = status.HTTP_412_PRECONDITION_FAILED
    elif isinstance(error, ConcurrentModificationError):
        code = status.HTTP_409_CONFLICT
    elif isinstance(error, ExternalServiceError):
        code = status.HTTP_502_BAD_GATEWAY
    else:
        code = status.HTTP_400_BAD_REQUEST
    return HTTPException(status_code=code, detail=str(error))


# =============================================================================
# REQUEST/RESPONSE MODELS
# =============================================================================

class RecoveryGoalResponse(BaseModel):
    goal_type: str
    description: str
    target_value: float
    current_value: float
    completed: bool


class GenerateGoalsResponse(BaseModel):
    vendor_id: str
    goals: List[RecoveryGoalResponse]
    recovery_needed: bool
    progress: float


class UpdateGoalRequest(BaseModel):
    """New current value for one recovery goal."""
    current_value: float = Field(..., description="New measured value for the goal")


class RecoveryStatusResponse(BaseModel):
    vendor_id: str
    trust_score: int
    trust_tier: str
    trust_recovery_active: bool
    trust_recovery_completed: bool
    trust_recovery_progress: float
    goals: List[RecoveryGoalResponse]


class VerificationRequestResponse(BaseModel):
    vendor_id: str
    request_id: str
    status: str = "pending_review"
    message: Optional[str] = None


def _recovery_status(profile) -> RecoveryStatusResponse:
    return RecoveryStatusResponse(
        vendor_id=profile.vendor_id,
        trust_score=profile.trust_score,
        trust_tier=profile.trust_tier,
        trust_recovery_active=profile.trust_recovery_active,
        trust_recovery_completed=profile.trust_recovery_completed,
        trust_recovery_progress=profile.trust_recovery_progress,
        goals=[RecoveryGoalResponse(**g.to_dict()) for g in profile.trust_recovery_goals],
    )


# =============================================================================
# READ ENDPOINTS
# =============================================================================

@router.get("", response_model=dict)
async def get_trust_overview(
    vendor_id: str,
    service: TrustProfileService = Depends(get_trust_service),
    current_user: UserDB = Depends(require_vendor_access),
):
    """
    Trust dashboard: profile, tier affordances, estimated breakdown and
    recovery state.
    """
    try:
        return service.get_trust_overview(vendor_id)
    except TrustEngineError as e:
        raise trust_http_exception(e) from e


@router.get("/breakdown", response_model=dict)
async def get_breakdown(
    vendor_id: str,
    service: TrustProfileService = Depends(get_trust_service),
    current_user: UserDB = Depends(require_vendor_access),
):
    """Estimated per-category points. Display only, not the authoritative score."""
    try:
        service.load_profile(vendor_id)
    except TrustEngineError as e:
        raise trust_http_exception(e) from e
    return service.get_breakdown(vendor_id).to_dict()


# =============================================================================
# RECOVERY PROGRAM
# =============================================================================

@router.post("/recovery/goals", response_model=GenerateGoalsResponse)
async def generate_goals(
    vendor_id: str,
    service: TrustProfileService = Depends(get_trust_service),
    current_user: UserDB = Depends(require_vendor_access),
):
    """
    Generate a fresh recovery goal list, replacing any existing goals.

    An empty list means no recovery is needed.
    """
    try:
        goals = service.generate_recovery_goals(vendor_id)
    except TrustEngineError as e:
        raise trust_http_exception(e) from e

    profile = service.get_cached_profile(vendor_id)
    return GenerateGoalsResponse(
        vendor_id=vendor_id,
        goals=[RecoveryGoalResponse(**g.to_dict()) for g in goals],
        recovery_needed=bool(goals),
        progress=profile.trust_recovery_progress if profile else 0.0,
    )


@router.patch("/recovery/goals/{goal_index}", response_model=RecoveryStatusResponse)
async def update_goal(
    vendor_id: str,
    goal_index: int,
    request: UpdateGoalRequest,
    service: TrustProfileService = Depends(get_trust_service),
    current_user: UserDB = Depends(require_vendor_access),
):
    """Update one goal's current value; progress is recomputed over all goals."""
    try:
        profile = service.update_goal_progress(vendor_id, goal_index, request.current_value)
    except TrustEngineError as e:
        raise trust_http_exception(e) from e
    return _recovery_status(profile)


@router.post("/recovery/complete", response_model=RecoveryStatusResponse)
async def complete_recovery(
    vendor_id: str,
    service: TrustProfileService = Depends(get_trust_service),
    current_user: UserDB = Depends(require_vendor_access),
):
    """Recalculate the trust score and mark the recovery program completed."""
    try:
        profile = service.complete_recovery(vendor_id)
    except TrustEngineError as e:
        raise trust_http_exception(e) from e
    return _recovery_status(profile)


# =============================================================================
# VERIFICATION
# =============================================================================

@router.post(
    "/verification-request",
    response_model=VerificationRequestResponse,
    status_code=status.HTTP_202_ACCEPTED,
)
async def request_verification(
    vendor_id: str,
    service: TrustProfileService = Depends(get_trust_service),
    current_user: UserDB = Depends(require_vendor_access),
):
    """
    Ask for the verified badge. Requires a score of at least 75 and no
    existing badge; the badge itself is granted by an admin after review.
    """
    try:
        request_id = service.request_verification(vendor_id, requested_by=current_user.id)
    except TrustEngineError as e:
        raise trust_http_exception(e) from e
    return VerificationRequestResponse(
        vendor_id=vendor_id,
        request_id=request_id,
        message="Verification request submitted",
    )
