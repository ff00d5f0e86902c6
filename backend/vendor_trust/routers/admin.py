"""
Vendor Trust Engine - Admin Router
Trust management console: vendor list, stats, recalculation, verification
and warnings. Every mutation goes through the same compare-and-swap store as
vendor actions.
"""
from typing import List, Optional
import logging

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field

from ..auth import require_admin
from ..models.db_models import UserDB, TrustTier
from ..models.trust import VendorTrustProfile
from ..services.trust import TrustProfileService, TrustEngineError
from ..services.trust.tier_classifier import classify_profile
from .trust import get_trust_service, trust_http_exception

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin/trust", tags=["admin"])


# =============================================================================
# PYDANTIC MODELS
# =============================================================================

class VendorTrustListItem(BaseModel):
    """Vendor row in the trust management list."""
    id: str
    shop_name: Optional[str] = None
    trust_score: int
    trust_tier: str
    tier_color: str
    verified_vendor: bool
    orders_fulfilled: int
    disputes_count: int
    warnings_count: int
    trust_recovery_active: bool
    last_update: Optional[str] = None


class TrustStatsResponse(BaseModel):
    total: int
    trusted: int
    verified: int
    in_recovery: int
    under_review: int


class SetVerificationRequest(BaseModel):
    verified: bool = Field(..., description="Grant (true) or revoke (false) the verified badge")


class AddWarningRequest(BaseModel):
    notes: Optional[str] = Field(None, description="Reason for the warning")


class TrustActionItem(BaseModel):
    id: str
    action_type: str
    actor: str
    actor_user_id: Optional[str] = None
    notes: Optional[str] = None
    metadata: Optional[dict] = None
    timestamp: str


def _list_item(profile: VendorTrustProfile) -> VendorTrustListItem:
    return VendorTrustListItem(
        id=profile.vendor_id,
        shop_name=profile.shop_name,
        trust_score=profile.trust_score,
        trust_tier=profile.trust_tier,
        tier_color=classify_profile(profile).color,
        verified_vendor=profile.verified_vendor,
        orders_fulfilled=profile.orders_fulfilled,
        disputes_count=profile.disputes_count,
        warnings_count=profile.warnings_count,
        trust_recovery_active=profile.trust_recovery_active,
        last_update=profile.last_update.isoformat() if profile.last_update else None,
    )


# =============================================================================
# API ENDPOINTS
# =============================================================================

@router.get("/vendors", response_model=List[VendorTrustListItem])
async def list_vendors(
    tier: Optional[TrustTier] = Query(None, description="Only vendors in this tier"),
    recovery_only: bool = Query(False, description="Only vendors with an active recovery program"),
    search: Optional[str] = Query(None, description="Case-insensitive shop name search"),
    service: TrustProfileService = Depends(get_trust_service),
    admin: UserDB = Depends(require_admin),
):
    """Vendors ordered by trust score, highest first."""
    try:
        profiles = service.list_profiles(tier=tier, recovery_only=recovery_only, search=search)
    except TrustEngineError as e:
        raise trust_http_exception(e) from e
    return [_list_item(p) for p in profiles]


@router.get("/stats", response_model=TrustStatsResponse)
async def get_stats(
    service: TrustProfileService = Depends(get_trust_service),
    admin: UserDB = Depends(require_admin),
):
    try:
        return TrustStatsResponse(**service.trust_stats())
    except TrustEngineError as e:
        raise trust_http_exception(e) from e


@router.post("/vendors/{vendor_id}/recalculate", response_model=VendorTrustListItem)
async def recalculate(
    vendor_id: str,
    service: TrustProfileService = Depends(get_trust_service),
    admin: UserDB = Depends(require_admin),
):
    """Trigger the authoritative score recalculation for one vendor."""
    try:
        profile = service.recalculate_score(vendor_id, admin_id=admin.id)
    except TrustEngineError as e:
        raise trust_http_exception(e) from e
    logger.info(f"Admin {admin.id} recalculated trust score for vendor {vendor_id}")
    return _list_item(profile)


@router.post("/vendors/{vendor_id}/verification", response_model=VendorTrustListItem)
async def set_verification(
    vendor_id: str,
    request: SetVerificationRequest,
    service: TrustProfileService = Depends(get_trust_service),
    admin: UserDB = Depends(require_admin),
):
    """Grant or revoke the verified badge."""
    try:
        profile = service.set_verification(vendor_id, request.verified, admin_id=admin.id)
    except TrustEngineError as e:
        raise trust_http_exception(e) from e
    return _list_item(profile)


@router.post("/vendors/{vendor_id}/warnings", response_model=VendorTrustListItem)
async def add_warning(
    vendor_id: str,
    request: AddWarningRequest,
    service: TrustProfileService = Depends(get_trust_service),
    admin: UserDB = Depends(require_admin),
):
    """Add a warning; the trust score is recalculated in the same transaction."""
    try:
        profile = service.add_warning(vendor_id, admin_id=admin.id, notes=request.notes)
    except TrustEngineError as e:
        raise trust_http_exception(e) from e
    return _list_item(profile)


@router.get("/vendors/{vendor_id}/actions", response_model=List[TrustActionItem])
async def list_actions(
    vendor_id: str,
    limit: int = Query(50, ge=1, le=500),
    service: TrustProfileService = Depends(get_trust_service),
    admin: UserDB = Depends(require_admin),
):
    """Trust audit trail for one vendor, newest first."""
    try:
        actions = service.list_actions(vendor_id, limit=limit)
    except TrustEngineError as e:
        raise trust_http_exception(e) from e
    return [
        TrustActionItem(
            id=a.id,
            action_type=a.action_type.value,
            actor=a.actor.value,
            actor_user_id=a.actor_user_id,
            notes=a.notes,
            metadata=a.event_metadata,
            timestamp=a.created_at.isoformat() if a.created_at else "",
        )
        for a in actions
    ]
