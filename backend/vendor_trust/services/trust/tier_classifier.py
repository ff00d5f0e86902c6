"""
Tier Classifier

Derives display affordances from the tier string stored by the recalculation
service. The tier itself is never re-derived from the score here; unknown tier
strings get the neutral affordance instead of being rejected.
"""
from typing import Any, Dict, Optional

from ...models.db_models import TrustTier
from ...models.trust import TierAffordance, VendorTrustProfile


VERIFICATION_MIN_SCORE = 75
RECOVERY_RECOMMENDED_BELOW = 75
BADGE_HIDDEN_BELOW = 50


# =============================================================================
# TIER CONFIGURATION
# =============================================================================

TIER_CONFIG: Dict[TrustTier, Dict[str, Any]] = {
    TrustTier.TRUSTED_VENDOR: {
        "badge_text": "Trusted Vendor",
        "color": "#4C7D7C",
        "icon": "award",
        "tooltip": (
            "High reliability, excellent reviews, and verified compliance "
            "with marketplace safety policies."
        ),
    },
    TrustTier.VERIFIED_AND_RELIABLE: {
        "badge_text": "Verified & Reliable",
        "color": "#10B981",
        "icon": "check-circle",
        "tooltip": "Consistently meets expectations and follows marketplace guidelines.",
    },
    TrustTier.NEW_OR_IMPROVING: {
        "badge_text": "New Vendor",
        "color": "#F59E0B",
        "icon": "shield",
        "tooltip": "Building reputation on the marketplace.",
    },
    TrustTier.UNDER_REVIEW: {
        "badge_text": "Under Review",
        "color": "#EE6E56",
        "icon": "info",
        "tooltip": "Currently being reviewed by the marketplace team.",
    },
}

UNKNOWN_TIER_CONFIG: Dict[str, Any] = {
    "badge_text": "Vendor",
    "color": "#6B7280",
    "icon": "shield",
    "tooltip": "",
}


def parse_tier(stored_tier: Optional[str]) -> Optional[TrustTier]:
    """Map a stored tier string to a TrustTier, or None if unrecognized."""
    if stored_tier is None:
        return None
    try:
        return TrustTier(stored_tier)
    except ValueError:
        return None


def can_request_verification(trust_score: int, verified_vendor: bool) -> bool:
    return not verified_vendor and trust_score >= VERIFICATION_MIN_SCORE


def verification_ineligibility_reason(trust_score: int, verified_vendor: bool) -> Optional[str]:
    """Why a verification request would be rejected, or None if eligible."""
    if verified_vendor:
        return "vendor is already verified"
    if trust_score < VERIFICATION_MIN_SCORE:
        return f"trust score {trust_score} is below {VERIFICATION_MIN_SCORE}"
    return None


def classify_tier(
    trust_score: int,
    verified_vendor: bool,
    stored_tier: Optional[str],
    trust_recovery_active: bool = False,
) -> TierAffordance:
    """Build the affordance set for a (score, verified, stored tier) triple."""
    tier = parse_tier(stored_tier)
    config = TIER_CONFIG[tier] if tier else UNKNOWN_TIER_CONFIG

    return TierAffordance(
        tier=tier,
        label=tier.value if tier else (stored_tier or "Unknown"),
        badge_text=config["badge_text"],
        color=config["color"],
        icon=config["icon"],
        tooltip=config["tooltip"],
        show_badge=verified_vendor or trust_score >= BADGE_HIDDEN_BELOW,
        can_request_verification=can_request_verification(trust_score, verified_vendor),
        recovery_recommended=trust_score < RECOVERY_RECOMMENDED_BELOW and not trust_recovery_active,
    )


def classify_profile(profile: VendorTrustProfile) -> TierAffordance:
    return classify_tier(
        trust_score=profile.trust_score,
        verified_vendor=profile.verified_vendor,
        stored_tier=profile.trust_tier,
        trust_recovery_active=profile.trust_recovery_active,
    )
