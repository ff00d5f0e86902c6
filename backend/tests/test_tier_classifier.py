"""
Tests for the Tier Classifier.

The stored tier string is authoritative; the classifier only derives badge
and action affordances from it.
"""
import pytest

from vendor_trust.models.db_models import TrustTier
from vendor_trust.models.trust import VendorTrustProfile
from vendor_trust.services.trust.tier_classifier import (
    classify_tier, classify_profile, can_request_verification,
    verification_ineligibility_reason, parse_tier,
)


class TestVerificationEligibility:

    @pytest.mark.parametrize("score,verified,expected", [
        (75, False, True),
        (100, False, True),
        (74, False, False),
        (0, False, False),
        (90, True, False),
        (75, True, False),
    ])
    def test_eligibility(self, score, verified, expected):
        assert can_request_verification(score, verified) is expected

    def test_reason_for_already_verified(self):
        assert verification_ineligibility_reason(95, True) == "vendor is already verified"

    def test_reason_for_low_score(self):
        assert "below 75" in verification_ineligibility_reason(60, False)

    def test_no_reason_when_eligible(self):
        assert verification_ineligibility_reason(80, False) is None


class TestTierAffordances:

    @pytest.mark.parametrize("tier,badge_text,color,icon", [
        (TrustTier.TRUSTED_VENDOR, "Trusted Vendor", "#4C7D7C", "award"),
        (TrustTier.VERIFIED_AND_RELIABLE, "Verified & Reliable", "#10B981", "check-circle"),
        (TrustTier.NEW_OR_IMPROVING, "New Vendor", "#F59E0B", "shield"),
        (TrustTier.UNDER_REVIEW, "Under Review", "#EE6E56", "info"),
    ])
    def test_known_tiers(self, tier, badge_text, color, icon):
        affordance = classify_tier(80, False, tier.value)

        assert affordance.tier is tier
        assert affordance.label == tier.value
        assert affordance.badge_text == badge_text
        assert affordance.color == color
        assert affordance.icon == icon
        assert affordance.is_known_tier

    def test_unknown_tier_gets_neutral_affordance(self):
        affordance = classify_tier(80, False, "Platinum Partner")

        assert affordance.tier is None
        assert affordance.label == "Platinum Partner"
        assert affordance.badge_text == "Vendor"
        assert affordance.color == "#6B7280"
        assert affordance.tooltip == ""
        assert not affordance.is_known_tier

    def test_missing_tier_is_unknown(self):
        assert parse_tier(None) is None
        assert classify_tier(70, False, None).label == "Unknown"

    def test_tier_is_not_rederived_from_score(self):
        """A stored 'Under Review' stays 'Under Review' even with a high score."""
        affordance = classify_tier(98, False, TrustTier.UNDER_REVIEW.value)
        assert affordance.tier is TrustTier.UNDER_REVIEW

    def test_badge_hidden_for_low_unverified_score(self):
        assert classify_tier(49, False, TrustTier.UNDER_REVIEW.value).show_badge is False
        assert classify_tier(49, True, TrustTier.UNDER_REVIEW.value).show_badge is True
        assert classify_tier(50, False, TrustTier.UNDER_REVIEW.value).show_badge is True

    def test_recovery_recommended_below_75_without_active_recovery(self):
        assert classify_tier(60, False, "New or Improving").recovery_recommended is True
        assert classify_tier(60, False, "New or Improving", trust_recovery_active=True).recovery_recommended is False
        assert classify_tier(75, False, "New or Improving").recovery_recommended is False

    def test_classify_profile_uses_profile_fields(self):
        profile = VendorTrustProfile(
            vendor_id="v-1",
            trust_score=88,
            trust_tier=TrustTier.TRUSTED_VENDOR.value,
            verified_vendor=False,
        )
        affordance = classify_profile(profile)

        assert affordance.tier is TrustTier.TRUSTED_VENDOR
        assert affordance.can_request_verification is True
        assert affordance.to_dict()["tier"] == "Trusted Vendor"
