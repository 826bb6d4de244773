"""
Trust scoring service for deriving decisions from a trust profile.

Every method is pure: the result depends only on the arguments, so the
service can be used without a node connection.
"""

from decimal import Decimal
from typing import List, Optional
import structlog

from ..config import DEFAULT_POLICY, ScoringPolicy
from ..models import (
    LendingAssessment,
    MarketplaceAssessment,
    RiskLevel,
    SellerBadge,
    TrustProfile,
    TrustTier,
)

logger = structlog.get_logger(__name__)

# Tier thresholds, inclusive lower bounds
EXCELLENT_REPUTATION = 750
EXCELLENT_KYC = 2
GOOD_REPUTATION = 500
GOOD_KYC = 1
BUILDING_REPUTATION = 250

LOW_RISK_REPUTATION = 600
MEDIUM_RISK_REPUTATION = 400

KYC_DESCRIPTIONS = {
    0: "Unverified",
    1: "Email Verified",
    2: "ID Verified",
    3: "Video Verified",
}


class TrustScoringService:
    """
    Service for classifying trust profiles.

    Tiers (first match wins):
    - Excellent: reputation >= 750 and KYC >= 2
    - Good: reputation >= 500 and KYC >= 1
    - Building: reputation >= 250
    - New: everything else

    Seller badges and listing caps follow the same thresholds.
    """

    @staticmethod
    def classify_trust(reputation: int, kyc_level: int) -> TrustTier:
        """
        Classify a reputation/KYC pair into a trust tier.

        Args:
            reputation: On-chain reputation score
            kyc_level: KYC verification level

        Returns:
            TrustTier
        """
        if reputation >= EXCELLENT_REPUTATION and kyc_level >= EXCELLENT_KYC:
            return TrustTier.EXCELLENT
        if reputation >= GOOD_REPUTATION and kyc_level >= GOOD_KYC:
            return TrustTier.GOOD
        if reputation >= BUILDING_REPUTATION:
            return TrustTier.BUILDING
        return TrustTier.NEW

    @staticmethod
    def eligible_features(reputation: int, kyc_level: int, activated: bool) -> List[str]:
        """
        List the features a profile unlocks. Conditions are additive.

        Args:
            reputation: On-chain reputation score
            kyc_level: KYC verification level
            activated: Whether the account is activated

        Returns:
            Feature names in a stable order
        """
        features = []
        if activated:
            features.append("Basic Trading")
        if kyc_level >= 1:
            features.extend(["Lending", "Borrowing"])
        if kyc_level >= 2:
            features.append("Advanced Trading")
        if reputation >= GOOD_REPUTATION:
            features.append("Premium Rates")
        return features

    @staticmethod
    def assess_risk(reputation: int, kyc_level: int) -> RiskLevel:
        if reputation >= LOW_RISK_REPUTATION and kyc_level >= 2:
            return RiskLevel.LOW
        if reputation >= MEDIUM_RISK_REPUTATION and kyc_level >= 1:
            return RiskLevel.MEDIUM
        return RiskLevel.HIGH

    @staticmethod
    def risk_premium(reputation: int, policy: ScoringPolicy = DEFAULT_POLICY) -> Decimal:
        """Interest premium in percent for the given reputation."""
        if reputation < policy.high_risk_reputation:
            return policy.high_risk_premium
        if reputation < policy.medium_risk_reputation:
            return policy.medium_risk_premium
        return Decimal("0")

    @staticmethod
    def max_loan(reputation: int, kyc_level: int, policy: ScoringPolicy = DEFAULT_POLICY) -> Decimal:
        """
        Maximum loan amount: max(1, reputation / 100) * (kyc_level + 1) * loan_unit.
        """
        trust_multiplier = max(Decimal("1"), Decimal(reputation) / Decimal("100"))
        kyc_multiplier = kyc_level + 1
        return trust_multiplier * kyc_multiplier * policy.loan_unit

    @staticmethod
    def interest_rate(reputation: int, kyc_level: int, policy: ScoringPolicy = DEFAULT_POLICY) -> Decimal:
        """Interest rate in percent: base + risk premium - KYC discount."""
        premium = TrustScoringService.risk_premium(reputation, policy)
        discount = kyc_level * policy.kyc_rate_discount
        return policy.base_interest_rate + premium - discount

    @staticmethod
    def assess_lending(
        profile: TrustProfile,
        requested_amount: Decimal,
        policy: ScoringPolicy = DEFAULT_POLICY
    ) -> LendingAssessment:
        """
        Assess a profile for a loan.

        Inactive accounts and accounts without KYC are rejected before any
        terms are computed. Otherwise the requested amount is approved when
        it fits under the maximum loan, or countered with the maximum.

        Args:
            profile: Trust profile of the borrower
            requested_amount: Requested loan amount
            policy: Business constants

        Returns:
            LendingAssessment
        """
        if not profile.activated:
            return LendingAssessment(
                eligible=False,
                reason="Account must be activated",
                recommendation="Complete account activation first"
            )

        if profile.kyc_level < 1:
            return LendingAssessment(
                eligible=False,
                reason="KYC verification required",
                recommendation="Complete email verification (KYC Level 1)"
            )

        requested_amount = Decimal(requested_amount)
        max_loan = TrustScoringService.max_loan(profile.reputation, profile.kyc_level, policy)
        eligible = requested_amount <= max_loan

        assessment = LendingAssessment(
            eligible=eligible,
            requested_amount=requested_amount,
            approved_amount=requested_amount if eligible else max_loan,
            max_loan_amount=max_loan,
            interest_rate=TrustScoringService.interest_rate(profile.reputation, profile.kyc_level, policy),
            trust_score=profile.reputation,
            kyc_level=profile.kyc_level,
            risk_level=TrustScoringService.assess_risk(profile.reputation, profile.kyc_level)
        )

        logger.debug(
            "lending_assessed",
            address=profile.address,
            requested=str(requested_amount),
            max_loan=str(max_loan),
            eligible=eligible
        )

        return assessment

    @staticmethod
    def seller_badge(reputation: int, kyc_level: int) -> SellerBadge:
        tier = TrustScoringService.classify_trust(reputation, kyc_level)
        return {
            TrustTier.EXCELLENT: SellerBadge.TRUSTED,
            TrustTier.GOOD: SellerBadge.VERIFIED,
            TrustTier.BUILDING: SellerBadge.NEW,
            TrustTier.NEW: SellerBadge.BUILD_REPUTATION,
        }[tier]

    @staticmethod
    def max_listing_value(
        reputation: int,
        kyc_level: int,
        policy: ScoringPolicy = DEFAULT_POLICY
    ) -> Optional[Decimal]:
        """
        Listing cap for a seller. None means unlimited.
        """
        tier = TrustScoringService.classify_trust(reputation, kyc_level)
        if tier == TrustTier.EXCELLENT:
            return None
        if tier == TrustTier.GOOD:
            return policy.verified_listing_cap
        if tier == TrustTier.BUILDING:
            return policy.building_listing_cap
        return policy.minimal_listing_cap

    @staticmethod
    def can_sell_high_value(reputation: int, kyc_level: int) -> bool:
        return reputation >= GOOD_REPUTATION and kyc_level >= 2

    @staticmethod
    def kyc_description(level: int) -> str:
        return KYC_DESCRIPTIONS.get(level, "Unknown")

    @staticmethod
    def assess_marketplace(
        profile: TrustProfile,
        policy: ScoringPolicy = DEFAULT_POLICY
    ) -> MarketplaceAssessment:
        """
        Assess a profile as a marketplace seller. Always computable.

        Args:
            profile: Trust profile of the seller
            policy: Business constants

        Returns:
            MarketplaceAssessment
        """
        return MarketplaceAssessment(
            seller_badge=TrustScoringService.seller_badge(profile.reputation, profile.kyc_level),
            trust_score=profile.reputation,
            verification_level=TrustScoringService.kyc_description(profile.kyc_level),
            can_sell_high_value=TrustScoringService.can_sell_high_value(profile.reputation, profile.kyc_level),
            max_listing_value=TrustScoringService.max_listing_value(profile.reputation, profile.kyc_level, policy)
        )


__all__ = ["TrustScoringService", "KYC_DESCRIPTIONS"]
