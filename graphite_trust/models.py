"""
Data models for the Graphite Trust Gateway.

Defines Pydantic models for trust profiles, assessments and API request/response validation.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional, List, Any, Dict
from pydantic import BaseModel, Field, computed_field


# ============================================================================
# Enums and Constants
# ============================================================================

class TrustTier(str, Enum):
    EXCELLENT = "Excellent"
    GOOD = "Good"
    BUILDING = "Building"
    NEW = "New"


class RiskLevel(str, Enum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"


class SellerBadge(str, Enum):
    TRUSTED = "Trusted Seller"
    VERIFIED = "Verified Seller"
    NEW = "New Seller"
    BUILD_REPUTATION = "Build Reputation"

    @property
    def display(self) -> str:
        """Badge label with its medal or warning glyph."""
        return f"{BADGE_ICONS[self]} {self.value}"


BADGE_ICONS = {
    SellerBadge.TRUSTED: "🥇",
    SellerBadge.VERIFIED: "🥈",
    SellerBadge.NEW: "🥉",
    SellerBadge.BUILD_REPUTATION: "⚠️",
}


MAX_KYC_LEVEL = 3


def format_usd(amount: Decimal) -> str:
    """Format a dollar amount with thousands separators, e.g. $50,000."""
    if amount == amount.to_integral_value():
        return f"${amount:,.0f}"
    return f"${amount:,.2f}"


# ============================================================================
# Trust Models
# ============================================================================

class TrustProfile(BaseModel):
    """
    Trust data for a single account, fetched fresh on every query.

    reputation and kyc_level are authoritative provider values; trust_level
    and eligible_features are derived from them.
    """
    address: str = Field(..., description="Account address")
    activated: bool = Field(..., description="Whether the account is activated")
    reputation: int = Field(..., ge=0, description="On-chain reputation score")
    kyc_level: int = Field(..., ge=0, le=MAX_KYC_LEVEL, description="KYC verification level (0-3)")
    filter_level: int = Field(default=0, ge=0, description="Transaction filter level")
    trust_level: Optional[TrustTier] = Field(None, description="Derived trust tier")
    eligible_features: List[str] = Field(default_factory=list, description="Features unlocked by this profile")

    class Config:
        json_schema_extra = {
            "example": {
                "address": "0x1234567890abcdef1234567890abcdef12345678",
                "activated": True,
                "reputation": 600,
                "kyc_level": 1,
                "filter_level": 0,
                "trust_level": "Good",
                "eligible_features": ["Basic Trading", "Lending", "Borrowing", "Premium Rates"]
            }
        }


class LendingAssessment(BaseModel):
    """
    Loan decision for one profile and requested amount.

    When a prerequisite is missing only eligible, reason and recommendation
    are set.
    """
    eligible: bool = Field(..., description="Whether the requested amount is approved")
    reason: Optional[str] = Field(None, description="Why the applicant is not eligible")
    recommendation: Optional[str] = Field(None, description="Next step for the applicant")
    requested_amount: Optional[Decimal] = Field(None, description="Requested loan amount")
    approved_amount: Optional[Decimal] = Field(None, description="Approved amount or counter-offer")
    max_loan_amount: Optional[Decimal] = Field(None, description="Maximum loan for this profile")
    interest_rate: Optional[Decimal] = Field(None, description="Interest rate in percent")
    trust_score: Optional[int] = Field(None, description="Reputation of the applicant")
    kyc_level: Optional[int] = Field(None, description="KYC level of the applicant")
    risk_level: Optional[RiskLevel] = Field(None, description="Risk classification")

    @computed_field
    @property
    def interest_rate_display(self) -> Optional[str]:
        if self.interest_rate is None:
            return None
        return f"{self.interest_rate:.2f}%"

    class Config:
        json_schema_extra = {
            "example": {
                "eligible": True,
                "requested_amount": "5000",
                "approved_amount": "5000",
                "max_loan_amount": "12000",
                "interest_rate": "4.5",
                "interest_rate_display": "4.50%",
                "trust_score": 600,
                "kyc_level": 1,
                "risk_level": "Medium"
            }
        }


class MarketplaceAssessment(BaseModel):
    """Seller standing for the marketplace."""
    seller_badge: SellerBadge = Field(..., description="Seller badge tier")
    trust_score: int = Field(..., description="Reputation of the seller")
    verification_level: str = Field(..., description="Human readable KYC level")
    can_sell_high_value: bool = Field(..., description="Whether high-value listings are allowed")
    max_listing_value: Optional[Decimal] = Field(None, description="Listing cap, None when unlimited")

    @computed_field
    @property
    def max_listing_display(self) -> str:
        if self.max_listing_value is None:
            return "Unlimited"
        return format_usd(self.max_listing_value)


# ============================================================================
# Provider Results
# ============================================================================

class TransactionReceipt(BaseModel):
    """Reference to a mined transaction."""
    tx_hash: str = Field(..., description="Transaction hash")
    block_number: Optional[int] = Field(None, description="Block the transaction was mined in")


class ActivationResult(BaseModel):
    """Outcome of an account activation attempt."""
    success: bool
    message: Optional[str] = None
    tx_hash: Optional[str] = None
    block_number: Optional[int] = None
    error: Optional[str] = None


class KycRequestResult(BaseModel):
    """Outcome of a KYC request submission."""
    success: bool
    message: Optional[str] = None
    level: Optional[int] = None
    request_id: Optional[str] = None
    tx_hash: Optional[str] = None
    fee: Optional[int] = Field(None, description="Fee paid in wei")
    error: Optional[str] = None


class KycStatus(BaseModel):
    """Current KYC standing of the signing account."""
    current_level: int = Field(..., ge=0, le=MAX_KYC_LEVEL)
    last_request: Optional[Dict[str, Any]] = None
    can_upgrade: bool
    next_level: Optional[int] = None


class NetworkStats(BaseModel):
    """Chain statistics from the block explorer."""
    latest_block: int = Field(..., ge=0)


class FeeResponse(BaseModel):
    """Protocol fee quote."""
    operation: str
    level: Optional[int] = None
    fee: int = Field(..., ge=0, description="Fee in wei")


# ============================================================================
# Request Models (API Input)
# ============================================================================

class KycRequest(BaseModel):
    """Request body for starting a KYC upgrade."""
    level: int = Field(default=1, ge=1, le=MAX_KYC_LEVEL, description="Target KYC level")


class LoanApplication(BaseModel):
    """Request body for a loan application."""
    borrower: str = Field(..., description="Borrower address")
    amount: Decimal = Field(..., gt=0, description="Requested loan amount")
    purpose: str = Field(default="", max_length=200, description="Purpose of the loan")

    class Config:
        json_schema_extra = {
            "example": {
                "borrower": "0x1234567890abcdef1234567890abcdef12345678",
                "amount": "5000",
                "purpose": "Business expansion"
            }
        }


class ListingRequest(BaseModel):
    """Request body for creating a marketplace listing."""
    seller: str = Field(..., description="Seller address")
    item_name: str = Field(..., min_length=1, max_length=200, description="Listed item")
    item_value: Decimal = Field(..., gt=0, description="Item value in USD")


# ============================================================================
# Response Models (API Output)
# ============================================================================

class LoanApplicationResult(BaseModel):
    """Outcome of a loan application."""
    borrower: str
    purpose: str
    assessment: LendingAssessment


class ListingResult(BaseModel):
    """Outcome of a listing attempt."""
    success: bool
    item_name: str
    item_value: Decimal
    badge: Optional[SellerBadge] = None
    reason: Optional[str] = None


class HealthResponse(BaseModel):
    """Response for health check endpoint."""
    status: str = Field(..., description="Service status")
    timestamp: datetime = Field(default_factory=datetime.utcnow, description="Current server time")
    version: str = Field(default="1.0.0", description="API version")
    node_connected: bool = Field(default=False, description="Whether the node connection is up")


class ErrorResponse(BaseModel):
    """Standard error response format."""
    error: str = Field(..., description="Error code")
    message: str = Field(..., description="Human-readable error message")
    details: Optional[dict] = Field(None, description="Additional error details")
    timestamp: datetime = Field(default_factory=datetime.utcnow, description="Error timestamp")
