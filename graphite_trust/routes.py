"""
API routes for the Graphite Trust Gateway.

Defines all API endpoints with request/response handling.
"""

from fastapi import APIRouter, Depends, Request, HTTPException, Query, status
from decimal import Decimal
from datetime import datetime
from web3 import Web3
import structlog

from .models import (
    ActivationResult,
    ErrorResponse,
    FeeResponse,
    HealthResponse,
    KycRequest,
    KycRequestResult,
    KycStatus,
    LendingAssessment,
    ListingRequest,
    ListingResult,
    LoanApplication,
    LoanApplicationResult,
    MarketplaceAssessment,
    MAX_KYC_LEVEL,
    NetworkStats,
    TrustProfile,
)
from .services.lending_app import TrustLendingApp
from .services.marketplace_app import TrustMarketplace
from .services.provider import NotInitializedError
from .services.trust_client import TrustClient

logger = structlog.get_logger(__name__)

# Create router
router = APIRouter()

PROVIDER_RESPONSES = {
    502: {"description": "Trust provider failure", "model": ErrorResponse},
    503: {"description": "Trust provider not initialized", "model": ErrorResponse},
}


# ============================================================================
# Helper Functions
# ============================================================================

def get_trust_client(request: Request) -> TrustClient:
    """
    Get the trust client created at startup.

    Raises:
        NotInitializedError if the application started without a client
    """
    client = getattr(request.app.state, "trust_client", None)
    if client is None:
        raise NotInitializedError("Trust client not initialized")
    return client


def validate_address(address: str, field: str = "address") -> str:
    """
    Validate an account address.

    Raises:
        HTTPException if the address is not a valid hex address
    """
    if not Web3.is_address(address):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={
                "error": "invalid_address",
                "message": f"Invalid account address format for {field}",
                "timestamp": datetime.utcnow().isoformat() + "Z"
            }
        )
    return address


# ============================================================================
# Health Check Endpoint
# ============================================================================

@router.get(
    "/health",
    response_model=HealthResponse,
    tags=["System"],
    summary="Health check",
    description="Check if the server is running and connected to the node"
)
async def health_check(request: Request) -> HealthResponse:
    client = getattr(request.app.state, "trust_client", None)
    return HealthResponse(
        status="healthy",
        timestamp=datetime.utcnow(),
        version="1.0.0",
        node_connected=bool(client and client.provider.is_connected)
    )


@router.get(
    "/network-stats",
    response_model=NetworkStats,
    responses={404: {"description": "Explorer unavailable", "model": ErrorResponse}},
    tags=["System"],
    summary="Latest block from the explorer"
)
def get_network_stats(client: TrustClient = Depends(get_trust_client)) -> NetworkStats:
    stats = client.get_network_stats()
    if stats is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={
                "error": "stats_unavailable",
                "message": "Network stats are not available",
                "timestamp": datetime.utcnow().isoformat() + "Z"
            }
        )
    return stats


# ============================================================================
# Trust Data Endpoints
# ============================================================================

@router.get(
    "/trust-profile/{address}",
    response_model=TrustProfile,
    responses={400: {"description": "Invalid address"}, **PROVIDER_RESPONSES},
    tags=["Trust Data"],
    summary="Get trust profile for an account",
    description="Activation, reputation, KYC and filter level plus derived trust tier and features."
)
async def get_trust_profile(
    address: str,
    client: TrustClient = Depends(get_trust_client)
) -> TrustProfile:
    validate_address(address)
    logger.info("trust_profile_requested", address=address)
    return await client.get_trust_profile(address)


# ============================================================================
# Account & KYC Endpoints
# ============================================================================

@router.post(
    "/account/activate",
    response_model=ActivationResult,
    responses=PROVIDER_RESPONSES,
    tags=["Account"],
    summary="Activate the gateway's signing account"
)
async def activate_account(client: TrustClient = Depends(get_trust_client)) -> ActivationResult:
    return await client.activate_account()


@router.get(
    "/fees/activation",
    response_model=FeeResponse,
    responses=PROVIDER_RESPONSES,
    tags=["Account"],
    summary="Get the activation fee"
)
async def get_activation_fee(client: TrustClient = Depends(get_trust_client)) -> FeeResponse:
    fee = await client.get_activation_fee()
    return FeeResponse(operation="activation", fee=fee)


@router.get(
    "/fees/kyc/{level}",
    response_model=FeeResponse,
    responses=PROVIDER_RESPONSES,
    tags=["KYC"],
    summary="Get the fee for a KYC level"
)
async def get_kyc_fee(
    level: int,
    client: TrustClient = Depends(get_trust_client)
) -> FeeResponse:
    if not 1 <= level <= MAX_KYC_LEVEL:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={
                "error": "invalid_parameter",
                "message": f"KYC level must be between 1 and {MAX_KYC_LEVEL}",
                "timestamp": datetime.utcnow().isoformat() + "Z"
            }
        )
    fee = await client.get_kyc_fee(level)
    return FeeResponse(operation="kyc", level=level, fee=fee)


@router.get(
    "/kyc/status",
    response_model=KycStatus,
    responses=PROVIDER_RESPONSES,
    tags=["KYC"],
    summary="Get KYC status of the signing account"
)
async def get_kyc_status(client: TrustClient = Depends(get_trust_client)) -> KycStatus:
    return await client.get_kyc_status()


@router.post(
    "/kyc/requests",
    response_model=KycRequestResult,
    responses=PROVIDER_RESPONSES,
    tags=["KYC"],
    summary="Request a KYC upgrade for the signing account"
)
async def create_kyc_request(
    kyc_request: KycRequest,
    client: TrustClient = Depends(get_trust_client)
) -> KycRequestResult:
    return await client.start_kyc(kyc_request.level)


# ============================================================================
# Lending Endpoints
# ============================================================================

@router.get(
    "/lending/assessment/{address}",
    response_model=LendingAssessment,
    responses={400: {"description": "Invalid parameters"}, **PROVIDER_RESPONSES},
    tags=["Lending"],
    summary="Assess an account for a loan"
)
async def assess_lending(
    address: str,
    amount: Decimal = Query(..., gt=0, description="Requested loan amount"),
    client: TrustClient = Depends(get_trust_client)
) -> LendingAssessment:
    validate_address(address)
    logger.info("lending_assessment_requested", address=address, amount=str(amount))
    return await client.assess_lending(address, amount)


@router.post(
    "/lending/applications",
    response_model=LoanApplicationResult,
    responses={400: {"description": "Invalid request data"}, **PROVIDER_RESPONSES},
    tags=["Lending"],
    summary="Submit a loan application"
)
async def submit_loan_application(
    application: LoanApplication,
    client: TrustClient = Depends(get_trust_client)
) -> LoanApplicationResult:
    validate_address(application.borrower, field="borrower")
    app = TrustLendingApp(client)
    return await app.process_loan_application(
        borrower=application.borrower,
        amount=application.amount,
        purpose=application.purpose
    )


# ============================================================================
# Marketplace Endpoints
# ============================================================================

@router.get(
    "/marketplace/assessment/{address}",
    response_model=MarketplaceAssessment,
    responses={400: {"description": "Invalid address"}, **PROVIDER_RESPONSES},
    tags=["Marketplace"],
    summary="Assess an account as a seller"
)
async def assess_marketplace(
    address: str,
    client: TrustClient = Depends(get_trust_client)
) -> MarketplaceAssessment:
    validate_address(address)
    marketplace = TrustMarketplace(client)
    return await marketplace.get_seller_profile(address)


@router.post(
    "/marketplace/listings",
    response_model=ListingResult,
    responses={400: {"description": "Invalid request data"}, **PROVIDER_RESPONSES},
    tags=["Marketplace"],
    summary="Create a marketplace listing"
)
async def create_listing(
    listing: ListingRequest,
    client: TrustClient = Depends(get_trust_client)
) -> ListingResult:
    validate_address(listing.seller, field="seller")
    marketplace = TrustMarketplace(client)
    return await marketplace.create_listing(
        seller=listing.seller,
        item_value=listing.item_value,
        item_name=listing.item_name
    )


# Export router
__all__ = ["router", "get_trust_client"]
