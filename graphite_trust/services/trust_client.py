"""
Trust client: the handle applications use to query and act on trust data.

Combines a connected TrustDataProvider, the explorer client and the
scoring policy. Create one with connect_trust_client().
"""

import asyncio
import time
from decimal import Decimal
from typing import Optional
from uuid import uuid4
import structlog

from ..config import DEFAULT_POLICY, ScoringPolicy, Settings
from ..models import (
    ActivationResult,
    KycRequestResult,
    KycStatus,
    LendingAssessment,
    MarketplaceAssessment,
    MAX_KYC_LEVEL,
    NetworkStats,
    TrustProfile,
)
from .explorer_client import ExplorerClient
from .provider import ProviderError, TrustDataProvider
from .trust_scoring import TrustScoringService
from .web3_provider import Web3TrustProvider

logger = structlog.get_logger(__name__)


def generate_kyc_request_id() -> str:
    """Request id of the form kyc_<millis>_<9 chars>."""
    return f"kyc_{int(time.time() * 1000)}_{uuid4().hex[:9]}"


class TrustClient:
    """
    Trust operations for one provider connection.
    """

    def __init__(
        self,
        provider: TrustDataProvider,
        explorer: Optional[ExplorerClient] = None,
        policy: ScoringPolicy = DEFAULT_POLICY
    ):
        """
        Initialize trust client.

        Args:
            provider: Trust data provider (connected)
            explorer: Block explorer client for network stats
            policy: Business constants for scoring
        """
        self.provider = provider
        self.explorer = explorer
        self.policy = policy
        self.scoring = TrustScoringService()

    async def _resolve_address(self, address: Optional[str]) -> str:
        if address:
            return address
        return await self.provider.get_wallet_address()

    # ------------------------------------------------------------------------
    # Account management
    # ------------------------------------------------------------------------

    async def activate_account(self) -> ActivationResult:
        """
        Activate the signing account unless it is already active.

        Returns:
            ActivationResult; provider failures are reported with success=False
        """
        address = await self.provider.get_wallet_address()

        try:
            if await self.provider.is_activated(address):
                return ActivationResult(success=True, message="Already activated")

            logger.info("activating_account", address=address)
            receipt = await self.provider.activate_account()
        except ProviderError as e:
            logger.error(
                "account_activation_failed",
                address=address,
                error=e.message
            )
            return ActivationResult(success=False, error=e.message)

        logger.info(
            "account_activated",
            address=address,
            tx_hash=receipt.tx_hash,
            block_number=receipt.block_number
        )

        return ActivationResult(
            success=True,
            tx_hash=receipt.tx_hash,
            block_number=receipt.block_number
        )

    async def get_activation_fee(self) -> int:
        return await self.provider.get_activation_fee()

    async def get_kyc_fee(self, level: int) -> int:
        self._check_kyc_level(level)
        return await self.provider.get_kyc_fee(level)

    # ------------------------------------------------------------------------
    # Trust data
    # ------------------------------------------------------------------------

    async def get_trust_profile(self, address: Optional[str] = None) -> TrustProfile:
        """
        Fetch and classify the trust profile of an account.

        The four reads are issued concurrently. Reputation is clamped to be
        non-negative and KYC level to 0-3 before scoring.

        Args:
            address: Account address (defaults to the signing account)

        Returns:
            TrustProfile with trust level and eligible features

        Raises:
            ProviderError if any read fails
        """
        address = await self._resolve_address(address)

        activated, reputation_raw, kyc_level_raw, filter_level_raw = await asyncio.gather(
            self.provider.is_activated(address),
            self.provider.get_reputation(address),
            self.provider.get_kyc_level(address),
            self.provider.get_filter_level(address)
        )

        reputation = max(0, int(reputation_raw))
        kyc_level = min(MAX_KYC_LEVEL, max(0, int(kyc_level_raw)))
        filter_level = max(0, int(filter_level_raw))

        if reputation != int(reputation_raw) or kyc_level != int(kyc_level_raw):
            logger.warning(
                "trust_values_clamped",
                address=address,
                reputation_raw=int(reputation_raw),
                kyc_level_raw=int(kyc_level_raw)
            )

        profile = TrustProfile(
            address=address,
            activated=bool(activated),
            reputation=reputation,
            kyc_level=kyc_level,
            filter_level=filter_level,
            trust_level=self.scoring.classify_trust(reputation, kyc_level),
            eligible_features=self.scoring.eligible_features(reputation, kyc_level, bool(activated))
        )

        logger.debug(
            "trust_profile_fetched",
            address=address,
            reputation=reputation,
            kyc_level=kyc_level,
            trust_level=profile.trust_level.value
        )

        return profile

    # ------------------------------------------------------------------------
    # KYC management
    # ------------------------------------------------------------------------

    @staticmethod
    def _check_kyc_level(level: int) -> None:
        if not 1 <= level <= MAX_KYC_LEVEL:
            raise ValueError(f"KYC level must be between 1 and {MAX_KYC_LEVEL}")

    async def start_kyc(self, level: int = 1) -> KycRequestResult:
        """
        Request a KYC upgrade for the signing account.

        Args:
            level: Target KYC level (1-3)

        Returns:
            KycRequestResult; provider failures are reported with success=False

        Raises:
            ValueError if level is out of range
        """
        self._check_kyc_level(level)
        address = await self.provider.get_wallet_address()

        try:
            current_level = int(await self.provider.get_kyc_level(address))
            if current_level >= level:
                return KycRequestResult(
                    success=True,
                    level=current_level,
                    message=f"Already at KYC Level {current_level}"
                )

            fee = await self.provider.get_kyc_fee(level)
            logger.info("kyc_fee_quoted", level=level, fee=fee)

            request_id = generate_kyc_request_id()
            receipt = await self.provider.create_kyc_request(request_id, level)
        except ProviderError as e:
            logger.error(
                "kyc_request_failed",
                address=address,
                level=level,
                error=e.message
            )
            return KycRequestResult(success=False, level=level, error=e.message)

        logger.info(
            "kyc_request_submitted",
            address=address,
            level=level,
            request_id=request_id,
            tx_hash=receipt.tx_hash
        )

        return KycRequestResult(
            success=True,
            level=level,
            request_id=request_id,
            tx_hash=receipt.tx_hash,
            fee=fee
        )

    async def get_kyc_status(self) -> KycStatus:
        address = await self.provider.get_wallet_address()

        current_level_raw, last_request = await asyncio.gather(
            self.provider.get_kyc_level(address),
            self.provider.get_last_kyc_request(address)
        )
        current_level = min(MAX_KYC_LEVEL, max(0, int(current_level_raw)))

        return KycStatus(
            current_level=current_level,
            last_request=last_request,
            can_upgrade=current_level < MAX_KYC_LEVEL,
            next_level=current_level + 1 if current_level < MAX_KYC_LEVEL else None
        )

    # ------------------------------------------------------------------------
    # Trust-based features
    # ------------------------------------------------------------------------

    async def assess_lending(self, address: Optional[str], requested_amount: Decimal) -> LendingAssessment:
        profile = await self.get_trust_profile(address)
        return self.scoring.assess_lending(profile, requested_amount, self.policy)

    async def assess_marketplace(self, address: Optional[str]) -> MarketplaceAssessment:
        profile = await self.get_trust_profile(address)
        return self.scoring.assess_marketplace(profile, self.policy)

    def get_network_stats(self) -> Optional[NetworkStats]:
        if self.explorer is None:
            return None
        return self.explorer.get_network_stats()


async def connect_trust_client(
    settings: Settings,
    provider: Optional[TrustDataProvider] = None
) -> TrustClient:
    """
    Build a ready-to-use trust client.

    Args:
        settings: Application settings
        provider: Provider to use instead of the Web3 adapter

    Returns:
        TrustClient with a connected provider

    Raises:
        ProviderError if the node connection fails
    """
    logger.info("initializing_trust_client")

    provider = provider or Web3TrustProvider(settings)
    if not provider.is_connected:
        await provider.connect()

    client = TrustClient(
        provider=provider,
        explorer=ExplorerClient(settings.graphite_api_url),
        policy=settings.scoring
    )

    logger.info("trust_client_ready")
    return client


__all__ = ["TrustClient", "connect_trust_client", "generate_kyc_request_id"]
