"""
Marketplace seller checks built on trust assessments.
"""

from decimal import Decimal
import structlog

from ..models import ListingResult, MarketplaceAssessment
from .trust_client import TrustClient

logger = structlog.get_logger(__name__)


class TrustMarketplace:
    """
    Gates marketplace listings on the seller's trust profile.
    """

    def __init__(self, client: TrustClient):
        self.client = client

    async def get_seller_profile(self, seller: str) -> MarketplaceAssessment:
        assessment = await self.client.assess_marketplace(seller)

        logger.info(
            "seller_profile_loaded",
            seller=seller,
            badge=assessment.seller_badge.value,
            trust_score=assessment.trust_score,
            max_listing=assessment.max_listing_display
        )

        return assessment

    async def create_listing(
        self,
        seller: str,
        item_value: Decimal,
        item_name: str
    ) -> ListingResult:
        """
        Create a listing if the seller may list an item of this value.

        Items above the high-value threshold need a seller cleared for
        high-value sales.

        Args:
            seller: Seller address
            item_value: Item value in USD
            item_name: Listed item

        Returns:
            ListingResult
        """
        profile = await self.get_seller_profile(seller)
        item_value = Decimal(item_value)

        if item_value > self.client.policy.high_value_listing_threshold and not profile.can_sell_high_value:
            logger.info(
                "listing_restricted",
                seller=seller,
                item_name=item_name,
                item_value=str(item_value)
            )
            return ListingResult(
                success=False,
                item_name=item_name,
                item_value=item_value,
                reason="Verification required for high-value items"
            )

        logger.info(
            "listing_approved",
            seller=seller,
            item_name=item_name,
            badge=profile.seller_badge.value
        )

        return ListingResult(
            success=True,
            item_name=item_name,
            item_value=item_value,
            badge=profile.seller_badge
        )


__all__ = ["TrustMarketplace"]
