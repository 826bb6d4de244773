#!/usr/bin/env python3
"""
Verified seller marketplace demo.

Creates a low-value and a high-value listing for the configured signing
account against the Graphite node in GRAPHITE_NODE_URL.
"""

import asyncio
from decimal import Decimal

from graphite_trust.config import settings
from graphite_trust.main import configure_logging
from graphite_trust.services.marketplace_app import TrustMarketplace
from graphite_trust.services.trust_client import connect_trust_client


async def main():
    configure_logging(settings)
    client = await connect_trust_client(settings)
    marketplace = TrustMarketplace(client)
    print("🛒 TrustMarket Initialized")

    seller = await client.provider.get_wallet_address()

    profile = await marketplace.get_seller_profile(seller)
    print(f"\n👤 SELLER PROFILE: {seller}")
    print(f"🏆 Badge: {profile.seller_badge.display}")
    print(f"⭐ Trust Score: {profile.trust_score}")
    print(f"🔐 Verification: {profile.verification_level}")
    print(f"💰 Max Listing: {profile.max_listing_display}")
    print(f"🔒 High-Value Sales: {'Enabled' if profile.can_sell_high_value else 'Disabled'}")

    for item_name, item_value in [("Vintage Watch", Decimal("500")), ("Luxury Car", Decimal("15000"))]:
        print(f"\n📝 LISTING: {item_name} (${item_value:,})")
        result = await marketplace.create_listing(seller, item_value, item_name)
        if result.success:
            print(f"✅ LISTING APPROVED with {result.badge.display}")
        else:
            print("⚠️ RESTRICTED: Complete ID verification for high-value listings")


if __name__ == "__main__":
    asyncio.run(main())
