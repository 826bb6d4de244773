#!/usr/bin/env python3
"""
Lending desk demo.

Assesses a loan application for the configured signing account against the
Graphite node in GRAPHITE_NODE_URL.
"""

import asyncio
from decimal import Decimal

from graphite_trust.config import settings
from graphite_trust.main import configure_logging
from graphite_trust.services.lending_app import TrustLendingApp
from graphite_trust.services.trust_client import connect_trust_client


async def main():
    configure_logging(settings)
    client = await connect_trust_client(settings)
    app = TrustLendingApp(client)
    print("🏦 TrustLend Protocol Initialized")

    borrower = await client.provider.get_wallet_address()
    amount = Decimal("5000")

    print("\n📋 LOAN APPLICATION")
    print(f"Borrower: {borrower}")
    print(f"Amount: ${amount:,}")
    print("Purpose: Business expansion")

    result = await app.process_loan_application(borrower, amount, "Business expansion")
    assessment = result.assessment

    print("\n📊 ASSESSMENT RESULT:")
    if assessment.eligible:
        print("✅ APPROVED!")
        print(f"💰 Amount: ${assessment.approved_amount:,}")
        print(f"📈 Rate: {assessment.interest_rate_display}")
        print(f"🎯 Risk: {assessment.risk_level.value}")
        print(f"⭐ Trust Score: {assessment.trust_score}")
    elif assessment.reason:
        print(f"❌ DENIED: {assessment.reason}")
        print(f"💡 Recommendation: {assessment.recommendation}")
    else:
        print(f"⚠️ COUNTER-OFFER: ${assessment.approved_amount:,} at {assessment.interest_rate_display}")


if __name__ == "__main__":
    asyncio.run(main())
