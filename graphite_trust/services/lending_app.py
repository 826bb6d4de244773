"""
Lending desk built on trust assessments.
"""

from decimal import Decimal
import structlog

from ..models import LoanApplicationResult
from .trust_client import TrustClient

logger = structlog.get_logger(__name__)


class TrustLendingApp:
    """
    Approves loans from the borrower's on-chain trust profile.
    """

    def __init__(self, client: TrustClient):
        self.client = client

    async def process_loan_application(
        self,
        borrower: str,
        amount: Decimal,
        purpose: str = ""
    ) -> LoanApplicationResult:
        """
        Assess a loan application.

        Args:
            borrower: Borrower address
            amount: Requested loan amount
            purpose: Purpose of the loan

        Returns:
            LoanApplicationResult with the lending assessment
        """
        logger.info(
            "loan_application_received",
            borrower=borrower,
            amount=str(amount),
            purpose=purpose
        )

        assessment = await self.client.assess_lending(borrower, amount)

        if assessment.eligible:
            logger.info(
                "loan_approved",
                borrower=borrower,
                approved_amount=str(assessment.approved_amount),
                interest_rate=assessment.interest_rate_display,
                risk_level=assessment.risk_level.value
            )
        else:
            logger.info(
                "loan_denied",
                borrower=borrower,
                reason=assessment.reason,
                counter_offer=str(assessment.approved_amount) if assessment.approved_amount is not None else None
            )

        return LoanApplicationResult(
            borrower=borrower,
            purpose=purpose,
            assessment=assessment
        )


__all__ = ["TrustLendingApp"]
