"""
Payment Stub

Stands in for a real payment gateway: every charge succeeds after a fixed,
non-blocking delay and returns a synthetic transaction record.
"""

import asyncio
import logging
import uuid
from datetime import datetime, timezone
from decimal import Decimal

from ..models import PaymentMethodType, PaymentResult

logger = logging.getLogger(__name__)

PROCESSOR_NAME = "stub-payment-processor"


def mask_payment_method(payment_method_id: str, payment_method_type: PaymentMethodType) -> str:
    """Display-safe hint of the payment method"""
    if payment_method_type in (PaymentMethodType.CREDIT_CARD, PaymentMethodType.DEBIT_CARD):
        return f"****{payment_method_id[-4:]}"
    if payment_method_type == PaymentMethodType.PAYPAL:
        return "****@example.com"
    if payment_method_type == PaymentMethodType.APPLE_PAY:
        return "****-apple-pay"
    if payment_method_type == PaymentMethodType.GOOGLE_PAY:
        return "****-google-pay"
    return "****"


class PaymentStub:
    """Simulated payment gateway"""

    def __init__(self, latency_seconds: float = 0.5):
        self.latency_seconds = latency_seconds

    async def process_payment(
        self,
        amount: Decimal,
        payment_method_id: str,
        payment_method_type: PaymentMethodType,
    ) -> PaymentResult:
        """Charge ``amount``; always succeeds"""
        logger.info(f"Processing stub payment of {amount} via {payment_method_type.value}")

        # Simulated gateway latency; yields to other requests
        if self.latency_seconds > 0:
            await asyncio.sleep(self.latency_seconds)

        transaction_id = f"txn_{uuid.uuid4().hex[:8]}"
        return PaymentResult(
            success=True,
            transaction_id=transaction_id,
            message="Payment processed successfully",
            amount=amount,
            metadata={
                "processor": PROCESSOR_NAME,
                "timestamp": datetime.now(timezone.utc).isoformat(),
                "last4": mask_payment_method(payment_method_id, payment_method_type),
            },
        )

    async def validate_payment_method(
        self,
        payment_method_id: str,
        payment_method_type: PaymentMethodType,
    ) -> bool:
        return bool(payment_method_id and payment_method_id.strip())

    async def cancel_recurring_payment(self, subscription_id: str) -> bool:
        logger.info(f"Cancelled recurring payment for subscription {subscription_id}")
        return True


__all__ = ["PaymentStub", "mask_payment_method", "PROCESSOR_NAME"]
