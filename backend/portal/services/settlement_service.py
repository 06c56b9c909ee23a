"""
Settlement Service — Two-phase fee payment: create an order with the
gateway, then verify the completion callback's signature before marking
the student's fees paid.
"""
import logging
import time
from datetime import datetime
from enum import Enum
from typing import Callable

from portal.errors import VerificationError, VerificationErrorKind
from portal.schemas.schemas import PaymentOrder
from portal.services.payment_gateway import PaymentGateway
from portal.services.student_store import SettleResult, StudentRecordStore
from portal.utils.clock import utcnow
from portal.utils.hashing import payment_signature, signatures_match
from portal.utils.validators import receipt_for

logger = logging.getLogger(__name__)


class SettleOutcome(str, Enum):
    SETTLED = "settled"
    ALREADY_SETTLED = "already_settled"


class PaymentSettlementEngine:
    """Signature verification is the only gate between a client callback and
    a fee-paid transition; nothing is written unless it passes."""

    def __init__(
        self,
        gateway: PaymentGateway,
        store: StudentRecordStore,
        secret: str,
        *,
        currency: str = "INR",
        clock: Callable[[], datetime] = utcnow,
    ):
        if not secret:
            raise ValueError("gateway signing secret is not configured")
        self._gateway = gateway
        self._store = store
        self._secret = secret
        self._currency = currency
        self._clock = clock

    def create_order(self, amount: int, student_id: str) -> PaymentOrder:
        """Reserve an order with the gateway. Does not touch the store."""
        if amount <= 0:
            raise ValueError("amount must be a positive number of minor units")
        receipt = receipt_for(student_id, int(time.time() * 1000))
        order = self._gateway.create_order(amount, self._currency, receipt)
        logger.info("Order %s created for student %s (%d %s)", order.order_id, student_id, amount, order.currency)
        return order

    def settle(self, order_id: str, payment_id: str, signature: str, student_id: str) -> SettleOutcome:
        expected = payment_signature(order_id, payment_id, self._secret)
        if not signatures_match(expected, signature):
            logger.warning("Signature mismatch for order %s payment %s", order_id, payment_id)
            raise VerificationError(VerificationErrorKind.INVALID_SIGNATURE)

        result = self._store.settle_fees(student_id, order_id, payment_id, self._clock())
        if result is SettleResult.UNKNOWN_STUDENT:
            logger.warning("Verified payment %s references unknown student %s", payment_id, student_id)
            raise VerificationError(VerificationErrorKind.UNKNOWN_STUDENT)
        if result is SettleResult.ALREADY_SETTLED:
            logger.info("Payment %s for student %s: fees already settled", payment_id, student_id)
            return SettleOutcome.ALREADY_SETTLED

        logger.info("Payment %s settled order %s for student %s", payment_id, order_id, student_id)
        return SettleOutcome.SETTLED
