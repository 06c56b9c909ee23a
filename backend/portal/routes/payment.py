"""
Payment Routes — Razorpay order creation and signature-verified settlement.
"""
import logging

from fastapi import APIRouter, Depends, HTTPException

from portal.config import get_settings
from portal.dependencies import get_settlement_engine, get_store
from portal.errors import GatewayError, VerificationError, VerificationErrorKind
from portal.schemas.schemas import CreateOrderRequest, MessageResponse, PaymentOrder, SettleRequest
from portal.services.settlement_service import PaymentSettlementEngine, SettleOutcome
from portal.services.student_store import StudentRecordStore
from portal.utils.rate_limiter import rate_limit

settings = get_settings()
logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/razorpay", tags=["Payment"])


@router.post("", response_model=PaymentOrder)
def create_order(
    payload: CreateOrderRequest,
    store: StudentRecordStore = Depends(get_store),
    engine: PaymentSettlementEngine = Depends(get_settlement_engine),
    _throttle: bool = Depends(rate_limit(
        requests=settings.ORDER_RATE_LIMIT_REQUESTS, window=settings.ORDER_RATE_LIMIT_WINDOW,
    )),
):
    """Create a gateway order for a student's fee payment."""
    if store.get_student(payload.student_id) is None:
        raise HTTPException(status_code=404, detail="Student not found")

    try:
        return engine.create_order(payload.amount, payload.student_id)
    except GatewayError:
        raise HTTPException(status_code=500, detail="Internal Server Error")


@router.put("", response_model=MessageResponse)
def settle_payment(
    payload: SettleRequest,
    engine: PaymentSettlementEngine = Depends(get_settlement_engine),
):
    """Verify the gateway's payment signature and mark the student's fees paid."""
    try:
        outcome = engine.settle(payload.order_id, payload.payment_id, payload.signature, payload.student_id)
    except VerificationError as exc:
        if exc.kind is VerificationErrorKind.UNKNOWN_STUDENT:
            raise HTTPException(status_code=404, detail="Student not found")
        raise HTTPException(status_code=400, detail="Payment verification failed. Invalid signature.")

    if outcome is SettleOutcome.ALREADY_SETTLED:
        return MessageResponse(message="Payment already verified.")
    return MessageResponse(message="Payment verified successfully.")
