import hashlib
import hmac
import json
from datetime import datetime

import httpx
import pytest

from portal.errors import GatewayError, GatewayErrorKind, VerificationError, VerificationErrorKind
from portal.services.payment_gateway import RazorpayGateway
from portal.services.settlement_service import PaymentSettlementEngine, SettleOutcome

GATEWAY_SECRET = "s3cr3t"

NOW = datetime(2026, 10, 19, 9, 30)


def sign(order_id: str, payment_id: str, secret: str = GATEWAY_SECRET) -> str:
    return hmac.new(secret.encode(), f"{order_id}|{payment_id}".encode(), hashlib.sha256).hexdigest()


@pytest.fixture
def engine(store, gateway):
    return PaymentSettlementEngine(gateway, store, GATEWAY_SECRET, clock=lambda: NOW)


def test_engine_requires_secret(store, gateway):
    with pytest.raises(ValueError):
        PaymentSettlementEngine(gateway, store, "")


def test_create_order_does_not_touch_store(engine, store, gateway, add_student):
    add_student("stu_42")
    before = store.get_student("stu_42")

    order = engine.create_order(50000, "stu_42")

    assert order.order_id == "order_1"
    assert order.amount == 50000
    assert order.currency == "INR"
    call = gateway.calls[0]
    assert call["receipt"].startswith("rcpt_stu42_")
    assert len(call["receipt"]) <= 40
    assert store.get_student("stu_42") == before


def test_create_order_rejects_non_positive_amount(engine, gateway):
    with pytest.raises(ValueError):
        engine.create_order(0, "stu_42")
    assert gateway.calls == []


def test_create_order_gateway_failure(engine, gateway):
    gateway.fail = True
    with pytest.raises(GatewayError):
        engine.create_order(100, "stu_42")


def test_settle_scenario(engine, store, add_student):
    add_student("stu_42")

    outcome = engine.settle("order_1", "pay_1", sign("order_1", "pay_1"), "stu_42")

    assert outcome is SettleOutcome.SETTLED
    fees = store.get_student("stu_42").fees
    assert fees.paid is True
    assert fees.payment_id == "pay_1"
    assert fees.order_id == "order_1"
    assert fees.payment_date == NOW


def test_settle_twice_is_idempotent(engine, store, add_student):
    add_student("stu_42")
    signature = sign("order_1", "pay_1")

    engine.settle("order_1", "pay_1", signature, "stu_42")
    once = store.get_student("stu_42").fees
    assert engine.settle("order_1", "pay_1", signature, "stu_42") is SettleOutcome.ALREADY_SETTLED

    assert store.get_student("stu_42").fees == once


@pytest.mark.parametrize("signature", [
    "",
    "deadbeef",
    sign("order_1", "pay_1", secret="wrong"),
    sign("order_1", "pay_2"),
    sign("order_1", "pay_1").upper(),
])
def test_forged_signature_never_marks_paid(engine, store, add_student, signature):
    add_student("stu_42")
    with pytest.raises(VerificationError) as exc:
        engine.settle("order_1", "pay_1", signature, "stu_42")
    assert exc.value.kind is VerificationErrorKind.INVALID_SIGNATURE
    assert store.get_student("stu_42").fees.paid is False


def test_forged_signature_leaves_paid_record_untouched(engine, store, add_student):
    add_student("stu_42")
    engine.settle("order_1", "pay_1", sign("order_1", "pay_1"), "stu_42")
    paid = store.get_student("stu_42").fees

    with pytest.raises(VerificationError):
        engine.settle("order_9", "pay_9", "forged", "stu_42")
    assert store.get_student("stu_42").fees == paid


def test_settle_unknown_student(engine, store):
    with pytest.raises(VerificationError) as exc:
        engine.settle("order_1", "pay_1", sign("order_1", "pay_1"), "ghost")
    assert exc.value.kind is VerificationErrorKind.UNKNOWN_STUDENT
    assert store.get_student("ghost") is None


def _razorpay(handler) -> RazorpayGateway:
    client = httpx.Client(transport=httpx.MockTransport(handler))
    return RazorpayGateway("rzp_key", "rzp_secret", base_url="https://rzp.test/v1", client=client)


def test_razorpay_gateway_creates_order():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["auth"] = request.headers.get("Authorization")
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={
            "id": "order_Abc", "amount": 50000, "currency": "INR", "receipt": "rcpt_x", "status": "created",
        })

    order = _razorpay(handler).create_order(50000, "INR", "rcpt_x")

    assert order.order_id == "order_Abc"
    assert seen["url"] == "https://rzp.test/v1/orders"
    assert seen["auth"].startswith("Basic ")
    assert seen["body"] == {"amount": 50000, "currency": "INR", "receipt": "rcpt_x"}


@pytest.mark.parametrize("response", [
    httpx.Response(400, json={"error": {"code": "BAD_REQUEST_ERROR"}}),
    httpx.Response(500),
    httpx.Response(200, json={"unexpected": True}),
])
def test_razorpay_gateway_failures(response):
    with pytest.raises(GatewayError) as exc:
        _razorpay(lambda request: response).create_order(100, "INR", "rcpt_x")
    assert exc.value.kind is GatewayErrorKind.CREATE_FAILED


def test_razorpay_gateway_timeout_fails_closed():
    def handler(request):
        raise httpx.ConnectTimeout("timed out", request=request)

    with pytest.raises(GatewayError):
        _razorpay(handler).create_order(100, "INR", "rcpt_x")
