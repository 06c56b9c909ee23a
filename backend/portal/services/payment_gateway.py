"""
Payment Gateway Client — Order creation against the Razorpay Orders API.
"""
import logging
from typing import Protocol

import httpx

from portal.errors import GatewayError, GatewayErrorKind
from portal.schemas.schemas import PaymentOrder

logger = logging.getLogger(__name__)


class PaymentGateway(Protocol):
    def create_order(self, amount: int, currency: str, receipt: str) -> PaymentOrder: ...


class RazorpayGateway:
    """Mints orders with HTTP basic auth (key id / key secret)."""

    def __init__(self, key_id: str, key_secret: str, *, base_url: str = "https://api.razorpay.com/v1",
                 timeout: float = 10.0, client: httpx.Client | None = None):
        self._auth = (key_id, key_secret)
        self._base_url = base_url.rstrip("/")
        self._client = client or httpx.Client(timeout=httpx.Timeout(timeout))

    def create_order(self, amount: int, currency: str, receipt: str) -> PaymentOrder:
        try:
            resp = self._client.post(
                f"{self._base_url}/orders",
                json={"amount": amount, "currency": currency, "receipt": receipt},
                auth=self._auth,
            )
        except httpx.HTTPError as exc:
            logger.error("Gateway order request failed: %s", type(exc).__name__)
            raise GatewayError(GatewayErrorKind.CREATE_FAILED, "gateway unreachable") from exc

        if resp.status_code >= 300:
            logger.error("Gateway rejected order (status=%s receipt=%s)", resp.status_code, receipt)
            raise GatewayError(GatewayErrorKind.CREATE_FAILED, f"gateway returned {resp.status_code}")

        try:
            body = resp.json()
            return PaymentOrder(
                order_id=body["id"],
                amount=int(body.get("amount", amount)),
                currency=body.get("currency", currency),
                receipt=body.get("receipt", receipt),
            )
        except (ValueError, KeyError, TypeError) as exc:
            raise GatewayError(GatewayErrorKind.CREATE_FAILED, "malformed gateway response") from exc

    def close(self):
        self._client.close()
