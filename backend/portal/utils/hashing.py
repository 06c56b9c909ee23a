"""
Cryptographic Utilities — HMAC-SHA256 signatures for payment callbacks.
"""
import hashlib
import hmac


def payment_signature(order_id: str, payment_id: str, secret: str) -> str:
    """Keyed MAC the gateway attaches to a completed payment: HMAC-SHA256(order_id|payment_id)."""
    message = f"{order_id}|{payment_id}".encode("utf-8")
    return hmac.new(secret.encode("utf-8"), message, hashlib.sha256).hexdigest()


def signatures_match(expected: str, supplied: str) -> bool:
    """Constant-time comparison of two hex signatures."""
    return hmac.compare_digest(expected.encode("utf-8"), supplied.encode("utf-8"))
