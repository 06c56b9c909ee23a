from portal.utils.hashing import payment_signature, signatures_match
from portal.utils.clock import utcnow
from portal.utils.validators import parse_bearer, unique_ids, sanitize_name, receipt_for

__all__ = [
    "payment_signature", "signatures_match",
    "parse_bearer", "unique_ids", "sanitize_name", "receipt_for",
    "utcnow",
]
