"""
Domain Errors — Failure taxonomy raised by services.
Routes translate these into HTTP responses; services never raise HTTPException.
"""
from enum import Enum


class AuthErrorKind(str, Enum):
    MISSING_CREDENTIAL = "missing_credential"
    INVALID_CREDENTIAL = "invalid_credential"
    ORACLE_UNAVAILABLE = "oracle_unavailable"
    FORBIDDEN = "forbidden"


class WriteErrorKind(str, Enum):
    BATCH_REJECTED = "batch_rejected"
    PARTIAL_RESOLUTION_SKIPPED = "partial_resolution_skipped"


class GatewayErrorKind(str, Enum):
    CREATE_FAILED = "create_failed"


class VerificationErrorKind(str, Enum):
    INVALID_SIGNATURE = "invalid_signature"
    UNKNOWN_STUDENT = "unknown_student"


class PortalError(Exception):
    """Base class for all domain failures."""

    def __init__(self, kind: Enum, message: str = ""):
        super().__init__(message or kind.value)
        self.kind = kind
        self.message = message or kind.value


class AuthError(PortalError):
    pass


class WriteError(PortalError):
    pass


class BatchTooLargeError(WriteError):
    """The batch exceeds the configured size limit; nothing was written."""


class GatewayError(PortalError):
    pass


class VerificationError(PortalError):
    pass


class StoreError(Exception):
    """The Student Record Store failed or timed out."""
