"""
Dependency Wiring — Builds the core components from settings and exposes
them as FastAPI dependencies. Tests replace them via app.dependency_overrides.
"""
import logging
from functools import lru_cache

from fastapi import Depends, Header, HTTPException, status

from portal.config import get_settings
from portal.database import SessionLocal
from portal.errors import AuthError, AuthErrorKind
from portal.schemas.schemas import Role, Subject
from portal.services.attendance_service import AttendanceLedgerWriter
from portal.services.authorization_service import RoleAuthorizer
from portal.services.identity_service import HttpIdentityOracle, IdentityOracle, IdentityVerifier, JwtIdentityOracle
from portal.services.payment_gateway import PaymentGateway, RazorpayGateway
from portal.services.settlement_service import PaymentSettlementEngine
from portal.services.student_store import SqlStudentRecordStore, StudentRecordStore

logger = logging.getLogger(__name__)

FORBIDDEN_DETAIL = "Forbidden"


@lru_cache()
def get_store() -> StudentRecordStore:
    settings = get_settings()
    return SqlStudentRecordStore(SessionLocal, default_fee_amount=settings.DEFAULT_FEE_AMOUNT)


@lru_cache()
def get_identity_oracle() -> IdentityOracle:
    settings = get_settings()
    if settings.IDENTITY_ORACLE == "http":
        return HttpIdentityOracle(
            settings.IDENTITY_ORACLE_URL,
            api_key=settings.IDENTITY_ORACLE_API_KEY,
            timeout=settings.ORACLE_TIMEOUT_SECONDS,
        )
    return JwtIdentityOracle(settings.JWT_SECRET, settings.JWT_ALG)


@lru_cache()
def get_gateway() -> PaymentGateway:
    settings = get_settings()
    return RazorpayGateway(
        settings.RAZORPAY_KEY_ID,
        settings.RAZORPAY_KEY_SECRET,
        base_url=settings.RAZORPAY_API_URL,
        timeout=settings.GATEWAY_TIMEOUT_SECONDS,
    )


def get_verifier(oracle: IdentityOracle = Depends(get_identity_oracle)) -> IdentityVerifier:
    return IdentityVerifier(oracle)


def get_authorizer(store: StudentRecordStore = Depends(get_store)) -> RoleAuthorizer:
    return RoleAuthorizer(store)


def get_attendance_writer(store: StudentRecordStore = Depends(get_store)) -> AttendanceLedgerWriter:
    return AttendanceLedgerWriter(store, batch_limit=get_settings().ATTENDANCE_BATCH_LIMIT)


def get_settlement_engine(
    gateway: PaymentGateway = Depends(get_gateway),
    store: StudentRecordStore = Depends(get_store),
) -> PaymentSettlementEngine:
    settings = get_settings()
    try:
        return PaymentSettlementEngine(
            gateway, store, settings.RAZORPAY_KEY_SECRET, currency=settings.PAYMENT_CURRENCY,
        )
    except ValueError:
        logger.error("Payment gateway secret is not configured")
        raise HTTPException(status_code=500, detail="Internal Server Error")


def auth_http_error(exc: AuthError) -> HTTPException:
    """Every rejection reads the same to the client; only an unavailable oracle differs."""
    if exc.kind is AuthErrorKind.ORACLE_UNAVAILABLE:
        return HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Service temporarily unavailable")
    return HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=FORBIDDEN_DETAIL)


def require_identity(
    authorization: str | None = Header(default=None),
    verifier: IdentityVerifier = Depends(get_verifier),
) -> str:
    """Subject id of any verified caller."""
    try:
        return verifier.verify(authorization)
    except AuthError as exc:
        raise auth_http_error(exc)


def require_role(role: Role):
    """Dependency factory: verified caller holding `role`."""
    def checker(
        subject_id: str = Depends(require_identity),
        authorizer: RoleAuthorizer = Depends(get_authorizer),
    ) -> Subject:
        try:
            return authorizer.authorize(subject_id, role)
        except AuthError as exc:
            raise auth_http_error(exc)

    return checker


require_teacher = require_role(Role.TEACHER)
require_student = require_role(Role.STUDENT)
