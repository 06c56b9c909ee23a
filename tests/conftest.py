import os
import tempfile

# Settings are read once at import; point them at throwaway resources first.
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("LOG_DIR", tempfile.mkdtemp(prefix="portal-logs-"))
os.environ["RAZORPAY_KEY_ID"] = "rzp_test_key"
os.environ["RAZORPAY_KEY_SECRET"] = "s3cr3t"
os.environ["JWT_SECRET"] = "test-jwt-secret"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from portal.database import create_store_engine, init_db
from portal.dependencies import get_gateway, get_identity_oracle, get_store
from portal.errors import GatewayError, GatewayErrorKind
from portal.main import app
from portal.models.user import UserRole
from portal.schemas.schemas import PaymentOrder
from portal.services.identity_service import JwtIdentityOracle
from portal.services.student_store import SqlStudentRecordStore
from portal.utils.rate_limiter import reset_rate_limits


class FakeGateway:
    def __init__(self):
        self.calls = []
        self.fail = False

    def create_order(self, amount: int, currency: str, receipt: str) -> PaymentOrder:
        self.calls.append({"amount": amount, "currency": currency, "receipt": receipt})
        if self.fail:
            raise GatewayError(GatewayErrorKind.CREATE_FAILED, "gateway down")
        return PaymentOrder(
            order_id=f"order_{len(self.calls)}", amount=amount, currency=currency, receipt=receipt,
        )


@pytest.fixture
def session_factory():
    engine = create_store_engine("sqlite://", 5.0, poolclass=StaticPool)
    init_db(bind=engine)
    yield sessionmaker(bind=engine, autoflush=False)
    engine.dispose()


@pytest.fixture
def store(session_factory):
    return SqlStudentRecordStore(session_factory, default_fee_amount=50000)


@pytest.fixture
def grant_role(session_factory):
    def grant(subject_id: str, role: str):
        with session_factory() as db, db.begin():
            existing = db.get(UserRole, subject_id)
            if existing:
                existing.role = role
            else:
                db.add(UserRole(id=subject_id, role=role))
    return grant


@pytest.fixture
def add_student(store):
    def add(student_id: str, name: str = "Student", class_name: str = "10"):
        store.upsert_student(student_id, name, f"{student_id}@example.com", class_name)
    return add


@pytest.fixture
def oracle():
    return JwtIdentityOracle("test-jwt-secret")


@pytest.fixture
def gateway():
    return FakeGateway()


@pytest.fixture
def auth_header(oracle):
    def header(subject_id: str) -> dict:
        return {"Authorization": f"Bearer {oracle.issue_token(subject_id)}"}
    return header


@pytest.fixture
def client(store, oracle, gateway):
    app.dependency_overrides[get_store] = lambda: store
    app.dependency_overrides[get_identity_oracle] = lambda: oracle
    app.dependency_overrides[get_gateway] = lambda: gateway
    reset_rate_limits()
    yield TestClient(app)
    app.dependency_overrides.clear()
