from portal.services.identity_service import IdentityVerifier, JwtIdentityOracle, HttpIdentityOracle
from portal.services.authorization_service import RoleAuthorizer
from portal.services.attendance_service import AttendanceLedgerWriter
from portal.services.settlement_service import PaymentSettlementEngine
from portal.services.payment_gateway import RazorpayGateway
from portal.services.student_store import SqlStudentRecordStore

__all__ = [
    "IdentityVerifier", "JwtIdentityOracle", "HttpIdentityOracle", "RoleAuthorizer",
    "AttendanceLedgerWriter", "PaymentSettlementEngine", "RazorpayGateway", "SqlStudentRecordStore",
]
