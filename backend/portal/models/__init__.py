from portal.models.student import Student, AttendanceEntry
from portal.models.user import UserRole

__all__ = ["Student", "AttendanceEntry", "UserRole"]
