"""
Authorization Service — Role gate for privileged operations.
"""
import logging

from portal.errors import AuthError, AuthErrorKind
from portal.schemas.schemas import Role, Subject
from portal.services.student_store import StudentRecordStore

logger = logging.getLogger(__name__)


class RoleAuthorizer:
    """Looks up the subject's role record on every call; nothing is cached."""

    def __init__(self, store: StudentRecordStore):
        self._store = store

    def authorize(self, subject_id: str, required_role: Role) -> Subject:
        role = self._store.get_role(subject_id)
        if role != required_role:
            # no record and wrong role are reported identically
            logger.info("Forbidden: subject %s lacks role %s", subject_id, required_role.value)
            raise AuthError(AuthErrorKind.FORBIDDEN)
        return Subject(subject_id=subject_id, role=role)
