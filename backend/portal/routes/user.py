"""
User Routes — Registration finalisation and profile completeness check.
The subject id always comes from the verified credential, never the body.
"""
import logging

from fastapi import APIRouter, Depends

from portal.dependencies import get_store, require_identity
from portal.schemas.schemas import CheckProfileResponse, FinalizeSignupRequest
from portal.services.student_store import StudentRecordStore
from portal.utils.validators import sanitize_name

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/user", tags=["User"])


@router.post("/finalize-signup")
def finalize_signup(
    payload: FinalizeSignupRequest,
    subject_id: str = Depends(require_identity),
    store: StudentRecordStore = Depends(get_store),
):
    """Create the student's record, or merge profile fields into an existing one."""
    name = sanitize_name(payload.name)
    created = store.upsert_student(subject_id, name, payload.email.strip(), payload.class_name.strip())
    logger.info("Student %s %s", subject_id, "registered" if created else "profile updated")
    return {
        "message": "Registration successfully finalized.",
        "user": {"uid": subject_id, "name": name},
    }


@router.get("/check-profile", response_model=CheckProfileResponse)
def check_profile(
    subject_id: str = Depends(require_identity),
    store: StudentRecordStore = Depends(get_store),
):
    """A profile is complete once the student record exists with a class."""
    record = store.get_student(subject_id)
    if record is not None and record.class_name:
        return CheckProfileResponse(exists=True, message="Profile complete.")
    return CheckProfileResponse(exists=False, message="Profile incomplete, requires class selection.")
