"""
Student Routes — Dashboard polling for the caller's own record.
"""
from fastapi import APIRouter, Depends, HTTPException, Query

from portal.dependencies import get_store, require_student
from portal.schemas.schemas import StudentPollResponse, Subject
from portal.services.student_store import StudentRecordStore

router = APIRouter(prefix="/api/student", tags=["Student"])


@router.get("/me", response_model=StudentPollResponse)
def poll_own_record(
    since: int = Query(0, ge=0, description="Last version the client has seen"),
    subject: Subject = Depends(require_student),
    store: StudentRecordStore = Depends(get_store),
):
    """Return the record when it changed after `since`; otherwise just the current version."""
    changes = store.changes_since(subject.subject_id, since)
    if changes is None:
        raise HTTPException(status_code=404, detail="Student record not found")
    return StudentPollResponse(changed=changes.record is not None, version=changes.version, record=changes.record)
