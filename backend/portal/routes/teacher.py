"""
Teacher Routes — Role-gated attendance marking and student roster.
"""
from fastapi import APIRouter, Depends, HTTPException

from portal.dependencies import get_attendance_writer, get_store, require_teacher
from portal.errors import BatchTooLargeError, WriteError
from portal.schemas.schemas import MarkAttendanceRequest, MarkAttendanceResponse, StudentRecord, Subject
from portal.services.attendance_service import AttendanceLedgerWriter
from portal.services.student_store import StudentRecordStore

router = APIRouter(prefix="/api/teacher", tags=["Teacher"])


@router.post("/attendance", response_model=MarkAttendanceResponse)
def mark_attendance(
    payload: MarkAttendanceRequest,
    subject: Subject = Depends(require_teacher),
    writer: AttendanceLedgerWriter = Depends(get_attendance_writer),
):
    """Mark every listed student present for this session."""
    try:
        result = writer.mark_present(payload.present_student_uids, payload.teacher_name)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    except BatchTooLargeError:
        raise HTTPException(status_code=413, detail="Attendance batch too large")
    except WriteError:
        raise HTTPException(status_code=500, detail="Internal Server Error")

    return MarkAttendanceResponse(
        message="Attendance marked successfully.",
        attempted=result.attempted,
        applied=len(result.applied),
        skipped=result.skipped,
        warning=result.warning.value if result.warning else None,
    )


@router.get("/students", response_model=list[StudentRecord])
def list_students(
    subject: Subject = Depends(require_teacher),
    store: StudentRecordStore = Depends(get_store),
):
    """All student records, ordered by name."""
    return store.list_students()
