"""
Attendance Service — Batch, append-only attendance marking.

Policy for ids that do not resolve to a student: they are skipped, the rest
are appended, and the whole set of appends commits as one transaction. A
store fault or an oversized batch applies nothing.
"""
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Optional

from portal.errors import BatchTooLargeError, StoreError, WriteError, WriteErrorKind
from portal.schemas.schemas import AttendanceEntry
from portal.services.student_store import StudentRecordStore
from portal.utils.clock import utcnow
from portal.utils.validators import sanitize_name, unique_ids

logger = logging.getLogger(__name__)

DEFAULT_TEACHER_NAME = "Teacher"


@dataclass
class MarkResult:
    attempted: int
    applied: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)

    @property
    def warning(self) -> Optional[WriteErrorKind]:
        return WriteErrorKind.PARTIAL_RESOLUTION_SKIPPED if self.skipped else None


class AttendanceLedgerWriter:
    """Appends one AttendanceEntry per present student. Callers must already
    have authorized the subject as a teacher."""

    def __init__(self, store: StudentRecordStore, *, batch_limit: int = 500,
                 clock: Callable[[], datetime] = utcnow):
        self._store = store
        self._batch_limit = batch_limit
        self._clock = clock

    def mark_present(self, student_ids: list[str], teacher_name: str | None) -> MarkResult:
        ids = unique_ids(student_ids)
        if not ids:
            raise ValueError("at least one student id is required")
        if len(ids) > self._batch_limit:
            logger.warning("Attendance batch of %d exceeds limit %d", len(ids), self._batch_limit)
            raise BatchTooLargeError(WriteErrorKind.BATCH_REJECTED, f"batch exceeds {self._batch_limit} students")

        entry = AttendanceEntry(
            date=self._clock(),
            teacher_name=sanitize_name(teacher_name, DEFAULT_TEACHER_NAME),
        )
        try:
            applied, skipped = self._store.append_attendance(ids, entry)
        except StoreError as exc:
            logger.error("Attendance batch rejected by store: %s", exc)
            raise WriteError(WriteErrorKind.BATCH_REJECTED, "store rejected the batch") from exc

        result = MarkResult(attempted=len(ids), applied=applied, skipped=skipped)
        if result.skipped:
            logger.warning(
                "Attendance marked with %s: %d unknown id(s) skipped %s",
                WriteErrorKind.PARTIAL_RESOLUTION_SKIPPED.value, len(skipped), skipped,
            )
        logger.info("Attendance marked by %s: %d/%d applied", entry.teacher_name, len(applied), len(ids))
        return result
