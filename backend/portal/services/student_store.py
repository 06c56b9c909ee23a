"""
Student Record Store — Read/update access to per-student documents.

The core only talks to the store through the `StudentRecordStore` protocol.
`SqlStudentRecordStore` is the SQLAlchemy-backed adapter shipped with the
service: every multi-row write runs in a single transaction, fee settlement
is a conditional update, and attendance rows are insert-only.
"""
import logging
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional, Protocol

from sqlalchemy import select, text, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from portal.errors import StoreError
from portal.models.student import Student, AttendanceEntry as AttendanceRow
from portal.models.user import UserRole
from portal.schemas.schemas import AttendanceEntry, FeeStatus, Role, StudentRecord

logger = logging.getLogger(__name__)


class SettleResult(str, Enum):
    SETTLED = "settled"
    ALREADY_SETTLED = "already_settled"
    UNKNOWN_STUDENT = "unknown_student"


@dataclass(frozen=True)
class StudentChanges:
    version: int
    record: Optional[StudentRecord]  # None when nothing changed since the caller's version


class StudentRecordStore(Protocol):
    def ping(self) -> bool: ...

    def get_student(self, student_id: str) -> Optional[StudentRecord]: ...

    def list_students(self) -> list[StudentRecord]: ...

    def get_role(self, subject_id: str) -> Optional[Role]: ...

    def upsert_student(self, student_id: str, name: str, email: str, class_name: str) -> bool: ...

    def append_attendance(
        self, student_ids: list[str], entry: AttendanceEntry
    ) -> tuple[list[str], list[str]]: ...

    def settle_fees(
        self, student_id: str, order_id: str, payment_id: str, paid_at: datetime
    ) -> SettleResult: ...

    def changes_since(self, student_id: str, since_version: int) -> Optional[StudentChanges]: ...


def _to_record(student: Student) -> StudentRecord:
    return StudentRecord(
        id=student.id,
        name=student.name or "",
        email=student.email or "",
        class_name=student.class_name,
        attendance=[
            AttendanceEntry(date=row.date, teacher_name=row.teacher_name)
            for row in student.attendance
        ],
        fees=FeeStatus(
            amount=student.fee_amount or 0,
            paid=bool(student.fee_paid),
            payment_id=student.fee_payment_id,
            order_id=student.fee_order_id,
            payment_date=student.fee_payment_date,
        ),
        version=student.version or 1,
    )


class SqlStudentRecordStore:
    """SQLAlchemy adapter. Any SQLAlchemy failure surfaces as StoreError."""

    def __init__(self, session_factory: sessionmaker, default_fee_amount: int = 0):
        self._session_factory = session_factory
        self._default_fee_amount = default_fee_amount

    def _session(self) -> Session:
        return self._session_factory()

    def ping(self) -> bool:
        try:
            with self._session() as db:
                db.execute(text("SELECT 1"))
            return True
        except SQLAlchemyError:
            logger.warning("Student store ping failed", exc_info=True)
            return False

    def get_student(self, student_id: str) -> Optional[StudentRecord]:
        try:
            with self._session() as db:
                student = db.get(Student, student_id)
                return _to_record(student) if student else None
        except SQLAlchemyError as exc:
            raise StoreError("get_student failed") from exc

    def list_students(self) -> list[StudentRecord]:
        try:
            with self._session() as db:
                students = db.scalars(select(Student).order_by(Student.name, Student.id)).all()
                return [_to_record(s) for s in students]
        except SQLAlchemyError as exc:
            raise StoreError("list_students failed") from exc

    def get_role(self, subject_id: str) -> Optional[Role]:
        try:
            with self._session() as db:
                role = db.scalar(select(UserRole.role).where(UserRole.id == subject_id))
        except SQLAlchemyError as exc:
            raise StoreError("get_role failed") from exc
        try:
            return Role(role) if role is not None else None
        except ValueError:
            logger.warning("Unrecognised role %r on subject %s", role, subject_id)
            return None

    def upsert_student(self, student_id: str, name: str, email: str, class_name: str) -> bool:
        """Create the record if absent, else merge profile fields only.

        Attendance and fees are never touched by a merge. A `student` role
        record is created for subjects that have none. Returns True on create.
        A concurrent registration that wins the insert turns this call into a merge.
        """
        try:
            try:
                return self._upsert_once(student_id, name, email, class_name)
            except IntegrityError:
                logger.info("Concurrent registration for %s; retrying as merge", student_id)
                return self._upsert_once(student_id, name, email, class_name)
        except SQLAlchemyError as exc:
            raise StoreError("upsert_student failed") from exc

    def _upsert_once(self, student_id: str, name: str, email: str, class_name: str) -> bool:
        with self._session() as db, db.begin():
            student = db.get(Student, student_id)
            created = student is None
            if created:
                db.add(Student(
                    id=student_id,
                    name=name,
                    email=email,
                    class_name=class_name,
                    fee_amount=self._default_fee_amount,
                    fee_paid=False,
                    version=1,
                ))
            else:
                student.name = name
                student.email = email
                student.class_name = class_name
                student.version = Student.version + 1

            if db.get(UserRole, student_id) is None:
                db.add(UserRole(id=student_id, role=Role.STUDENT.value))
        return created

    def append_attendance(
        self, student_ids: list[str], entry: AttendanceEntry
    ) -> tuple[list[str], list[str]]:
        """Append `entry` to every existing student in one transaction.

        Returns (applied_ids, skipped_ids). Either all appends commit or none do.
        """
        try:
            with self._session() as db, db.begin():
                existing = set(db.scalars(select(Student.id).where(Student.id.in_(student_ids))))
                applied = [sid for sid in student_ids if sid in existing]
                skipped = [sid for sid in student_ids if sid not in existing]

                db.add_all([
                    AttendanceRow(student_id=sid, date=entry.date, teacher_name=entry.teacher_name)
                    for sid in applied
                ])
                if applied:
                    db.execute(
                        update(Student)
                        .where(Student.id.in_(applied))
                        .values(version=Student.version + 1)
                        .execution_options(synchronize_session=False)
                    )
            return applied, skipped
        except SQLAlchemyError as exc:
            raise StoreError("append_attendance failed") from exc

    def settle_fees(
        self, student_id: str, order_id: str, payment_id: str, paid_at: datetime
    ) -> SettleResult:
        """Conditionally flip fees to paid; only an unpaid, existing record changes."""
        try:
            with self._session() as db, db.begin():
                result = db.execute(
                    update(Student)
                    .where(Student.id == student_id, Student.fee_paid.is_(False))
                    .values(
                        fee_paid=True,
                        fee_payment_id=payment_id,
                        fee_order_id=order_id,
                        fee_payment_date=paid_at,
                        version=Student.version + 1,
                    )
                    .execution_options(synchronize_session=False)
                )
                if result.rowcount == 1:
                    return SettleResult.SETTLED

                exists = db.scalar(select(Student.id).where(Student.id == student_id))
                return SettleResult.ALREADY_SETTLED if exists else SettleResult.UNKNOWN_STUDENT
        except SQLAlchemyError as exc:
            raise StoreError("settle_fees failed") from exc

    def changes_since(self, student_id: str, since_version: int) -> Optional[StudentChanges]:
        """Polling read: the record if its version is newer than `since_version`.

        Returns None for an unknown student.
        """
        try:
            with self._session() as db:
                version = db.scalar(select(Student.version).where(Student.id == student_id))
                if version is None:
                    return None
                if version <= since_version:
                    return StudentChanges(version=version, record=None)
                record = _to_record(db.get(Student, student_id))
                return StudentChanges(version=record.version, record=record)
        except SQLAlchemyError as exc:
            raise StoreError("changes_since failed") from exc
