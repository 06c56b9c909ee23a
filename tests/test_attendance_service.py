from datetime import datetime

import pytest

from portal.errors import StoreError, WriteError, WriteErrorKind
from portal.schemas.schemas import AttendanceEntry
from portal.services.attendance_service import AttendanceLedgerWriter

NOW = datetime(2026, 10, 19, 9, 30)


@pytest.fixture
def writer(store):
    return AttendanceLedgerWriter(store, batch_limit=3, clock=lambda: NOW)


def test_marks_each_student_once(writer, store, add_student):
    add_student("stu_1")
    add_student("stu_2")
    add_student("stu_3")

    result = writer.mark_present(["stu_1", "stu_2"], "Ms. Rao")

    assert result.attempted == 2
    assert result.applied == ["stu_1", "stu_2"]
    assert result.skipped == []
    assert result.warning is None
    expected = [AttendanceEntry(date=NOW, teacher_name="Ms. Rao")]
    assert store.get_student("stu_1").attendance == expected
    assert store.get_student("stu_2").attendance == expected
    assert store.get_student("stu_3").attendance == []


def test_unknown_ids_are_skipped_and_flagged(writer, store, add_student):
    add_student("stu_1")
    add_student("stu_2")

    result = writer.mark_present(["stu_1", "ghost", "stu_2"], "Ms. Rao")

    assert result.attempted == 3
    assert result.applied == ["stu_1", "stu_2"]
    assert result.skipped == ["ghost"]
    assert result.warning is WriteErrorKind.PARTIAL_RESOLUTION_SKIPPED
    assert len(store.get_student("stu_1").attendance) == 1


def test_duplicate_ids_in_one_call_append_once(writer, store, add_student):
    add_student("stu_1")
    result = writer.mark_present(["stu_1", "stu_1", " stu_1 "], "Ms. Rao")
    assert result.attempted == 1
    assert len(store.get_student("stu_1").attendance) == 1


def test_repeat_calls_append_again(writer, store, add_student):
    add_student("stu_1")
    writer.mark_present(["stu_1"], "Ms. Rao")
    writer.mark_present(["stu_1"], "Ms. Rao")
    assert len(store.get_student("stu_1").attendance) == 2


def test_missing_teacher_name_defaults(writer, store, add_student):
    add_student("stu_1")
    writer.mark_present(["stu_1"], None)
    assert store.get_student("stu_1").attendance[0].teacher_name == "Teacher"


def test_empty_batch_is_rejected(writer):
    with pytest.raises(ValueError):
        writer.mark_present(["", "  "], "Ms. Rao")


def test_oversized_batch_applies_nothing(writer, store, add_student):
    for i in range(4):
        add_student(f"stu_{i}")

    with pytest.raises(WriteError) as exc:
        writer.mark_present([f"stu_{i}" for i in range(4)], "Ms. Rao")

    assert exc.value.kind is WriteErrorKind.BATCH_REJECTED
    assert all(not r.attendance for r in store.list_students())


class FailingStore:
    def append_attendance(self, student_ids, entry):
        raise StoreError("disk full")


def test_store_fault_is_batch_rejected():
    writer = AttendanceLedgerWriter(FailingStore(), clock=lambda: NOW)
    with pytest.raises(WriteError) as exc:
        writer.mark_present(["stu_1"], "Ms. Rao")
    assert exc.value.kind is WriteErrorKind.BATCH_REJECTED
