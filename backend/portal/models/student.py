"""
Student Record Model — Per-student profile, fee ledger and attendance log.
Maps to the 'students' and 'attendance_entries' tables.
"""
from datetime import datetime
from sqlalchemy import Column, String, Integer, DateTime, Boolean, ForeignKey
from sqlalchemy.orm import relationship

from portal.database import Base


class Student(Base):
    __tablename__ = "students"

    id = Column(String(128), primary_key=True, index=True)  # subject id from the identity oracle
    name = Column(String(128), nullable=False, default="")
    email = Column(String(256), nullable=False, default="")
    class_name = Column("class", String(64))

    # FeeStatus, flattened
    fee_amount = Column(Integer, nullable=False, default=0)  # minor units (paise)
    fee_paid = Column(Boolean, nullable=False, default=False)
    fee_payment_id = Column(String(64))
    fee_order_id = Column(String(64))
    fee_payment_date = Column(DateTime, nullable=True)

    version = Column(Integer, nullable=False, default=1)  # bumped on every mutation
    created_at = Column(DateTime, default=datetime.utcnow)

    attendance = relationship(
        "AttendanceEntry",
        order_by="AttendanceEntry.id",
        lazy="selectin",
    )


class AttendanceEntry(Base):
    """Append-only: rows are inserted, never updated or deleted."""

    __tablename__ = "attendance_entries"

    id = Column(Integer, primary_key=True, autoincrement=True)
    student_id = Column(String(128), ForeignKey("students.id"), nullable=False, index=True)
    date = Column(DateTime, nullable=False)
    teacher_name = Column(String(128), nullable=False)
