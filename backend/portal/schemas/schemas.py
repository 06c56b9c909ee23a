"""
Pydantic Schemas — Domain records plus request & response models.
Wire names are camelCase (the portal frontend's field names); Python
attributes are snake_case.
"""
from datetime import datetime
from enum import Enum
from typing import Optional, List
from pydantic import AliasChoices, BaseModel, Field, field_validator


class Role(str, Enum):
    STUDENT = "student"
    TEACHER = "teacher"


# ──────────────── Student Record ────────────────

class AttendanceEntry(BaseModel):
    date: datetime
    teacher_name: str = Field(..., alias="teacherName")

    class Config:
        populate_by_name = True
        frozen = True


class FeeStatus(BaseModel):
    amount: int = 0  # minor currency units
    paid: bool = False
    payment_id: Optional[str] = Field(None, alias="paymentId")
    order_id: Optional[str] = Field(None, alias="orderId")
    payment_date: Optional[datetime] = Field(None, alias="paymentDate")

    class Config:
        populate_by_name = True


class StudentRecord(BaseModel):
    id: str
    name: str = ""
    email: str = ""
    class_name: Optional[str] = Field(None, alias="class")
    attendance: List[AttendanceEntry] = []
    fees: FeeStatus = FeeStatus()
    version: int = 1

    class Config:
        populate_by_name = True


class Subject(BaseModel):
    subject_id: str
    role: Role


# ──────────────── Payment ────────────────

class PaymentOrder(BaseModel):
    order_id: str = Field(..., alias="orderId")
    amount: int
    currency: str
    receipt: str

    class Config:
        populate_by_name = True


class CreateOrderRequest(BaseModel):
    amount: int = Field(..., gt=0, description="Amount in minor units (paise)")
    student_id: str = Field(..., min_length=1, alias="studentId")

    class Config:
        populate_by_name = True


class SettleRequest(BaseModel):
    order_id: str = Field(..., min_length=1, validation_alias=AliasChoices("orderId", "razorpay_order_id"))
    payment_id: str = Field(..., min_length=1, validation_alias=AliasChoices("paymentId", "razorpay_payment_id"))
    signature: str = Field(..., min_length=1, validation_alias=AliasChoices("signature", "razorpay_signature"))
    student_id: str = Field(..., min_length=1, validation_alias=AliasChoices("studentId", "student_id"))


class MessageResponse(BaseModel):
    message: str


# ──────────────── Attendance ────────────────

class MarkAttendanceRequest(BaseModel):
    present_student_uids: List[str] = Field(..., min_length=1, alias="presentStudentUids")
    teacher_name: Optional[str] = Field(None, alias="teacherName")

    class Config:
        populate_by_name = True


class MarkAttendanceResponse(BaseModel):
    message: str
    attempted: int
    applied: int
    skipped: List[str] = []
    warning: Optional[str] = None


# ──────────────── Profile ────────────────

class FinalizeSignupRequest(BaseModel):
    name: str = Field(..., min_length=1)
    email: str = Field(..., min_length=3)
    class_name: str = Field(..., min_length=1, alias="class")

    class Config:
        populate_by_name = True

    @field_validator("name", "email", "class_name")
    @classmethod
    def not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be blank")
        return value


class CheckProfileResponse(BaseModel):
    exists: bool
    message: str


class StudentPollResponse(BaseModel):
    changed: bool
    version: int
    record: Optional[StudentRecord] = None
