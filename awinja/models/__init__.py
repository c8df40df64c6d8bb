"""Beanie document models and Pydantic schemas."""
from awinja.models.user import User, UserRole, UserCreate
from awinja.models.student import Student, StudentCreate, StudentUpdate, Grade, Gender, AdmissionFee
from awinja.models.payroll import (
    Month,
    MonthlyPayment,
    PaymentStatus,
    PaymentFrequency,
    SalaryInfo,
    MarkPaidBody,
    PeriodBody,
    BulkMarkPaidBody,
)
from awinja.models.teacher import Teacher, TeacherCreate, TeacherUpdate, TeacherGrade
from awinja.models.non_teaching_staff import (
    NonTeachingStaff,
    NonTeachingStaffCreate,
    NonTeachingStaffUpdate,
    StaffRole,
)
from awinja.models.fees import (
    Term,
    FeeStructure,
    FeeStructureCreate,
    FeeStructureUpdate,
    FeePayment,
    FeePaymentCreate,
    FeePaymentUpdate,
)

__all__ = [
    "User",
    "UserRole",
    "UserCreate",
    "Student",
    "StudentCreate",
    "StudentUpdate",
    "Grade",
    "Gender",
    "AdmissionFee",
    "Month",
    "MonthlyPayment",
    "PaymentStatus",
    "PaymentFrequency",
    "SalaryInfo",
    "MarkPaidBody",
    "PeriodBody",
    "BulkMarkPaidBody",
    "Teacher",
    "TeacherCreate",
    "TeacherUpdate",
    "TeacherGrade",
    "NonTeachingStaff",
    "NonTeachingStaffCreate",
    "NonTeachingStaffUpdate",
    "StaffRole",
    "Term",
    "FeeStructure",
    "FeeStructureCreate",
    "FeeStructureUpdate",
    "FeePayment",
    "FeePaymentCreate",
    "FeePaymentUpdate",
]
