"""Support staff (drivers, cooks, security...) with embedded payroll records."""
from datetime import datetime
from enum import Enum
from typing import Optional

from beanie import Document, Indexed
from pydantic import BaseModel, EmailStr, Field

from awinja.models.payroll import MonthlyPayment, SalaryInfo


class StaffRole(str, Enum):
    DRIVER = "Driver"
    GARDENER = "Gardener"
    CLEANER = "Cleaner"
    COOK = "Cook"
    SECURITY = "Security"
    OTHER = "Other"


class NonTeachingStaff(Document):
    """Non-teaching staff document. Deleting removes the record outright."""

    first_name: str
    last_name: str
    email: Indexed(EmailStr, unique=True)
    phone: str
    role: StaffRole = StaffRole.OTHER
    employment_date: datetime = Field(default_factory=datetime.utcnow)
    salary: SalaryInfo = Field(default_factory=SalaryInfo)
    monthly_payments: list[MonthlyPayment] = Field(default_factory=list)
    is_active: bool = True
    notes: str = ""
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    class Settings:
        name = "non_teaching_staff"
        use_state_management = True
        use_revision = True


class NonTeachingStaffCreate(BaseModel):
    first_name: str
    last_name: str
    email: EmailStr
    phone: str
    role: StaffRole = StaffRole.OTHER
    employment_date: Optional[datetime] = None
    salary: Optional[SalaryInfo] = None
    notes: str = ""


class NonTeachingStaffUpdate(BaseModel):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    role: Optional[StaffRole] = None
    employment_date: Optional[datetime] = None
    salary: Optional[SalaryInfo] = None
    is_active: Optional[bool] = None
    notes: Optional[str] = None
