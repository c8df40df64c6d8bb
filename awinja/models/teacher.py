"""Teaching staff: grade assignments plus embedded payroll records."""
from datetime import datetime
from enum import Enum
from typing import Optional

from beanie import Document, Indexed
from pydantic import BaseModel, EmailStr, Field

from awinja.models.payroll import MonthlyPayment, SalaryInfo


class TeacherGrade(str, Enum):
    PLAYGROUP = "Playgroup"
    PP1 = "PP1"
    PP2 = "PP2"
    GRADE_1 = "Grade 1"
    GRADE_2 = "Grade 2"
    GRADE_3 = "Grade 3"
    GRADE_4 = "Grade 4"
    NONE = "None"


class Teacher(Document):
    """Teacher document. Deleting only clears is_active."""

    first_name: str
    last_name: str
    email: Indexed(EmailStr, unique=True)
    phone: str
    primary_grade_assigned: TeacherGrade = TeacherGrade.NONE
    additional_grades: list[TeacherGrade] = Field(default_factory=list)
    salary: SalaryInfo = Field(default_factory=SalaryInfo)
    monthly_payments: list[MonthlyPayment] = Field(default_factory=list)
    is_active: bool = True
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    @property
    def grades(self) -> list[TeacherGrade]:
        return [self.primary_grade_assigned, *self.additional_grades]

    class Settings:
        name = "teachers"
        use_state_management = True
        use_revision = True


class TeacherCreate(BaseModel):
    first_name: str
    last_name: str
    email: EmailStr
    phone: str
    primary_grade_assigned: TeacherGrade = TeacherGrade.NONE
    additional_grades: list[TeacherGrade] = Field(default_factory=list)
    salary: Optional[SalaryInfo] = None


class TeacherUpdate(BaseModel):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    primary_grade_assigned: Optional[TeacherGrade] = None
    additional_grades: Optional[list[TeacherGrade]] = None
    salary: Optional[SalaryInfo] = None
    is_active: Optional[bool] = None
