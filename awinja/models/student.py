"""Student records: admission details, grade, parent contact, admission fee."""
from datetime import datetime
from enum import Enum
from typing import Optional

from beanie import Document, Indexed
from pydantic import BaseModel, Field


class Grade(str, Enum):
    DAY_CARE = "Day Care"
    PLAYGROUP = "Playgroup"
    PP1 = "PP1"
    PP2 = "PP2"
    GRADE_1 = "Grade 1"
    GRADE_2 = "Grade 2"
    GRADE_3 = "Grade 3"
    GRADE_4 = "Grade 4"


class Gender(str, Enum):
    MALE = "Male"
    FEMALE = "Female"


class AdmissionFee(BaseModel):
    paid: bool = False
    amount: float = Field(default=0, ge=0)
    payment_date: Optional[datetime] = None
    academic_year: Optional[str] = None  # filled from settings on create


class Student(Document):
    """Student document: admission number is the human-facing key."""

    admission_number: Indexed(str, unique=True)
    first_name: str
    last_name: str
    grade: Grade
    gender: Gender
    parent_name: str
    parent_phone: str
    knec_code: str = ""
    admission_fee: AdmissionFee = Field(default_factory=AdmissionFee)
    date_of_admission: datetime = Field(default_factory=datetime.utcnow)
    is_active: bool = True
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    class Settings:
        name = "students"
        use_state_management = True


class StudentCreate(BaseModel):
    admission_number: str
    first_name: str
    last_name: str
    grade: Grade
    gender: Gender
    parent_name: str
    parent_phone: str
    knec_code: str = ""
    admission_fee: Optional[AdmissionFee] = None
    date_of_admission: Optional[datetime] = None


class StudentUpdate(BaseModel):
    """All fields optional; admission_number stays fixed once issued."""
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    grade: Optional[Grade] = None
    gender: Optional[Gender] = None
    parent_name: Optional[str] = None
    parent_phone: Optional[str] = None
    knec_code: Optional[str] = None
    admission_fee: Optional[AdmissionFee] = None
    date_of_admission: Optional[datetime] = None
    is_active: Optional[bool] = None
