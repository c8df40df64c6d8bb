"""Fee structures (per grade and academic year) and recorded term payments."""
from datetime import datetime
from enum import Enum
from typing import Optional

from beanie import Document, Indexed
from pydantic import BaseModel, Field
from pymongo import ASCENDING, IndexModel

from awinja.models.student import Grade


class Term(str, Enum):
    TERM_1 = "Term 1"
    TERM_2 = "Term 2"
    TERM_3 = "Term 3"


class FeeStructure(Document):
    """Charges for each of the three terms. One per (grade, academic_year)."""

    grade: Grade
    academic_year: str
    term1_amount: float = Field(ge=0)
    term2_amount: float = Field(ge=0)
    term3_amount: float = Field(ge=0)
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    class Settings:
        name = "fee_structures"
        use_state_management = True
        indexes = [
            IndexModel([("grade", ASCENDING), ("academic_year", ASCENDING)], unique=True),
        ]


class FeeStructureCreate(BaseModel):
    grade: Grade
    academic_year: Optional[str] = None
    term1_amount: float = Field(ge=0)
    term2_amount: float = Field(ge=0)
    term3_amount: float = Field(ge=0)


class FeeStructureUpdate(BaseModel):
    term1_amount: Optional[float] = Field(default=None, ge=0)
    term2_amount: Optional[float] = Field(default=None, ge=0)
    term3_amount: Optional[float] = Field(default=None, ge=0)


class FeePayment(Document):
    """A single payment towards a student's term fees.

    ``balance`` is the running balance after this payment within its
    (student, term, academic_year) group; negative means overpaid.
    """

    student_id: Indexed(str)
    admission_number: Indexed(str)
    student_name: str
    grade: Grade
    term: Term
    academic_year: str
    amount_paid: float = Field(gt=0)
    balance: float = 0
    date_paid: datetime = Field(default_factory=datetime.utcnow)
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    class Settings:
        name = "fee_payments"
        use_state_management = True
        indexes = [
            IndexModel([("student_id", ASCENDING), ("term", ASCENDING), ("academic_year", ASCENDING)]),
        ]


class FeePaymentCreate(BaseModel):
    student_id: str
    term: Term
    academic_year: Optional[str] = None
    amount_paid: float = Field(gt=0)
    date_paid: Optional[datetime] = None


class FeePaymentUpdate(BaseModel):
    term: Optional[Term] = None
    academic_year: Optional[str] = None
    amount_paid: Optional[float] = Field(default=None, gt=0)
    date_paid: Optional[datetime] = None
