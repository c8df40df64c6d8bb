"""Salary settings and per-month payment records embedded in staff documents."""
from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class Month(str, Enum):
    JANUARY = "January"
    FEBRUARY = "February"
    MARCH = "March"
    APRIL = "April"
    MAY = "May"
    JUNE = "June"
    JULY = "July"
    AUGUST = "August"
    SEPTEMBER = "September"
    OCTOBER = "October"
    NOVEMBER = "November"
    DECEMBER = "December"


MONTH_NAMES: list[str] = [m.value for m in Month]


class PaymentStatus(str, Enum):
    PAID = "Paid"
    PENDING = "Pending"
    PARTIAL = "Partial"  # declared for stored data; no operation sets it


class PaymentFrequency(str, Enum):
    MONTHLY = "Monthly"
    WEEKLY = "Weekly"
    DAILY = "Daily"
    OTHER = "Other"


class SalaryInfo(BaseModel):
    amount: float = Field(default=0, ge=0)
    currency: Optional[str] = None  # settings.currency when unset
    payment_frequency: PaymentFrequency = PaymentFrequency.MONTHLY


class MonthlyPayment(BaseModel):
    """One salary disbursement, unique per (year, month) within a staff member."""

    year: int
    month: Month
    amount: float = 0
    paid_date: Optional[datetime] = None
    paid_by: Optional[str] = None
    notes: Optional[str] = None
    status: PaymentStatus = PaymentStatus.PENDING
    created_at: datetime = Field(default_factory=datetime.utcnow)


class MarkPaidBody(BaseModel):
    year: int
    month: str
    amount: Optional[float] = Field(default=None, ge=0)
    notes: Optional[str] = None


class PeriodBody(BaseModel):
    year: int
    month: str


class BulkMarkPaidBody(BaseModel):
    staff_ids: list[str] = Field(min_length=1)
    year: int
    month: str
    notes: Optional[str] = None
