"""Pytest fixtures for testing"""

import os

# Settings are read at import time; the production secret guard needs these.
os.environ.setdefault("DEBUG", "true")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret")

from datetime import datetime, timedelta
from typing import Callable, Optional

import pytest
from pydantic import BaseModel, Field

from awinja.models.fees import Term
from awinja.models.payroll import MonthlyPayment, SalaryInfo


class PaymentRow(BaseModel):
    """Stand-in for a FeePayment document (no database needed)."""

    id: str
    student_id: str = "student-1"
    term: Term = Term.TERM_1
    academic_year: str = "2025"
    amount_paid: float
    balance: float = 0
    date_paid: datetime
    created_at: Optional[datetime] = None


class StaffRow(BaseModel):
    """Stand-in for a Teacher / NonTeachingStaff document."""

    id: str
    first_name: str
    last_name: str
    salary: SalaryInfo = Field(default_factory=SalaryInfo)
    monthly_payments: list[MonthlyPayment] = Field(default_factory=list)
    is_active: bool = True

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"


BASE_DATE = datetime(2025, 1, 6, 9, 0)


@pytest.fixture
def make_payment() -> Callable[..., PaymentRow]:
    """Build payments dated ``day`` days after the start of term."""
    counter = {"n": 0}

    def _make(amount: float, day: int = 0, **kwargs) -> PaymentRow:
        counter["n"] += 1
        n = counter["n"]
        kwargs.setdefault("date_paid", BASE_DATE + timedelta(days=day))
        kwargs.setdefault("created_at", BASE_DATE + timedelta(seconds=n))
        return PaymentRow(id=f"pay-{n}", amount_paid=amount, **kwargs)

    return _make


@pytest.fixture
def make_staff() -> Callable[..., StaffRow]:
    def _make(staff_id: str, salary: float = 15000, **kwargs) -> StaffRow:
        kwargs.setdefault("first_name", "Jane")
        kwargs.setdefault("last_name", staff_id.title())
        return StaffRow(id=staff_id, salary=SalaryInfo(amount=salary), **kwargs)

    return _make
