"""Per-month salary payment status for teachers and non-teaching staff.

A staff document stores its payments as an embedded list. ``PayrollLedger``
indexes that list by ``(year, month)`` so that marking a month as paid
replaces the existing record instead of appending a second one, and undoing
a payment removes it. ``to_list()`` gives back the list to persist.
"""
from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Iterable, Optional

from pydantic import BaseModel, Field

from awinja.exceptions import DuplicateMonthlyPayment, InvalidPeriod
from awinja.models.payroll import MONTH_NAMES, MonthlyPayment, Month, PaymentFrequency, PaymentStatus

logger = logging.getLogger(__name__)

PeriodKey = tuple[int, Month]

NOT_PAID_NOTE = "Not yet paid"


class PaymentStatusView(BaseModel):
    status: PaymentStatus
    amount: float = 0
    paid_date: Optional[datetime] = None
    notes: Optional[str] = None


def validate_period(year: Any, month: Any) -> PeriodKey:
    """Return the ledger key for a period or raise ``InvalidPeriod``."""
    if isinstance(year, bool) or not isinstance(year, int) or year <= 0:
        raise InvalidPeriod(f"Year must be a positive integer, got {year!r}")
    if isinstance(month, Month):
        return year, month
    if month not in MONTH_NAMES:
        raise InvalidPeriod(f"Month must be one of {', '.join(MONTH_NAMES)}; got {month!r}")
    return year, Month(month)


def _month_index(month: Month) -> int:
    return MONTH_NAMES.index(month.value)


class PayrollLedger:
    """Payment records of one staff member, keyed by (year, month)."""

    def __init__(
        self,
        payments: Iterable[MonthlyPayment],
        salary_amount: float = 0,
        default_paid_by: str = "Admin",
        owner: str | None = None,
    ):
        self.salary_amount = salary_amount
        self.default_paid_by = default_paid_by
        self.owner = owner
        self._records: dict[PeriodKey, list[MonthlyPayment]] = {}
        for payment in payments:
            self._records.setdefault((payment.year, Month(payment.month)), []).append(payment)
        self.duplicates: list[DuplicateMonthlyPayment] = [
            DuplicateMonthlyPayment(year, month.value, len(records))
            for (year, month), records in self._records.items()
            if len(records) > 1
        ]
        for dup in self.duplicates:
            logger.warning("Payroll data integrity (%s): %s", owner or "unknown staff", dup)

    def get(self, year: int, month: Month | str) -> MonthlyPayment | None:
        records = self._records.get(validate_period(year, month))
        return records[0] if records else None

    def get_status(self, year: int, month: Month | str) -> PaymentStatusView:
        key = validate_period(year, month)
        records = self._records.get(key)
        if not records:
            return PaymentStatusView(status=PaymentStatus.PENDING, amount=0, paid_date=None, notes=NOT_PAID_NOTE)
        if len(records) > 1:
            logger.warning(
                "Payroll lookup (%s): %d records for %s %d, using the first",
                self.owner or "unknown staff", len(records), key[1].value, key[0],
            )
        record = records[0]
        return PaymentStatusView(
            status=record.status,
            amount=record.amount,
            paid_date=record.paid_date,
            notes=record.notes,
        )

    def mark_paid(
        self,
        year: int,
        month: Month | str,
        amount: float | None = None,
        notes: str | None = None,
        paid_by: str | None = None,
        paid_at: datetime | None = None,
    ) -> MonthlyPayment:
        """Record the month as paid, replacing any existing record for it."""
        key = validate_period(year, month)
        record = MonthlyPayment(
            year=key[0],
            month=key[1],
            amount=amount or self.salary_amount,
            paid_date=paid_at or datetime.utcnow(),
            paid_by=paid_by or self.default_paid_by,
            notes=notes or f"Salary payment for {key[1].value} {key[0]}",
            status=PaymentStatus.PAID,
        )
        self._records.pop(key, None)
        self._records[key] = [record]
        return record

    def undo_payment(self, year: int, month: Month | str) -> bool:
        """Remove the month's record. Returns False when there was nothing to remove."""
        return self._records.pop(validate_period(year, month), None) is not None

    def history(self) -> list[MonthlyPayment]:
        """Records sorted newest period first."""
        return sorted(
            self.to_list(),
            key=lambda p: (p.year, _month_index(Month(p.month))),
            reverse=True,
        )

    def latest_payment(self) -> MonthlyPayment | None:
        paid = [p for p in self.to_list() if p.paid_date is not None]
        return max(paid, key=lambda p: p.paid_date, default=None)

    def to_list(self) -> list[MonthlyPayment]:
        return [record for records in self._records.values() for record in records]


def ledger_for(staff: Any, default_paid_by: str = "Admin") -> PayrollLedger:
    """Build a ledger from a staff document (teacher or non-teaching)."""
    return PayrollLedger(
        staff.monthly_payments,
        salary_amount=staff.salary.amount,
        default_paid_by=default_paid_by,
        owner=str(getattr(staff, "id", None) or staff.full_name),
    )


class PayrollSummaryEntry(BaseModel):
    id: str
    name: str
    salary: float
    status: PaymentStatus
    paid_amount: float


class PayrollSummary(BaseModel):
    month: str
    total_staff: int = 0
    paid_staff: int = 0
    unpaid_staff: int = 0
    total_monthly_salary: float = 0
    paid_amount: float = 0
    unpaid_amount: float = 0
    staff: list[PayrollSummaryEntry] = Field(default_factory=list)


def payroll_summary(staff_list: Iterable[Any], year: int, month: Month | str) -> PayrollSummary:
    """Paid and unpaid totals for one month across ``staff_list``.

    A paid record with a zero amount counts the member's salary instead.
    """
    key = validate_period(year, month)
    summary = PayrollSummary(month=f"{key[1].value} {key[0]}")
    for member in staff_list:
        status = ledger_for(member).get_status(*key)
        salary = member.salary.amount or 0
        if status.status == PaymentStatus.PAID:
            summary.paid_staff += 1
            summary.paid_amount += status.amount or salary
        else:
            summary.unpaid_staff += 1
            summary.unpaid_amount += salary
        summary.staff.append(
            PayrollSummaryEntry(
                id=str(member.id),
                name=member.full_name,
                salary=salary,
                status=status.status,
                paid_amount=status.amount or 0,
            )
        )
    summary.total_staff = len(summary.staff)
    summary.total_monthly_salary = summary.paid_amount + summary.unpaid_amount
    return summary


def monthly_salary_total(staff_list: Iterable[Any]) -> float:
    """Sum of salaries paid on a monthly basis."""
    return sum(
        member.salary.amount or 0
        for member in staff_list
        if member.salary.payment_frequency == PaymentFrequency.MONTHLY
    )
