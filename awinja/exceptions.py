"""Ledger errors shared by the fee and payroll services."""


class LedgerError(Exception):
    """Base error for fee balance and payroll operations."""

    code = "ledger_error"


class MissingFeeStructure(LedgerError):
    """No fee structure configured for a grade and academic year."""

    code = "missing_fee_structure"

    def __init__(self, grade: str, academic_year: str):
        self.grade = grade
        self.academic_year = academic_year
        super().__init__(
            f"Fee structure not found for grade: {grade} and academic year: {academic_year}"
        )


class MixedPaymentGroup(LedgerError):
    """Payments passed for recomputation span more than one group."""

    code = "mixed_payment_group"


class InvalidPeriod(LedgerError):
    """Month name or year outside the accepted range."""

    code = "invalid_period"


class DuplicateMonthlyPayment(LedgerError):
    """More than one monthly payment stored for the same period.

    Not raised by the payroll ledger itself; it is collected as a warning so
    lookups stay deterministic.
    """

    code = "duplicate_monthly_payment"

    def __init__(self, year: int, month: str, count: int):
        self.year = year
        self.month = month
        self.count = count
        super().__init__(f"{count} payment records found for {month} {year}")
