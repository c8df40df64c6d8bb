"""Running balances for term fee payments.

Payments for one (student, term, academic_year) group are replayed in
``date_paid`` order against the term charge from the grade's fee structure.
Each payment stores ``term_charge - cumulative_paid`` after it, so a new,
edited or deleted payment shifts every later balance in the group. Balances
are never clamped: a negative balance means the term is overpaid.

The functions here work on any objects exposing ``student_id``, ``term``,
``academic_year``, ``amount_paid``, ``date_paid``, ``balance`` and
(optionally) ``created_at``; the API passes ``FeePayment`` documents.
"""
from __future__ import annotations

import logging
from collections import defaultdict
from typing import Any, Callable, Iterable

from pydantic import BaseModel, ConfigDict, Field

from awinja.exceptions import LedgerError, MissingFeeStructure, MixedPaymentGroup
from awinja.models.fees import Term

logger = logging.getLogger(__name__)

GroupKey = tuple[str, str, str]  # (student_id, term, academic_year)

TERM_FIELDS: dict[Term, str] = {
    Term.TERM_1: "term1_amount",
    Term.TERM_2: "term2_amount",
    Term.TERM_3: "term3_amount",
}


class GroupRecompute(BaseModel):
    """Result of replaying one payment group."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    term_charge: float
    payments: list[Any] = Field(default_factory=list)  # sorted by date_paid
    changed: list[Any] = Field(default_factory=list)  # balance differs from stored value
    total_paid: float = 0

    @property
    def outstanding(self) -> float:
        return self.term_charge - self.total_paid


class SkippedGroup(BaseModel):
    student_id: str
    term: str
    academic_year: str
    code: str
    reason: str


class BatchRecompute(BaseModel):
    model_config = ConfigDict(arbitrary_types_allowed=True)

    groups: int = 0
    payments: int = 0
    changed: list[Any] = Field(default_factory=list)
    skipped: list[SkippedGroup] = Field(default_factory=list)


def _enum_value(value: Any) -> str:
    return value.value if hasattr(value, "value") else str(value)


def group_key(payment: Any) -> GroupKey:
    return (str(payment.student_id), _enum_value(payment.term), str(payment.academic_year))


def term_charge(structure: Any, term: Term | str) -> float:
    """Charge for ``term`` ("Term 1".."Term 3") from a fee structure."""
    field = TERM_FIELDS[Term(_enum_value(term))]
    return float(getattr(structure, field))


def resolve_term_charge(structure: Any | None, grade: Any, academic_year: str, term: Term | str) -> float:
    """Like ``term_charge`` but raises ``MissingFeeStructure`` when no structure was found."""
    if structure is None:
        raise MissingFeeStructure(_enum_value(grade), academic_year)
    return term_charge(structure, term)


def _sort_key(payment: Any):
    # Ties on date_paid keep creation order; sorted() is stable for the rest.
    return (payment.date_paid, getattr(payment, "created_at", None) or payment.date_paid)


def recompute_group_balances(payments: Iterable[Any], term_charge: float) -> GroupRecompute:
    """Recompute running balances for one payment group in place.

    ``payments`` may arrive in any order. Only payments whose stored balance
    changed are listed in ``changed`` so callers can persist selectively.
    """
    if term_charge < 0:
        raise ValueError(f"term_charge must be non-negative, got {term_charge}")

    ordered = sorted(payments, key=_sort_key)
    if not ordered:
        return GroupRecompute(term_charge=term_charge)

    keys = {group_key(p) for p in ordered}
    if len(keys) > 1:
        raise MixedPaymentGroup(f"Payments span {len(keys)} groups: {sorted(keys)}")

    running_total = 0.0
    changed = []
    for payment in ordered:
        running_total += payment.amount_paid
        balance = term_charge - running_total
        if payment.balance != balance:
            payment.balance = balance
            changed.append(payment)

    return GroupRecompute(
        term_charge=term_charge,
        payments=ordered,
        changed=changed,
        total_paid=running_total,
    )


def group_payments(payments: Iterable[Any]) -> dict[GroupKey, list[Any]]:
    groups: dict[GroupKey, list[Any]] = defaultdict(list)
    for payment in payments:
        groups[group_key(payment)].append(payment)
    return dict(groups)


def recompute_many(
    payments: Iterable[Any],
    charge_for: Callable[[GroupKey, list[Any]], float],
) -> BatchRecompute:
    """Recompute every group found in ``payments``.

    ``charge_for`` resolves a group's term charge and may raise a
    ``LedgerError`` (typically ``MissingFeeStructure``); that group is then
    skipped and reported while the remaining groups are still processed.
    """
    result = BatchRecompute()
    for key, group in group_payments(payments).items():
        result.groups += 1
        result.payments += len(group)
        student_id, term, academic_year = key
        try:
            charge = charge_for(key, group)
            outcome = recompute_group_balances(group, charge)
        except LedgerError as e:
            logger.warning("Skipping payment group %s: %s", key, e)
            result.skipped.append(
                SkippedGroup(
                    student_id=student_id,
                    term=term,
                    academic_year=academic_year,
                    code=e.code,
                    reason=str(e),
                )
            )
            continue
        result.changed.extend(outcome.changed)
    return result
