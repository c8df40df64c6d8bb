"""Unit tests for running fee balances"""

import pytest
from types import SimpleNamespace

from awinja.exceptions import MissingFeeStructure, MixedPaymentGroup
from awinja.models.fees import Term
from awinja.services.fee_balance import (
    group_key,
    group_payments,
    recompute_group_balances,
    recompute_many,
    resolve_term_charge,
    term_charge,
)


STRUCTURE = SimpleNamespace(term1_amount=9500, term2_amount=8000, term3_amount=7000)


def test_running_balance_after_each_payment(make_payment):
    """Balance after the k-th payment is charge minus the first k amounts"""
    first = make_payment(3000, day=1)
    second = make_payment(2000, day=5)

    result = recompute_group_balances([first, second], 9500)

    assert [p.balance for p in result.payments] == [6500, 4500]
    assert result.total_paid == 5000
    assert result.outstanding == 4500


def test_overpayment_goes_negative(make_payment):
    """Overpaid terms keep a negative balance"""
    payment = make_payment(5000)

    recompute_group_balances([payment], 3000)

    assert payment.balance == -2000


def test_single_payment(make_payment):
    payment = make_payment(1200)
    result = recompute_group_balances([payment], 9500)
    assert payment.balance == 8300
    assert result.changed == [payment]


def test_zero_term_charge(make_payment):
    payments = [make_payment(100, day=1), make_payment(250, day=2)]

    recompute_group_balances(payments, 0)

    assert [p.balance for p in payments] == [-100, -350]


def test_empty_group_is_noop():
    result = recompute_group_balances([], 9500)

    assert result.payments == []
    assert result.changed == []
    assert result.outstanding == 9500


def test_input_order_does_not_matter(make_payment):
    """Payments are sorted by date internally"""
    early = make_payment(3000, day=1)
    middle = make_payment(2000, day=10)
    late = make_payment(1000, day=20)

    result = recompute_group_balances([late, early, middle], 9500)

    assert [p.id for p in result.payments] == [early.id, middle.id, late.id]
    assert (early.balance, middle.balance, late.balance) == (6500, 4500, 3500)


def test_same_date_keeps_creation_order(make_payment):
    """Ties on date_paid are broken by creation time"""
    first = make_payment(1000, day=3)
    second = make_payment(500, day=3)

    result = recompute_group_balances([second, first], 2000)

    assert [p.id for p in result.payments] == [first.id, second.id]
    assert first.balance == 1000
    assert second.balance == 500


def test_only_changed_balances_are_flagged(make_payment):
    correct = make_payment(3000, day=1, balance=6500)
    stale = make_payment(2000, day=2, balance=7500)

    result = recompute_group_balances([correct, stale], 9500)

    assert result.changed == [stale]
    assert stale.balance == 4500


def test_deleting_middle_payment_shifts_later_balances(make_payment):
    first = make_payment(3000, day=1)
    middle = make_payment(2000, day=2)
    last = make_payment(1000, day=3)
    recompute_group_balances([first, middle, last], 9500)
    assert (first.balance, last.balance) == (6500, 3500)

    result = recompute_group_balances([first, last], 9500)

    assert first.balance == 6500
    assert last.balance == 5500
    assert result.changed == [last]


def test_mixed_groups_rejected(make_payment):
    payments = [make_payment(100), make_payment(100, term=Term.TERM_2)]

    with pytest.raises(MixedPaymentGroup):
        recompute_group_balances(payments, 9500)
    assert all(p.balance == 0 for p in payments)


def test_negative_term_charge_rejected(make_payment):
    with pytest.raises(ValueError):
        recompute_group_balances([make_payment(100)], -1)


@pytest.mark.parametrize(
    "term, expected",
    [(Term.TERM_1, 9500), ("Term 2", 8000), (Term.TERM_3, 7000)],
)
def test_term_charge_selects_term_field(term, expected):
    assert term_charge(STRUCTURE, term) == expected


def test_missing_fee_structure():
    with pytest.raises(MissingFeeStructure) as exc_info:
        resolve_term_charge(None, "Grade 4", "2099", Term.TERM_1)

    assert exc_info.value.grade == "Grade 4"
    assert exc_info.value.academic_year == "2099"
    assert exc_info.value.code == "missing_fee_structure"


def test_group_key_uses_enum_values(make_payment):
    payment = make_payment(100, term=Term.TERM_3, academic_year="2026")
    assert group_key(payment) == ("student-1", "Term 3", "2026")


def test_group_payments_splits_by_student_term_year(make_payment):
    payments = [
        make_payment(100),
        make_payment(100, student_id="student-2"),
        make_payment(100, academic_year="2026"),
        make_payment(100),
    ]

    groups = group_payments(payments)

    assert len(groups) == 3
    assert len(groups[("student-1", "Term 1", "2025")]) == 2


def test_batch_skips_groups_without_structure(make_payment):
    """A missing structure for one group does not stop the others"""
    configured = [make_payment(3000, day=1), make_payment(2000, day=2)]
    orphan = make_payment(1000, student_id="student-9", academic_year="2099", balance=123)

    def charge_for(key, group):
        student_id, term, academic_year = key
        if academic_year == "2099":
            return resolve_term_charge(None, "Grade 4", academic_year, term)
        return resolve_term_charge(STRUCTURE, "Grade 1", academic_year, term)

    result = recompute_many([*configured, orphan], charge_for)

    assert result.groups == 2
    assert result.payments == 3
    assert [p.balance for p in configured] == [6500, 4500]
    assert orphan.balance == 123
    assert len(result.skipped) == 1
    skipped = result.skipped[0]
    assert (skipped.student_id, skipped.academic_year, skipped.code) == (
        "student-9",
        "2099",
        "missing_fee_structure",
    )
    assert orphan not in result.changed
