"""Load, recompute and persist fee payment groups."""
from __future__ import annotations

import asyncio
import logging
from collections import Counter
from contextlib import asynccontextmanager

from beanie import PydanticObjectId

from awinja.db import find_document
from awinja.models.fees import FeePayment, FeeStructure
from awinja.models.student import Grade, Student
from awinja.services.fee_balance import (
    BatchRecompute,
    GroupKey,
    GroupRecompute,
    recompute_group_balances,
    recompute_many,
    resolve_term_charge,
)

logger = logging.getLogger(__name__)

# Serializes read-recompute-write per (student, term, academic_year) within this process.
# Entries are dropped once no task holds or waits on them.
_group_locks: dict[GroupKey, asyncio.Lock] = {}
_group_lock_users: Counter[GroupKey] = Counter()


@asynccontextmanager
async def group_lock(key: GroupKey):
    lock = _group_locks.setdefault(key, asyncio.Lock())
    _group_lock_users[key] += 1
    try:
        async with lock:
            yield
    finally:
        _group_lock_users[key] -= 1
        if not _group_lock_users[key]:
            del _group_lock_users[key]
            del _group_locks[key]


def pricing_grade(student: Student | None, payment: FeePayment) -> Grade:
    """Grade that prices a payment's group: the student's current grade, else the stored one."""
    return student.grade if student else payment.grade


async def find_fee_structure(grade, academic_year: str) -> FeeStructure | None:
    return await FeeStructure.find_one(
        FeeStructure.grade == grade,
        FeeStructure.academic_year == academic_year,
    )


async def charge_for_grade(grade, term, academic_year: str) -> float:
    structure = await find_fee_structure(grade, academic_year)
    return resolve_term_charge(structure, grade, academic_year, term)


async def charge_for_payment(payment: FeePayment, student: Student | None = None) -> float:
    """Term charge for the group ``payment`` belongs to.

    Raises ``MissingFeeStructure`` when the pricing grade has no structure for
    the payment's academic year.
    """
    grade = pricing_grade(student, payment)
    return await charge_for_grade(grade, payment.term, payment.academic_year)


async def recompute_group(student_id: str, term, academic_year: str) -> GroupRecompute:
    """Recompute and save balances for every payment in one group.

    Raises ``MissingFeeStructure`` without touching stored balances when the
    group's pricing grade has no structure for ``academic_year``.
    """
    key = (student_id, getattr(term, "value", term), academic_year)
    async with group_lock(key):
        payments = await FeePayment.find(
            FeePayment.student_id == student_id,
            FeePayment.term == term,
            FeePayment.academic_year == academic_year,
        ).sort("+_id").to_list()
        if not payments:
            return GroupRecompute(term_charge=0)

        student = await find_document(Student, student_id)
        charge = await charge_for_payment(payments[0], student)

        result = recompute_group_balances(payments, charge)
        for payment in result.changed:
            await payment.save()
        if result.changed:
            logger.info("Updated %d balance(s) for payment group %s", len(result.changed), key)
        return result


async def recompute_all() -> BatchRecompute:
    """Recompute every payment group; groups without a fee structure are skipped."""
    payments = await FeePayment.find_all().sort("+_id").to_list()
    structures = {
        (s.grade.value, s.academic_year): s for s in await FeeStructure.find_all().to_list()
    }
    student_ids = {PydanticObjectId(p.student_id) for p in payments if PydanticObjectId.is_valid(p.student_id)}
    students = {
        str(s.id): s for s in await Student.find({"_id": {"$in": list(student_ids)}}).to_list()
    }

    def charge_for(key: GroupKey, group: list[FeePayment]) -> float:
        student_id, term, academic_year = key
        grade = pricing_grade(students.get(student_id), group[0])
        structure = structures.get((grade.value, academic_year))
        return resolve_term_charge(structure, grade, academic_year, term)

    result = recompute_many(payments, charge_for)
    for payment in result.changed:
        await payment.save()
    logger.info(
        "Balance recompute: %d payments in %d groups, %d updated, %d groups skipped",
        result.payments, result.groups, len(result.changed), len(result.skipped),
    )
    return result
