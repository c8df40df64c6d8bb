"""Fee structures and term payments with running balances."""
import logging
from datetime import datetime

from fastapi import APIRouter, HTTPException

from awinja.api.deps import AdminOnly, CurrentUser, get_document_or_404
from awinja.config import settings
from awinja.db import find_document
from awinja.exceptions import MissingFeeStructure
from awinja.models.fees import (
    FeePayment,
    FeePaymentCreate,
    FeePaymentUpdate,
    FeeStructure,
    FeeStructureCreate,
    FeeStructureUpdate,
)
from awinja.models.student import Student
from awinja.services.fee_balance import group_key
from awinja.services.fee_ledger import (
    charge_for_grade,
    charge_for_payment,
    recompute_all,
    recompute_group,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def _structure_out(s: FeeStructure) -> dict:
    return {
        "id": str(s.id),
        "grade": s.grade.value,
        "academic_year": s.academic_year,
        "term1_amount": s.term1_amount,
        "term2_amount": s.term2_amount,
        "term3_amount": s.term3_amount,
        "currency": settings.currency,
    }


def _payment_out(p: FeePayment) -> dict:
    return {
        "id": str(p.id),
        "student_id": p.student_id,
        "admission_number": p.admission_number,
        "student_name": p.student_name,
        "grade": p.grade.value,
        "term": p.term.value,
        "academic_year": p.academic_year,
        "amount_paid": p.amount_paid,
        "balance": p.balance,
        "date_paid": p.date_paid.isoformat(),
    }


async def _recompute_reporting(student_id: str, term, academic_year: str) -> dict | None:
    """Recompute a group after a change; a missing structure is reported, not raised."""
    try:
        await recompute_group(student_id, term, academic_year)
    except MissingFeeStructure as e:
        logger.warning("Balances not recomputed for %s/%s/%s: %s", student_id, term, academic_year, e)
        return {
            "student_id": student_id,
            "term": getattr(term, "value", term),
            "academic_year": academic_year,
            "code": e.code,
            "reason": str(e),
        }
    return None


# === Fee structures ===


@router.get("/structure")
async def list_fee_structures(user: CurrentUser):
    structures = await FeeStructure.find_all().sort("-academic_year", "+grade").to_list()
    return [_structure_out(s) for s in structures]


@router.post("/structure", status_code=201)
async def create_fee_structure(data: FeeStructureCreate, admin: AdminOnly):
    academic_year = data.academic_year or settings.default_academic_year
    existing = await FeeStructure.find_one(
        FeeStructure.grade == data.grade,
        FeeStructure.academic_year == academic_year,
    )
    if existing:
        raise HTTPException(
            status_code=400,
            detail=f"Fee structure already exists for {data.grade.value} {academic_year}",
        )
    s = FeeStructure(
        grade=data.grade,
        academic_year=academic_year,
        term1_amount=data.term1_amount,
        term2_amount=data.term2_amount,
        term3_amount=data.term3_amount,
    )
    await s.insert()
    return _structure_out(s)


@router.put("/structure/{structure_id}")
async def update_fee_structure(structure_id: str, data: FeeStructureUpdate, admin: AdminOnly):
    """Change term charges. Existing balances follow on the next recompute."""
    s = await get_document_or_404(FeeStructure, structure_id, "Fee structure")
    for key, value in data.model_dump(exclude_unset=True).items():
        if value is not None:
            setattr(s, key, value)
    s.updated_at = datetime.utcnow()
    await s.save()
    return _structure_out(s)


@router.delete("/structure/{structure_id}", status_code=204)
async def delete_fee_structure(structure_id: str, admin: AdminOnly):
    s = await get_document_or_404(FeeStructure, structure_id, "Fee structure")
    await s.delete()


# === Payments ===


@router.get("/payments")
async def list_payments(user: CurrentUser):
    payments = await FeePayment.find_all().sort("-date_paid").to_list()
    return [_payment_out(p) for p in payments]


@router.get("/payments/student/{admission_number}")
async def list_student_payments(admission_number: str, user: CurrentUser):
    payments = await FeePayment.find(
        FeePayment.admission_number == admission_number
    ).sort("-academic_year", "-date_paid").to_list()
    return {
        "payments": [_payment_out(p) for p in payments],
        "summary": {
            "total_paid": sum(p.amount_paid for p in payments),
            "payment_count": len(payments),
        },
    }


@router.post("/payments/recompute")
async def recompute_all_balances(admin: AdminOnly):
    """Maintenance: recompute every group's running balances."""
    result = await recompute_all()
    return {
        "groups": result.groups,
        "payments": result.payments,
        "updated": len(result.changed),
        "skipped": result.skipped,
    }


@router.post("/payments", status_code=201)
async def record_payment(data: FeePaymentCreate, admin: AdminOnly):
    student = await find_document(Student, data.student_id)
    if not student:
        raise HTTPException(status_code=404, detail="Student not found")
    academic_year = data.academic_year or settings.default_academic_year
    charge = await charge_for_grade(student.grade, data.term, academic_year)

    payment = FeePayment(
        student_id=str(student.id),
        admission_number=student.admission_number,
        student_name=student.full_name,
        grade=student.grade,
        term=data.term,
        academic_year=academic_year,
        amount_paid=data.amount_paid,
        balance=charge - data.amount_paid,
        date_paid=data.date_paid or datetime.utcnow(),
    )
    await payment.insert()
    result = await recompute_group(payment.student_id, payment.term, academic_year)
    payment = next((p for p in result.payments if p.id == payment.id), payment)
    return {
        "payment": _payment_out(payment),
        "calculation": {
            "term_total": charge,
            "amount_paid": payment.amount_paid,
            "balance": payment.balance,
            "total_paid": result.total_paid,
            "outstanding": result.outstanding,
        },
    }


@router.put("/payments/{payment_id}")
async def update_payment(payment_id: str, data: FeePaymentUpdate, admin: AdminOnly):
    payment = await get_document_or_404(FeePayment, payment_id, "Payment")
    old_key = group_key(payment)

    update_data = data.model_dump(exclude_unset=True)
    for key, value in update_data.items():
        if value is not None:
            setattr(payment, key, value)
    new_key = group_key(payment)

    student = await find_document(Student, payment.student_id)
    # fail before saving when the target group has no structure
    await charge_for_payment(payment, student)
    if student and new_key != old_key:
        payment.grade = student.grade

    payment.updated_at = datetime.utcnow()
    await payment.save()

    skipped = []
    result = await recompute_group(payment.student_id, payment.term, payment.academic_year)
    payment = next((p for p in result.payments if p.id == payment.id), payment)
    if new_key != old_key:
        report = await _recompute_reporting(*old_key)
        if report:
            skipped.append(report)
    return {"payment": _payment_out(payment), "skipped_groups": skipped}


@router.delete("/payments/{payment_id}")
async def delete_payment(payment_id: str, admin: AdminOnly):
    payment = await get_document_or_404(FeePayment, payment_id, "Payment")
    key = group_key(payment)
    await payment.delete()
    report = await _recompute_reporting(*key)
    return {
        "message": "Payment deleted successfully",
        "skipped_groups": [report] if report else [],
    }
