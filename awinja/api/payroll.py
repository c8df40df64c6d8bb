"""Payroll routes shared by teachers and non-teaching staff."""
from datetime import datetime

from beanie import Document, PydanticObjectId
from fastapi import APIRouter

from awinja.api.deps import AdminOnly, CurrentUser, get_document_or_404
from awinja.config import settings
from awinja.models.payroll import BulkMarkPaidBody, MarkPaidBody, PeriodBody
from awinja.services.payroll import ledger_for, payroll_summary, validate_period


def salary_out(staff) -> dict:
    return {
        "amount": staff.salary.amount,
        "currency": staff.salary.currency or settings.currency,
        "payment_frequency": staff.salary.payment_frequency.value,
    }


def build_payroll_router(model: type[Document], label: str) -> APIRouter:
    """Mark-paid, undo, status, history, bulk and summary routes for ``model``."""
    router = APIRouter()

    def _paid_by(user) -> str:
        return user.full_name or settings.default_paid_by

    async def _save_payments(staff, ledger) -> None:
        staff.monthly_payments = ledger.to_list()
        staff.updated_at = datetime.utcnow()
        await staff.save()

    @router.post("/bulk/mark-paid")
    async def bulk_mark_paid(body: BulkMarkPaidBody, admin: AdminOnly):
        year, month = validate_period(body.year, body.month)
        ids = [PydanticObjectId(i) for i in body.staff_ids if PydanticObjectId.is_valid(i)]
        staff_list = await model.find({"_id": {"$in": ids}}).to_list()
        for staff in staff_list:
            ledger = ledger_for(staff, settings.default_paid_by)
            ledger.mark_paid(
                year,
                month,
                staff.salary.amount,
                body.notes or f"Bulk salary payment for {month.value} {year}",
                _paid_by(admin),
            )
            await _save_payments(staff, ledger)
        return {
            "updated": len(staff_list),
            "message": f"{len(staff_list)} {label.lower()} record(s) marked as paid for {month.value} {year}",
        }

    @router.get("/payroll/summary/{year}/{month}")
    async def get_payroll_summary(year: int, month: str, user: CurrentUser):
        validate_period(year, month)
        staff_list = await model.find({"is_active": True}).to_list()
        return payroll_summary(staff_list, year, month)

    @router.post("/{staff_id}/mark-paid")
    async def mark_paid(staff_id: str, body: MarkPaidBody, admin: AdminOnly):
        staff = await get_document_or_404(model, staff_id, label)
        ledger = ledger_for(staff, settings.default_paid_by)
        record = ledger.mark_paid(body.year, body.month, body.amount, body.notes, _paid_by(admin))
        await _save_payments(staff, ledger)
        return {
            "message": f"{label} marked as paid for {record.month.value} {record.year}",
            "payment": record,
        }

    @router.post("/{staff_id}/undo-payment")
    async def undo_payment(staff_id: str, body: PeriodBody, admin: AdminOnly):
        staff = await get_document_or_404(model, staff_id, label)
        ledger = ledger_for(staff, settings.default_paid_by)
        removed = ledger.undo_payment(body.year, body.month)
        if removed:
            await _save_payments(staff, ledger)
        return {"removed": removed, "payment_status": ledger.get_status(body.year, body.month)}

    @router.get("/{staff_id}/payment-status/{year}/{month}")
    async def get_payment_status(staff_id: str, year: int, month: str, user: CurrentUser):
        staff = await get_document_or_404(model, staff_id, label)
        ledger = ledger_for(staff, settings.default_paid_by)
        return {
            "payment_status": ledger.get_status(year, month),
            "staff": {
                "name": staff.full_name,
                "salary": salary_out(staff),
                "is_active": staff.is_active,
            },
            "warnings": [str(d) for d in ledger.duplicates],
        }

    @router.get("/{staff_id}/payment-history")
    async def get_payment_history(staff_id: str, user: CurrentUser):
        staff = await get_document_or_404(model, staff_id, label)
        ledger = ledger_for(staff, settings.default_paid_by)
        return {
            "payment_history": ledger.history(),
            "latest_payment": ledger.latest_payment(),
            "salary": salary_out(staff),
        }

    return router
