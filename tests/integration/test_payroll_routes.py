"""Payroll routes persist the monthly ledger on the staff document"""

import pytest
from beanie.exceptions import RevisionIdWasChanged
from fastapi import FastAPI
from fastapi.testclient import TestClient

from awinja.api.payroll import build_payroll_router
from awinja.exceptions import InvalidPeriod
from awinja.main import revision_conflict_handler
from awinja.models.non_teaching_staff import NonTeachingStaff, StaffRole
from awinja.models.payroll import BulkMarkPaidBody, MarkPaidBody, Month, PaymentStatus, PeriodBody, SalaryInfo
from awinja.models.teacher import Teacher


@pytest.fixture
def routes(db) -> dict:
    router = build_payroll_router(Teacher, "Teacher")
    return {route.name: route.endpoint for route in router.routes}


@pytest.fixture
async def teacher(db) -> Teacher:
    return await Teacher(
        first_name="Jane",
        last_name="Wanjiku",
        email="jane.wanjiku@awinja.ac.ke",
        phone="0722000111",
        salary=SalaryInfo(amount=25000),
    ).insert()


async def test_mark_paid_persists_one_record(routes, teacher, admin):
    await routes["mark_paid"](str(teacher.id), MarkPaidBody(year=2025, month="June"), admin)
    response = await routes["mark_paid"](
        str(teacher.id), MarkPaidBody(year=2025, month="June", amount=26000, notes="with bonus"), admin
    )

    stored = await Teacher.get(teacher.id)
    assert response["message"] == "Teacher marked as paid for June 2025"
    assert len(stored.monthly_payments) == 1
    record = stored.monthly_payments[0]
    assert (record.year, record.month, record.amount) == (2025, Month.JUNE, 26000)
    assert record.status == PaymentStatus.PAID
    assert record.notes == "with bonus"
    assert record.paid_by == "Mary Bursar"


async def test_undo_payment_persists_removal(routes, teacher, admin):
    await routes["mark_paid"](str(teacher.id), MarkPaidBody(year=2025, month="May"), admin)
    await routes["mark_paid"](str(teacher.id), MarkPaidBody(year=2025, month="June"), admin)

    response = await routes["undo_payment"](str(teacher.id), PeriodBody(year=2025, month="June"), admin)

    assert response["removed"] is True
    assert response["payment_status"].status == PaymentStatus.PENDING
    stored = await Teacher.get(teacher.id)
    assert [(p.year, p.month) for p in stored.monthly_payments] == [(2025, Month.MAY)]


async def test_undo_without_record_changes_nothing(routes, teacher, admin):
    response = await routes["undo_payment"](str(teacher.id), PeriodBody(year=2025, month="June"), admin)

    assert response["removed"] is False
    stored = await Teacher.get(teacher.id)
    assert stored.monthly_payments == []
    assert stored.revision_id == teacher.revision_id


async def test_invalid_month_is_rejected_before_saving(routes, teacher, admin):
    with pytest.raises(InvalidPeriod):
        await routes["mark_paid"](str(teacher.id), MarkPaidBody(year=2025, month="june"), admin)

    stored = await Teacher.get(teacher.id)
    assert stored.monthly_payments == []


async def test_status_and_history(routes, teacher, admin):
    await routes["mark_paid"](str(teacher.id), MarkPaidBody(year=2025, month="March"), admin)
    await routes["mark_paid"](str(teacher.id), MarkPaidBody(year=2025, month="April"), admin)

    status = await routes["get_payment_status"](str(teacher.id), 2025, "April", admin)
    pending = await routes["get_payment_status"](str(teacher.id), 2025, "May", admin)
    history = await routes["get_payment_history"](str(teacher.id), admin)

    assert status["payment_status"].amount == 25000
    assert status["staff"]["salary"]["currency"] == "KSh"
    assert pending["payment_status"].status == PaymentStatus.PENDING
    assert [p.month for p in history["payment_history"]] == [Month.APRIL, Month.MARCH]


async def test_bulk_mark_paid_and_summary(routes, teacher, admin):
    other = await Teacher(
        first_name="Peter",
        last_name="Kamau",
        email="peter.kamau@awinja.ac.ke",
        phone="0722000222",
        salary=SalaryInfo(amount=20000),
    ).insert()
    unpaid = await Teacher(
        first_name="Ruth",
        last_name="Achieng",
        email="ruth.achieng@awinja.ac.ke",
        phone="0722000333",
        salary=SalaryInfo(amount=18000),
    ).insert()

    response = await routes["bulk_mark_paid"](
        BulkMarkPaidBody(staff_ids=[str(teacher.id), str(other.id), "not-an-id"], year=2025, month="June"),
        admin,
    )
    summary = await routes["get_payroll_summary"](2025, "June", admin)

    assert response["updated"] == 2
    assert (summary.paid_staff, summary.unpaid_staff) == (2, 1)
    assert summary.paid_amount == 45000
    assert summary.unpaid_amount == 18000
    stored = await Teacher.get(unpaid.id)
    assert stored.monthly_payments == []


async def test_non_teaching_staff_share_the_routes(db, admin):
    routes = {r.name: r.endpoint for r in build_payroll_router(NonTeachingStaff, "Staff member").routes}
    driver = await NonTeachingStaff(
        first_name="John",
        last_name="Mwangi",
        email="john.mwangi@awinja.ac.ke",
        phone="0733000111",
        role=StaffRole.DRIVER,
        salary=SalaryInfo(amount=15000),
    ).insert()

    response = await routes["mark_paid"](str(driver.id), MarkPaidBody(year=2025, month="July"), admin)

    assert response["message"] == "Staff member marked as paid for July 2025"
    stored = await NonTeachingStaff.get(driver.id)
    assert stored.monthly_payments[0].amount == 15000


async def test_stale_staff_copy_cannot_overwrite(teacher):
    first = await Teacher.get(teacher.id)
    second = await Teacher.get(teacher.id)

    first.phone = "0700000001"
    await first.save()
    second.phone = "0700000002"

    with pytest.raises(RevisionIdWasChanged):
        await second.save()

    stored = await Teacher.get(teacher.id)
    assert stored.phone == "0700000001"


def test_revision_conflict_maps_to_409():
    test_app = FastAPI()
    test_app.add_exception_handler(RevisionIdWasChanged, revision_conflict_handler)

    @test_app.post("/teachers/{staff_id}/mark-paid")
    async def conflicting(staff_id: str):
        raise RevisionIdWasChanged

    response = TestClient(test_app).post("/teachers/abc/mark-paid")

    assert response.status_code == 409
    assert response.json()["code"] == "conflict"
