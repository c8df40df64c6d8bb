"""Non-teaching staff CRUD, statistics and payroll."""
from datetime import datetime

from fastapi import APIRouter, HTTPException

from awinja.api.deps import AdminOnly, CurrentUser, get_document_or_404
from awinja.api.payroll import build_payroll_router, salary_out
from awinja.models.non_teaching_staff import (
    NonTeachingStaff,
    NonTeachingStaffCreate,
    NonTeachingStaffUpdate,
    StaffRole,
)
from awinja.models.payroll import SalaryInfo
from awinja.services.payroll import monthly_salary_total

router = APIRouter()
router.include_router(build_payroll_router(NonTeachingStaff, "Staff member"))


def _staff_out(s: NonTeachingStaff) -> dict:
    return {
        "id": str(s.id),
        "first_name": s.first_name,
        "last_name": s.last_name,
        "full_name": s.full_name,
        "email": s.email,
        "phone": s.phone,
        "role": s.role.value,
        "employment_date": s.employment_date.isoformat() if s.employment_date else None,
        "salary": salary_out(s),
        "is_active": s.is_active,
        "notes": s.notes,
    }


@router.get("/")
async def list_staff(user: CurrentUser, status: str | None = None, role: StaffRole | None = None):
    query = {}
    if status == "active":
        query["is_active"] = True
    elif status == "inactive":
        query["is_active"] = False
    if role:
        query["role"] = role.value
    staff = await NonTeachingStaff.find(query).sort("first_name").to_list()
    return [_staff_out(s) for s in staff]


@router.get("/role/{role}")
async def list_staff_by_role(role: StaffRole, user: CurrentUser):
    staff = await NonTeachingStaff.find(
        NonTeachingStaff.role == role, NonTeachingStaff.is_active == True
    ).sort("first_name").to_list()
    return [_staff_out(s) for s in staff]


@router.get("/stats/summary")
async def get_staff_stats(user: CurrentUser):
    total = await NonTeachingStaff.count()
    active_staff = await NonTeachingStaff.find(NonTeachingStaff.is_active == True).to_list()
    by_role = {role.value: 0 for role in StaffRole}
    for s in active_staff:
        by_role[s.role.value] += 1
    return {
        "total": total,
        "active": len(active_staff),
        "inactive": total - len(active_staff),
        "by_role": by_role,
        "total_monthly_salary": monthly_salary_total(active_staff),
    }


@router.get("/{staff_id}")
async def get_staff(staff_id: str, user: CurrentUser):
    s = await get_document_or_404(NonTeachingStaff, staff_id, "Staff member")
    return _staff_out(s)


@router.post("/", status_code=201)
async def create_staff(data: NonTeachingStaffCreate, admin: AdminOnly):
    existing = await NonTeachingStaff.find_one(NonTeachingStaff.email == data.email)
    if existing:
        raise HTTPException(status_code=400, detail="Email already registered")
    s = NonTeachingStaff(
        first_name=data.first_name,
        last_name=data.last_name,
        email=data.email,
        phone=data.phone,
        role=data.role,
        employment_date=data.employment_date or datetime.utcnow(),
        salary=data.salary or SalaryInfo(),
        notes=data.notes,
    )
    await s.insert()
    return _staff_out(s)


@router.put("/{staff_id}")
async def update_staff(staff_id: str, data: NonTeachingStaffUpdate, admin: AdminOnly):
    s = await get_document_or_404(NonTeachingStaff, staff_id, "Staff member")
    update_data = data.model_dump(exclude_unset=True)
    if update_data.get("salary") is not None:
        update_data["salary"] = SalaryInfo(**update_data["salary"])
    for key, value in update_data.items():
        setattr(s, key, value)
    s.updated_at = datetime.utcnow()
    await s.save()
    return _staff_out(s)


@router.delete("/{staff_id}")
async def delete_staff(staff_id: str, admin: AdminOnly):
    """Permanently delete a staff member along with their payroll records."""
    s = await get_document_or_404(NonTeachingStaff, staff_id, "Staff member")
    out = _staff_out(s)
    await s.delete()
    return {"deleted": out}
