"""Teacher CRUD, grade lookups and payroll."""
from datetime import datetime

from fastapi import APIRouter, HTTPException

from awinja.api.deps import AdminOnly, CurrentUser, get_document_or_404
from awinja.api.payroll import build_payroll_router, salary_out
from awinja.models.payroll import SalaryInfo
from awinja.models.teacher import Teacher, TeacherCreate, TeacherGrade, TeacherUpdate

router = APIRouter()
router.include_router(build_payroll_router(Teacher, "Teacher"))


def _teacher_out(t: Teacher) -> dict:
    return {
        "id": str(t.id),
        "first_name": t.first_name,
        "last_name": t.last_name,
        "full_name": t.full_name,
        "email": t.email,
        "phone": t.phone,
        "primary_grade_assigned": t.primary_grade_assigned.value,
        "additional_grades": [g.value for g in t.additional_grades],
        "salary": salary_out(t),
        "is_active": t.is_active,
    }


@router.get("/")
async def list_teachers(user: CurrentUser, status: str | None = None):
    """List teachers; ``status`` is ``active``, ``inactive`` or omitted for all."""
    query = {}
    if status == "active":
        query["is_active"] = True
    elif status == "inactive":
        query["is_active"] = False
    teachers = await Teacher.find(query).sort("first_name").to_list()
    return [_teacher_out(t) for t in teachers]


@router.get("/grade/{grade}")
async def list_teachers_by_grade(grade: TeacherGrade, user: CurrentUser):
    teachers = await Teacher.find(
        {
            "$or": [
                {"primary_grade_assigned": grade.value},
                {"additional_grades": grade.value},
            ],
            "is_active": True,
        }
    ).sort("first_name").to_list()
    return [_teacher_out(t) for t in teachers]


@router.get("/{teacher_id}")
async def get_teacher(teacher_id: str, user: CurrentUser):
    t = await get_document_or_404(Teacher, teacher_id, "Teacher")
    return _teacher_out(t)


@router.get("/{teacher_id}/grades")
async def get_teacher_grades(teacher_id: str, user: CurrentUser):
    t = await get_document_or_404(Teacher, teacher_id, "Teacher")
    return {"grades": [g.value for g in t.grades]}


@router.post("/", status_code=201)
async def create_teacher(data: TeacherCreate, admin: AdminOnly):
    existing = await Teacher.find_one(Teacher.email == data.email)
    if existing:
        raise HTTPException(status_code=400, detail="Email already registered")
    t = Teacher(
        first_name=data.first_name,
        last_name=data.last_name,
        email=data.email,
        phone=data.phone,
        primary_grade_assigned=data.primary_grade_assigned,
        additional_grades=data.additional_grades,
        salary=data.salary or SalaryInfo(),
    )
    await t.insert()
    return _teacher_out(t)


@router.put("/{teacher_id}")
async def update_teacher(teacher_id: str, data: TeacherUpdate, admin: AdminOnly):
    t = await get_document_or_404(Teacher, teacher_id, "Teacher")
    update_data = data.model_dump(exclude_unset=True)
    if update_data.get("salary") is not None:
        update_data["salary"] = SalaryInfo(**update_data["salary"])
    for key, value in update_data.items():
        setattr(t, key, value)
    t.updated_at = datetime.utcnow()
    await t.save()
    return _teacher_out(t)


@router.delete("/{teacher_id}", status_code=204)
async def delete_teacher(teacher_id: str, admin: AdminOnly):
    """Soft delete: the teacher and their payroll history stay on record."""
    t = await get_document_or_404(Teacher, teacher_id, "Teacher")
    t.is_active = False
    t.updated_at = datetime.utcnow()
    await t.save()
