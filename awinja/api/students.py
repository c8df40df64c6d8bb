"""Student CRUD and lookup by admission number."""
from datetime import datetime

from fastapi import APIRouter, HTTPException, Query

from awinja.api.deps import AdminOnly, CurrentUser, get_document_or_404
from awinja.config import settings
from awinja.models.student import AdmissionFee, Grade, Student, StudentCreate, StudentUpdate

router = APIRouter()


def _student_out(s: Student) -> dict:
    return {
        "id": str(s.id),
        "admission_number": s.admission_number,
        "first_name": s.first_name,
        "last_name": s.last_name,
        "full_name": s.full_name,
        "grade": s.grade.value,
        "gender": s.gender.value,
        "parent_name": s.parent_name,
        "parent_phone": s.parent_phone,
        "knec_code": s.knec_code,
        "admission_fee": s.admission_fee.model_dump(),
        "date_of_admission": s.date_of_admission.isoformat() if s.date_of_admission else None,
        "is_active": s.is_active,
    }


@router.get("/")
async def list_students(
    user: CurrentUser,
    grade: Grade | None = None,
    active: bool | None = None,
):
    query = {}
    if grade:
        query["grade"] = grade.value
    if active is not None:
        query["is_active"] = active
    students = await Student.find(query).sort("admission_number").to_list()
    return [_student_out(s) for s in students]


@router.get("/by-admission")
async def get_student_by_admission(
    user: CurrentUser,
    admission_number: str = Query(..., description="e.g. AEC/001/2026"),
):
    s = await Student.find_one(Student.admission_number == admission_number)
    if not s:
        raise HTTPException(status_code=404, detail=f"Student not found: {admission_number}")
    return _student_out(s)


@router.get("/{student_id}")
async def get_student(student_id: str, user: CurrentUser):
    s = await get_document_or_404(Student, student_id, "Student")
    return _student_out(s)


@router.post("/", status_code=201)
async def create_student(data: StudentCreate, admin: AdminOnly):
    existing = await Student.find_one(Student.admission_number == data.admission_number)
    if existing:
        raise HTTPException(status_code=400, detail="Admission number already registered")
    admission_fee = data.admission_fee or AdmissionFee()
    if not admission_fee.academic_year:
        admission_fee.academic_year = settings.default_academic_year
    s = Student(
        admission_number=data.admission_number,
        first_name=data.first_name,
        last_name=data.last_name,
        grade=data.grade,
        gender=data.gender,
        parent_name=data.parent_name,
        parent_phone=data.parent_phone,
        knec_code=data.knec_code,
        admission_fee=admission_fee,
        date_of_admission=data.date_of_admission or datetime.utcnow(),
    )
    await s.insert()
    return _student_out(s)


@router.put("/{student_id}")
async def update_student(student_id: str, data: StudentUpdate, admin: AdminOnly):
    s = await get_document_or_404(Student, student_id, "Student")
    update_data = data.model_dump(exclude_unset=True)
    if update_data.get("admission_fee") is not None:
        update_data["admission_fee"] = AdmissionFee(**update_data["admission_fee"])
    for key, value in update_data.items():
        setattr(s, key, value)
    s.updated_at = datetime.utcnow()
    await s.save()
    return _student_out(s)


@router.delete("/{student_id}")
async def delete_student(student_id: str, admin: AdminOnly):
    """Delete the student record. Fee payments are kept for the audit trail."""
    s = await get_document_or_404(Student, student_id, "Student")
    out = _student_out(s)
    await s.delete()
    return {"deleted": out}
