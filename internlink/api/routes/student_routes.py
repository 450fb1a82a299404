"""
Student Routes

GET /internships/student/profile - Get own profile
PUT /internships/student/profile - Update profile (only sent fields)
GET /internships/student/applications - Get my applications
"""

from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy import text

from internlink.core.errors import NotFoundError
from internlink.core.guard import Caller, guard
from internlink.db.database import Database, get_database, update_sql
from internlink.schemas.schemas import StudentApplicationResponse, StudentResponse, StudentUpdate

router = APIRouter(prefix="/internships/student", tags=["Students"])


def _student_id(caller: Caller) -> int:
    if caller.profile_id is None:
        raise NotFoundError("Student profile not found.")
    return caller.profile_id


@router.get("/profile", response_model=StudentResponse)
def get_profile(caller: Caller = Depends(guard("student.profile")), db: Database = Depends(get_database)):
    """Get current student's profile."""
    row = db.fetch_one("SELECT * FROM students WHERE id = :id", {"id": _student_id(caller)})
    return StudentResponse(**row)


@router.put("/profile", response_model=StudentResponse)
def update_profile(
    data: StudentUpdate,
    caller: Caller = Depends(guard("student.profile")),
    db: Database = Depends(get_database)
):
    """Update student profile. Only provided fields are updated."""
    student_id = _student_id(caller)
    changes = data.changes()

    with db.session() as s:
        row = s.execute(
            text(update_sql("students", changes)), {**changes, "row_id": student_id}
        ).mappings().fetchone()

    return StudentResponse(**row)


@router.get("/applications", response_model=List[StudentApplicationResponse])
def get_my_applications(
    caller: Caller = Depends(guard("student.applications")),
    db: Database = Depends(get_database)
):
    """Get all internship applications for current student, newest first."""
    results = db.fetch_all("""
        SELECT a.*, i.title, i.location, i.deadline, i.type, c.company_name
        FROM applications a
        JOIN internships i ON a.internship_id = i.id
        JOIN companies c ON i.company_id = c.id
        WHERE a.student_id = :id
        ORDER BY a.created_at DESC, a.id DESC
    """, {"id": _student_id(caller)})

    return [StudentApplicationResponse(**r) for r in results]
