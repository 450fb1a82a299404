"""
Admin Routes (admin role only)

GET /admin/users | /admin/students | /admin/companies | /admin/internships - Listings
DELETE /admin/users/{id} | /admin/companies/{id} | /admin/internships/{id} - Hard delete (cascades)
PATCH /admin/internships/{id}/approve | /reject - Moderate an internship
PATCH /admin/users/{id}/role - Change a user's role
"""

import logging
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy import text

from internlink.core.errors import NotFoundError
from internlink.core.guard import Caller, guard
from internlink.db.database import Database, get_database
from internlink.schemas.schemas import (
    CompanyResponse, InternshipResponse, InternshipStatus, MessageResponse, RoleUpdate,
    StudentResponse, UserResponse, UserRole
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["Admin"], dependencies=[Depends(guard("admin"))])


# ============================================================
# LISTINGS
# ============================================================

@router.get("/users", response_model=List[UserResponse])
def list_users(db: Database = Depends(get_database)):
    return [UserResponse(**r) for r in db.fetch_all(
        "SELECT id, email, role, created_at FROM users ORDER BY id"
    )]


@router.get("/students", response_model=List[StudentResponse])
def list_students(db: Database = Depends(get_database)):
    return [StudentResponse(**r) for r in db.fetch_all("SELECT * FROM students ORDER BY id")]


@router.get("/companies", response_model=List[CompanyResponse])
def list_companies(db: Database = Depends(get_database)):
    return [CompanyResponse(**r) for r in db.fetch_all("SELECT * FROM companies ORDER BY id")]


@router.get("/internships", response_model=List[InternshipResponse])
def list_internships(db: Database = Depends(get_database)):
    """Every internship regardless of status."""
    return [InternshipResponse(**r) for r in db.fetch_all("""
        SELECT i.*, c.company_name
        FROM internships i JOIN companies c ON i.company_id = c.id
        ORDER BY i.id
    """)]


# ============================================================
# DELETES
# ============================================================

def _delete(db: Database, table: str, row_id: int, label: str) -> MessageResponse:
    with db.session() as s:
        result = s.execute(text(f"DELETE FROM {table} WHERE id = :id"), {"id": row_id})
        if result.rowcount == 0:
            raise NotFoundError(f"{label} not found")

    logger.info("Admin deleted %s %s", table, row_id)
    return MessageResponse(message=f"{label} deleted")


@router.delete("/users/{user_id}", response_model=MessageResponse)
def delete_user(user_id: int, db: Database = Depends(get_database)):
    """Delete a user and (by cascade) its profile, internships and applications."""
    return _delete(db, "users", user_id, "User")


@router.delete("/companies/{company_id}", response_model=MessageResponse)
def delete_company(company_id: int, db: Database = Depends(get_database)):
    return _delete(db, "companies", company_id, "Company")


@router.delete("/internships/{internship_id}", response_model=MessageResponse)
def delete_internship(internship_id: int, db: Database = Depends(get_database)):
    return _delete(db, "internships", internship_id, "Internship")


# ============================================================
# MODERATION
# ============================================================

def _set_internship_status(db: Database, internship_id: int, status: InternshipStatus) -> MessageResponse:
    with db.session() as s:
        result = s.execute(
            text("UPDATE internships SET status = :status, updated_at = CURRENT_TIMESTAMP WHERE id = :id"),
            {"status": status.value, "id": internship_id}
        )
        if result.rowcount == 0:
            raise NotFoundError("Internship not found")

    logger.info("Admin set internship %s to %s", internship_id, status.value)
    return MessageResponse(message=f"Internship {status.value}")


@router.patch("/internships/{internship_id}/approve", response_model=MessageResponse)
def approve_internship(internship_id: int, db: Database = Depends(get_database)):
    return _set_internship_status(db, internship_id, InternshipStatus.approved)


@router.patch("/internships/{internship_id}/reject", response_model=MessageResponse)
def reject_internship(internship_id: int, db: Database = Depends(get_database)):
    return _set_internship_status(db, internship_id, InternshipStatus.rejected)


@router.patch("/users/{user_id}/role", response_model=MessageResponse)
def change_user_role(
    user_id: int,
    update: RoleUpdate,
    db: Database = Depends(get_database)
):
    """
    Change a user's role. A blank student/company profile is created when the
    user has none for the new role. Tokens issued under the old role stop working.
    """
    role = update.role.value

    with db.session() as s:
        user = s.execute(
            text("SELECT id, email FROM users WHERE id = :id"), {"id": user_id}
        ).mappings().fetchone()
        if not user:
            raise NotFoundError("User not found")

        s.execute(text("UPDATE users SET role = :role WHERE id = :id"), {"role": role, "id": user_id})

        if update.role == UserRole.student:
            s.execute(
                text("""
                    INSERT INTO students (user_id)
                    SELECT :id WHERE NOT EXISTS (SELECT 1 FROM students WHERE user_id = :id)
                """),
                {"id": user_id}
            )
        elif update.role == UserRole.company:
            s.execute(
                text("""
                    INSERT INTO companies (user_id, company_name)
                    SELECT :id, :name WHERE NOT EXISTS (SELECT 1 FROM companies WHERE user_id = :id)
                """),
                {"id": user_id, "name": user["email"]}
            )

    logger.info("Admin changed role of user %s to %s", user_id, role)
    return MessageResponse(message="User role updated")
