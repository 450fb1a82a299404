"""
Internship Routes

GET /internships - List approved internships (public) with filters
POST /internships - Create internship (company only, starts pending)
GET /internships/{internship_id} - Get internship details
GET /internships/{internship_id}/applicants - Applicants (owning company only)
PUT /internships/{internship_id} - Update internship (owning company only)
DELETE /internships/{internship_id} - Delete internship (owning company only)
POST /internships/{internship_id}/apply - Apply to internship (student only)
PATCH /internships/applications/{application_id} - Update application status (owning company only)
"""

import logging
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy import text
from sqlalchemy.exc import IntegrityError

from internlink.core.errors import NotFoundError, ValidationError, duplicate_application
from internlink.core.guard import ADMIN, COMPANY, Caller, guard, optional_caller
from internlink.db.database import Database, get_database, update_sql
from internlink.schemas.schemas import (
    ApplicantResponse, ApplicationCreate, ApplicationResponse, ApplicationStatusUpdate,
    InternshipCreate, InternshipResponse, InternshipStatus, InternshipUpdate, MessageResponse
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/internships", tags=["Internships"])

INTERNSHIP_SELECT = """
    SELECT i.*, c.company_name
    FROM internships i JOIN companies c ON i.company_id = c.id
"""


def get_internship_row(db: Database, internship_id: int) -> Optional[dict]:
    return db.fetch_one(INTERNSHIP_SELECT + " WHERE i.id = :id", {"id": internship_id})


@router.get("", response_model=List[InternshipResponse])
def list_internships(
    search: Optional[str] = Query(None, description="Search in title"),
    location: Optional[str] = Query(None),
    type: Optional[str] = Query(None, description="Internship type, e.g. full-time"),
    remote_only: bool = Query(False),
    db: Database = Depends(get_database)
):
    """List approved internships. Pending and rejected postings are never shown here."""
    sql = INTERNSHIP_SELECT + " WHERE i.status = :status"
    params = {"status": InternshipStatus.approved.value}

    if search:
        sql += " AND LOWER(i.title) LIKE :search"
        params["search"] = f"%{search.lower()}%"
    if location:
        sql += " AND LOWER(i.location) LIKE :location"
        params["location"] = f"%{location.lower()}%"
    if type:
        sql += " AND i.type = :type"
        params["type"] = type
    if remote_only:
        sql += " AND i.is_remote = :remote"
        params["remote"] = True

    sql += " ORDER BY i.posted_at DESC, i.id DESC"
    return [InternshipResponse(**r) for r in db.fetch_all(sql, params)]


@router.post("", response_model=InternshipResponse, status_code=201)
def create_internship(
    internship: InternshipCreate,
    caller: Caller = Depends(guard("internships.create")),
    db: Database = Depends(get_database)
):
    """Create a new internship. It stays pending until an admin approves it."""
    if caller.profile_id is None:
        raise NotFoundError("Company profile not found.")

    with db.session() as s:
        internship_id = s.execute(
            text("""
                INSERT INTO internships (company_id, title, description, requirements, location,
                    type, duration, is_remote, deadline, status)
                VALUES (:company_id, :title, :description, :requirements, :location,
                    :type, :duration, :is_remote, :deadline, 'pending')
                RETURNING id
            """),
            {"company_id": caller.profile_id, **internship.model_dump(mode="json")}
        ).scalar_one()

    logger.info("Company %s posted internship %s", caller.profile_id, internship_id)
    return InternshipResponse(**get_internship_row(db, internship_id))


@router.patch("/applications/{application_id}", response_model=ApplicationResponse)
def update_application_status(
    application_id: int,
    update: ApplicationStatusUpdate,
    caller: Caller = Depends(guard("applications.update_status")),
    db: Database = Depends(get_database)
):
    """Update status of an application to one of the company's internships."""
    with db.session() as s:
        row = s.execute(
            text("""
                UPDATE applications SET status = :status, updated_at = CURRENT_TIMESTAMP
                WHERE id = :id RETURNING *
            """),
            {"id": application_id, "status": update.status.value}
        ).mappings().fetchone()

    if not row:
        raise NotFoundError("Application not found.")
    return ApplicationResponse(**row)


@router.get("/{internship_id}", response_model=InternshipResponse)
def get_internship(
    internship_id: int,
    caller: Optional[Caller] = Depends(optional_caller),
    db: Database = Depends(get_database)
):
    """
    Get details of an internship.

    Approved internships are public; others are visible only to the owning
    company and admins.
    """
    row = get_internship_row(db, internship_id)
    if not row:
        raise NotFoundError("Internship not found")

    if row["status"] != InternshipStatus.approved.value:
        is_owner = caller is not None and caller.role == COMPANY and caller.profile_id == row["company_id"]
        is_admin = caller is not None and caller.role == ADMIN
        if not (is_owner or is_admin):
            raise NotFoundError("Internship not found")

    return InternshipResponse(**row)


@router.get("/{internship_id}/applicants", response_model=List[ApplicantResponse])
def get_applicants(
    internship_id: int,
    caller: Caller = Depends(guard("internships.applicants")),
    db: Database = Depends(get_database)
):
    """All applicants for one of the company's internships, newest first."""
    results = db.fetch_all("""
        SELECT a.*, s.first_name, s.last_name, u.email, s.university, s.major,
               s.resume_url, s.resume_filename, s.user_id
        FROM applications a
        JOIN students s ON a.student_id = s.id
        JOIN users u ON s.user_id = u.id
        WHERE a.internship_id = :iid
        ORDER BY a.created_at DESC, a.id DESC
    """, {"iid": internship_id})
    return [ApplicantResponse(**r) for r in results]


@router.put("/{internship_id}", response_model=InternshipResponse)
def update_internship(
    internship_id: int,
    update: InternshipUpdate,
    caller: Caller = Depends(guard("internships.update")),
    db: Database = Depends(get_database)
):
    """Update an internship. Only the owning company can update; only sent fields change."""
    changes = update.changes()

    with db.session() as s:
        s.execute(text(update_sql("internships", changes)), {**changes, "row_id": internship_id})
        row = s.execute(
            text(INTERNSHIP_SELECT + " WHERE i.id = :id"), {"id": internship_id}
        ).mappings().fetchone()

    if not row:
        # Deleted after the ownership check
        raise NotFoundError("Internship not found")
    return InternshipResponse(**row)


@router.delete("/{internship_id}", response_model=MessageResponse)
def delete_internship(
    internship_id: int,
    caller: Caller = Depends(guard("internships.delete")),
    db: Database = Depends(get_database)
):
    """Delete an internship. Cascades to its applications."""
    with db.session() as s:
        s.execute(text("DELETE FROM internships WHERE id = :id"), {"id": internship_id})

    logger.info("Company %s deleted internship %s", caller.profile_id, internship_id)
    return MessageResponse(message="Internship deleted")


@router.post("/{internship_id}/apply", response_model=ApplicationResponse, status_code=201)
def apply_to_internship(
    internship_id: int,
    application: Optional[ApplicationCreate] = None,
    caller: Caller = Depends(guard("internships.apply")),
    db: Database = Depends(get_database)
):
    """Apply to an approved internship. Students only. Cannot apply twice to the same internship."""
    if caller.profile_id is None:
        raise NotFoundError("Student profile not found.")

    cover_letter = application.cover_letter if application else None
    params = {"iid": internship_id, "sid": caller.profile_id}

    try:
        with db.session() as s:
            internship = s.execute(
                text("""
                    SELECT status, (deadline IS NOT NULL AND deadline < :today) AS closed
                    FROM internships WHERE id = :iid
                """),
                {"iid": internship_id, "today": date.today().isoformat()}
            ).mappings().fetchone()
            if not internship or internship["status"] != InternshipStatus.approved.value:
                raise NotFoundError("Internship not found")
            if internship["closed"]:
                raise ValidationError("The application deadline has passed.", code="InternshipNotOpen")

            existing = s.execute(
                text("SELECT id FROM applications WHERE internship_id = :iid AND student_id = :sid"), params
            ).fetchone()
            if existing:
                raise duplicate_application()

            row = s.execute(
                text("""
                    INSERT INTO applications (internship_id, student_id, cover_letter, status)
                    VALUES (:iid, :sid, :cover, 'pending')
                    RETURNING *
                """),
                {**params, "cover": cover_letter}
            ).mappings().fetchone()
    except IntegrityError:
        # Either a concurrent duplicate or the internship was deleted meanwhile
        if db.fetch_one("SELECT id FROM applications WHERE internship_id = :iid AND student_id = :sid", params):
            raise duplicate_application()
        raise NotFoundError("Internship not found")

    return ApplicationResponse(**row)
