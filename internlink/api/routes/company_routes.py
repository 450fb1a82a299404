"""
Company Routes

GET /internships/company/profile - Get own profile
PUT /internships/company/profile - Update profile (only sent fields)
GET /internships/company/internships - Own internships (every status) with application counts
"""

from datetime import timedelta
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy import text

from internlink.core.errors import NotFoundError
from internlink.core.guard import Caller, guard
from internlink.db.database import Database, get_database, update_sql
from internlink.schemas.schemas import CompanyInternshipResponse, CompanyResponse, CompanyUpdate

router = APIRouter(prefix="/internships/company", tags=["Companies"])

RECENT_WINDOW = timedelta(days=7)


def _company_id(caller: Caller) -> int:
    if caller.profile_id is None:
        raise NotFoundError("Company profile not found.")
    return caller.profile_id


@router.get("/profile", response_model=CompanyResponse)
def get_profile(caller: Caller = Depends(guard("company.profile")), db: Database = Depends(get_database)):
    """Get current company's profile."""
    row = db.fetch_one("SELECT * FROM companies WHERE id = :id", {"id": _company_id(caller)})
    return CompanyResponse(**row)


@router.put("/profile", response_model=CompanyResponse)
def update_profile(
    data: CompanyUpdate,
    caller: Caller = Depends(guard("company.profile")),
    db: Database = Depends(get_database)
):
    """Update company profile. Only provided fields are updated."""
    company_id = _company_id(caller)
    changes = data.changes()

    with db.session() as s:
        row = s.execute(
            text(update_sql("companies", changes)), {**changes, "row_id": company_id}
        ).mappings().fetchone()

    return CompanyResponse(**row)


@router.get("/internships", response_model=List[CompanyInternshipResponse])
def get_company_internships(
    caller: Caller = Depends(guard("internships.company_list")),
    db: Database = Depends(get_database)
):
    """All internships posted by this company, with total and last-7-days application counts."""
    # Same clock that filled applications.created_at
    since = (db.now() - RECENT_WINDOW).strftime("%Y-%m-%d %H:%M:%S")

    results = db.fetch_all("""
        SELECT i.*, c.company_name,
               CAST(COUNT(a.id) AS INTEGER) AS application_count,
               CAST(COUNT(CASE WHEN a.created_at > :since THEN 1 END) AS INTEGER) AS recent_applications
        FROM internships i
        JOIN companies c ON i.company_id = c.id
        LEFT JOIN applications a ON a.internship_id = i.id
        WHERE i.company_id = :cid
        GROUP BY i.id, c.company_name
        ORDER BY i.posted_at DESC, i.id DESC
    """, {"cid": _company_id(caller), "since": since})

    return [CompanyInternshipResponse(**r) for r in results]
