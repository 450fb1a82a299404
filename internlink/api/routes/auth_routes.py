"""
Authentication Routes

POST /auth/register - Register user + role profile, returns token
POST /auth/login - Login and get JWT token
GET /auth/me - Get current user info
POST /auth/upload-resume - Student uploads resume (multipart field "resume")
GET /auth/student/{user_id}/resume - Company fetches a student's resume reference
GET /auth/download/resume/{user_id} - Company downloads a student's resume file
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, UploadFile
from fastapi.responses import FileResponse
from sqlalchemy import text

from internlink.core.auth import TokenCodec
from internlink.core.config import Settings, get_app_settings
from internlink.core.errors import NotFoundError
from internlink.core.guard import Caller, get_token_codec, guard
from internlink.db.database import Database, get_database
from internlink.schemas.schemas import (
    AuthResponse, AuthUser, LoginRequest, RegisterRequest, ResumeResponse, UserResponse
)
from internlink.services.credentials import CredentialStore, get_credential_store
from internlink.utils.file_upload import delete_resume, resolve_resume_path, save_resume

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.post("/register", response_model=AuthResponse, response_model_exclude_none=True, status_code=201)
def register(
    request: RegisterRequest,
    credentials: CredentialStore = Depends(get_credential_store),
    tokens: TokenCodec = Depends(get_token_codec)
):
    """Register a student or company account. Returns a session token."""
    claims = credentials.register(request)
    return AuthResponse(token=tokens.issue(claims), user=AuthUser(**claims))


@router.post("/login", response_model=AuthResponse, response_model_exclude_none=True)
def login(
    request: LoginRequest,
    credentials: CredentialStore = Depends(get_credential_store),
    tokens: TokenCodec = Depends(get_token_codec)
):
    """
    Login and receive JWT access token.

    Include token in requests: Authorization: Bearer <token>
    """
    claims = credentials.verify(request.email, request.password)
    return AuthResponse(token=tokens.issue(claims), user=AuthUser(**claims))


@router.get("/me", response_model=UserResponse)
def get_me(caller: Caller = Depends(guard("auth.me")), db: Database = Depends(get_database)):
    """Get current authenticated user's info."""
    row = db.fetch_one(
        "SELECT id, email, role, created_at FROM users WHERE id = :id", {"id": caller.user_id}
    )
    return UserResponse(**row)


@router.post("/upload-resume", response_model=ResumeResponse)
def upload_resume(
    resume: Optional[UploadFile] = File(None, description="Resume file (PDF, DOC, DOCX or TXT)"),
    caller: Caller = Depends(guard("resume.upload")),
    db: Database = Depends(get_database),
    settings: Settings = Depends(get_app_settings)
):
    """Upload the caller's resume. Replaces (and deletes) any previous one."""
    previous = db.fetch_one("SELECT resume_url FROM students WHERE user_id = :id", {"id": caller.user_id})
    if not previous:
        raise NotFoundError("Student profile not found.")

    resume_url, filename = save_resume(
        resume, caller.user_id, settings.resume_dir, settings.max_resume_size_mb
    )

    try:
        with db.session() as s:
            s.execute(
                text("""
                    UPDATE students SET resume_url = :url, resume_filename = :filename,
                        updated_at = CURRENT_TIMESTAMP
                    WHERE user_id = :id
                """),
                {"url": resume_url, "filename": filename, "id": caller.user_id}
            )
    except Exception:
        # Nothing references the new file yet
        delete_resume(resume_url, settings.resume_dir)
        raise

    if previous["resume_url"] and previous["resume_url"] != resume_url:
        delete_resume(previous["resume_url"], settings.resume_dir)

    return ResumeResponse(url=resume_url, filename=filename)


def _resume_row(db: Database, user_id: int) -> dict:
    row = db.fetch_one(
        "SELECT resume_url, resume_filename FROM students WHERE user_id = :id", {"id": user_id}
    )
    if not row or not row["resume_url"]:
        raise NotFoundError("Resume not found.")
    return row


@router.get("/student/{user_id}/resume", response_model=ResumeResponse)
def get_student_resume(
    user_id: int,
    caller: Caller = Depends(guard("resume.view")),
    db: Database = Depends(get_database)
):
    """Company fetches the stored reference to a student's resume."""
    row = _resume_row(db, user_id)
    filename = row["resume_filename"] or row["resume_url"].rsplit("/", 1)[-1]
    return ResumeResponse(url=row["resume_url"], filename=filename)


@router.get("/download/resume/{user_id}")
def download_resume(
    user_id: int,
    caller: Caller = Depends(guard("resume.view")),
    db: Database = Depends(get_database),
    settings: Settings = Depends(get_app_settings)
):
    """Stream the resume bytes as an attachment named after the original upload."""
    row = _resume_row(db, user_id)
    path = resolve_resume_path(row["resume_url"], settings.resume_dir)
    if path is None:
        raise NotFoundError("Resume file not found on server.")

    return FileResponse(
        path,
        media_type="application/octet-stream",
        filename=row["resume_filename"] or path.name,
    )
