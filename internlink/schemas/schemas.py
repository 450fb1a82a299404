"""
Pydantic Schemas - Request/Response Validation

All API request and response schemas in one file for simplicity.
"""

from datetime import date, datetime
from enum import Enum
from typing import Any, ClassVar, Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, EmailStr, Field, model_validator

from internlink.core.errors import ValidationError, no_fields_provided


# ============================================================
# ENUMS
# ============================================================

class UserRole(str, Enum):
    student = "student"
    company = "company"
    admin = "admin"


class InternshipStatus(str, Enum):
    pending = "pending"
    approved = "approved"
    rejected = "rejected"


class ApplicationStatus(str, Enum):
    pending = "pending"
    reviewed = "reviewed"
    shortlisted = "shortlisted"
    accepted = "accepted"
    rejected = "rejected"


# ============================================================
# PATCH BASE
# ============================================================

class PatchModel(BaseModel):
    """
    Partial update body. Each declared field maps to exactly one column of
    the same name; only fields present in the request are applied.
    """

    # Columns that may be changed but never set to NULL
    non_nullable: ClassVar[Tuple[str, ...]] = ()

    def changes(self) -> Dict[str, Any]:
        data = self.model_dump(mode="json", exclude_unset=True)
        if not data:
            raise no_fields_provided()
        for field in self.non_nullable:
            if field in data and data[field] is None:
                raise ValidationError(f"'{field}' cannot be null")
        return data


# ============================================================
# AUTH SCHEMAS
# ============================================================

class RegisterRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    email: EmailStr
    password: str = Field(..., min_length=8, max_length=72)
    role: UserRole
    # Student fields
    first_name: Optional[str] = Field(None, max_length=100, alias="firstName")
    last_name: Optional[str] = Field(None, max_length=100, alias="lastName")
    # Company fields
    company_name: Optional[str] = Field(None, max_length=200, alias="companyName")
    about: Optional[str] = None

    @model_validator(mode="after")
    def check_role_fields(self):
        if self.role == UserRole.admin:
            raise ValueError("Admin accounts cannot be self-registered")
        if self.role == UserRole.company and not (self.company_name or "").strip():
            raise ValueError("company_name is required for company accounts")
        return self


class LoginRequest(BaseModel):
    # Plain str: a malformed address fails as InvalidCredentials
    email: str
    password: str


class AuthUser(BaseModel):
    id: int
    email: str
    role: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    company_name: Optional[str] = None


class AuthResponse(BaseModel):
    token: str
    user: AuthUser


class UserResponse(BaseModel):
    id: int
    email: str
    role: str
    created_at: datetime


# ============================================================
# STUDENT SCHEMAS
# ============================================================

class StudentUpdate(PatchModel):
    first_name: Optional[str] = Field(None, max_length=100)
    last_name: Optional[str] = Field(None, max_length=100)
    phone: Optional[str] = Field(None, max_length=30)
    university: Optional[str] = Field(None, max_length=200)
    major: Optional[str] = Field(None, max_length=200)
    graduation_year: Optional[int] = Field(None, ge=1950, le=2100)
    profile_picture_url: Optional[str] = None
    bio: Optional[str] = None


class StudentResponse(BaseModel):
    id: int
    user_id: int
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    phone: Optional[str] = None
    university: Optional[str] = None
    major: Optional[str] = None
    graduation_year: Optional[int] = None
    profile_picture_url: Optional[str] = None
    bio: Optional[str] = None
    resume_url: Optional[str] = None
    resume_filename: Optional[str] = None
    created_at: datetime
    updated_at: datetime


# ============================================================
# COMPANY SCHEMAS
# ============================================================

class CompanyUpdate(PatchModel):
    non_nullable: ClassVar[Tuple[str, ...]] = ("company_name",)

    company_name: Optional[str] = Field(None, min_length=1, max_length=200)
    industry: Optional[str] = None
    website: Optional[str] = None
    location: Optional[str] = None
    company_size: Optional[str] = None
    company_logo_url: Optional[str] = None
    about: Optional[str] = None


class CompanyResponse(BaseModel):
    id: int
    user_id: int
    company_name: str
    industry: Optional[str] = None
    website: Optional[str] = None
    location: Optional[str] = None
    company_size: Optional[str] = None
    company_logo_url: Optional[str] = None
    about: Optional[str] = None
    created_at: datetime
    updated_at: datetime


# ============================================================
# INTERNSHIP SCHEMAS
# ============================================================

class InternshipCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    requirements: Optional[str] = None
    location: Optional[str] = None
    type: Optional[str] = None
    duration: Optional[str] = None
    is_remote: bool = False
    deadline: Optional[date] = None


class InternshipUpdate(PatchModel):
    non_nullable: ClassVar[Tuple[str, ...]] = ("title", "is_remote")

    title: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = None
    requirements: Optional[str] = None
    location: Optional[str] = None
    type: Optional[str] = None
    duration: Optional[str] = None
    is_remote: Optional[bool] = None
    deadline: Optional[date] = None


class InternshipResponse(BaseModel):
    id: int
    company_id: int
    company_name: Optional[str] = None
    title: str
    description: Optional[str] = None
    requirements: Optional[str] = None
    location: Optional[str] = None
    type: Optional[str] = None
    duration: Optional[str] = None
    is_remote: bool = False
    deadline: Optional[date] = None
    status: str
    posted_at: datetime
    updated_at: datetime


class CompanyInternshipResponse(InternshipResponse):
    application_count: int = 0
    recent_applications: int = 0


# ============================================================
# APPLICATION SCHEMAS
# ============================================================

class ApplicationCreate(BaseModel):
    cover_letter: Optional[str] = None


class ApplicationStatusUpdate(BaseModel):
    status: ApplicationStatus


class ApplicationResponse(BaseModel):
    id: int
    internship_id: int
    student_id: int
    status: str
    cover_letter: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class StudentApplicationResponse(ApplicationResponse):
    title: str
    location: Optional[str] = None
    deadline: Optional[date] = None
    type: Optional[str] = None
    company_name: str


class ApplicantResponse(ApplicationResponse):
    user_id: int
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: str
    university: Optional[str] = None
    major: Optional[str] = None
    resume_url: Optional[str] = None
    resume_filename: Optional[str] = None


# ============================================================
# RESUME SCHEMAS
# ============================================================

class ResumeResponse(BaseModel):
    url: str
    filename: str


# ============================================================
# ADMIN SCHEMAS
# ============================================================

class RoleUpdate(BaseModel):
    role: UserRole


# ============================================================
# GENERIC SCHEMAS
# ============================================================

class MessageResponse(BaseModel):
    message: str
    success: bool = True


class ErrorResponse(BaseModel):
    message: str
    error: Optional[str] = None
    details: Optional[List[dict]] = None
