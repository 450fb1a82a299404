"""
Table definitions.

Queries are written as raw SQL with text(); these Core tables only exist so the
schema (and its constraints) can be created on any backend with create_all().

Integrity rules live here, not in the routes:
- users.email is unique
- one student/company profile per user
- one application per (internship_id, student_id)
- deleting a user/company/internship cascades to its dependents
"""

from sqlalchemy import (
    Boolean, CheckConstraint, Column, Date, DateTime, ForeignKey, Integer,
    MetaData, String, Table, Text, UniqueConstraint, false, func
)

metadata = MetaData()


users = Table(
    "users", metadata,
    Column("id", Integer, primary_key=True),
    Column("email", String(255), nullable=False, unique=True),
    Column("password_hash", String(255), nullable=False),
    Column("role", String(20), nullable=False),
    Column("created_at", DateTime, nullable=False, server_default=func.current_timestamp()),
    CheckConstraint("role IN ('student', 'company', 'admin')", name="ck_users_role"),
)

students = Table(
    "students", metadata,
    Column("id", Integer, primary_key=True),
    Column("user_id", Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, unique=True),
    Column("first_name", String(100)),
    Column("last_name", String(100)),
    Column("phone", String(30)),
    Column("university", String(200)),
    Column("major", String(200)),
    Column("graduation_year", Integer),
    Column("bio", Text),
    Column("profile_picture_url", String(500)),
    Column("resume_url", String(500)),
    Column("resume_filename", String(255)),
    Column("created_at", DateTime, nullable=False, server_default=func.current_timestamp()),
    Column("updated_at", DateTime, nullable=False, server_default=func.current_timestamp()),
)

companies = Table(
    "companies", metadata,
    Column("id", Integer, primary_key=True),
    Column("user_id", Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, unique=True),
    Column("company_name", String(200), nullable=False),
    Column("industry", String(100)),
    Column("website", String(500)),
    Column("location", String(200)),
    Column("company_size", String(50)),
    Column("company_logo_url", String(500)),
    Column("about", Text),
    Column("created_at", DateTime, nullable=False, server_default=func.current_timestamp()),
    Column("updated_at", DateTime, nullable=False, server_default=func.current_timestamp()),
)

internships = Table(
    "internships", metadata,
    Column("id", Integer, primary_key=True),
    Column("company_id", Integer, ForeignKey("companies.id", ondelete="CASCADE"), nullable=False, index=True),
    Column("title", String(200), nullable=False),
    Column("description", Text),
    Column("requirements", Text),
    Column("location", String(200)),
    Column("type", String(50)),
    Column("duration", String(100)),
    Column("is_remote", Boolean, nullable=False, server_default=false()),
    Column("deadline", Date),
    Column("status", String(20), nullable=False, server_default="pending"),
    Column("posted_at", DateTime, nullable=False, server_default=func.current_timestamp()),
    Column("updated_at", DateTime, nullable=False, server_default=func.current_timestamp()),
    CheckConstraint("status IN ('pending', 'approved', 'rejected')", name="ck_internships_status"),
)

applications = Table(
    "applications", metadata,
    Column("id", Integer, primary_key=True),
    Column("internship_id", Integer, ForeignKey("internships.id", ondelete="CASCADE"), nullable=False),
    Column("student_id", Integer, ForeignKey("students.id", ondelete="CASCADE"), nullable=False),
    Column("status", String(20), nullable=False, server_default="pending"),
    Column("cover_letter", Text),
    Column("created_at", DateTime, nullable=False, server_default=func.current_timestamp()),
    Column("updated_at", DateTime, nullable=False, server_default=func.current_timestamp()),
    UniqueConstraint("internship_id", "student_id", name="uq_applications_internship_student"),
)
