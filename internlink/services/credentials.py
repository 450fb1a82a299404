"""
Credential Store - user identities, password hashes and session claims.

Registration writes the user and its role profile in one transaction.
Uniqueness of email is enforced by the users table; the pre-check here only
produces the friendly error in the common case.
"""

import logging
from typing import Optional

from fastapi import Request
from sqlalchemy import text
from sqlalchemy.exc import IntegrityError

from internlink.core.auth import build_password_context
from internlink.core.errors import duplicate_user, invalid_credentials
from internlink.db.database import Database
from internlink.schemas.schemas import RegisterRequest, UserRole

logger = logging.getLogger(__name__)


def normalize_email(email: str) -> str:
    return email.strip().lower()


class CredentialStore:
    """Registers users and verifies their credentials."""

    def __init__(self, db: Database, bcrypt_rounds: int = 12):
        self.db = db
        self.pwd_context = build_password_context(bcrypt_rounds)
        # Compared against when the email is unknown so both failure paths cost the same
        self._dummy_hash = self.pwd_context.hash("internlink-dummy-password")

    def hash_password(self, password: str) -> str:
        return self.pwd_context.hash(password)

    def verify_password(self, plain_password: str, hashed_password: str) -> bool:
        return self.pwd_context.verify(plain_password, hashed_password)

    def register(self, data: RegisterRequest) -> dict:
        """
        Create a user plus its student/company profile.

        Returns the claim set for the new user.
        Raises ConflictError(DuplicateUser) if the email is taken.
        """
        email = normalize_email(data.email)
        password_hash = self.hash_password(data.password)

        with self.db.session() as s:
            existing = s.execute(
                text("SELECT id FROM users WHERE email = :email"), {"email": email}
            ).fetchone()
            if existing:
                raise duplicate_user()

            try:
                user_id = s.execute(
                    text("""
                        INSERT INTO users (email, password_hash, role)
                        VALUES (:email, :password_hash, :role)
                        RETURNING id
                    """),
                    {"email": email, "password_hash": password_hash, "role": data.role.value}
                ).scalar_one()

                if data.role == UserRole.student:
                    s.execute(
                        text("""
                            INSERT INTO students (user_id, first_name, last_name)
                            VALUES (:user_id, :first_name, :last_name)
                        """),
                        {"user_id": user_id, "first_name": data.first_name, "last_name": data.last_name}
                    )
                elif data.role == UserRole.company:
                    s.execute(
                        text("""
                            INSERT INTO companies (user_id, company_name, about)
                            VALUES (:user_id, :company_name, :about)
                        """),
                        {"user_id": user_id, "company_name": data.company_name.strip(), "about": data.about}
                    )
            except IntegrityError:
                # Lost a race with a concurrent registration for the same email
                raise duplicate_user()

        logger.info("Registered %s account %s (id=%s)", data.role.value, email, user_id)

        claims = {"id": user_id, "email": email, "role": data.role.value}
        if data.role == UserRole.student:
            claims.update(first_name=data.first_name, last_name=data.last_name)
        elif data.role == UserRole.company:
            claims.update(company_name=data.company_name.strip())
        return claims

    def verify(self, email: str, password: str) -> dict:
        """
        Check credentials and return the claim set.

        Unknown email and wrong password raise the same InvalidCredentials error.
        """
        email = normalize_email(email)
        user = self.db.fetch_one(
            "SELECT id, email, password_hash, role FROM users WHERE email = :email",
            {"email": email}
        )

        if not user:
            self.verify_password(password, self._dummy_hash)
            logger.info("Failed login for %s", email)
            raise invalid_credentials()

        if not self.verify_password(password, user["password_hash"]):
            logger.info("Failed login for %s", email)
            raise invalid_credentials()

        return self.claims_for(user)

    def claims_for(self, user: dict) -> dict:
        """Session claims: id, email, role and the role's display fields."""
        claims = {"id": user["id"], "email": user["email"], "role": user["role"]}

        if user["role"] == UserRole.student.value:
            profile = self.db.fetch_one(
                "SELECT first_name, last_name FROM students WHERE user_id = :id", {"id": user["id"]}
            )
            if profile:
                claims.update(first_name=profile["first_name"], last_name=profile["last_name"])
        elif user["role"] == UserRole.company.value:
            profile = self.db.fetch_one(
                "SELECT company_name FROM companies WHERE user_id = :id", {"id": user["id"]}
            )
            if profile:
                claims.update(company_name=profile["company_name"])

        return claims

    def bootstrap_admin(self, email: Optional[str], password: Optional[str]) -> Optional[int]:
        """Create the configured admin account if it does not exist yet."""
        if not email or not password:
            return None

        email = normalize_email(email)
        existing = self.db.fetch_one("SELECT id, role FROM users WHERE email = :email", {"email": email})
        if existing:
            if existing["role"] != UserRole.admin.value:
                logger.warning("Admin bootstrap skipped: %s exists with role %s", email, existing["role"])
            return existing["id"]

        with self.db.session() as s:
            admin_id = s.execute(
                text("""
                    INSERT INTO users (email, password_hash, role)
                    VALUES (:email, :password_hash, 'admin')
                    RETURNING id
                """),
                {"email": email, "password_hash": self.hash_password(password)}
            ).scalar_one()

        logger.info("Bootstrapped admin account %s (id=%s)", email, admin_id)
        return admin_id


def get_credential_store(request: Request) -> CredentialStore:
    """Dependency - the store created in the app lifespan."""
    return request.app.state.credentials
