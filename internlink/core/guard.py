"""
Authorization Guard - one policy table, evaluated the same way for every route.

Per request:
    1. bearer token present?            -> 401 TokenMissing
    2. token valid / not expired?       -> 403 TokenInvalid / 401 TokenExpired
    3. caller role allowed by policy?   -> 403 Forbidden
    4. caller owns the resource?        -> 403 Forbidden (policies with an owner resolver)

Usage:
    @router.put("/{internship_id}")
    def edit(internship_id: int, caller: Caller = Depends(guard("internships.update"))):
        ...
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, FrozenSet, Mapping, Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from internlink.core.auth import TokenCodec, token_invalid
from internlink.core.errors import ForbiddenError
from internlink.db.database import Database, get_database

logger = logging.getLogger(__name__)

# auto_error=False so a missing header is reported as TokenMissing, not FastAPI's default
bearer_scheme = HTTPBearer(auto_error=False)

NO_ACCESS = "You do not have access to this internship."

STUDENT = "student"
COMPANY = "company"
ADMIN = "admin"


@dataclass
class Caller:
    user_id: int
    email: str
    role: str
    profile_id: Optional[int] = None  # students.id or companies.id, by role
    claims: dict = field(default_factory=dict)


# ============================================================
# OWNER RESOLVERS
# Return the owning companies.id for a resource id, or None if it does not exist.
# ============================================================

OwnerResolver = Callable[[Database, int], Optional[int]]


def internship_owner(db: Database, internship_id: int) -> Optional[int]:
    row = db.fetch_one("SELECT company_id FROM internships WHERE id = :id", {"id": internship_id})
    return row["company_id"] if row else None


def application_owner(db: Database, application_id: int) -> Optional[int]:
    row = db.fetch_one(
        """
        SELECT i.company_id FROM applications a
        JOIN internships i ON a.internship_id = i.id
        WHERE a.id = :id
        """,
        {"id": application_id}
    )
    return row["company_id"] if row else None


# ============================================================
# POLICY TABLE
# ============================================================

@dataclass(frozen=True)
class Policy:
    roles: FrozenSet[str]
    denial: str = "Forbidden"
    owner_of: Optional[OwnerResolver] = None
    resource_param: Optional[str] = None


POLICIES: Dict[str, Policy] = {
    "auth.me": Policy(frozenset({STUDENT, COMPANY, ADMIN})),
    "resume.upload": Policy(frozenset({STUDENT}), "Only students can upload resumes."),
    "resume.view": Policy(frozenset({COMPANY}), "Only companies can download resumes."),
    "internships.create": Policy(frozenset({COMPANY}), "Only companies can post internships."),
    "internships.company_list": Policy(frozenset({COMPANY}), "Only companies can access their internships."),
    "internships.applicants": Policy(
        frozenset({COMPANY}), "Only companies can view applicants.",
        owner_of=internship_owner, resource_param="internship_id",
    ),
    "internships.update": Policy(
        frozenset({COMPANY}), "Only companies can edit internships.",
        owner_of=internship_owner, resource_param="internship_id",
    ),
    "internships.delete": Policy(
        frozenset({COMPANY}), "Only companies can delete internships.",
        owner_of=internship_owner, resource_param="internship_id",
    ),
    "internships.apply": Policy(frozenset({STUDENT}), "Only students can apply to internships."),
    "applications.update_status": Policy(
        frozenset({COMPANY}), "Only companies can update application status.",
        owner_of=application_owner, resource_param="application_id",
    ),
    "student.applications": Policy(frozenset({STUDENT}), "Only students can access their applications."),
    "student.profile": Policy(frozenset({STUDENT}), "Only students can access their profile."),
    "company.profile": Policy(frozenset({COMPANY}), "Only companies can access their profile."),
    "admin": Policy(frozenset({ADMIN}), "Forbidden: Admins only"),
}


# ============================================================
# AUTHENTICATION
# ============================================================

def get_token_codec(request: Request) -> TokenCodec:
    return request.app.state.tokens


def _profile_id(db: Database, user_id: int, role: str) -> Optional[int]:
    if role == STUDENT:
        row = db.fetch_one("SELECT id FROM students WHERE user_id = :id", {"id": user_id})
    elif role == COMPANY:
        row = db.fetch_one("SELECT id FROM companies WHERE user_id = :id", {"id": user_id})
    else:
        return None
    return row["id"] if row else None


def authenticate(token: Optional[str], db: Database, tokens: TokenCodec) -> Caller:
    """Steps 1-2: verify the token and load the caller it names."""
    claims = tokens.verify(token)

    try:
        user_id = int(claims["sub"])
    except (TypeError, ValueError):
        raise token_invalid()

    user = db.fetch_one("SELECT id, email, role FROM users WHERE id = :id", {"id": user_id})
    # Deleted users and role changes since issue invalidate the token
    if not user or user["role"] != claims["role"]:
        raise token_invalid()

    return Caller(
        user_id=user["id"],
        email=user["email"],
        role=user["role"],
        profile_id=_profile_id(db, user["id"], user["role"]),
        claims=claims,
    )


# ============================================================
# AUTHORIZATION
# ============================================================

def authorize(policy_name: str, caller: Caller, db: Database, path_params: Mapping[str, str]) -> None:
    """Steps 3-4: role gate, then ownership gate."""
    policy = POLICIES[policy_name]

    if caller.role not in policy.roles:
        logger.debug("Denied %s to user %s (role %s)", policy_name, caller.user_id, caller.role)
        raise ForbiddenError(policy.denial)

    if policy.owner_of is None:
        return

    try:
        resource_id = int(path_params[policy.resource_param])
    except (KeyError, TypeError, ValueError):
        raise ForbiddenError(NO_ACCESS)

    owner_id = policy.owner_of(db, resource_id)
    # Missing resource and foreign resource look the same to the caller
    if owner_id is None or caller.profile_id is None or owner_id != caller.profile_id:
        logger.debug("Ownership check failed for %s on %s by user %s", policy_name, resource_id, caller.user_id)
        raise ForbiddenError(NO_ACCESS)


class Guard:
    """FastAPI dependency enforcing one named policy."""

    def __init__(self, policy_name: str):
        if policy_name not in POLICIES:
            raise KeyError(f"Unknown policy '{policy_name}'")
        self.policy_name = policy_name

    def __call__(
        self,
        request: Request,
        credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
        db: Database = Depends(get_database),
        tokens: TokenCodec = Depends(get_token_codec),
    ) -> Caller:
        caller = authenticate(credentials.credentials if credentials else None, db, tokens)
        authorize(self.policy_name, caller, db, request.path_params)
        return caller


def guard(policy_name: str) -> Guard:
    return Guard(policy_name)


def optional_caller(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Database = Depends(get_database),
    tokens: TokenCodec = Depends(get_token_codec),
) -> Optional[Caller]:
    """Dependency - the caller if a token was sent, else None (public routes)."""
    if credentials is None:
        return None
    return authenticate(credentials.credentials, db, tokens)
