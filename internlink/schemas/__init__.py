"""
Schemas module - Request/Response schemas for API endpoints.

Schemas are the API contract (what the client sends/receives). Patch
schemas double as the whitelist of columns an update may touch.
"""

from internlink.schemas.schemas import (
    ApplicationStatus, InternshipStatus, MessageResponse, PatchModel, UserRole
)

__all__ = ["ApplicationStatus", "InternshipStatus", "MessageResponse", "PatchModel", "UserRole"]
