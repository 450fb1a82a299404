"""
API Errors - exception taxonomy and the handlers that render it.

Every error leaves the app as JSON:
    {"message": "<human readable>", "error": "<machine code>"}
"""

import logging
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class APIError(Exception):
    """Base class for errors that map onto an HTTP response."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    code: str = "InternalError"
    message: str = "Server error"

    def __init__(self, message: Optional[str] = None, code: Optional[str] = None,
                 status_code: Optional[int] = None):
        self.message = message or self.message
        self.code = code or self.code
        if status_code is not None:
            self.status_code = status_code
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {"message": self.message, "error": self.code}


class ValidationError(APIError):
    status_code = status.HTTP_400_BAD_REQUEST
    code = "ValidationError"
    message = "Invalid request"


class AuthError(APIError):
    status_code = status.HTTP_401_UNAUTHORIZED
    code = "AuthError"
    message = "Authentication required"


class ForbiddenError(APIError):
    status_code = status.HTTP_403_FORBIDDEN
    code = "Forbidden"
    message = "Forbidden"


class NotFoundError(APIError):
    status_code = status.HTTP_404_NOT_FOUND
    code = "NotFound"
    message = "Not found"


class ConflictError(APIError):
    # Duplicates are reported as 400, matching the existing client contract
    status_code = status.HTTP_400_BAD_REQUEST
    code = "Conflict"
    message = "Resource already exists"


class PayloadTooLarge(APIError):
    status_code = status.HTTP_413_REQUEST_ENTITY_TOO_LARGE
    code = "FileTooLarge"
    message = "File too large"


class InternalError(APIError):
    pass


# ============================================================
# Named failures used across the app
# ============================================================

def invalid_credentials() -> AuthError:
    # Same message for unknown email and wrong password
    return AuthError("Invalid credentials", code="InvalidCredentials")


def duplicate_user() -> ConflictError:
    return ConflictError("User already exists", code="DuplicateUser")


def duplicate_application() -> ConflictError:
    return ConflictError("You have already applied to this internship.", code="DuplicateApplication")


def no_fields_provided() -> ValidationError:
    return ValidationError("No fields to update.", code="NoFieldsProvided")


# ============================================================
# Handlers
# ============================================================

def register_exception_handlers(app: FastAPI, debug: bool = False) -> None:
    """Attach JSON error handlers for the taxonomy above."""

    @app.exception_handler(APIError)
    async def handle_api_error(request: Request, exc: APIError):
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        details = [
            {
                "field": ".".join(str(part) for part in err.get("loc", ()) if part != "body"),
                "message": err.get("msg", ""),
            }
            for err in exc.errors()
        ]
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"message": "Invalid request", "error": "ValidationError", "details": details},
        )

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content={"message": str(exc.detail)},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def handle_unexpected(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        content = {"message": "Server error"}
        if debug:
            content["error"] = str(exc)
        return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=content)
