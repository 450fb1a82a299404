"""
API Routes - Combines all route modules into single router.
"""

from fastapi import APIRouter

from internlink.api.routes.auth_routes import router as auth_router
from internlink.api.routes.student_routes import router as student_router
from internlink.api.routes.company_routes import router as company_router
from internlink.api.routes.internship_routes import router as internship_router
from internlink.api.routes.admin_routes import router as admin_router

# Main API router
api_router = APIRouter()

# Student/company sub-paths live under /internships, so they go in before /internships/{id}
api_router.include_router(auth_router)
api_router.include_router(student_router)
api_router.include_router(company_router)
api_router.include_router(internship_router)
api_router.include_router(admin_router)
