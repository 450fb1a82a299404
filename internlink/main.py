"""
InternLink API - Main Application

FastAPI backend with:
- PostgreSQL for structured data (SQLAlchemy, raw SQL)
- JWT authentication with role + ownership policies
- Resume uploads stored on disk and served from /uploads

Run: uvicorn internlink.main:app --reload
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from internlink.api import api_router
from internlink.core.auth import TokenCodec
from internlink.core.config import Settings, get_settings
from internlink.core.errors import register_exception_handlers
from internlink.db.database import Database
from internlink.services.credentials import CredentialStore

logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build the app. Tests pass their own Settings."""
    settings = settings or get_settings()
    configure_logging(settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Acquire the database client for the process lifetime; release it on shutdown."""
        settings.resume_dir.mkdir(parents=True, exist_ok=True)

        db = Database(settings.sqlalchemy_url, echo=settings.debug)
        try:
            db.create_tables()
            credentials = CredentialStore(db, settings.bcrypt_rounds)
            credentials.bootstrap_admin(settings.admin_email, settings.admin_password)

            app.state.db = db
            app.state.credentials = credentials
            app.state.tokens = TokenCodec.from_settings(settings)
            logger.info("InternLink API started")
            yield
        finally:
            db.dispose()
            logger.info("Database connections released")

    app = FastAPI(
        title="InternLink API",
        description="""
        Internship marketplace backend.

        ## Features
        - **Authentication**: JWT-based auth for students, companies and admins
        - **Internships**: Company postings, admin moderation, public browse of approved postings
        - **Applications**: One application per student per internship, status managed by the owner
        - **Resumes**: Student upload, company download
        """,
        version="1.0.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan
    )
    app.state.settings = settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app, debug=settings.debug)

    # Include API routes
    app.include_router(api_router, prefix="/api")

    # Uploaded files (directory is created in lifespan)
    app.mount("/uploads", StaticFiles(directory=settings.upload_dir, check_dir=False), name="uploads")

    @app.get("/", tags=["Health"])
    def root():
        return {"message": "Welcome to InternLink API"}

    @app.get("/health", tags=["Health"])
    def health_check():
        """Detailed health check."""
        return {
            "status": "healthy",
            "database": "connected" if app.state.db.ping() else "disconnected"
        }

    return app


app = create_app()
