"""
Database client - one explicitly constructed handle per process.

The app creates a Database in its lifespan, stores it on app.state and
disposes it on shutdown. Routes receive it through the get_database dependency
instead of importing a global engine.
"""

import logging
from contextlib import contextmanager
from datetime import datetime
from typing import Any, Dict, Iterator, List, Optional

from fastapi import Request
from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from internlink.db.tables import metadata

logger = logging.getLogger(__name__)


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class Database:
    """Engine + session factory with small raw-SQL helpers."""

    def __init__(self, url: str, echo: bool = False):
        self.url = url
        if url.startswith("sqlite"):
            # TestClient and the threadpool share connections across threads
            self.engine: Engine = create_engine(
                url, echo=echo, connect_args={"check_same_thread": False}
            )
            event.listen(self.engine, "connect", _enable_sqlite_foreign_keys)
        else:
            # pool_size=5: maintain 5 connections ready
            # max_overflow=10: allow 10 extra connections under load
            self.engine = create_engine(url, pool_size=5, max_overflow=10, echo=echo)
        self.SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=self.engine)

    @contextmanager
    def session(self) -> Iterator[Session]:
        """
        Transactional session scope.
        Usage:
            with db.session() as s:
                s.execute(text("SELECT * FROM users"))
        """
        session = self.SessionLocal()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def fetch_all(self, sql: str, params: Optional[dict] = None) -> List[Dict[str, Any]]:
        """Execute raw SQL and return results as list of dicts."""
        with self.session() as s:
            result = s.execute(text(sql), params or {})
            return [dict(row._mapping) for row in result.fetchall()]

    def fetch_one(self, sql: str, params: Optional[dict] = None) -> Optional[Dict[str, Any]]:
        rows = self.fetch_all(sql, params)
        return rows[0] if rows else None

    def now(self) -> datetime:
        """
        Current time by the database clock, as the naive wall-clock value a
        CURRENT_TIMESTAMP column default stores in this session.
        """
        with self.session() as s:
            value = s.execute(text("SELECT CURRENT_TIMESTAMP")).scalar()
        if isinstance(value, str):
            # SQLite returns text
            value = datetime.fromisoformat(value)
        return value.replace(tzinfo=None)

    def create_tables(self) -> None:
        metadata.create_all(self.engine)

    def ping(self) -> bool:
        """
        Test if the database is reachable.
        Returns True if connection successful, False otherwise.
        """
        try:
            with self.session() as s:
                return s.execute(text("SELECT 1")).scalar() == 1
        except Exception as e:
            logger.warning("Database connection failed: %s", e)
            return False

    def dispose(self) -> None:
        self.engine.dispose()


def update_sql(table: str, changes: Dict[str, Any]) -> str:
    """
    UPDATE ... RETURNING * for a validated patch. Column names come from the
    patch schema's declared fields, never from raw request keys.
    Bind the row id as :row_id.
    """
    assignments = ", ".join(f"{column} = :{column}" for column in changes)
    return (
        f"UPDATE {table} SET {assignments}, updated_at = CURRENT_TIMESTAMP "
        f"WHERE id = :row_id RETURNING *"
    )


def get_database(request: Request) -> Database:
    """
    Dependency for FastAPI route injection.
    Usage:
        @router.get("/users")
        def list_users(db: Database = Depends(get_database)):
            ...
    """
    return request.app.state.db
