"""
Database module - injected client and table metadata.
"""
from internlink.db.database import Database, get_database
from internlink.db.tables import metadata

__all__ = [
    "Database",
    "get_database",
    "metadata"
]
