"""Persistence layer for file metadata."""

from filedepot.infrastructure.persistence.database import (
    Base,
    DatabaseManager,
    get_db_session,
    init_database,
)

__all__ = [
    "Base",
    "DatabaseManager",
    "get_db_session",
    "init_database",
]
