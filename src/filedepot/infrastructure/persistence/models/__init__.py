"""SQLAlchemy models for FileDepot.

All models inherit from the Base class defined in database.py.
"""

from filedepot.infrastructure.persistence.models.file import FileModel

__all__ = [
    "FileModel",
]
