"""Repositories for FileDepot persistence."""

from filedepot.infrastructure.persistence.repositories.file_repository import FileRepository

__all__ = ["FileRepository"]
