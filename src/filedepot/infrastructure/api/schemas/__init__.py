"""Pydantic schemas for FileDepot API."""

from filedepot.infrastructure.api.schemas.file_schemas import (
    BulkDeleteError,
    BulkDeleteRequest,
    BulkDeleteResponse,
    ErrorResponse,
    FileListResponse,
    FileRecordResponse,
    MessageResponse,
    RenameFileRequest,
    UploadResponse,
)

__all__ = [
    "BulkDeleteError",
    "BulkDeleteRequest",
    "BulkDeleteResponse",
    "ErrorResponse",
    "FileListResponse",
    "FileRecordResponse",
    "MessageResponse",
    "RenameFileRequest",
    "UploadResponse",
]
