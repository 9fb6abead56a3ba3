"""Pydantic schemas for file endpoints."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class FileRecordResponse(BaseModel):
    """Response schema for one stored file.

    The absolute storage path is never included.
    """

    model_config = ConfigDict(from_attributes=True)

    id: int = Field(..., description="Store-assigned file ID")
    original_name: str = Field(..., description="Display name of the file")
    stored_name: str = Field(..., description="Server-generated name on disk")
    mime_type: str = Field(..., description="MIME type of the file")
    file_size: int = Field(..., description="File size in bytes")
    category: str = Field(..., description="Storage category (image, video, document)")
    created_at: datetime = Field(..., description="Upload timestamp")
    updated_at: datetime = Field(..., description="Timestamp of the last rename")


class FileListResponse(BaseModel):
    """Response schema for listing files."""

    files: list[FileRecordResponse] = Field(default_factory=list)


class UploadResponse(BaseModel):
    """Response schema for a batch upload."""

    message: str = Field(default="File upload processing complete")
    successful: int = Field(..., description="Number of files stored")
    failed: int = Field(..., description="Number of files rejected")
    results: list[dict[str, Any]] = Field(
        ..., description="Per-file results in submission order"
    )


class RenameFileRequest(BaseModel):
    """Request schema for renaming a file."""

    original_name: str | None = Field(None, description="New display name")


class BulkDeleteRequest(BaseModel):
    """Request schema for deleting several files."""

    model_config = ConfigDict(populate_by_name=True)

    file_ids: list[int] = Field(default_factory=list, alias="fileIds")


class BulkDeleteError(BaseModel):
    """A file whose disk copy could not be removed during a bulk delete."""

    id: int
    name: str
    error: str


class BulkDeleteResponse(BaseModel):
    """Response schema for a bulk delete."""

    message: str = Field(default="Bulk delete operation completed")
    deleted_count: int
    total: int
    requested_ids: list[int]
    deleted_ids: list[int]
    errors: list[BulkDeleteError] = Field(default_factory=list)


class MessageResponse(BaseModel):
    """Generic message response."""

    message: str


class ErrorResponse(BaseModel):
    """Error response body."""

    error: str
    message: str | None = None
