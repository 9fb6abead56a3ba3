"""Domain entities for FileDepot.

Entities are plain dataclasses and enums with no dependencies on
infrastructure or external frameworks.
"""

from filedepot.domain.entities.file_descriptor import (
    Category,
    FileDescriptor,
    UploadErrorCode,
)
from filedepot.domain.entities.upload_result import (
    BulkDeleteSummary,
    UploadBatch,
    UploadFailure,
    UploadResult,
    UploadSuccess,
)

__all__ = [
    "BulkDeleteSummary",
    "Category",
    "FileDescriptor",
    "UploadBatch",
    "UploadErrorCode",
    "UploadFailure",
    "UploadResult",
    "UploadSuccess",
]
