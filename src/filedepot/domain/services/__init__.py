"""Domain services for FileDepot.

Services contain the upload pipeline and the operations on stored files.
"""

from filedepot.domain.services.file_management_service import FileManagementService
from filedepot.domain.services.file_validator import FileValidator, format_bytes
from filedepot.domain.services.upload_normalizer import (
    IndexedBatch,
    SingleFile,
    UploadNormalizer,
)
from filedepot.domain.services.upload_orchestrator import UploadOrchestrator

__all__ = [
    "FileManagementService",
    "FileValidator",
    "IndexedBatch",
    "SingleFile",
    "UploadNormalizer",
    "UploadOrchestrator",
    "format_bytes",
]
