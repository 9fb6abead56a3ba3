"""Drives the upload pipeline for a batch of files.

Each descriptor goes through validate, store and record on its own. Whatever
goes wrong for one file becomes an ``UploadFailure`` in that file's slot; no
exception leaves ``process``.
"""

from collections.abc import Mapping
from typing import Any, Protocol

from filedepot.core.logging import LoggingContext, get_logger
from filedepot.domain.entities.file_descriptor import FileDescriptor
from filedepot.domain.entities.upload_result import (
    UploadBatch,
    UploadFailure,
    UploadResult,
    UploadSuccess,
)
from filedepot.domain.exceptions import FileDepotError, FileStorageError
from filedepot.domain.services.file_validator import FileValidator
from filedepot.domain.services.upload_normalizer import UploadNormalizer
from filedepot.infrastructure.storage.base import StoredLocation, StorageWriter

logger = get_logger(__name__)


class RecordedFile(Protocol):
    id: int


class MetadataRecorder(Protocol):
    """Persists one metadata row per stored file."""

    async def create(
        self,
        original_name: str,
        stored_name: str,
        file_path: str,
        mime_type: str,
        file_size: int,
        category: str,
    ) -> RecordedFile: ...


class UploadOrchestrator:
    """Runs normalize, then validate/store/record for every file of a batch."""

    def __init__(
        self,
        validator: FileValidator,
        writer: StorageWriter,
        recorder: MetadataRecorder,
        normalizer: UploadNormalizer | None = None,
    ) -> None:
        self.validator = validator
        self.writer = writer
        self.recorder = recorder
        self.normalizer = normalizer or UploadNormalizer()

    async def process(self, raw: Mapping[str, Any] | None) -> UploadBatch:
        """Process a raw upload payload.

        Returns:
            UploadBatch: One result per submitted file, in submission order.
        """
        batch = UploadBatch()
        for entry in self.normalizer.normalize(raw):
            if isinstance(entry, UploadFailure):
                batch.results.append(entry)
            else:
                batch.results.append(await self.process_one(entry))

        logger.info(
            "Upload batch processed",
            total=len(batch.results),
            successful=batch.successful,
            failed=batch.failed,
        )
        return batch

    async def process_one(self, descriptor: FileDescriptor) -> UploadResult:
        """Validate, store and record a single file."""
        with LoggingContext(file_index=descriptor.index, filename=descriptor.name):
            return await self._process_one(descriptor)

    async def _process_one(self, descriptor: FileDescriptor) -> UploadResult:
        try:
            category = self.validator.validate(descriptor)
            location = await self.writer.store(descriptor, category)
        except FileDepotError as e:
            logger.warning(
                "Upload rejected",
                error_type=type(e).__name__,
                error=str(e),
            )
            return UploadFailure(name=descriptor.name, error=str(e))
        except Exception as e:
            logger.error(
                "Unexpected error processing upload",
                error=str(e),
                exc_info=True,
            )
            return UploadFailure(name=descriptor.name, error=str(e))

        try:
            record = await self.recorder.create(
                original_name=descriptor.name,
                stored_name=location.stored_name,
                file_path=str(location.file_path),
                mime_type=descriptor.mime_type,
                file_size=descriptor.size,
                category=category.value,
            )
        except Exception as e:
            logger.error("Recording file metadata failed", error=str(e))
            await self._discard(location)
            return UploadFailure(name=descriptor.name, error=str(e))

        logger.info(
            "File uploaded successfully",
            file_id=record.id,
            category=category.value,
            size=descriptor.size,
        )
        return UploadSuccess(id=record.id, name=descriptor.name, category=category)

    async def _discard(self, location: StoredLocation) -> None:
        """Remove a stored file whose metadata row could not be written."""
        try:
            await self.writer.delete(location.file_path)
        except FileStorageError as e:
            logger.error(
                "Orphaned stored file could not be removed",
                path=str(location.file_path),
                error=str(e),
            )
