"""Listing, renaming and deletion of stored files."""

from collections.abc import Iterable, Sequence

from filedepot.core.logging import get_logger
from filedepot.domain.entities.upload_result import BulkDeleteSummary
from filedepot.domain.exceptions import (
    EmptyFileIdListError,
    FileNotFoundInStoreError,
    FileStorageError,
    InvalidFileNameError,
)
from filedepot.infrastructure.persistence.models.file import FileModel
from filedepot.infrastructure.persistence.repositories.file_repository import FileRepository
from filedepot.infrastructure.storage.base import StorageWriter

logger = get_logger(__name__)


class FileManagementService:
    """Operations on already-stored files.

    Deleting always removes the disk file first; a disk file that is already
    gone is not an error.
    """

    def __init__(self, repository: FileRepository, writer: StorageWriter) -> None:
        self.repository = repository
        self.writer = writer

    async def list_files(self) -> Sequence[FileModel]:
        return await self.repository.list_all()

    async def get_file(self, file_id: int) -> FileModel:
        record = await self.repository.get_by_id(file_id)
        if record is None:
            raise FileNotFoundInStoreError(file_id)
        return record

    async def rename_file(self, file_id: int, original_name: str | None) -> FileModel:
        """Rename a file's display name.

        Raises:
            InvalidFileNameError: If the new name is empty or whitespace only.
            FileNotFoundInStoreError: If no such file exists.
        """
        name = (original_name or "").strip()
        if not name:
            raise InvalidFileNameError()

        record = await self.repository.rename(file_id, name)
        if record is None:
            raise FileNotFoundInStoreError(file_id)

        logger.info("File renamed", file_id=file_id, original_name=name)
        return record

    async def delete_file(self, file_id: int) -> None:
        """Delete a file from disk and its metadata row.

        Raises:
            FileNotFoundInStoreError: If no such file exists.
            FileStorageError: If the disk file exists but cannot be removed.
        """
        record = await self.get_file(file_id)
        await self.writer.delete(record.file_path)
        await self.repository.delete(file_id)
        logger.info("File deleted", file_id=file_id)

    async def bulk_delete(self, file_ids: Iterable[int] | None) -> BulkDeleteSummary:
        """Delete every existing file among ``file_ids``.

        IDs without a metadata row are skipped silently. Every existing row
        is removed even if its disk file could not be deleted; such files
        are reported in ``errors`` and not counted in ``deleted_count``.

        Raises:
            EmptyFileIdListError: If no IDs were given.
        """
        requested = [int(file_id) for file_id in file_ids or []]
        if not requested:
            raise EmptyFileIdListError()

        summary = BulkDeleteSummary(requested_ids=requested)
        for record in await self.repository.get_many(requested):
            summary.deleted_ids.append(record.id)
            try:
                await self.writer.delete(record.file_path)
            except FileStorageError as e:
                logger.warning(
                    "Bulk delete could not remove file from disk",
                    file_id=record.id,
                    error=str(e),
                )
                summary.errors.append(
                    {"id": record.id, "name": record.original_name, "error": str(e)}
                )
                continue
            summary.deleted_count += 1

        await self.repository.delete_many(summary.deleted_ids)

        logger.info(
            "Bulk delete completed",
            requested=summary.total,
            deleted=summary.deleted_count,
            errors=len(summary.errors),
        )
        return summary
