"""Repository for accessing and managing stored file metadata."""

from collections.abc import Sequence

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from filedepot.core.logging import get_logger
from filedepot.domain.exceptions import FilePersistenceError
from filedepot.infrastructure.persistence.models.file import FileModel

logger = get_logger(__name__)


class FileRepository:
    """Repository for FileModel rows.

    Write operations commit immediately; any SQLAlchemy failure is rolled
    back and re-raised as ``FilePersistenceError``.
    """

    def __init__(self, session: AsyncSession):
        """Initialize the repository.

        Args:
            session: SQLAlchemy async session.
        """
        self.session = session

    async def _fail(self, action: str, error: SQLAlchemyError) -> FilePersistenceError:
        await self.session.rollback()
        logger.error("File metadata operation failed", action=action, error=str(error))
        return FilePersistenceError(f"Failed to {action} file record: {error}")

    async def create(
        self,
        original_name: str,
        stored_name: str,
        file_path: str,
        mime_type: str,
        file_size: int,
        category: str,
    ) -> FileModel:
        """Insert a metadata row for a stored file.

        Returns:
            The created FileModel with its store-assigned ID.

        Raises:
            FilePersistenceError: If the insert is rejected.
        """
        record = FileModel(
            original_name=original_name,
            stored_name=stored_name,
            file_path=file_path,
            mime_type=mime_type,
            file_size=file_size,
            category=category,
        )
        try:
            self.session.add(record)
            await self.session.commit()
            await self.session.refresh(record)
        except SQLAlchemyError as e:
            raise await self._fail("create", e) from e
        return record

    async def get_by_id(self, file_id: int) -> FileModel | None:
        """Get a file record by ID.

        Returns:
            The FileModel or None if not found.
        """
        stmt = select(FileModel).where(FileModel.id == file_id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_many(self, file_ids: Sequence[int]) -> Sequence[FileModel]:
        """Get every existing record among the given IDs, ordered by ID."""
        if not file_ids:
            return []
        stmt = select(FileModel).where(FileModel.id.in_(set(file_ids))).order_by(FileModel.id)
        result = await self.session.execute(stmt)
        return result.scalars().all()

    async def list_all(self) -> Sequence[FileModel]:
        """List all file records, newest first."""
        stmt = select(FileModel).order_by(FileModel.created_at.desc(), FileModel.id.desc())
        result = await self.session.execute(stmt)
        return result.scalars().all()

    async def rename(self, file_id: int, original_name: str) -> FileModel | None:
        """Change a file's display name.

        Returns:
            The updated FileModel or None if not found.

        Raises:
            FilePersistenceError: If the update is rejected.
        """
        record = await self.get_by_id(file_id)
        if record is None:
            return None

        try:
            record.original_name = original_name
            await self.session.commit()
            await self.session.refresh(record)
        except SQLAlchemyError as e:
            raise await self._fail("update", e) from e
        return record

    async def delete(self, file_id: int) -> bool:
        """Delete a file record.

        Returns:
            True if deleted, False if not found.
        """
        record = await self.get_by_id(file_id)
        if record is None:
            return False

        try:
            await self.session.delete(record)
            await self.session.commit()
        except SQLAlchemyError as e:
            raise await self._fail("delete", e) from e
        return True

    async def delete_many(self, file_ids: Sequence[int]) -> int:
        """Delete every record among the given IDs.

        Returns:
            Number of rows removed.
        """
        if not file_ids:
            return 0
        try:
            result = await self.session.execute(
                delete(FileModel).where(FileModel.id.in_(set(file_ids)))
            )
            await self.session.commit()
        except SQLAlchemyError as e:
            raise await self._fail("delete", e) from e
        return result.rowcount or 0
