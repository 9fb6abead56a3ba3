"""Local filesystem storage for uploaded files."""

import asyncio
import os
import secrets
import shutil
from pathlib import Path

from filedepot.core.config import Settings, get_settings
from filedepot.core.logging import get_logger
from filedepot.domain.entities.file_descriptor import Category, FileDescriptor
from filedepot.domain.exceptions import FileStorageError
from filedepot.infrastructure.storage.base import StoredLocation, StorageWriter

logger = get_logger(__name__)

TOKEN_BYTES = 16  # 128-bit stored-name token


class LocalStorageWriter(StorageWriter):
    """Stores uploads in per-category directories under a base path.

    Stored names are random 128-bit hex tokens plus the original extension.
    Each target is opened with an exclusive create, so a name is only ever
    retried when another file already holds it.
    """

    def __init__(
        self,
        base_path: str | Path | None = None,
        settings: Settings | None = None,
    ) -> None:
        settings = settings or get_settings()
        self.base_path = Path(base_path or settings.upload_base_path)
        self.file_mode = settings.stored_file_mode
        self.directory_mode = settings.directory_mode
        self.max_attempts = max(1, settings.stored_name_attempts)
        self.chunk_size = settings.copy_chunk_size

    def category_directory(self, category: Category) -> Path:
        return self.base_path / category.directory_name

    @staticmethod
    def generate_stored_name(extension: str) -> str:
        return f"{secrets.token_hex(TOKEN_BYTES)}{extension}"

    def ensure_directories(self) -> None:
        for category in Category:
            directory = self._ensure_writable_directory(self.category_directory(category))
            logger.info(
                "Storage directory ready",
                category=category.value,
                path=str(directory),
                writable=os.access(directory, os.W_OK),
            )

    async def store(self, descriptor: FileDescriptor, category: Category) -> StoredLocation:
        return await asyncio.to_thread(self._store, descriptor, category)

    async def delete(self, file_path: str | Path) -> bool:
        return await asyncio.to_thread(self._delete, Path(file_path))

    def _store(self, descriptor: FileDescriptor, category: Category) -> StoredLocation:
        source = Path(descriptor.tmp_path)
        if not source.is_file():
            raise FileStorageError(f"Temporary file not found: {descriptor.tmp_path}")
        if not os.access(source, os.R_OK):
            raise FileStorageError(f"Cannot read temporary file: {descriptor.tmp_path}")

        directory = self._ensure_writable_directory(self.category_directory(category))
        target, fd = self._create_exclusive(directory, descriptor.extension)

        try:
            with os.fdopen(fd, "wb") as destination, source.open("rb") as origin:
                shutil.copyfileobj(origin, destination, self.chunk_size)
        except OSError as e:
            target.unlink(missing_ok=True)
            raise FileStorageError(f"Failed to move file. Error: {e.strerror or e}") from e

        try:
            source.unlink()
        except OSError as e:
            logger.warning(
                "Could not remove temporary upload file",
                tmp_path=str(source),
                error=str(e),
            )

        try:
            os.chmod(target, self.file_mode)
        except OSError as e:
            logger.warning("Could not set stored file permissions", path=str(target), error=str(e))

        logger.info(
            "File stored",
            category=category.value,
            stored_name=target.name,
            size=descriptor.size,
        )
        return StoredLocation(stored_name=target.name, file_path=target.resolve())

    def _create_exclusive(self, directory: Path, extension: str) -> tuple[Path, int]:
        flags = os.O_WRONLY | os.O_CREAT | os.O_EXCL | getattr(os, "O_BINARY", 0)
        for attempt in range(1, self.max_attempts + 1):
            target = directory / self.generate_stored_name(extension)
            try:
                return target, os.open(target, flags, self.file_mode)
            except FileExistsError:
                logger.warning(
                    "Stored name already taken, regenerating",
                    stored_name=target.name,
                    attempt=attempt,
                )
            except OSError as e:
                raise FileStorageError(f"Failed to move file. Error: {e.strerror or e}") from e

        raise FileStorageError(
            f"Could not allocate a unique stored name after {self.max_attempts} attempts"
        )

    def _ensure_writable_directory(self, directory: Path) -> Path:
        try:
            directory.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise FileStorageError(f"Failed to create directory: {directory}") from e

        if not os.access(directory, os.W_OK):
            # One repair attempt before giving up
            try:
                os.chmod(directory, self.directory_mode)
            except OSError as e:
                logger.warning("Permission repair failed", path=str(directory), error=str(e))
            if not os.access(directory, os.W_OK):
                raise FileStorageError(f"Upload directory not writable: {directory}")
        return directory

    def _delete(self, path: Path) -> bool:
        try:
            path.unlink()
        except FileNotFoundError:
            logger.info("Stored file already absent", path=str(path))
            return False
        except OSError as e:
            raise FileStorageError("Failed to delete file from disk") from e
        return True
