"""Base abstractions for upload storage."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path

from filedepot.domain.entities.file_descriptor import Category, FileDescriptor


@dataclass(slots=True, frozen=True)
class StoredLocation:
    """Where a stored upload ended up on disk."""

    stored_name: str
    file_path: Path


class StorageWriter(ABC):
    """Abstract base class for moving validated uploads into category storage."""

    @abstractmethod
    async def store(self, descriptor: FileDescriptor, category: Category) -> StoredLocation:
        """Copy the descriptor's temporary file into the category directory."""
        ...

    @abstractmethod
    async def delete(self, file_path: str | Path) -> bool:
        """Delete a stored file.

        Returns:
            True if a file was removed, False if it was already absent.
        """
        ...

    @abstractmethod
    def ensure_directories(self) -> None:
        """Create every category directory."""
        ...
