"""Result records returned for each submitted file and for a whole batch."""

from dataclasses import dataclass, field
from typing import Any, Union

from filedepot.domain.entities.file_descriptor import Category


@dataclass(frozen=True)
class UploadSuccess:
    """A file that was validated, stored and recorded."""

    id: int
    name: str
    category: Category
    status: str = "success"

    @property
    def ok(self) -> bool:
        return True

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "category": self.category.value,
            "status": self.status,
        }


@dataclass(frozen=True)
class UploadFailure:
    """A file that was rejected at some stage of the pipeline."""

    name: str
    error: str

    @property
    def ok(self) -> bool:
        return False

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "error": self.error}


UploadResult = Union[UploadSuccess, UploadFailure]


@dataclass
class UploadBatch:
    """Ordered per-file results of one upload request."""

    results: list[UploadResult] = field(default_factory=list)

    @property
    def successful(self) -> int:
        return sum(1 for result in self.results if result.ok)

    @property
    def failed(self) -> int:
        return len(self.results) - self.successful

    @property
    def any_succeeded(self) -> bool:
        return self.successful > 0

    def to_list(self) -> list[dict[str, Any]]:
        return [result.to_dict() for result in self.results]


@dataclass
class BulkDeleteSummary:
    """Outcome of a bulk delete request.

    Attributes:
        requested_ids: IDs as submitted by the client.
        deleted_ids: IDs whose metadata rows existed and were removed.
        deleted_count: Deleted IDs whose disk file was removed or already absent.
        errors: Disk-level failures as ``{id, name, error}`` entries.
    """

    requested_ids: list[int]
    deleted_ids: list[int] = field(default_factory=list)
    deleted_count: int = 0
    errors: list[dict[str, Any]] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.requested_ids)
