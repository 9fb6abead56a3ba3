"""Validation of uploaded files against transport status, size and MIME policy."""

from collections.abc import Mapping, Sequence

from filedepot.domain.entities.file_descriptor import (
    Category,
    FileDescriptor,
    UploadErrorCode,
)
from filedepot.domain.exceptions import FileValidationError, UploadPolicyError

BYTE_UNITS = ("B", "KB", "MB", "GB", "TB")

_POLICY_CODES = {UploadErrorCode.INI_SIZE, UploadErrorCode.FORM_SIZE}


def format_bytes(size: int | float) -> str:
    """Format a byte count using binary (1024-based) units.

    Examples:
        >>> format_bytes(512)
        '512.00 B'
        >>> format_bytes(10 * 1024 ** 3)
        '10.00 GB'
    """
    value = float(size)
    unit = 0
    while value >= 1024 and unit < len(BYTE_UNITS) - 1:
        value /= 1024
        unit += 1
    return f"{value:.2f} {BYTE_UNITS[unit]}"


class FileValidator:
    """Checks one file descriptor and classifies it into a category.

    Validation has no side effects. The category allow-lists are searched in
    ``Category`` declaration order, so a MIME type listed under several
    categories belongs to the first of them.
    """

    def __init__(
        self,
        allowed_types: Mapping[str, Sequence[str]],
        max_file_size: int,
    ) -> None:
        self.allowed_types: dict[Category, tuple[str, ...]] = {
            category: tuple(allowed_types.get(category.value, ()))
            for category in Category
        }
        self.max_file_size = max_file_size

    @property
    def all_allowed_types(self) -> list[str]:
        """Union of every category allow-list, in category order."""
        return [mime for types in self.allowed_types.values() for mime in types]

    def validate(self, descriptor: FileDescriptor) -> Category:
        """Validate a descriptor and return its category.

        Raises:
            UploadPolicyError: If the transport rejected the file for its size.
            FileValidationError: If the descriptor is incomplete, reports a
                transport error, is empty, is too large or has a MIME type
                outside every allow-list.
        """
        if (
            descriptor.tmp_path is None
            or descriptor.size is None
            or descriptor.mime_type is None
            or descriptor.error is None
        ):
            raise FileValidationError("Invalid file data provided")

        if descriptor.error != UploadErrorCode.OK:
            message = UploadErrorCode.describe(descriptor.error)
            if descriptor.error in _POLICY_CODES:
                raise UploadPolicyError(message)
            raise FileValidationError(message)

        if descriptor.size <= 0:
            raise FileValidationError("File is empty")

        if descriptor.size > self.max_file_size:
            raise FileValidationError(
                f"File size {format_bytes(descriptor.size)} exceeds limit of "
                f"{format_bytes(self.max_file_size)}"
            )

        category = self.categorize(descriptor.mime_type)
        if category is None:
            raise FileValidationError(
                f"File type {descriptor.mime_type} is not allowed. "
                f"Allowed types: {', '.join(self.all_allowed_types)}"
            )
        return category

    def categorize(self, mime_type: str) -> Category | None:
        """Return the first category whose allow-list contains the MIME type."""
        for category, types in self.allowed_types.items():
            if mime_type in types:
                return category
        return None
