"""Exceptions raised by the upload pipeline and file management services."""


class FileDepotError(Exception):
    """Base exception for FileDepot domain errors."""

    pass


class UploadTransportError(FileDepotError):
    """Raised when an upload field is malformed or lacks required sub-fields."""

    pass


class FileValidationError(FileDepotError):
    """Raised when a file is empty, too large or of a disallowed type."""

    pass


class UploadPolicyError(FileValidationError):
    """Raised when the transport rejected a file by its own size limits."""

    pass


class FileStorageError(FileDepotError):
    """Raised when a file cannot be written to or removed from disk."""

    pass


class FilePersistenceError(FileDepotError):
    """Raised when the metadata store rejects an insert, update or delete."""

    pass


class FileNotFoundInStoreError(FileDepotError):
    """Raised when no metadata row exists for the requested file ID."""

    def __init__(self, file_id: int) -> None:
        self.file_id = file_id
        super().__init__("File not found")


class InvalidFileNameError(FileDepotError):
    """Raised when a rename targets an empty or whitespace-only name."""

    def __init__(self) -> None:
        super().__init__("Invalid file name")


class EmptyFileIdListError(FileDepotError):
    """Raised when a bulk delete request carries no file IDs."""

    def __init__(self) -> None:
        super().__init__("No file IDs provided for deletion")
