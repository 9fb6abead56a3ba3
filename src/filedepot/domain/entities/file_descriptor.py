"""Transient per-file descriptor produced by the upload normalizer.

A descriptor carries the client-supplied facts about one uploaded file. None
of its fields are trusted until the file validator has accepted it, and it is
never persisted directly.
"""

from dataclasses import dataclass
from enum import Enum, IntEnum


class UploadErrorCode(IntEnum):
    """Transport-level status of one uploaded file part."""

    OK = 0
    INI_SIZE = 1
    FORM_SIZE = 2
    PARTIAL = 3
    NO_FILE = 4
    NO_TMP_DIR = 6
    CANT_WRITE = 7
    EXTENSION = 8

    @property
    def message(self) -> str:
        """Human-readable description of the transport error."""
        return UPLOAD_ERROR_MESSAGES[self]

    @classmethod
    def describe(cls, code: int) -> str:
        """Describe any integer code, including ones outside the enum."""
        try:
            return cls(code).message
        except ValueError:
            return "Unknown upload error"


UPLOAD_ERROR_MESSAGES: dict[UploadErrorCode, str] = {
    UploadErrorCode.OK: "File uploaded successfully",
    UploadErrorCode.INI_SIZE: "File size exceeds server upload limit",
    UploadErrorCode.FORM_SIZE: "File size exceeds form upload limit",
    UploadErrorCode.PARTIAL: "File was only partially uploaded",
    UploadErrorCode.NO_FILE: "No file was uploaded",
    UploadErrorCode.NO_TMP_DIR: "Missing temporary folder",
    UploadErrorCode.CANT_WRITE: "Failed to write file to disk",
    UploadErrorCode.EXTENSION: "File upload stopped by extension",
}


class Category(str, Enum):
    """Storage category of an accepted file.

    Declaration order is the order in which allow-lists are searched.
    """

    IMAGE = "image"
    VIDEO = "video"
    DOCUMENT = "document"

    @property
    def directory_name(self) -> str:
        """Name of the category's subdirectory under the upload base path."""
        return f"{self.value}s"


@dataclass(frozen=True)
class FileDescriptor:
    """One uploaded file as described by the transport.

    Attributes:
        name: Original client-supplied filename (untrusted).
        mime_type: Declared MIME type (untrusted until validated).
        tmp_path: Path of the buffered temporary copy.
        size: Declared size in bytes.
        error: Transport-level error code.
        index: Position of the file within its batch.
    """

    name: str
    mime_type: str
    tmp_path: str
    size: int
    error: int = UploadErrorCode.OK
    index: int = 0

    @property
    def extension(self) -> str:
        """Suffix of the client filename including the dot, or ''.

        A leading-dot basename such as ``.htaccess`` is all extension.
        A trailing dot yields ''.
        """
        basename = self.name.replace("\\", "/").rsplit("/", 1)[-1]
        dot = basename.rfind(".")
        if dot == -1 or dot == len(basename) - 1:
            return ""
        return basename[dot:]
