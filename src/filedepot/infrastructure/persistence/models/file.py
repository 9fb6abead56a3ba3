"""SQLAlchemy model for the files table."""

from datetime import datetime

from sqlalchemy import BigInteger, DateTime, Integer, String, func
from sqlalchemy.orm import Mapped, mapped_column

from filedepot.infrastructure.persistence.database import Base


class FileModel(Base):
    """SQLAlchemy model for the files table.

    One row per stored upload. Only ``original_name`` and ``updated_at``
    change after insert.

    Attributes:
        id: Auto-incrementing primary key.
        original_name: Client-supplied display name (renamable).
        stored_name: Server-generated name of the file on disk.
        file_path: Absolute path of the stored file (never exposed by the API).
        mime_type: Validated MIME type.
        file_size: Size in bytes.
        category: Storage category (image, video or document).
        created_at: Timestamp when the file was uploaded.
        updated_at: Timestamp of the last rename.
    """

    __tablename__ = "files"

    id: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
        autoincrement=True,
    )
    original_name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )
    stored_name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="Random hex token plus original extension",
    )
    file_path: Mapped[str] = mapped_column(
        String(1024),
        nullable=False,
    )
    mime_type: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
    )
    file_size: Mapped[int] = mapped_column(
        BigInteger,
        nullable=False,
    )
    category: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        index=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime,
        nullable=False,
        server_default=func.now(),
        index=True,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime,
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )

    def __repr__(self) -> str:
        return f"<File(id={self.id}, original_name='{self.original_name}', category='{self.category}')>"
