"""Multipart form adapter for the upload pipeline.

Buffers every file part of a Starlette form into a named temporary file and
builds the raw file-parameter payload the upload normalizer understands.
Repeated ``file`` fields become a list of file objects, ``file[N]`` fields are
kept as separate top-level keys, and a lone ``file`` field stays a single
file object. A form mixing both styles becomes one list in submission order.
"""

import asyncio
import os
import re
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from starlette.datastructures import FormData, UploadFile

from filedepot.core.config import Settings
from filedepot.core.logging import get_logger
from filedepot.domain.entities.file_descriptor import UploadErrorCode

logger = get_logger(__name__)

TMP_PREFIX = "fd_upload_"


@dataclass
class BufferedUpload:
    """Raw upload payload plus the temporary files created for it."""

    payload: dict[str, Any] = field(default_factory=dict)
    tmp_paths: list[str] = field(default_factory=list)

    @property
    def has_files(self) -> bool:
        return bool(self.payload)

    async def cleanup(self) -> None:
        """Remove temporary files the storage writer did not consume."""
        await asyncio.to_thread(self._cleanup)

    def _cleanup(self) -> None:
        for tmp_path in self.tmp_paths:
            try:
                os.unlink(tmp_path)
            except FileNotFoundError:
                continue
            except OSError as e:
                logger.warning("Could not remove temporary upload file", tmp_path=tmp_path, error=str(e))


class MultipartUploadAdapter:
    """Turns multipart form data into the raw upload payload."""

    def __init__(
        self,
        tmp_dir: str | Path,
        field_name: str = "file",
        max_size: int | None = None,
        chunk_size: int = 1024 * 1024,
    ) -> None:
        self.tmp_dir = Path(tmp_dir)
        self.field_name = field_name
        self.max_size = max_size
        self.chunk_size = chunk_size
        self._bracket_key = re.compile(rf"^{re.escape(field_name)}\[(\d+)\]$")

    @classmethod
    def from_settings(cls, settings: Settings) -> "MultipartUploadAdapter":
        return cls(
            tmp_dir=settings.upload_tmp_path,
            max_size=settings.transport_max_file_size,
            chunk_size=settings.copy_chunk_size,
        )

    async def collect(self, form: FormData) -> BufferedUpload:
        """Buffer the file parts of ``form`` and build the raw payload.

        Temporary files already buffered are removed if a later part fails.
        """
        upload = BufferedUpload()
        try:
            await self._collect(form, upload)
        except Exception:
            await upload.cleanup()
            raise

        logger.debug(
            "Multipart upload buffered",
            fields=sorted(upload.payload),
            tmp_files=len(upload.tmp_paths),
        )
        return upload

    async def _collect(self, form: FormData, upload: BufferedUpload) -> None:
        parts: list[dict[str, Any]] = []
        repeated = 0
        indexed: dict[str, dict[str, Any]] = {}
        duplicate_index = False

        for key, value in form.multi_items():
            if key in (self.field_name, f"{self.field_name}[]"):
                parts.append(await self._entry(value, upload))
                repeated += 1
            elif self._bracket_key.match(key):
                entry = await self._entry(value, upload)
                parts.append(entry)
                duplicate_index = duplicate_index or key in indexed
                indexed[key] = entry

        if not parts:
            return
        if (repeated and indexed) or duplicate_index:
            # Mixed field styles: every part in submission order.
            upload.payload[self.field_name] = parts
        elif indexed:
            upload.payload.update(indexed)
        elif repeated == 1:
            upload.payload[self.field_name] = parts[0]
        else:
            upload.payload[self.field_name] = parts

    async def _entry(self, value: UploadFile | str, upload: BufferedUpload) -> dict[str, Any]:
        if not isinstance(value, UploadFile):
            return self._empty_entry(str(value), UploadErrorCode.NO_FILE)

        entry = await asyncio.to_thread(self._buffer, value)
        if entry["tmp_name"]:
            upload.tmp_paths.append(entry["tmp_name"])
        return entry

    @staticmethod
    def _empty_entry(name: str, error: UploadErrorCode, mime_type: str = "") -> dict[str, Any]:
        return {
            "name": name,
            "type": mime_type,
            "tmp_name": "",
            "error": int(error),
            "size": 0,
        }

    def _buffer(self, part: UploadFile) -> dict[str, Any]:
        name = part.filename or ""
        mime_type = part.content_type or ""

        if not name:
            return self._empty_entry(name, UploadErrorCode.NO_FILE, mime_type)
        if not self.tmp_dir.is_dir():
            return self._empty_entry(name, UploadErrorCode.NO_TMP_DIR, mime_type)

        size = 0
        tmp_name = ""
        try:
            with tempfile.NamedTemporaryFile(dir=self.tmp_dir, prefix=TMP_PREFIX, delete=False) as out:
                tmp_name = out.name
                part.file.seek(0)
                while True:
                    chunk = part.file.read(self.chunk_size)
                    if not chunk:
                        break
                    size += len(chunk)
                    if self.max_size is not None and size > self.max_size:
                        break
                    out.write(chunk)
        except OSError as e:
            logger.warning("Buffering upload part failed", filename=name, error=str(e))
            self._discard(tmp_name)
            return self._empty_entry(name, UploadErrorCode.CANT_WRITE, mime_type)
        except Exception:
            self._discard(tmp_name)
            raise

        if self.max_size is not None and size > self.max_size:
            self._discard(tmp_name)
            entry = self._empty_entry(name, UploadErrorCode.INI_SIZE, mime_type)
            entry["size"] = part.size if part.size is not None else size
            return entry

        return {
            "name": name,
            "type": mime_type,
            "tmp_name": tmp_name,
            "error": int(UploadErrorCode.OK),
            "size": size,
        }

    @staticmethod
    def _discard(tmp_name: str) -> None:
        if tmp_name:
            Path(tmp_name).unlink(missing_ok=True)
