"""Unit tests for the local storage writer."""

import os
import re
import stat
from pathlib import Path
from unittest import mock

import pytest

from filedepot.domain.entities.file_descriptor import Category, FileDescriptor
from filedepot.domain.exceptions import FileStorageError
from filedepot.infrastructure.storage.local_storage_writer import LocalStorageWriter

STORED_NAME = re.compile(r"^[0-9a-f]{32}(\.\w+)?$")


def _descriptor(tmp_path: str, name: str = "photo.JPG", size: int = 5) -> FileDescriptor:
    return FileDescriptor(name=name, mime_type="image/jpeg", tmp_path=tmp_path, size=size)


@pytest.fixture
def writer(settings) -> LocalStorageWriter:
    return LocalStorageWriter(settings=settings)


class TestStoredName:
    """Tests for stored-name generation."""

    def test_name_is_token_plus_extension(self):
        name = LocalStorageWriter.generate_stored_name(".JPG")

        assert STORED_NAME.match(name)
        assert name.endswith(".JPG")

    def test_name_without_extension_is_bare_token(self):
        assert re.fullmatch(r"[0-9a-f]{32}", LocalStorageWriter.generate_stored_name(""))

    def test_names_are_unique(self):
        names = {LocalStorageWriter.generate_stored_name(".txt") for _ in range(1000)}

        assert len(names) == 1000


class TestStore:
    """Tests for LocalStorageWriter.store."""

    @pytest.mark.asyncio
    async def test_store_moves_file_into_category_directory(self, writer, settings, make_tmp_file):
        tmp_file = make_tmp_file(b"\xff\xd8\xff\xe0J")

        location = await writer.store(_descriptor(tmp_file), Category.IMAGE)

        assert location.file_path.parent == (Path(settings.upload_base_path) / "images").resolve()
        assert location.file_path.read_bytes() == b"\xff\xd8\xff\xe0J"
        assert location.stored_name == location.file_path.name
        assert location.stored_name.endswith(".JPG")
        assert STORED_NAME.match(location.stored_name)
        assert not Path(tmp_file).exists()

    @pytest.mark.asyncio
    async def test_extension_uses_last_suffix(self, writer, make_tmp_file):
        location = await writer.store(
            _descriptor(make_tmp_file(), name="archive.tar.gz"), Category.DOCUMENT
        )

        assert location.stored_name.endswith(".gz")
        assert location.file_path.parent.name == "documents"

    @pytest.mark.asyncio
    async def test_no_extension(self, writer, make_tmp_file):
        location = await writer.store(_descriptor(make_tmp_file(), name="README"), Category.DOCUMENT)

        assert re.fullmatch(r"[0-9a-f]{32}", location.stored_name)

    @pytest.mark.asyncio
    @pytest.mark.skipif(os.name != "posix", reason="POSIX permission bits")
    async def test_stored_file_permissions(self, writer, make_tmp_file):
        old_umask = os.umask(0o022)
        try:
            location = await writer.store(_descriptor(make_tmp_file()), Category.IMAGE)
        finally:
            os.umask(old_umask)

        assert stat.S_IMODE(location.file_path.stat().st_mode) == 0o666

    @pytest.mark.asyncio
    async def test_missing_temp_file(self, writer, settings):
        missing = str(Path(settings.upload_tmp_path) / "gone")

        with pytest.raises(FileStorageError, match="^Temporary file not found: "):
            await writer.store(_descriptor(missing), Category.IMAGE)

    @pytest.mark.asyncio
    async def test_name_collision_is_retried(self, writer, settings, make_tmp_file):
        images = Path(settings.upload_base_path) / "images"
        images.mkdir(parents=True)
        taken = "a" * 32 + ".JPG"
        (images / taken).write_bytes(b"existing")
        fresh = "b" * 32 + ".JPG"

        with mock.patch.object(
            LocalStorageWriter, "generate_stored_name", side_effect=[taken, fresh]
        ):
            location = await writer.store(_descriptor(make_tmp_file(b"new")), Category.IMAGE)

        assert location.stored_name == fresh
        assert (images / taken).read_bytes() == b"existing"
        assert (images / fresh).read_bytes() == b"new"

    @pytest.mark.asyncio
    async def test_collisions_exhaust_attempts(self, settings, make_tmp_file):
        settings.stored_name_attempts = 2
        writer = LocalStorageWriter(settings=settings)
        images = Path(settings.upload_base_path) / "images"
        images.mkdir(parents=True)
        taken = "c" * 32 + ".JPG"
        (images / taken).write_bytes(b"existing")

        with mock.patch.object(LocalStorageWriter, "generate_stored_name", return_value=taken):
            with pytest.raises(FileStorageError, match="after 2 attempts"):
                await writer.store(_descriptor(make_tmp_file()), Category.IMAGE)

        assert (images / taken).read_bytes() == b"existing"

    @pytest.mark.asyncio
    async def test_copy_failure_removes_partial_file(self, writer, settings, make_tmp_file):
        with mock.patch(
            "filedepot.infrastructure.storage.local_storage_writer.shutil.copyfileobj",
            side_effect=OSError(28, "No space left on device"),
        ):
            with pytest.raises(FileStorageError, match="^Failed to move file. Error: No space left on device"):
                await writer.store(_descriptor(make_tmp_file()), Category.IMAGE)

        assert list((Path(settings.upload_base_path) / "images").iterdir()) == []

    @pytest.mark.asyncio
    async def test_unwritable_directory(self, writer, make_tmp_file):
        with mock.patch(
            "filedepot.infrastructure.storage.local_storage_writer.os.access",
            side_effect=lambda path, mode: mode != os.W_OK,
        ):
            with pytest.raises(FileStorageError, match="^Upload directory not writable: "):
                await writer.store(_descriptor(make_tmp_file()), Category.IMAGE)


class TestDirectoriesAndDelete:
    """Tests for directory setup and deletion."""

    def test_ensure_directories_creates_all_categories(self, writer, settings):
        writer.ensure_directories()

        base = Path(settings.upload_base_path)
        assert sorted(p.name for p in base.iterdir()) == ["documents", "images", "videos"]

    @pytest.mark.asyncio
    async def test_delete_existing_file(self, writer, tmp_path):
        path = tmp_path / "stored.txt"
        path.write_text("x")

        assert await writer.delete(path) is True
        assert not path.exists()

    @pytest.mark.asyncio
    async def test_delete_missing_file_is_not_an_error(self, writer, tmp_path):
        assert await writer.delete(tmp_path / "absent.txt") is False

    @pytest.mark.asyncio
    async def test_delete_failure_raises(self, writer, tmp_path):
        directory = tmp_path / "a-directory"
        directory.mkdir()

        with pytest.raises(FileStorageError, match="Failed to delete file from disk"):
            await writer.delete(directory)
