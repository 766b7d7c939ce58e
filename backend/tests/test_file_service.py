"""Tests for the storage dispatcher against the local sandbox backend."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from webdav4.client import ResourceNotFound

from cloudmgr.exceptions import InvalidPathError, PathConflictError, PathNotFoundError
from cloudmgr.schemas.drives import Drive, DriveType
from cloudmgr.services.file_service import FileService
from cloudmgr.services.local_backend import LocalBackend

LOCAL = Drive(id="local", name="Local Device", type=DriveType.LOCAL, path="/")
DAV = Drive(id="dav1", name="Nutstore", type=DriveType.WEBDAV, url="https://dav.example.com/dav/")


@pytest.fixture
def tree(local_root):
    (local_root / "docs").mkdir()
    (local_root / "docs" / "note.txt").write_text("hello")
    (local_root / "photo.jpg").write_bytes(b"\xff\xd8\xff")
    (local_root / "archive").mkdir()
    return local_root


class TestListFiles:
    @pytest.mark.asyncio
    async def test_root_listing_normalized(self, file_service: FileService, tree):
        entries = {e.name: e for e in await file_service.list_files(LOCAL, "/")}

        assert set(entries) == {"docs", "photo.jpg", "archive"}
        assert entries["docs"].is_directory is True
        assert entries["docs"].type == "folder"
        assert entries["docs"].path == "/docs"
        assert entries["photo.jpg"].type == "image/jpeg"
        assert entries["photo.jpg"].size == 3
        assert entries["photo.jpg"].mtime is not None

    @pytest.mark.asyncio
    async def test_nested_paths(self, file_service, tree):
        entries = await file_service.list_files(LOCAL, "/docs/")
        assert [(e.name, e.path, e.type) for e in entries] == [("note.txt", "/docs/note.txt", "text/plain")]

    @pytest.mark.asyncio
    async def test_missing_directory(self, file_service, tree):
        with pytest.raises(PathNotFoundError):
            await file_service.list_files(LOCAL, "/nope")

    @pytest.mark.asyncio
    async def test_traversal_rejected(self, file_service, tree):
        with pytest.raises(InvalidPathError):
            await file_service.list_files(LOCAL, "/../../etc")


class TestCreateDirectory:
    @pytest.mark.asyncio
    async def test_creates_folder(self, file_service, tree):
        path = await file_service.create_directory(LOCAL, "/docs/new")
        assert path == "/docs/new"
        assert (tree / "docs" / "new").is_dir()

    @pytest.mark.asyncio
    async def test_creates_missing_parents(self, file_service, tree):
        path = await file_service.create_directory(LOCAL, "/a/b/c")

        assert path == "/a/b/c"
        assert (tree / "a" / "b" / "c").is_dir()

    @pytest.mark.asyncio
    async def test_existing_name_conflicts(self, file_service, tree):
        with pytest.raises(PathConflictError):
            await file_service.create_directory(LOCAL, "/docs")

    @pytest.mark.asyncio
    async def test_root_is_invalid(self, file_service, tree):
        with pytest.raises(InvalidPathError):
            await file_service.create_directory(LOCAL, "/")


class TestRename:
    @pytest.mark.asyncio
    async def test_rename_in_same_folder(self, file_service, tree):
        new_path = await file_service.rename(LOCAL, "/docs/note.txt", "todo.txt")

        assert new_path == "/docs/todo.txt"
        assert (tree / "docs" / "todo.txt").read_text() == "hello"
        assert not (tree / "docs" / "note.txt").exists()

    @pytest.mark.asyncio
    async def test_rename_to_existing_name(self, file_service, tree):
        with pytest.raises(PathConflictError):
            await file_service.rename(LOCAL, "/photo.jpg", "archive")

    @pytest.mark.asyncio
    async def test_name_with_slash_rejected(self, file_service, tree):
        with pytest.raises(InvalidPathError):
            await file_service.rename(LOCAL, "/photo.jpg", "docs/photo.jpg")


class TestDelete:
    @pytest.mark.asyncio
    async def test_deletes_files_and_folders(self, file_service, tree):
        result = await file_service.delete(LOCAL, ["/docs", "/photo.jpg"])

        assert sorted(result.succeeded) == ["/docs", "/photo.jpg"]
        assert result.ok
        assert not (tree / "docs").exists()
        assert not (tree / "photo.jpg").exists()

    @pytest.mark.asyncio
    async def test_partial_failure_reported_per_item(self, file_service, tree):
        result = await file_service.delete(LOCAL, ["/photo.jpg", "/ghost.txt"])

        assert result.succeeded == ["/photo.jpg"]
        assert [f.path for f in result.failed] == ["/ghost.txt"]
        assert not result.ok


class TestMove:
    @pytest.mark.asyncio
    async def test_moves_into_destination(self, file_service, tree):
        result = await file_service.move(LOCAL, ["/photo.jpg", "/docs"], "/archive")

        assert result.ok
        assert (tree / "archive" / "photo.jpg").exists()
        assert (tree / "archive" / "docs" / "note.txt").exists()

    @pytest.mark.asyncio
    async def test_no_rollback_on_partial_failure(self, file_service, tree):
        (tree / "archive" / "photo.jpg").write_bytes(b"older")

        result = await file_service.move(LOCAL, ["/photo.jpg", "/docs"], "/archive")

        assert result.succeeded == ["/docs"]
        assert [f.path for f in result.failed] == ["/photo.jpg"]
        assert (tree / "archive" / "docs").is_dir()
        assert (tree / "photo.jpg").exists()

    @pytest.mark.asyncio
    async def test_folder_into_itself_fails(self, file_service, tree):
        result = await file_service.move(LOCAL, ["/docs"], "/docs")

        assert result.succeeded == []
        assert "into itself" in result.failed[0].error
        assert (tree / "docs" / "note.txt").exists()


class TestUploadAndRead:
    @pytest.mark.asyncio
    async def test_upload_then_read(self, file_service, tree):
        path = await file_service.upload_file(LOCAL, "/docs/new.md", b"# hi")

        assert path == "/docs/new.md"
        assert await file_service.read_file(LOCAL, "/docs/new.md") == b"# hi"

    @pytest.mark.asyncio
    async def test_upload_refuses_overwrite_by_default(self, file_service, tree):
        with pytest.raises(PathConflictError):
            await file_service.upload_file(LOCAL, "/docs/note.txt", b"replaced")
        assert (tree / "docs" / "note.txt").read_text() == "hello"

    @pytest.mark.asyncio
    async def test_upload_overwrite(self, file_service, tree):
        await file_service.upload_file(LOCAL, "/docs/note.txt", b"replaced", overwrite=True)
        assert (tree / "docs" / "note.txt").read_text() == "replaced"

    @pytest.mark.asyncio
    async def test_read_directory_is_invalid(self, file_service, tree):
        with pytest.raises(InvalidPathError):
            await file_service.read_file(LOCAL, "/docs")


    @pytest.mark.asyncio
    async def test_upload_many_reports_each_file(self, file_service, tree):
        result = await file_service.upload_files(
            LOCAL, "/docs", [("a.txt", b"aaa"), ("note.txt", b"clash"), ("b.txt", b"bbb")],
        )

        assert sorted(result.succeeded) == ["/docs/a.txt", "/docs/b.txt"]
        assert [f.path for f in result.failed] == ["/docs/note.txt"]
        assert (tree / "docs" / "b.txt").read_bytes() == b"bbb"
        assert (tree / "docs" / "note.txt").read_text() == "hello"

    @pytest.mark.asyncio
    async def test_upload_many_rejects_bad_name(self, file_service, tree):
        result = await file_service.upload_files(LOCAL, "/", [("..", b"x"), ("ok.txt", b"y")])

        assert result.succeeded == ["/ok.txt"]
        assert len(result.failed) == 1


class TestDispatch:
    def test_local_drive_uses_local_backend(self, file_service):
        assert isinstance(file_service.backend_for(LOCAL), LocalBackend)

    @pytest.mark.asyncio
    @patch("cloudmgr.services.file_service.WebDAVBackend")
    async def test_webdav_drive_delegates(self, mock_backend_cls, file_service):
        backend = MagicMock()
        backend.list_dir = AsyncMock(return_value=[])
        mock_backend_cls.return_value = backend

        assert await file_service.list_files(DAV, "/Documents/") == []

        mock_backend_cls.assert_called_once_with(DAV)
        backend.list_dir.assert_awaited_once_with("/Documents")
        backend.close.assert_called_once()

    @pytest.mark.asyncio
    @patch("cloudmgr.services.webdav_backend.Client")
    async def test_webdav_connection_closed_after_operation(self, mock_client_cls, file_service):
        dav_client = mock_client_cls.return_value
        dav_client.ls.return_value = []

        await file_service.list_files(DAV, "/")

        dav_client.http.close.assert_called_once()

    @pytest.mark.asyncio
    @patch("cloudmgr.services.webdav_backend.Client")
    async def test_webdav_connection_closed_on_error(self, mock_client_cls, file_service):
        dav_client = mock_client_cls.return_value
        dav_client.remove.side_effect = ResourceNotFound("gone.txt")

        result = await file_service.delete(DAV, ["/gone.txt"])

        assert [f.path for f in result.failed] == ["/gone.txt"]
        dav_client.http.close.assert_called_once()

    def test_file_url_points_at_raw_route(self, file_service):
        url = file_service.get_file_url(DAV, "/My Docs/a&b.txt")
        assert url == "/api/raw?path=%2FMy+Docs%2Fa%26b.txt&drive=dav1"
