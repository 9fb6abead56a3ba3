"""Integration tests for the file API."""

from io import BytesIO
from pathlib import Path

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import select

from filedepot.infrastructure.persistence.models import FileModel


def _txt(name: str, content: bytes = b"hello") -> tuple:
    return ("file", (name, BytesIO(content), "text/plain"))


async def _upload(client: AsyncClient, *names: str) -> list[int]:
    response = await client.post("/files", files=[_txt(name) for name in names])
    assert response.status_code == 201, response.text
    return [r["id"] for r in response.json()["results"] if "id" in r]


async def _stored_path(app, file_id: int) -> Path:
    async with app.state.db.session() as session:
        result = await session.execute(select(FileModel.file_path).where(FileModel.id == file_id))
        return Path(result.scalar_one())


@pytest.mark.asyncio
async def test_upload_single_file(client: AsyncClient, settings):
    response = await client.post(
        "/files", files={"file": ("photo.png", BytesIO(b"\x89PNG\r\n"), "image/png")}
    )

    assert response.status_code == 201
    data = response.json()
    assert data["message"] == "File upload processing complete"
    assert data["successful"] == 1
    assert data["failed"] == 0
    assert data["results"] == [
        {"id": data["results"][0]["id"], "name": "photo.png", "category": "image", "status": "success"}
    ]
    stored = list((Path(settings.upload_base_path) / "images").iterdir())
    assert len(stored) == 1
    assert stored[0].suffix == ".png"


@pytest.mark.asyncio
async def test_upload_batch_with_one_empty_file(client: AsyncClient):
    files = [
        _txt("1.txt", b"one"),
        _txt("2.txt", b"two"),
        _txt("3.txt", b""),
        _txt("4.txt", b"four"),
        _txt("5.txt", b"five"),
    ]

    response = await client.post("/files", files=files)

    assert response.status_code == 201
    data = response.json()
    assert data["successful"] == 4
    assert data["failed"] == 1
    assert [r["name"] for r in data["results"]] == ["1.txt", "2.txt", "3.txt", "4.txt", "5.txt"]
    assert data["results"][2] == {"name": "3.txt", "error": "File is empty"}


@pytest.mark.asyncio
async def test_upload_bracket_indexed_fields(client: AsyncClient):
    response = await client.post(
        "/files",
        files=[
            ("file[1]", ("b.txt", BytesIO(b"b"), "text/plain")),
            ("file[0]", ("a.txt", BytesIO(b"a"), "text/plain")),
        ],
    )

    assert response.status_code == 201
    assert [r["name"] for r in response.json()["results"]] == ["a.txt", "b.txt"]


@pytest.mark.asyncio
async def test_upload_mixed_field_styles_reports_every_file(client: AsyncClient, settings):
    response = await client.post(
        "/files",
        files=[
            _txt("a.txt"),
            _txt("b.txt"),
            ("file[0]", ("c.txt", BytesIO(b"c"), "text/plain")),
        ],
    )

    assert response.status_code == 201
    data = response.json()
    assert data["successful"] == 3
    assert sorted(r["name"] for r in data["results"]) == ["a.txt", "b.txt", "c.txt"]
    assert len(list((Path(settings.upload_base_path) / "documents").iterdir())) == 3


@pytest.mark.asyncio
async def test_upload_all_rejected_returns_400(client: AsyncClient, settings):
    response = await client.post(
        "/files",
        files={"file": ("setup.exe", BytesIO(b"MZ\x90\x00"), "application/x-msdownload")},
    )

    assert response.status_code == 400
    data = response.json()
    assert data["successful"] == 0
    assert data["failed"] == 1
    assert data["results"][0]["error"].startswith(
        "File type application/x-msdownload is not allowed. Allowed types: "
    )
    assert list(Path(settings.upload_tmp_path).iterdir()) == []


@pytest.mark.asyncio
async def test_upload_without_files(client: AsyncClient):
    response = await client.post("/files", data={"note": "no files here"})

    assert response.status_code == 400
    assert response.json() == {"error": "No files uploaded"}


@pytest.mark.asyncio
async def test_upload_leaves_no_temp_files(client: AsyncClient, settings):
    await _upload(client, "a.txt", "b.txt")

    assert list(Path(settings.upload_tmp_path).iterdir()) == []


@pytest.mark.asyncio
async def test_get_after_upload_is_stable(client: AsyncClient):
    [file_id] = await _upload(client, "notes.txt")

    first = await client.get(f"/files/{file_id}")
    second = await client.get(f"/files/{file_id}")

    assert first.status_code == 200
    assert first.json() == second.json()
    data = first.json()
    assert data["id"] == file_id
    assert data["original_name"] == "notes.txt"
    assert data["mime_type"] == "text/plain"
    assert data["file_size"] == 5
    assert data["category"] == "document"
    assert data["stored_name"].endswith(".txt")
    assert "file_path" not in data


@pytest.mark.asyncio
async def test_get_missing_file(client: AsyncClient):
    response = await client.get("/files/999")

    assert response.status_code == 404
    assert response.json() == {"error": "File not found"}


@pytest.mark.asyncio
async def test_list_files(client: AsyncClient):
    ids = await _upload(client, "a.txt", "b.txt", "c.txt")

    response = await client.get("/files")

    assert response.status_code == 200
    files = response.json()["files"]
    assert sorted(f["id"] for f in files) == sorted(ids)
    assert all("file_path" not in f for f in files)


@pytest.mark.asyncio
async def test_list_files_empty(client: AsyncClient):
    response = await client.get("/files")

    assert response.status_code == 200
    assert response.json() == {"files": []}


@pytest.mark.asyncio
async def test_rename_file(client: AsyncClient):
    [file_id] = await _upload(client, "draft.txt")

    response = await client.put(f"/files/{file_id}", json={"original_name": "  final.txt "})

    assert response.status_code == 200
    assert response.json()["original_name"] == "final.txt"
    assert (await client.get(f"/files/{file_id}")).json()["original_name"] == "final.txt"


@pytest.mark.asyncio
@pytest.mark.parametrize("body", [{"original_name": "   "}, {"original_name": ""}, {}])
async def test_rename_blank_name_leaves_record_unchanged(client: AsyncClient, body):
    [file_id] = await _upload(client, "draft.txt")
    before = (await client.get(f"/files/{file_id}")).json()

    response = await client.put(f"/files/{file_id}", json=body)

    assert response.status_code == 400
    assert response.json() == {"error": "Invalid file name"}
    assert (await client.get(f"/files/{file_id}")).json() == before


@pytest.mark.asyncio
async def test_rename_missing_file(client: AsyncClient):
    response = await client.put("/files/999", json={"original_name": "x.txt"})

    assert response.status_code == 404
    assert response.json() == {"error": "File not found"}


@pytest.mark.asyncio
async def test_malformed_json_is_bad_request(client: AsyncClient):
    [file_id] = await _upload(client, "draft.txt")

    response = await client.put(
        f"/files/{file_id}",
        content=b"{not json",
        headers={"Content-Type": "application/json"},
    )

    assert response.status_code == 400
    assert response.json()["error"] == "Invalid request"


@pytest.mark.asyncio
async def test_delete_file(client: AsyncClient, app):
    [file_id] = await _upload(client, "gone.txt")
    path = await _stored_path(app, file_id)

    response = await client.delete(f"/files/{file_id}")

    assert response.status_code == 200
    assert response.json() == {"message": "File deleted successfully"}
    assert not path.exists()
    assert (await client.get(f"/files/{file_id}")).status_code == 404


@pytest.mark.asyncio
async def test_delete_with_missing_disk_file(client: AsyncClient, app):
    [file_id] = await _upload(client, "gone.txt")
    (await _stored_path(app, file_id)).unlink()

    response = await client.delete(f"/files/{file_id}")

    assert response.status_code == 200
    assert (await client.get(f"/files/{file_id}")).status_code == 404


@pytest.mark.asyncio
async def test_delete_missing_file(client: AsyncClient):
    response = await client.delete("/files/999")

    assert response.status_code == 404
    assert response.json() == {"error": "File not found"}


@pytest.mark.asyncio
async def test_bulk_delete(client: AsyncClient, app):
    ids = await _upload(client, "a.txt", "b.txt", "c.txt")
    paths = [await _stored_path(app, file_id) for file_id in ids]
    requested = [ids[0], 999, ids[2]]

    response = await client.post("/files/bulk-delete", json={"fileIds": requested})

    assert response.status_code == 200
    assert response.json() == {
        "message": "Bulk delete operation completed",
        "deleted_count": 2,
        "total": 3,
        "requested_ids": requested,
        "deleted_ids": [ids[0], ids[2]],
        "errors": [],
    }
    assert not paths[0].exists()
    assert paths[1].exists()
    assert not paths[2].exists()
    remaining = (await client.get("/files")).json()["files"]
    assert [f["id"] for f in remaining] == [ids[1]]


@pytest.mark.asyncio
async def test_bulk_delete_accepts_snake_case_key(client: AsyncClient):
    ids = await _upload(client, "a.txt")

    response = await client.post("/files/bulk-delete", json={"file_ids": ids})

    assert response.status_code == 200
    assert response.json()["deleted_count"] == 1


@pytest.mark.asyncio
@pytest.mark.parametrize("body", [{"fileIds": []}, {}])
async def test_bulk_delete_without_ids(client: AsyncClient, body):
    response = await client.post("/files/bulk-delete", json=body)

    assert response.status_code == 400
    assert response.json() == {"error": "No file IDs provided for deletion"}


@pytest.mark.asyncio
async def test_bulk_delete_is_not_captured_by_id_route(client: AsyncClient):
    response = await client.delete("/files/bulk-delete")

    assert response.status_code == 400


@pytest.mark.asyncio
@pytest.mark.parametrize("path", ["/files", "/files/1", "/files/bulk-delete", "/anything"])
async def test_preflight(client: AsyncClient, path):
    response = await client.options(path)

    assert response.status_code == 200
    assert response.headers["Access-Control-Allow-Origin"] == "*"
    assert response.headers["Access-Control-Allow-Methods"] == "GET, POST, PUT, DELETE, OPTIONS"
    assert response.headers["Access-Control-Allow-Headers"] == (
        "Content-Type, X-Requested-With, Authorization"
    )


@pytest.mark.asyncio
async def test_cors_headers_on_every_response(client: AsyncClient):
    responses = [
        await client.get("/files"),
        await client.get("/files/999"),
        await client.post("/files", data={}),
        await client.get("/no-such-route"),
    ]

    for response in responses:
        assert response.headers["Access-Control-Allow-Origin"] == "*"


@pytest.mark.asyncio
async def test_unknown_route_error_shape(client: AsyncClient):
    response = await client.get("/no-such-route")

    assert response.status_code == 404
    assert response.json() == {"error": "Not Found"}


@pytest.mark.asyncio
async def test_unhandled_error_returns_500_with_cors(app, monkeypatch):
    async def explode(self):
        raise RuntimeError("database went away")

    monkeypatch.setattr(
        "filedepot.domain.services.file_management_service.FileManagementService.list_files",
        explode,
    )

    async with AsyncClient(
        transport=ASGITransport(app=app, raise_app_exceptions=False),
        base_url="http://test",
    ) as client:
        response = await client.get("/files")

    assert response.status_code == 500
    assert response.json() == {"error": "Internal Server Error", "message": "database went away"}
    assert response.headers["Access-Control-Allow-Origin"] == "*"


@pytest.mark.asyncio
async def test_health_and_ready(client: AsyncClient):
    health = await client.get("/health")
    ready = await client.get("/ready")

    assert health.status_code == 200
    assert health.json()["status"] == "healthy"
    assert ready.status_code == 200
    assert ready.json()["database"] == "connected"


@pytest.mark.asyncio
async def test_correlation_id_is_echoed(client: AsyncClient):
    response = await client.get("/health", headers={"X-Correlation-ID": "cid_test"})

    assert response.headers["X-Correlation-ID"] == "cid_test"
