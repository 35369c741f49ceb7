"""Tests for the upload endpoint."""

from unittest.mock import AsyncMock, MagicMock

import pytest
from httpx import AsyncClient

from app.core.exceptions import StorageException
from app.core.storage import StoredFile


@pytest.fixture
def stored_file(mock_storage: MagicMock) -> StoredFile:
    stored = StoredFile(
        url="https://res.cloudinary.com/demo/image/upload/v1/healthcare-admin/document/abc.pdf",
        public_id="healthcare-admin/document/abc",
        format="pdf",
        size=11,
    )
    mock_storage.upload = AsyncMock(return_value=stored)
    return stored


@pytest.mark.asyncio
async def test_upload_document(
    client: AsyncClient,
    admin_headers: dict,
    mock_storage: MagicMock,
    stored_file: StoredFile,
) -> None:
    """Test that a PDF lands in the default folder under its type."""
    response = await client.post(
        "/api/v1/upload",
        headers=admin_headers,
        files={"file": ("license.pdf", b"%PDF-1.4 ok", "application/pdf")},
    )
    assert response.status_code == 200
    data = response.json()
    assert data["url"] == stored_file.url
    assert data["public_id"] == stored_file.public_id
    assert data["format"] == "pdf"
    assert data["size"] == 11
    assert data["width"] is None

    mock_storage.upload.assert_awaited_once_with(
        b"%PDF-1.4 ok", "license.pdf", "application/pdf", "healthcare-admin/document"
    )


@pytest.mark.asyncio
async def test_upload_image_to_folder(
    client: AsyncClient,
    manager_headers: dict,
    mock_storage: MagicMock,
    stored_file: StoredFile,
) -> None:
    response = await client.post(
        "/api/v1/upload",
        headers=manager_headers,
        files={"file": ("front.webp", b"RIFF....WEBP", "image/webp")},
        data={"folder": "pharmacies", "type": "image"},
    )
    assert response.status_code == 200
    assert mock_storage.upload.await_args.args[3] == "pharmacies/image"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "upload_type,filename,content_type",
    [
        ("document", "front.webp", "image/webp"),
        ("image", "license.pdf", "application/pdf"),
        ("license", "notes.txt", "text/plain"),
    ],
)
async def test_upload_invalid_type(
    client: AsyncClient,
    admin_headers: dict,
    mock_storage: MagicMock,
    stored_file: StoredFile,
    upload_type: str,
    filename: str,
    content_type: str,
) -> None:
    response = await client.post(
        "/api/v1/upload",
        headers=admin_headers,
        files={"file": (filename, b"data", content_type)},
        data={"type": upload_type},
    )
    assert response.status_code == 400
    assert response.json()["message"] == "Invalid file type"
    mock_storage.upload.assert_not_awaited()


@pytest.mark.asyncio
async def test_upload_too_large(
    client: AsyncClient,
    admin_headers: dict,
    mock_storage: MagicMock,
    stored_file: StoredFile,
) -> None:
    payload = b"0" * (10 * 1024 * 1024 + 1)

    response = await client.post(
        "/api/v1/upload",
        headers=admin_headers,
        files={"file": ("scan.png", payload, "image/png")},
    )
    assert response.status_code == 400
    assert response.json()["message"] == "File too large. Maximum size is 10MB"
    mock_storage.upload.assert_not_awaited()


@pytest.mark.asyncio
async def test_upload_requires_session(client: AsyncClient) -> None:
    response = await client.post(
        "/api/v1/upload",
        files={"file": ("license.pdf", b"%PDF", "application/pdf")},
    )
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_upload_storage_failure(
    client: AsyncClient,
    admin_headers: dict,
    mock_storage: MagicMock,
) -> None:
    mock_storage.upload = AsyncMock(side_effect=StorageException())

    response = await client.post(
        "/api/v1/upload",
        headers=admin_headers,
        files={"file": ("license.pdf", b"%PDF", "application/pdf")},
    )
    assert response.status_code == 500
    data = response.json()
    assert data["error"] == "StorageException"
    assert data["message"] == "Failed to upload file"
