"""Cloudinary-backed file storage for verification documents and images."""

from dataclasses import dataclass

import httpx
import structlog

from app.config import settings
from app.core.exceptions import StorageException

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class StoredFile:
    """Result of a successful upload."""

    url: str
    public_id: str
    format: str | None
    size: int
    width: int | None = None
    height: int | None = None


class CloudinaryStorage:
    """Uploads files through Cloudinary's unsigned upload API."""

    TIMEOUT = 30.0

    def __init__(
        self,
        cloud_name: str | None = None,
        upload_preset: str | None = None,
        base_url: str | None = None,
    ):
        self.cloud_name = cloud_name or settings.cloudinary_cloud_name
        self.upload_preset = upload_preset or settings.cloudinary_upload_preset
        self.base_url = (base_url or settings.cloudinary_api_base_url).rstrip("/")

    @property
    def upload_url(self) -> str:
        return f"{self.base_url}/{self.cloud_name}/auto/upload"

    async def upload(
        self,
        data: bytes,
        filename: str,
        content_type: str,
        folder: str,
    ) -> StoredFile:
        """
        Upload a file and return its public location.

        Args:
            data: Raw file bytes
            filename: Original file name
            content_type: MIME type of the file
            folder: Destination folder on the storage account

        Returns:
            Stored file metadata

        Raises:
            StorageException: If storage is not configured or the upload fails
        """
        if not self.cloud_name or not self.upload_preset:
            raise StorageException("File storage is not configured")

        async with httpx.AsyncClient(timeout=self.TIMEOUT) as client:
            try:
                response = await client.post(
                    self.upload_url,
                    data={"upload_preset": self.upload_preset, "folder": folder},
                    files={"file": (filename, data, content_type)},
                )
            except httpx.HTTPError as e:
                logger.error("upload_request_failed", folder=folder, error=str(e))
                raise StorageException() from e

        if response.status_code != 200:
            logger.error(
                "upload_rejected",
                folder=folder,
                status_code=response.status_code,
                body=response.text[:500],
            )
            raise StorageException()

        payload = response.json()
        return StoredFile(
            url=payload["secure_url"],
            public_id=payload["public_id"],
            format=payload.get("format"),
            size=payload.get("bytes", len(data)),
            width=payload.get("width"),
            height=payload.get("height"),
        )


def get_file_storage() -> CloudinaryStorage:
    """Dependency returning the configured storage backend."""
    return CloudinaryStorage()
