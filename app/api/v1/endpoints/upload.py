"""File upload endpoint."""

import structlog
from fastapi import APIRouter, File, Form, UploadFile, status

from app.config import settings
from app.core.exceptions import BadRequestException
from app.dependencies import CurrentAdmin, FileStorage
from app.schemas.upload import ALLOWED_CONTENT_TYPES, UploadResponse, UploadType

router = APIRouter()

logger = structlog.get_logger(__name__)


@router.post(
    "/upload",
    response_model=UploadResponse,
    status_code=status.HTTP_200_OK,
    summary="Upload a document or image",
)
async def upload_file(
    current_admin: CurrentAdmin,
    storage: FileStorage,
    file: UploadFile = File(...),
    folder: str | None = Form(None),
    upload_type: UploadType = Form(UploadType.DOCUMENT, alias="type"),
) -> UploadResponse:
    """
    Store a verification document or image and return its public URL.

    Args:
        current_admin: Authenticated admin
        storage: File storage backend
        file: Uploaded file
        folder: Destination folder, defaults to the configured one
        upload_type: ``document``, ``image`` or ``license``

    Returns:
        Public URL and metadata of the stored file

    Raises:
        BadRequestException: If the file type is not allowed or the file is too large
        StorageException: If the storage backend rejects the upload
    """
    content_type = file.content_type or ""
    if content_type not in ALLOWED_CONTENT_TYPES[upload_type]:
        raise BadRequestException("Invalid file type")

    data = await file.read()
    if len(data) > settings.max_upload_size_bytes:
        raise BadRequestException(
            f"File too large. Maximum size is {settings.max_upload_size_mb}MB"
        )

    destination = f"{folder or settings.upload_default_folder}/{upload_type.value}"
    stored = await storage.upload(data, file.filename or "upload", content_type, destination)

    logger.info(
        "file_uploaded",
        user_id=str(current_admin["id"]),
        folder=destination,
        public_id=stored.public_id,
        size=stored.size,
    )
    return UploadResponse(
        url=stored.url,
        public_id=stored.public_id,
        format=stored.format,
        size=stored.size,
        width=stored.width,
        height=stored.height,
    )
