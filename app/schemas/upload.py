"""Upload schemas."""

from enum import Enum

from pydantic import BaseModel


class UploadType(str, Enum):
    DOCUMENT = "document"
    IMAGE = "image"
    LICENSE = "license"


ALLOWED_CONTENT_TYPES: dict[UploadType, frozenset[str]] = {
    UploadType.DOCUMENT: frozenset({"application/pdf", "image/jpeg", "image/png", "image/jpg"}),
    UploadType.LICENSE: frozenset({"application/pdf", "image/jpeg", "image/png", "image/jpg"}),
    UploadType.IMAGE: frozenset({"image/jpeg", "image/png", "image/jpg", "image/webp"}),
}


class UploadResponse(BaseModel):
    url: str
    public_id: str
    format: str | None = None
    size: int
    width: int | None = None
    height: int | None = None
