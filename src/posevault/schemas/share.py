from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from posevault.models.share import DEFAULT_MAX_UPLOAD_SIZE_MB, MAX_UPLOAD_SIZE_MB, SharedGallery
from posevault.schemas.base import CamelModel

# Viewer-facing payloads (camelCase on the wire)


class ShareAccessRequest(CamelModel):
    token: str | None = None
    password: str | None = None


class SharePasswordRequest(CamelModel):
    token: str
    password: str


class SharedImage(CamelModel):
    id: int
    name: str = ""
    notes: str = ""
    r2_key: str
    tags: list[str] = Field(default_factory=list)


class SharedGalleryInfo(CamelModel):
    name: str
    notes: str = ""


class SharedGalleryData(CamelModel):
    gallery: SharedGalleryInfo
    images: list[SharedImage]


class ShareAccessResponse(CamelModel):
    ok: bool = True
    data: SharedGalleryData


class ShareUploadRecord(CamelModel):
    id: UUID
    shared_gallery_id: UUID
    viewer_id: UUID
    storage_key: str
    original_filename: str
    file_size: int
    approved: bool
    uploaded_at: datetime


class ShareUploadResponse(CamelModel):
    ok: bool = True
    data: ShareUploadRecord
    approved: bool
    message: str


class ViewerCreateRequest(CamelModel):
    token: str
    password: str | None = None
    display_name: str = Field(..., min_length=1, max_length=100)

    @field_validator("display_name", mode="before")
    @classmethod
    def strip_display_name(cls, value):
        return value.strip() if isinstance(value, str) else value


class ViewerResponse(CamelModel):
    id: UUID
    shared_gallery_id: UUID
    display_name: str
    created_at: datetime


class FavoriteToggleRequest(CamelModel):
    token: str
    password: str | None = None
    viewer_id: UUID
    image_id: int


class FavoriteToggleResponse(CamelModel):
    ok: bool = True
    is_favorite: bool


class CommentCreateRequest(CamelModel):
    token: str
    password: str | None = None
    viewer_id: UUID
    image_id: int
    text: str = Field(..., min_length=1, max_length=2000)

    @field_validator("text", mode="before")
    @classmethod
    def strip_text(cls, value):
        return value.strip() if isinstance(value, str) else value


class CommentResponse(CamelModel):
    id: UUID
    image_id: int
    viewer_id: UUID
    text: str = Field(validation_alias="comment_text")
    created_at: datetime


class AccessLogRequest(CamelModel):
    token: str
    password: str | None = None
    action: str = Field(..., min_length=1, max_length=50)
    viewer_id: UUID | None = None
    image_id: int | None = None


# Owner share management


class ShareCreateRequest(BaseModel):
    expires_at: datetime | None = None
    password: str | None = Field(None, min_length=1, description="Optional viewer password")
    allow_favorites: bool = True
    allow_comments: bool = True
    allow_uploads: bool = False
    require_upload_approval: bool = True
    max_uploads_per_viewer: int | None = Field(None, ge=1)
    max_upload_size_mb: int = Field(DEFAULT_MAX_UPLOAD_SIZE_MB, ge=1, le=MAX_UPLOAD_SIZE_MB)


class ShareUpdateRequest(BaseModel):
    """Partial update; only fields present in the request body are applied.

    Sending ``"password": null`` removes the password.
    """

    expires_at: datetime | None = None
    password: str | None = Field(None, min_length=1)
    allow_favorites: bool | None = None
    allow_comments: bool | None = None
    allow_uploads: bool | None = None
    require_upload_approval: bool | None = None
    max_uploads_per_viewer: int | None = Field(None, ge=1)
    max_upload_size_mb: int | None = Field(None, ge=1, le=MAX_UPLOAD_SIZE_MB)
    is_active: bool | None = None


class ShareResponse(BaseModel):
    id: UUID
    gallery_id: int
    share_token: str
    is_active: bool
    expires_at: datetime | None = None
    has_password: bool = False
    allow_favorites: bool
    allow_comments: bool
    allow_uploads: bool
    require_upload_approval: bool
    max_uploads_per_viewer: int | None = None
    max_upload_size_mb: int
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)

    @classmethod
    def from_share(cls, share: SharedGallery) -> "ShareResponse":
        response = cls.model_validate(share)
        response.has_password = share.password_hash is not None
        return response
