from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict

from posevault.schemas.base import CamelModel


class CreateNotificationRequest(CamelModel):
    shared_gallery_id: UUID
    type: str
    viewer_name: str | None = None
    image_id: int | None = None


class CleanupResponse(BaseModel):
    ok: bool = True
    deactivated: int
    notified: int


class NotificationResponse(BaseModel):
    id: UUID
    shared_gallery_id: UUID | None = None
    type: str
    message: str
    viewer_id: UUID | None = None
    image_id: int | None = None
    is_read: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class NotificationListResponse(BaseModel):
    notifications: list[NotificationResponse]
    total: int
    limit: int
    offset: int


class UnreadCountResponse(BaseModel):
    unread: int


class PreferenceUpdateRequest(BaseModel):
    shared_gallery_id: UUID | None = None
    quiet_mode: bool | None = None
    notify_on_view: bool | None = None
    notify_on_favorite: bool | None = None
    notify_on_upload: bool | None = None
    notify_on_comment: bool | None = None
    notify_on_expiry: bool | None = None


class PreferenceResponse(BaseModel):
    id: UUID
    shared_gallery_id: UUID | None = None
    quiet_mode: bool
    notify_on_view: bool
    notify_on_favorite: bool
    notify_on_upload: bool
    notify_on_comment: bool
    notify_on_expiry: bool

    model_config = ConfigDict(from_attributes=True)
