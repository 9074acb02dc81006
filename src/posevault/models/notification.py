import enum
import uuid

from sqlalchemy import Boolean, ForeignKey, Integer, String, Text, UniqueConstraint, Uuid
from sqlalchemy.orm import mapped_column

from posevault.models.db import Base, TZDateTime, utcnow


class NotificationType(enum.StrEnum):
    VIEW = "view"
    FAVORITE = "favorite"
    UPLOAD_PENDING = "upload_pending"
    COMMENT = "comment"
    SHARE_EXPIRED = "share_expired"


class NotificationPreference(Base):
    """Per-share (or global, when shared_gallery_id is NULL) notification settings."""

    __tablename__ = "notification_preferences"
    __table_args__ = (UniqueConstraint("user_id", "shared_gallery_id", name="uq_notification_preferences_user_share"),)

    id = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = mapped_column(Uuid, nullable=False, index=True)
    shared_gallery_id = mapped_column(Uuid, ForeignKey("shared_galleries.id", ondelete="CASCADE"), nullable=True)
    quiet_mode = mapped_column(Boolean, nullable=False, default=False)
    notify_on_view = mapped_column(Boolean, nullable=False, default=False)
    notify_on_favorite = mapped_column(Boolean, nullable=False, default=True)
    notify_on_upload = mapped_column(Boolean, nullable=False, default=True)
    notify_on_comment = mapped_column(Boolean, nullable=False, default=True)
    notify_on_expiry = mapped_column(Boolean, nullable=False, default=True)
    updated_at = mapped_column(TZDateTime, default=utcnow, onupdate=utcnow, nullable=False)


class Notification(Base):
    __tablename__ = "notifications"

    id = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = mapped_column(Uuid, nullable=False, index=True)
    shared_gallery_id = mapped_column(Uuid, ForeignKey("shared_galleries.id", ondelete="CASCADE"), nullable=True)
    type = mapped_column(String(32), nullable=False)
    message = mapped_column(Text, nullable=False)
    viewer_id = mapped_column(Uuid, ForeignKey("share_viewers.id", ondelete="SET NULL"), nullable=True)
    image_id = mapped_column(Integer, nullable=True)
    is_read = mapped_column(Boolean, nullable=False, default=False)
    created_at = mapped_column(TZDateTime, default=utcnow, nullable=False)
