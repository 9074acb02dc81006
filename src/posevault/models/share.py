import uuid

from sqlalchemy import Boolean, ForeignKey, Integer, String, Text, Uuid
from sqlalchemy.orm import mapped_column, relationship

from posevault.models.db import Base, TZDateTime, utcnow

DEFAULT_MAX_UPLOAD_SIZE_MB = 10
MAX_UPLOAD_SIZE_MB = 100


class SharedGallery(Base):
    __tablename__ = "shared_galleries"

    id = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    owner_id = mapped_column(Uuid, nullable=False, index=True)
    gallery_id = mapped_column(Integer, ForeignKey("galleries.uid", ondelete="CASCADE"), nullable=False, index=True)
    # Opaque and immutable once issued
    share_token = mapped_column(String(128), nullable=False, unique=True, index=True)
    is_active = mapped_column(Boolean, nullable=False, default=True)
    expires_at = mapped_column(TZDateTime, nullable=True)
    password_hash = mapped_column(String(255), nullable=True)
    allow_favorites = mapped_column(Boolean, nullable=False, default=True)
    allow_comments = mapped_column(Boolean, nullable=False, default=True)
    allow_uploads = mapped_column(Boolean, nullable=False, default=False)
    require_upload_approval = mapped_column(Boolean, nullable=False, default=True)
    max_uploads_per_viewer = mapped_column(Integer, nullable=True)
    max_upload_size_mb = mapped_column(Integer, nullable=False, default=DEFAULT_MAX_UPLOAD_SIZE_MB)
    created_at = mapped_column(TZDateTime, default=utcnow, nullable=False)
    updated_at = mapped_column(TZDateTime, default=utcnow, onupdate=utcnow, nullable=False)

    gallery = relationship("Gallery", back_populates="shares")

    @property
    def max_upload_bytes(self) -> int:
        return self.max_upload_size_mb * 1024 * 1024


class ShareViewer(Base):
    __tablename__ = "share_viewers"

    id = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    shared_gallery_id = mapped_column(Uuid, ForeignKey("shared_galleries.id", ondelete="CASCADE"), nullable=False, index=True)
    display_name = mapped_column(String(100), nullable=False)
    created_at = mapped_column(TZDateTime, default=utcnow, nullable=False)


class ShareUpload(Base):
    __tablename__ = "share_uploads"

    id = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    shared_gallery_id = mapped_column(Uuid, ForeignKey("shared_galleries.id", ondelete="CASCADE"), nullable=False, index=True)
    viewer_id = mapped_column(Uuid, ForeignKey("share_viewers.id", ondelete="CASCADE"), nullable=False, index=True)
    storage_key = mapped_column(String(1024), nullable=False)
    original_filename = mapped_column(String(255), nullable=False)
    file_size = mapped_column(Integer, nullable=False, default=0)
    # Decided once at creation from require_upload_approval
    approved = mapped_column(Boolean, nullable=False, default=False)
    uploaded_at = mapped_column(TZDateTime, default=utcnow, nullable=False)


class ShareFavorite(Base):
    __tablename__ = "share_favorites"

    id = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    shared_gallery_id = mapped_column(Uuid, ForeignKey("shared_galleries.id", ondelete="CASCADE"), nullable=False, index=True)
    viewer_id = mapped_column(Uuid, ForeignKey("share_viewers.id", ondelete="CASCADE"), nullable=False)
    image_id = mapped_column(Integer, nullable=False)
    created_at = mapped_column(TZDateTime, default=utcnow, nullable=False)


class ShareComment(Base):
    __tablename__ = "share_comments"

    id = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    shared_gallery_id = mapped_column(Uuid, ForeignKey("shared_galleries.id", ondelete="CASCADE"), nullable=False, index=True)
    viewer_id = mapped_column(Uuid, ForeignKey("share_viewers.id", ondelete="CASCADE"), nullable=False)
    image_id = mapped_column(Integer, nullable=False)
    comment_text = mapped_column(Text, nullable=False)
    created_at = mapped_column(TZDateTime, default=utcnow, nullable=False)


class ShareAccessLog(Base):
    __tablename__ = "share_access_log"

    id = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    shared_gallery_id = mapped_column(Uuid, ForeignKey("shared_galleries.id", ondelete="CASCADE"), nullable=False, index=True)
    viewer_id = mapped_column(Uuid, ForeignKey("share_viewers.id", ondelete="SET NULL"), nullable=True)
    action = mapped_column(String(50), nullable=False)
    image_id = mapped_column(Integer, nullable=True)
    accessed_at = mapped_column(TZDateTime, default=utcnow, nullable=False)
