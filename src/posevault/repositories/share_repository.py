import uuid
from datetime import datetime
from typing import Any

from sqlalchemy import select, update

from posevault.models.db import utcnow
from posevault.models.share import SharedGallery
from posevault.repositories.base_repository import BaseRepository

# Fields an owner may change after the share is issued; share_token is not one of them
MUTABLE_SHARE_FIELDS = frozenset(
    {
        "expires_at",
        "password_hash",
        "allow_favorites",
        "allow_comments",
        "allow_uploads",
        "require_upload_approval",
        "max_uploads_per_viewer",
        "max_upload_size_mb",
        "is_active",
    }
)


class ShareRepository(BaseRepository):
    def get_by_token(self, token: str) -> SharedGallery | None:
        stmt = select(SharedGallery).where(SharedGallery.share_token == token)
        return self.db.execute(stmt).scalar_one_or_none()

    def get_by_id(self, share_id: uuid.UUID) -> SharedGallery | None:
        stmt = select(SharedGallery).where(SharedGallery.id == share_id)
        return self.db.execute(stmt).scalar_one_or_none()

    def get_by_id_and_owner(self, share_id: uuid.UUID, owner_id: uuid.UUID) -> SharedGallery | None:
        stmt = select(SharedGallery).where(SharedGallery.id == share_id, SharedGallery.owner_id == owner_id)
        return self.db.execute(stmt).scalar_one_or_none()

    def list_for_gallery(self, gallery_uid: int, owner_id: uuid.UUID) -> list[SharedGallery]:
        stmt = (
            select(SharedGallery)
            .where(SharedGallery.gallery_id == gallery_uid, SharedGallery.owner_id == owner_id)
            .order_by(SharedGallery.created_at.desc())
        )
        return list(self.db.execute(stmt).scalars().all())

    def create_share(self, owner_id: uuid.UUID, gallery_uid: int, share_token: str, **config: Any) -> SharedGallery:
        share = SharedGallery(owner_id=owner_id, gallery_id=gallery_uid, share_token=share_token, **config)
        self.db.add(share)
        self.db.commit()
        self.db.refresh(share)
        return share

    def update_share(self, share: SharedGallery, **changes: Any) -> SharedGallery:
        unknown = set(changes) - MUTABLE_SHARE_FIELDS
        if unknown:
            raise ValueError(f"Cannot update share fields: {', '.join(sorted(unknown))}")
        for field, value in changes.items():
            setattr(share, field, value)
        self.db.commit()
        self.db.refresh(share)
        return share

    def find_expired_active(self, now: datetime) -> list[SharedGallery]:
        stmt = (
            select(SharedGallery)
            .where(SharedGallery.is_active.is_(True), SharedGallery.expires_at.is_not(None), SharedGallery.expires_at < now)
            .order_by(SharedGallery.expires_at.asc())
        )
        return list(self.db.execute(stmt).scalars().all())

    def deactivate(self, share_id: uuid.UUID) -> bool:
        """Flip an active share to inactive. Returns False when it was already inactive."""
        stmt = (
            update(SharedGallery)
            .where(SharedGallery.id == share_id, SharedGallery.is_active.is_(True))
            .values(is_active=False, updated_at=utcnow())
        )
        result = self.db.execute(stmt)
        self.db.commit()
        return result.rowcount > 0
