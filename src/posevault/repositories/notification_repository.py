import uuid
from typing import Any

from sqlalchemy import delete, func, select, update

from posevault.models.notification import Notification, NotificationPreference
from posevault.repositories.base_repository import BaseRepository

PREFERENCE_FIELDS = frozenset(
    {
        "quiet_mode",
        "notify_on_view",
        "notify_on_favorite",
        "notify_on_upload",
        "notify_on_comment",
        "notify_on_expiry",
    }
)


class NotificationRepository(BaseRepository):
    # Preferences

    def get_preference(self, user_id: uuid.UUID, shared_gallery_id: uuid.UUID | None) -> NotificationPreference | None:
        stmt = select(NotificationPreference).where(NotificationPreference.user_id == user_id)
        if shared_gallery_id is None:
            stmt = stmt.where(NotificationPreference.shared_gallery_id.is_(None))
        else:
            stmt = stmt.where(NotificationPreference.shared_gallery_id == shared_gallery_id)
        return self.db.execute(stmt).scalars().first()

    def list_preferences(self, user_id: uuid.UUID) -> list[NotificationPreference]:
        stmt = select(NotificationPreference).where(NotificationPreference.user_id == user_id)
        return list(self.db.execute(stmt).scalars().all())

    def upsert_preference(self, user_id: uuid.UUID, shared_gallery_id: uuid.UUID | None, updates: dict[str, Any]) -> NotificationPreference:
        # Select-then-write: a unique constraint cannot catch duplicate global rows,
        # since NULL share ids compare as distinct.
        unknown = set(updates) - PREFERENCE_FIELDS
        if unknown:
            raise ValueError(f"Unknown preference fields: {', '.join(sorted(unknown))}")

        pref = self.get_preference(user_id, shared_gallery_id)
        if pref is None:
            pref = NotificationPreference(user_id=user_id, shared_gallery_id=shared_gallery_id)
            self.db.add(pref)
        for field, value in updates.items():
            setattr(pref, field, value)
        self.db.commit()
        self.db.refresh(pref)
        return pref

    # Notifications

    def create_notification(
        self,
        user_id: uuid.UUID,
        shared_gallery_id: uuid.UUID | None,
        type: str,
        message: str,
        viewer_id: uuid.UUID | None = None,
        image_id: int | None = None,
    ) -> Notification:
        notification = Notification(
            user_id=user_id,
            shared_gallery_id=shared_gallery_id,
            type=type,
            message=message,
            viewer_id=viewer_id,
            image_id=image_id,
        )
        self.db.add(notification)
        self.db.commit()
        self.db.refresh(notification)
        return notification

    def list_notifications(self, user_id: uuid.UUID, limit: int = 50, offset: int = 0, unread_only: bool = False) -> tuple[list[Notification], int]:
        filters = [Notification.user_id == user_id]
        if unread_only:
            filters.append(Notification.is_read.is_(False))

        total = self.db.execute(select(func.count()).select_from(Notification).where(*filters)).scalar_one()
        stmt = select(Notification).where(*filters).order_by(Notification.created_at.desc()).offset(offset).limit(limit)
        return list(self.db.execute(stmt).scalars().all()), total

    def unread_count(self, user_id: uuid.UUID) -> int:
        stmt = select(func.count()).select_from(Notification).where(Notification.user_id == user_id, Notification.is_read.is_(False))
        return self.db.execute(stmt).scalar_one()

    def mark_read(self, notification_id: uuid.UUID, user_id: uuid.UUID) -> bool:
        stmt = update(Notification).where(Notification.id == notification_id, Notification.user_id == user_id).values(is_read=True)
        result = self.db.execute(stmt)
        self.db.commit()
        return result.rowcount > 0

    def mark_all_read(self, user_id: uuid.UUID) -> int:
        stmt = update(Notification).where(Notification.user_id == user_id, Notification.is_read.is_(False)).values(is_read=True)
        result = self.db.execute(stmt)
        self.db.commit()
        return result.rowcount

    def delete_notification(self, notification_id: uuid.UUID, user_id: uuid.UUID) -> bool:
        stmt = delete(Notification).where(Notification.id == notification_id, Notification.user_id == user_id)
        result = self.db.execute(stmt)
        self.db.commit()
        return result.rowcount > 0

    def clear_read(self, user_id: uuid.UUID) -> int:
        stmt = delete(Notification).where(Notification.user_id == user_id, Notification.is_read.is_(True))
        result = self.db.execute(stmt)
        self.db.commit()
        return result.rowcount
