"""Routing of viewer activity to owner notifications.

Preferences resolve in a fixed order: the owner's row for this share, then
the owner's global row (``shared_gallery_id IS NULL``), then the built-in
defaults. Skipping because of preferences is a successful dispatch.
"""

import logging
import uuid
from dataclasses import dataclass

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from posevault.exceptions import InputError, PoseVaultError, ShareNotFound, UpstreamError
from posevault.logger import logger as audit_logger
from posevault.models.notification import Notification, NotificationPreference, NotificationType
from posevault.repositories import GalleryRepository, NotificationRepository, ShareActivityRepository, ShareRepository

logger = logging.getLogger(__name__)

DEFAULT_VIEWER_NAME = "Someone"
UNKNOWN_GALLERY_NAME = "a gallery"

SKIP_QUIET_MODE = "quiet_mode"
SKIP_PREFERENCE_DISABLED = "preference_disabled"

MESSAGE_TEMPLATES: dict[NotificationType, str] = {
    NotificationType.VIEW: '{viewer} viewed "{gallery}"',
    NotificationType.FAVORITE: '{viewer} favorited an image in "{gallery}"',
    NotificationType.UPLOAD_PENDING: '{viewer} uploaded an image to "{gallery}" (pending approval)',
    NotificationType.COMMENT: '{viewer} commented on an image in "{gallery}"',
    NotificationType.SHARE_EXPIRED: 'Your share link for "{gallery}" has expired',
}


@dataclass(frozen=True)
class EffectivePreferences:
    quiet_mode: bool = False
    notify_on_view: bool = False
    notify_on_favorite: bool = True
    notify_on_upload: bool = True
    notify_on_comment: bool = True
    notify_on_expiry: bool = True

    @classmethod
    def from_row(cls, row: NotificationPreference) -> "EffectivePreferences":
        return cls(
            quiet_mode=row.quiet_mode,
            notify_on_view=row.notify_on_view,
            notify_on_favorite=row.notify_on_favorite,
            notify_on_upload=row.notify_on_upload,
            notify_on_comment=row.notify_on_comment,
            notify_on_expiry=row.notify_on_expiry,
        )

    def allows(self, notification_type: NotificationType) -> bool:
        flags = {
            NotificationType.VIEW: self.notify_on_view,
            NotificationType.FAVORITE: self.notify_on_favorite,
            NotificationType.UPLOAD_PENDING: self.notify_on_upload,
            NotificationType.COMMENT: self.notify_on_comment,
            NotificationType.SHARE_EXPIRED: self.notify_on_expiry,
        }
        return flags[notification_type]


@dataclass
class DispatchResult:
    skipped: bool = False
    reason: str | None = None
    notification: Notification | None = None

    def to_response(self) -> dict:
        if self.skipped:
            return {"ok": True, "skipped": True, "reason": self.reason}
        return {"ok": True}


def parse_notification_type(value: str | NotificationType) -> NotificationType:
    try:
        return NotificationType(value)
    except ValueError:
        raise InputError(f"Unknown notification type: {value}", code="invalid_notification_type") from None


def resolve_preferences(repo: NotificationRepository, user_id: uuid.UUID, shared_gallery_id: uuid.UUID | None) -> EffectivePreferences:
    row = repo.get_preference(user_id, shared_gallery_id) if shared_gallery_id is not None else None
    if row is None:
        row = repo.get_preference(user_id, None)
    if row is None:
        return EffectivePreferences()
    return EffectivePreferences.from_row(row)


def render_message(notification_type: NotificationType, viewer_name: str | None, gallery_name: str | None) -> str:
    return MESSAGE_TEMPLATES[notification_type].format(
        viewer=viewer_name or DEFAULT_VIEWER_NAME,
        gallery=gallery_name or UNKNOWN_GALLERY_NAME,
    )


class NotificationDispatcher:
    def __init__(
        self,
        shares: ShareRepository,
        galleries: GalleryRepository,
        activity: ShareActivityRepository,
        notifications: NotificationRepository,
    ):
        self.shares = shares
        self.galleries = galleries
        self.activity = activity
        self.notifications = notifications

    @classmethod
    def from_session(cls, db: Session) -> "NotificationDispatcher":
        return cls(ShareRepository(db), GalleryRepository(db), ShareActivityRepository(db), NotificationRepository(db))

    def dispatch(
        self,
        shared_gallery_id: uuid.UUID,
        notification_type: str | NotificationType,
        viewer_name: str | None = None,
        image_id: int | None = None,
    ) -> DispatchResult:
        notification_type = parse_notification_type(notification_type)

        share = self.shares.get_by_id(shared_gallery_id)
        if share is None:
            raise ShareNotFound("Share not found")

        prefs = resolve_preferences(self.notifications, share.owner_id, share.id)
        if prefs.quiet_mode:
            return self._skip(share.id, notification_type, SKIP_QUIET_MODE)
        if not prefs.allows(notification_type):
            return self._skip(share.id, notification_type, SKIP_PREFERENCE_DISABLED)

        gallery_name = self.galleries.get_gallery_name(share.gallery_id)
        message = render_message(notification_type, viewer_name, gallery_name)

        viewer_id = None
        if viewer_name:
            viewer = self.activity.find_latest_by_name(share.id, viewer_name)
            viewer_id = viewer.id if viewer is not None else None

        try:
            notification = self.notifications.create_notification(
                user_id=share.owner_id,
                shared_gallery_id=share.id,
                type=notification_type.value,
                message=message,
                viewer_id=viewer_id,
                image_id=image_id,
            )
        except SQLAlchemyError as e:
            self.notifications.db.rollback()
            logger.error("Failed to create %s notification for share %s: %s", notification_type, share.id, e)
            raise UpstreamError("Failed to create notification", detail=str(e)) from e

        audit_logger.share_event("notification_created", share, type=notification_type.value, notification_id=str(notification.id))
        return DispatchResult(notification=notification)

    def _skip(self, share_id: uuid.UUID, notification_type: NotificationType, reason: str) -> DispatchResult:
        audit_logger.log_event("notification_skipped", share_id=str(share_id), extra={"type": notification_type.value, "reason": reason})
        return DispatchResult(skipped=True, reason=reason)


def notify_best_effort(
    dispatcher: NotificationDispatcher | None,
    shared_gallery_id: uuid.UUID,
    notification_type: NotificationType,
    viewer_name: str | None = None,
    image_id: int | None = None,
) -> DispatchResult | None:
    """Dispatch on behalf of a viewer action; a failure must not fail that action."""
    if dispatcher is None:
        return None
    try:
        return dispatcher.dispatch(shared_gallery_id, notification_type, viewer_name=viewer_name, image_id=image_id)
    except (PoseVaultError, SQLAlchemyError) as e:
        dispatcher.notifications.db.rollback()
        logger.warning("%s notification for share %s not sent: %s", notification_type, shared_gallery_id, e)
        return None
