import logging
import uuid

from posevault.exceptions import AccessDenied, InputError
from posevault.models.notification import NotificationType
from posevault.models.share import SharedGallery, ShareAccessLog, ShareComment, ShareViewer
from posevault.repositories import ShareActivityRepository, ShareRepository
from posevault.services.notifications import NotificationDispatcher, notify_best_effort
from posevault.services.share_access import open_share

logger = logging.getLogger(__name__)

VIEW_GALLERY_ACTION = "view_gallery"


class ShareViewerService:
    """Token-scoped actions of an anonymous viewer: joining, favorites, comments and access logging."""

    def __init__(self, shares: ShareRepository, activity: ShareActivityRepository, dispatcher: NotificationDispatcher | None = None):
        self.shares = shares
        self.activity = activity
        self.dispatcher = dispatcher

    def _viewer_of(self, share: SharedGallery, viewer_id: uuid.UUID) -> ShareViewer:
        viewer = self.activity.get_viewer(viewer_id, share.id)
        if viewer is None:
            raise AccessDenied("Viewer is not registered for this share")
        return viewer

    def register_viewer(self, token: str, display_name: str, password: str | None = None) -> ShareViewer:
        share = open_share(self.shares, token, password)
        display_name = display_name.strip()
        if not display_name:
            raise InputError("Display name must not be blank")
        viewer = self.activity.create_viewer(share.id, display_name)
        logger.info("Viewer %s joined share %s", viewer.id, share.id)
        return viewer

    def toggle_favorite(self, token: str, viewer_id: uuid.UUID, image_id: int, password: str | None = None) -> bool:
        share = open_share(self.shares, token, password)
        if not share.allow_favorites:
            raise AccessDenied("Favorites are disabled for this share", code="favorites_disabled")
        viewer = self._viewer_of(share, viewer_id)

        is_favorite = self.activity.toggle_favorite(share.id, viewer.id, image_id)
        if is_favorite:
            notify_best_effort(self.dispatcher, share.id, NotificationType.FAVORITE, viewer_name=viewer.display_name, image_id=image_id)
        return is_favorite

    def add_comment(self, token: str, viewer_id: uuid.UUID, image_id: int, text: str, password: str | None = None) -> ShareComment:
        share = open_share(self.shares, token, password)
        if not share.allow_comments:
            raise AccessDenied("Comments are disabled for this share", code="comments_disabled")
        viewer = self._viewer_of(share, viewer_id)

        comment = self.activity.add_comment(share.id, viewer.id, image_id, text.strip())
        notify_best_effort(self.dispatcher, share.id, NotificationType.COMMENT, viewer_name=viewer.display_name, image_id=image_id)
        return comment

    def log_access(
        self, token: str, action: str, viewer_id: uuid.UUID | None = None, image_id: int | None = None, password: str | None = None
    ) -> ShareAccessLog:
        share = open_share(self.shares, token, password)
        viewer = self._viewer_of(share, viewer_id) if viewer_id is not None else None

        entry = self.activity.log_access(share.id, action, viewer_id=viewer.id if viewer else None, image_id=image_id)
        if action == VIEW_GALLERY_ACTION:
            notify_best_effort(self.dispatcher, share.id, NotificationType.VIEW, viewer_name=viewer.display_name if viewer else None)
        return entry
