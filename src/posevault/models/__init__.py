from .db import Base
from .gallery import Gallery, Image, Tag, image_tags
from .notification import Notification, NotificationPreference, NotificationType
from .share import ShareAccessLog, ShareComment, SharedGallery, ShareFavorite, ShareUpload, ShareViewer

__all__ = [
    "Base",
    "Gallery",
    "Image",
    "Notification",
    "NotificationPreference",
    "NotificationType",
    "ShareAccessLog",
    "ShareComment",
    "ShareFavorite",
    "ShareUpload",
    "ShareViewer",
    "SharedGallery",
    "Tag",
    "image_tags",
]
