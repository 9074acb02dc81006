# Repositories package

from .activity_repository import ShareActivityRepository
from .base_repository import BaseRepository
from .gallery_repository import GalleryData, GalleryRepository
from .notification_repository import NotificationRepository
from .share_repository import ShareRepository

__all__ = [
    "BaseRepository",
    "GalleryData",
    "GalleryRepository",
    "NotificationRepository",
    "ShareActivityRepository",
    "ShareRepository",
]
