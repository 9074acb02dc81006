import logging
import secrets
from datetime import datetime

import bcrypt

from posevault.exceptions import AccessDenied, NotFound, ShareExpired, ShareInactive, ShareNotFound
from posevault.models.db import as_utc, utcnow
from posevault.models.share import SharedGallery
from posevault.repositories.gallery_repository import GalleryRepository
from posevault.repositories.share_repository import ShareRepository

logger = logging.getLogger(__name__)


def generate_share_token() -> str:
    """URL-safe, high-entropy token for a new share link."""
    return secrets.token_urlsafe(32)


def hash_share_password(password: str) -> str:
    """Hash a share password using bcrypt with a random salt."""
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def check_share_password(password: str, hashed: str) -> bool:
    return bcrypt.checkpw(password.encode("utf-8"), hashed.encode("utf-8"))


def is_expired(share: SharedGallery, now: datetime | None = None) -> bool:
    expires_at = as_utc(share.expires_at)
    return expires_at is not None and expires_at < (now or utcnow())


def validate_share_token(repo: ShareRepository, token: str | None, now: datetime | None = None) -> SharedGallery:
    """Resolve a token to a usable share.

    Raises ``ShareNotFound``, ``ShareInactive`` or ``ShareExpired``. An
    expired share is only reported here; deactivating it is the sweep's job.
    """
    if not token:
        raise ShareNotFound("Share not found")

    share = repo.get_by_token(token)
    if share is None:
        raise ShareNotFound("Share not found")
    if not share.is_active:
        raise ShareInactive("This share link is no longer active")
    if is_expired(share, now):
        raise ShareExpired("This share link has expired")
    return share


def require_share_password(share: SharedGallery, password: str | None) -> None:
    if share.password_hash is None:
        return
    if not password or not check_share_password(password, share.password_hash):
        raise AccessDenied("Password required or incorrect", code="password_incorrect")


def open_share(repo: ShareRepository, token: str | None, password: str | None, now: datetime | None = None) -> SharedGallery:
    """Token validation followed by the password check; every viewer-facing route goes through here."""
    share = validate_share_token(repo, token, now)
    require_share_password(share, password)
    return share


def build_shared_gallery_view(share: SharedGallery, galleries: GalleryRepository) -> dict:
    """Gallery metadata and visible images for a validated share."""
    gallery = galleries.get_active_gallery(share.gallery_id)
    if gallery is None:
        raise NotFound("Gallery not found", code="gallery_not_found")

    images = galleries.get_shareable_images(gallery.uid)
    return {
        "gallery": {"name": gallery.name, "notes": gallery.notes or ""},
        "images": [
            {
                "id": image.uid,
                "name": image.name or "",
                "notes": image.notes or "",
                "r2Key": image.storage_key,
                "tags": image.tag_names,
            }
            for image in images
        ],
    }
