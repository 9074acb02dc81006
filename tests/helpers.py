import secrets
import uuid
from datetime import UTC, datetime, timedelta
from typing import Any

import jwt
from sqlalchemy.orm import Session

from posevault.models.gallery import Gallery, Image, Tag
from posevault.models.share import SharedGallery, ShareViewer

TEST_JWT_SECRET = "test-jwt-secret-key-with-enough-length"
TEST_SERVICE_KEY = "test-service-role-key"


def make_owner_token(
    owner_id: uuid.UUID,
    secret: str | None = None,
    expires_in: timedelta = timedelta(hours=1),
    audience: str = "authenticated",
) -> str:
    """Sign an owner session token the way the identity provider does."""
    now = datetime.now(UTC)
    payload = {"sub": str(owner_id), "aud": audience, "iat": now, "exp": now + expires_in}
    return jwt.encode(payload, secret or TEST_JWT_SECRET, algorithm="HS256")


def owner_headers(owner_id: uuid.UUID) -> dict[str, str]:
    return {"Authorization": f"Bearer {make_owner_token(owner_id)}"}


def service_headers() -> dict[str, str]:
    return {"Authorization": f"Bearer {TEST_SERVICE_KEY}"}


def make_gallery(db: Session, owner_id: uuid.UUID, name: str = "Poses", notes: str = "") -> Gallery:
    gallery = Gallery(owner_id=owner_id, name=name, notes=notes)
    db.add(gallery)
    db.commit()
    db.refresh(gallery)
    return gallery


def make_image(
    db: Session,
    gallery: Gallery,
    name: str = "pose",
    storage_key: str | None = None,
    cover_image: bool = False,
    created_at: datetime | None = None,
    tags: tuple[str, ...] = (),
    deleted: bool = False,
) -> Image:
    image = Image(
        owner_id=gallery.owner_id,
        category_uid=gallery.uid,
        name=name,
        storage_key=storage_key or f"users/{gallery.owner_id}/{uuid.uuid4()}-{name}.jpg",
        cover_image=cover_image,
        created_at=created_at or datetime.now(UTC),
        deleted_at=datetime.now(UTC) if deleted else None,
        tags=[Tag(owner_id=gallery.owner_id, name=tag) for tag in tags],
    )
    db.add(image)
    db.commit()
    db.refresh(image)
    return image


def make_share(db: Session, gallery: Gallery, **overrides: Any) -> SharedGallery:
    share = SharedGallery(owner_id=gallery.owner_id, gallery_id=gallery.uid, share_token=secrets.token_urlsafe(32), **overrides)
    db.add(share)
    db.commit()
    db.refresh(share)
    return share


def make_viewer(db: Session, share: SharedGallery, display_name: str, created_at: datetime | None = None) -> ShareViewer:
    viewer = ShareViewer(shared_gallery_id=share.id, display_name=display_name)
    if created_at is not None:
        viewer.created_at = created_at
    db.add(viewer)
    db.commit()
    db.refresh(viewer)
    return viewer
