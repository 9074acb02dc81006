import logging
import uuid
from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from sqlalchemy import select

from posevault.models.db import utcnow
from posevault.models.gallery import Gallery, Image
from posevault.repositories.base_repository import BaseRepository

logger = logging.getLogger(__name__)


@dataclass
class GalleryData:
    """Client-side view of a gallery used by ``GalleryRepository.put``."""

    name: str
    notes: str = ""
    cover_image_uid: int | None = None
    uid: int | None = None


class GalleryRepository(BaseRepository):
    """Per-owner gallery list.

    ``get`` and ``put`` are the whole-list interface the front end syncs
    against; soft-deleted galleries are invisible to every query here.
    """

    def get(self, owner_id: uuid.UUID) -> list[Gallery]:
        stmt = select(Gallery).where(Gallery.owner_id == owner_id, Gallery.deleted_at.is_(None)).order_by(Gallery.created_at.asc(), Gallery.uid.asc())
        return list(self.db.execute(stmt).scalars().all())

    def put(self, owner_id: uuid.UUID, galleries: Sequence[GalleryData]) -> list[Gallery]:
        """Replace the owner's gallery list.

        Entries with a known ``uid`` are updated, entries without one are
        created, and live galleries missing from ``galleries`` are soft-deleted.
        """
        existing = {g.uid: g for g in self.get(owner_id)}
        kept: set[int] = set()

        for data in galleries:
            gallery = existing.get(data.uid) if data.uid is not None else None
            if gallery is None:
                gallery = Gallery(owner_id=owner_id, name=data.name, notes=data.notes, cover_image_uid=data.cover_image_uid)
                self.db.add(gallery)
                continue
            gallery.name = data.name
            gallery.notes = data.notes
            gallery.cover_image_uid = data.cover_image_uid
            kept.add(gallery.uid)

        now = utcnow()
        removed = [g for uid, g in existing.items() if uid not in kept]
        for gallery in removed:
            gallery.deleted_at = now
        if removed:
            logger.info("Soft-deleted %d galleries for owner %s", len(removed), owner_id)

        self.db.commit()
        return self.get(owner_id)

    def get_active_gallery(self, gallery_uid: int) -> Gallery | None:
        stmt = select(Gallery).where(Gallery.uid == gallery_uid, Gallery.deleted_at.is_(None))
        return self.db.execute(stmt).scalar_one_or_none()

    def get_gallery_by_uid_and_owner(self, gallery_uid: int, owner_id: uuid.UUID) -> Gallery | None:
        stmt = select(Gallery).where(Gallery.uid == gallery_uid, Gallery.owner_id == owner_id, Gallery.deleted_at.is_(None))
        return self.db.execute(stmt).scalar_one_or_none()

    def get_gallery_name(self, gallery_uid: int) -> str | None:
        stmt = select(Gallery.name).where(Gallery.uid == gallery_uid, Gallery.deleted_at.is_(None))
        return self.db.execute(stmt).scalar_one_or_none()

    def get_shareable_images(self, gallery_uid: int) -> list[Image]:
        """Images shown to share viewers: live, non-cover, oldest first."""
        stmt = (
            select(Image)
            .where(Image.category_uid == gallery_uid, Image.cover_image.is_(False), Image.deleted_at.is_(None))
            .order_by(Image.created_at.asc(), Image.uid.asc())
        )
        return list(self.db.execute(stmt).scalars().all())

    def get_storage_keys(self, image_uids: Iterable[int]) -> dict[int, str]:
        uids = list(image_uids)
        if not uids:
            return {}
        stmt = select(Image.uid, Image.storage_key).where(Image.uid.in_(uids))
        return {uid: key for uid, key in self.db.execute(stmt).all()}
