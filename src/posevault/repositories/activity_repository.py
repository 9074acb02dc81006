import uuid

from sqlalchemy import func, select

from posevault.models.share import ShareAccessLog, ShareComment, ShareFavorite, ShareUpload, ShareViewer
from posevault.repositories.base_repository import BaseRepository


class ShareActivityRepository(BaseRepository):
    """Viewer identities and the append-only event tables of a share."""

    # Viewers

    def create_viewer(self, shared_gallery_id: uuid.UUID, display_name: str) -> ShareViewer:
        viewer = ShareViewer(shared_gallery_id=shared_gallery_id, display_name=display_name)
        self.db.add(viewer)
        self.db.commit()
        self.db.refresh(viewer)
        return viewer

    def get_viewer(self, viewer_id: uuid.UUID, shared_gallery_id: uuid.UUID) -> ShareViewer | None:
        stmt = select(ShareViewer).where(ShareViewer.id == viewer_id, ShareViewer.shared_gallery_id == shared_gallery_id)
        return self.db.execute(stmt).scalar_one_or_none()

    def find_latest_by_name(self, shared_gallery_id: uuid.UUID, display_name: str) -> ShareViewer | None:
        """Resolve a display name to a viewer of this share.

        Display names are self-declared and not unique: when several viewers
        share a name, the most recently created one wins.
        """
        stmt = (
            select(ShareViewer)
            .where(ShareViewer.shared_gallery_id == shared_gallery_id, ShareViewer.display_name == display_name)
            .order_by(ShareViewer.created_at.desc())
            .limit(1)
        )
        return self.db.execute(stmt).scalars().first()

    def list_viewers(self, shared_gallery_id: uuid.UUID) -> list[ShareViewer]:
        stmt = select(ShareViewer).where(ShareViewer.shared_gallery_id == shared_gallery_id).order_by(ShareViewer.created_at.asc())
        return list(self.db.execute(stmt).scalars().all())

    # Uploads

    def count_uploads(self, shared_gallery_id: uuid.UUID, viewer_id: uuid.UUID) -> int:
        stmt = select(func.count()).select_from(ShareUpload).where(ShareUpload.shared_gallery_id == shared_gallery_id, ShareUpload.viewer_id == viewer_id)
        return self.db.execute(stmt).scalar_one()

    def create_upload(
        self,
        shared_gallery_id: uuid.UUID,
        viewer_id: uuid.UUID,
        storage_key: str,
        original_filename: str,
        file_size: int,
        approved: bool,
    ) -> ShareUpload:
        upload = ShareUpload(
            shared_gallery_id=shared_gallery_id,
            viewer_id=viewer_id,
            storage_key=storage_key,
            original_filename=original_filename,
            file_size=file_size,
            approved=approved,
        )
        self.db.add(upload)
        self.db.commit()
        self.db.refresh(upload)
        return upload

    def list_uploads(self, shared_gallery_id: uuid.UUID) -> list[ShareUpload]:
        stmt = select(ShareUpload).where(ShareUpload.shared_gallery_id == shared_gallery_id).order_by(ShareUpload.uploaded_at.asc())
        return list(self.db.execute(stmt).scalars().all())

    # Favorites

    def toggle_favorite(self, shared_gallery_id: uuid.UUID, viewer_id: uuid.UUID, image_id: int) -> bool:
        """Add or remove a favorite; returns the new state."""
        stmt = select(ShareFavorite).where(
            ShareFavorite.shared_gallery_id == shared_gallery_id,
            ShareFavorite.viewer_id == viewer_id,
            ShareFavorite.image_id == image_id,
        )
        existing = self.db.execute(stmt).scalars().first()
        if existing is not None:
            self.db.delete(existing)
            self.db.commit()
            return False

        self.db.add(ShareFavorite(shared_gallery_id=shared_gallery_id, viewer_id=viewer_id, image_id=image_id))
        self.db.commit()
        return True

    def list_favorites(self, shared_gallery_id: uuid.UUID) -> list[ShareFavorite]:
        stmt = select(ShareFavorite).where(ShareFavorite.shared_gallery_id == shared_gallery_id).order_by(ShareFavorite.created_at.asc())
        return list(self.db.execute(stmt).scalars().all())

    # Comments

    def add_comment(self, shared_gallery_id: uuid.UUID, viewer_id: uuid.UUID, image_id: int, text: str) -> ShareComment:
        comment = ShareComment(shared_gallery_id=shared_gallery_id, viewer_id=viewer_id, image_id=image_id, comment_text=text)
        self.db.add(comment)
        self.db.commit()
        self.db.refresh(comment)
        return comment

    def list_recent_comments(self, shared_gallery_id: uuid.UUID, limit: int = 10) -> list[ShareComment]:
        stmt = select(ShareComment).where(ShareComment.shared_gallery_id == shared_gallery_id).order_by(ShareComment.created_at.desc()).limit(limit)
        return list(self.db.execute(stmt).scalars().all())

    # Access log

    def log_access(self, shared_gallery_id: uuid.UUID, action: str, viewer_id: uuid.UUID | None = None, image_id: int | None = None) -> ShareAccessLog:
        entry = ShareAccessLog(shared_gallery_id=shared_gallery_id, viewer_id=viewer_id, action=action, image_id=image_id)
        self.db.add(entry)
        self.db.commit()
        self.db.refresh(entry)
        return entry

    def list_access_log(self, shared_gallery_id: uuid.UUID) -> list[ShareAccessLog]:
        stmt = select(ShareAccessLog).where(ShareAccessLog.shared_gallery_id == shared_gallery_id).order_by(ShareAccessLog.accessed_at.asc())
        return list(self.db.execute(stmt).scalars().all())
