import asyncio
import logging
import uuid
from collections import Counter
from collections.abc import Callable, Sequence
from typing import TypeVar

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from posevault.exceptions import ShareNotFound, UpstreamError
from posevault.models.db import as_utc
from posevault.models.share import ShareAccessLog, ShareComment, ShareFavorite, ShareUpload, ShareViewer
from posevault.repositories import GalleryRepository, ShareActivityRepository, ShareRepository
from posevault.schemas.activity import ActivitySummary, FavoritedImage, RecentComment, ViewerActivity
from posevault.services.viewer_activity import VIEW_GALLERY_ACTION

logger = logging.getLogger(__name__)

T = TypeVar("T")

MOST_FAVORITED_LIMIT = 5
RECENT_COMMENTS_LIMIT = 10
UNKNOWN_VIEWER_NAME = "Unknown"


def top_favorited(favorites: Sequence[ShareFavorite], limit: int = MOST_FAVORITED_LIMIT) -> list[tuple[int, int]]:
    """(image_id, count) pairs, highest count first; ties keep first-seen order."""
    counts = Counter(f.image_id for f in favorites)
    return sorted(counts.items(), key=lambda item: item[1], reverse=True)[:limit]


def build_summary(
    viewers: Sequence[ShareViewer],
    favorites: Sequence[ShareFavorite],
    uploads: Sequence[ShareUpload],
    comments: Sequence[ShareComment],
    access_log: Sequence[ShareAccessLog],
    storage_keys: dict[int, str],
) -> ActivitySummary:
    viewer_names = {v.id: v.display_name for v in viewers}
    favorites_by_viewer = Counter(f.viewer_id for f in favorites)
    uploads_by_viewer = Counter(u.viewer_id for u in uploads)
    approved = sum(1 for u in uploads if u.approved)

    return ActivitySummary(
        total_views=sum(1 for entry in access_log if entry.action == VIEW_GALLERY_ACTION),
        unique_viewers=len(viewers),
        most_favorited=[FavoritedImage(image_id=image_id, count=count, r2_key=storage_keys.get(image_id)) for image_id, count in top_favorited(favorites)],
        pending_uploads=len(uploads) - approved,
        approved_uploads=approved,
        total_favorites=len(favorites),
        total_comments=len(comments),
        recent_comments=[
            RecentComment(
                id=c.id,
                image_id=c.image_id,
                viewer_name=viewer_names.get(c.viewer_id, UNKNOWN_VIEWER_NAME),
                text=c.comment_text,
                created_at=as_utc(c.created_at),
            )
            for c in comments
        ],
        viewers=[
            ViewerActivity(
                id=v.id,
                display_name=v.display_name,
                joined_at=as_utc(v.created_at),
                favorite_count=favorites_by_viewer[v.id],
                upload_count=uploads_by_viewer[v.id],
            )
            for v in viewers
        ],
    )


class ActivityAggregator:
    """Read-only activity report for one share.

    The five activity fetches run concurrently, each in a worker thread with
    its own session; there is no snapshot consistency between them.
    """

    def __init__(self, session_maker: sessionmaker[Session]):
        self.session_maker = session_maker

    def _read(self, query: Callable[[Session], T]) -> T:
        with self.session_maker() as db:
            return query(db)

    async def _run(self, query: Callable[[Session], T]) -> T:
        try:
            return await asyncio.to_thread(self._read, query)
        except SQLAlchemyError as e:
            logger.error("Activity query failed: %s", e)
            raise UpstreamError("Failed to load share activity", detail=str(e)) from e

    async def summarize(self, shared_gallery_id: uuid.UUID) -> ActivitySummary:
        share = await self._run(lambda db: ShareRepository(db).get_by_id(shared_gallery_id))
        if share is None:
            raise ShareNotFound("Share not found")

        viewers, favorites, uploads, comments, access_log = await asyncio.gather(
            self._run(lambda db: ShareActivityRepository(db).list_viewers(shared_gallery_id)),
            self._run(lambda db: ShareActivityRepository(db).list_favorites(shared_gallery_id)),
            self._run(lambda db: ShareActivityRepository(db).list_uploads(shared_gallery_id)),
            self._run(lambda db: ShareActivityRepository(db).list_recent_comments(shared_gallery_id, limit=RECENT_COMMENTS_LIMIT)),
            self._run(lambda db: ShareActivityRepository(db).list_access_log(shared_gallery_id)),
        )

        favorited_ids = [image_id for image_id, _ in top_favorited(favorites)]
        storage_keys = await self._run(lambda db: GalleryRepository(db).get_storage_keys(favorited_ids)) if favorited_ids else {}

        logger.debug("Summarized activity for share %s: %d viewers, %d log entries", shared_gallery_id, len(viewers), len(access_log))
        return build_summary(viewers, favorites, uploads, comments, access_log, storage_keys)
