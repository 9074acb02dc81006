from datetime import datetime
from uuid import UUID

from posevault.schemas.base import CamelModel


class ActivitySummaryRequest(CamelModel):
    shared_gallery_id: UUID


class FavoritedImage(CamelModel):
    image_id: int
    count: int
    r2_key: str | None = None


class RecentComment(CamelModel):
    id: UUID
    image_id: int
    viewer_name: str
    text: str
    created_at: datetime


class ViewerActivity(CamelModel):
    id: UUID
    display_name: str
    joined_at: datetime
    favorite_count: int
    upload_count: int


class ActivitySummary(CamelModel):
    total_views: int
    unique_viewers: int
    most_favorited: list[FavoritedImage]
    pending_uploads: int
    approved_uploads: int
    total_favorites: int
    total_comments: int
    recent_comments: list[RecentComment]
    viewers: list[ViewerActivity]


class ActivitySummaryResponse(CamelModel):
    ok: bool = True
    summary: ActivitySummary
