import uuid

from fastapi import APIRouter, Depends, Query, status

from posevault.auth_utils import get_current_owner_id
from posevault.dependencies import get_notification_repository, get_share_repository
from posevault.exceptions import NotFound
from posevault.repositories import NotificationRepository, ShareRepository
from posevault.schemas.notification import (
    NotificationListResponse,
    NotificationResponse,
    PreferenceResponse,
    PreferenceUpdateRequest,
    UnreadCountResponse,
)

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.get("", response_model=NotificationListResponse)
def list_notifications(
    limit: int = Query(50, ge=1, le=100),
    offset: int = Query(0, ge=0),
    unread_only: bool = Query(False),
    owner_id: uuid.UUID = Depends(get_current_owner_id),
    repo: NotificationRepository = Depends(get_notification_repository),
):
    notifications, total = repo.list_notifications(owner_id, limit=limit, offset=offset, unread_only=unread_only)
    return NotificationListResponse(
        notifications=[NotificationResponse.model_validate(n) for n in notifications],
        total=total,
        limit=limit,
        offset=offset,
    )


@router.get("/unread-count", response_model=UnreadCountResponse)
def unread_count(owner_id: uuid.UUID = Depends(get_current_owner_id), repo: NotificationRepository = Depends(get_notification_repository)):
    return UnreadCountResponse(unread=repo.unread_count(owner_id))


@router.post("/read-all")
def mark_all_read(owner_id: uuid.UUID = Depends(get_current_owner_id), repo: NotificationRepository = Depends(get_notification_repository)):
    return {"ok": True, "updated": repo.mark_all_read(owner_id)}


@router.delete("/read")
def clear_read(owner_id: uuid.UUID = Depends(get_current_owner_id), repo: NotificationRepository = Depends(get_notification_repository)):
    return {"ok": True, "deleted": repo.clear_read(owner_id)}


@router.get("/preferences", response_model=list[PreferenceResponse])
def list_preferences(owner_id: uuid.UUID = Depends(get_current_owner_id), repo: NotificationRepository = Depends(get_notification_repository)):
    return repo.list_preferences(owner_id)


@router.put("/preferences", response_model=PreferenceResponse)
def update_preferences(
    req: PreferenceUpdateRequest,
    owner_id: uuid.UUID = Depends(get_current_owner_id),
    repo: NotificationRepository = Depends(get_notification_repository),
    shares: ShareRepository = Depends(get_share_repository),
):
    """Create or update the global row, or the row of one share when ``shared_gallery_id`` is given."""
    if req.shared_gallery_id is not None and shares.get_by_id_and_owner(req.shared_gallery_id, owner_id) is None:
        raise NotFound("Share not found", code="share_not_found")

    updates = req.model_dump(exclude={"shared_gallery_id"}, exclude_none=True)
    return repo.upsert_preference(owner_id, req.shared_gallery_id, updates)


@router.post("/{notification_id}/read")
def mark_read(notification_id: uuid.UUID, owner_id: uuid.UUID = Depends(get_current_owner_id), repo: NotificationRepository = Depends(get_notification_repository)):
    if not repo.mark_read(notification_id, owner_id):
        raise NotFound("Notification not found")
    return {"ok": True}


@router.delete("/{notification_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_notification(notification_id: uuid.UUID, owner_id: uuid.UUID = Depends(get_current_owner_id), repo: NotificationRepository = Depends(get_notification_repository)):
    if not repo.delete_notification(notification_id, owner_id):
        raise NotFound("Notification not found")
    return
