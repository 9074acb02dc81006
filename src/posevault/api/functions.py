from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from posevault.auth_utils import require_service_credential
from posevault.dependencies import get_activity_aggregator, get_gallery_repository, get_notification_dispatcher, get_share_repository
from posevault.exceptions import MissingFields
from posevault.logger import logger
from posevault.models.db import get_db
from posevault.repositories import GalleryRepository, ShareRepository
from posevault.schemas.activity import ActivitySummaryRequest, ActivitySummaryResponse
from posevault.schemas.notification import CleanupResponse, CreateNotificationRequest
from posevault.schemas.share import ShareAccessRequest, ShareAccessResponse, SharedGalleryData, SharePasswordRequest
from posevault.services.activity import ActivityAggregator
from posevault.services.expiry import sweep_expired_shares
from posevault.services.notifications import NotificationDispatcher
from posevault.services.share_access import build_shared_gallery_view, open_share

router = APIRouter(prefix="/functions", tags=["functions"])


@router.post("/validate-share-access", response_model=ShareAccessResponse)
def validate_share_access(
    req: ShareAccessRequest,
    shares: ShareRepository = Depends(get_share_repository),
    galleries: GalleryRepository = Depends(get_gallery_repository),
):
    """Gallery metadata and images for a share token; nothing is returned unless the share is usable."""
    if not req.token:
        raise MissingFields("Missing token", code="missing_token")

    share = open_share(shares, req.token, req.password)
    data = build_shared_gallery_view(share, galleries)

    logger.share_event("share_view", share, images=len(data["images"]))
    return ShareAccessResponse(data=SharedGalleryData.model_validate(data))


@router.post("/verify-share-password")
def verify_share_password(req: SharePasswordRequest, shares: ShareRepository = Depends(get_share_repository)):
    open_share(shares, req.token, req.password)
    return {"ok": True}


@router.post("/create-notification", dependencies=[Depends(require_service_credential)])
def create_notification(req: CreateNotificationRequest, dispatcher: NotificationDispatcher = Depends(get_notification_dispatcher)):
    result = dispatcher.dispatch(req.shared_gallery_id, req.type, viewer_name=req.viewer_name, image_id=req.image_id)
    return result.to_response()


@router.post("/get-share-activity-summary", response_model=ActivitySummaryResponse, dependencies=[Depends(require_service_credential)])
async def get_share_activity_summary(req: ActivitySummaryRequest, aggregator: ActivityAggregator = Depends(get_activity_aggregator)):
    summary = await aggregator.summarize(req.shared_gallery_id)
    return ActivitySummaryResponse(summary=summary)


@router.post("/cleanup-expired-shares", response_model=CleanupResponse, dependencies=[Depends(require_service_credential)])
def cleanup_expired_shares(db: Session = Depends(get_db)):
    result = sweep_expired_shares(db)
    return CleanupResponse(**result.to_dict())
