from fastapi import APIRouter, Depends, File, Form, Header, Query, UploadFile
from fastapi.responses import Response

from posevault.dependencies import get_s3_client, get_share_repository, get_share_upload_gate, get_share_viewer_service
from posevault.exceptions import AccessDenied, MissingFields
from posevault.logger import logger
from posevault.models.share import MAX_UPLOAD_SIZE_MB
from posevault.repositories import ShareRepository
from posevault.s3_service import AsyncS3Client
from posevault.schemas.share import (
    AccessLogRequest,
    CommentCreateRequest,
    CommentResponse,
    FavoriteToggleRequest,
    FavoriteToggleResponse,
    ShareUploadRecord,
    ShareUploadResponse,
    ViewerCreateRequest,
    ViewerResponse,
)
from posevault.services.share_access import open_share
from posevault.services.share_uploads import ShareUploadGate
from posevault.services.storage_keys import is_owned_key
from posevault.services.viewer_activity import ShareViewerService

router = APIRouter(tags=["share"])

SHARE_CACHE_CONTROL = "public, max-age=300"

# One byte past the largest per-share limit is enough for the gate to reject an oversized file
UPLOAD_READ_LIMIT = MAX_UPLOAD_SIZE_MB * 1024 * 1024 + 1


@router.get("/share-image")
async def get_share_image(
    token: str | None = Query(None),
    key: str | None = Query(None),
    password: str | None = Query(None),
    x_share_password: str | None = Header(None),
    shares: ShareRepository = Depends(get_share_repository),
    s3_client: AsyncS3Client = Depends(get_s3_client),
):
    """Serve an object of the share owner's namespace to a share viewer.

    The share password, when set, comes in the ``X-Share-Password`` header or
    the ``password`` query parameter for plain image tags.
    """
    if not token or not key:
        raise MissingFields("Missing token or key")

    share = open_share(shares, token, x_share_password or password)
    if not is_owned_key(key, share.owner_id):
        raise AccessDenied("Key is outside this share's namespace")

    obj = await s3_client.get_object(key)
    logger.share_event("share_image", share, key=key)
    return Response(content=obj.body, media_type=obj.content_type, headers={"Cache-Control": SHARE_CACHE_CONTROL})


@router.post("/share-upload", response_model=ShareUploadResponse)
async def share_upload(
    token: str | None = Query(None),
    file: UploadFile | None = File(None),
    viewer_id: str | None = Form(None),
    shared_gallery_id: str | None = Form(None),
    password: str | None = Form(None),
    gate: ShareUploadGate = Depends(get_share_upload_gate),
):
    file_bytes = await file.read(UPLOAD_READ_LIMIT) if file is not None else None
    outcome = await gate.upload(
        token,
        file_bytes,
        file.filename if file is not None else None,
        file.content_type if file is not None else None,
        viewer_id,
        shared_gallery_id,
        password=password,
    )
    return ShareUploadResponse(data=ShareUploadRecord.model_validate(outcome.upload), approved=outcome.approved, message=outcome.message)


@router.post("/share/viewers", response_model=ViewerResponse, status_code=201)
def register_viewer(req: ViewerCreateRequest, service: ShareViewerService = Depends(get_share_viewer_service)):
    return service.register_viewer(req.token, req.display_name, password=req.password)


@router.post("/share/favorites/toggle", response_model=FavoriteToggleResponse)
def toggle_favorite(req: FavoriteToggleRequest, service: ShareViewerService = Depends(get_share_viewer_service)):
    is_favorite = service.toggle_favorite(req.token, req.viewer_id, req.image_id, password=req.password)
    return FavoriteToggleResponse(is_favorite=is_favorite)


@router.post("/share/comments", response_model=CommentResponse, status_code=201)
def add_comment(req: CommentCreateRequest, service: ShareViewerService = Depends(get_share_viewer_service)):
    return service.add_comment(req.token, req.viewer_id, req.image_id, req.text, password=req.password)


@router.post("/share/access-log")
def log_access(req: AccessLogRequest, service: ShareViewerService = Depends(get_share_viewer_service)):
    service.log_access(req.token, req.action, viewer_id=req.viewer_id, image_id=req.image_id, password=req.password)
    return {"ok": True}
