import uuid

from fastapi import APIRouter, Depends, status

from posevault.auth_utils import get_current_owner_id
from posevault.dependencies import get_gallery_repository, get_share_repository
from posevault.exceptions import InputError, NotFound
from posevault.logger import logger
from posevault.models.share import SharedGallery
from posevault.repositories import GalleryRepository, ShareRepository
from posevault.schemas.share import ShareCreateRequest, ShareResponse, ShareUpdateRequest
from posevault.services.share_access import generate_share_token, hash_share_password

router = APIRouter(prefix="/galleries/{gallery_uid}/shares", tags=["shares"])

NULLABLE_FIELDS = frozenset({"expires_at", "max_uploads_per_viewer", "password"})


def _require_gallery(gallery_uid: int, owner_id: uuid.UUID, galleries: GalleryRepository) -> None:
    if galleries.get_gallery_by_uid_and_owner(gallery_uid, owner_id) is None:
        raise NotFound("Gallery not found", code="gallery_not_found")


def _get_owned_share(share_id: uuid.UUID, gallery_uid: int, owner_id: uuid.UUID, shares: ShareRepository) -> SharedGallery:
    share = shares.get_by_id_and_owner(share_id, owner_id)
    if share is None or share.gallery_id != gallery_uid:
        raise NotFound("Share not found", code="share_not_found")
    return share


@router.post("", response_model=ShareResponse, status_code=status.HTTP_201_CREATED)
def create_share(
    gallery_uid: int,
    req: ShareCreateRequest,
    owner_id: uuid.UUID = Depends(get_current_owner_id),
    shares: ShareRepository = Depends(get_share_repository),
    galleries: GalleryRepository = Depends(get_gallery_repository),
):
    _require_gallery(gallery_uid, owner_id, galleries)

    config = req.model_dump(exclude={"password"})
    if req.password:
        config["password_hash"] = hash_share_password(req.password)
    share = shares.create_share(owner_id, gallery_uid, generate_share_token(), **config)

    logger.share_event("share_created", share, gallery_uid=gallery_uid)
    return ShareResponse.from_share(share)


@router.get("", response_model=list[ShareResponse])
def list_shares(
    gallery_uid: int,
    owner_id: uuid.UUID = Depends(get_current_owner_id),
    shares: ShareRepository = Depends(get_share_repository),
    galleries: GalleryRepository = Depends(get_gallery_repository),
):
    _require_gallery(gallery_uid, owner_id, galleries)
    return [ShareResponse.from_share(share) for share in shares.list_for_gallery(gallery_uid, owner_id)]


@router.patch("/{share_id}", response_model=ShareResponse)
def update_share(
    gallery_uid: int,
    share_id: uuid.UUID,
    req: ShareUpdateRequest,
    owner_id: uuid.UUID = Depends(get_current_owner_id),
    shares: ShareRepository = Depends(get_share_repository),
):
    share = _get_owned_share(share_id, gallery_uid, owner_id, shares)

    changes = req.model_dump(exclude_unset=True)
    cleared = [field for field, value in changes.items() if value is None and field not in NULLABLE_FIELDS]
    if cleared:
        raise InputError(f"Fields cannot be null: {', '.join(sorted(cleared))}")
    if "password" in changes:
        password = changes.pop("password")
        changes["password_hash"] = hash_share_password(password) if password else None

    return ShareResponse.from_share(shares.update_share(share, **changes))


@router.post("/{share_id}/deactivate", response_model=ShareResponse)
def deactivate_share(
    gallery_uid: int,
    share_id: uuid.UUID,
    owner_id: uuid.UUID = Depends(get_current_owner_id),
    shares: ShareRepository = Depends(get_share_repository),
):
    share = _get_owned_share(share_id, gallery_uid, owner_id, shares)
    return ShareResponse.from_share(shares.update_share(share, is_active=False))


@router.post("/{share_id}/reactivate", response_model=ShareResponse)
def reactivate_share(
    gallery_uid: int,
    share_id: uuid.UUID,
    owner_id: uuid.UUID = Depends(get_current_owner_id),
    shares: ShareRepository = Depends(get_share_repository),
):
    share = _get_owned_share(share_id, gallery_uid, owner_id, shares)
    return ShareResponse.from_share(shares.update_share(share, is_active=True))
