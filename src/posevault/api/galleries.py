import uuid

from fastapi import APIRouter, Depends

from posevault.auth_utils import get_current_owner_id
from posevault.dependencies import get_gallery_repository
from posevault.repositories import GalleryData, GalleryRepository
from posevault.schemas.gallery import GalleryResponse, GallerySyncRequest

router = APIRouter(prefix="/galleries", tags=["galleries"])


@router.get("", response_model=list[GalleryResponse])
def get_galleries(owner_id: uuid.UUID = Depends(get_current_owner_id), repo: GalleryRepository = Depends(get_gallery_repository)):
    return repo.get(owner_id)


@router.put("", response_model=list[GalleryResponse])
def put_galleries(req: GallerySyncRequest, owner_id: uuid.UUID = Depends(get_current_owner_id), repo: GalleryRepository = Depends(get_gallery_repository)):
    """Replace the caller's gallery list; galleries left out are soft-deleted."""
    galleries = [GalleryData(name=g.name, notes=g.notes, cover_image_uid=g.cover_image_uid, uid=g.uid) for g in req.galleries]
    return repo.put(owner_id, galleries)
