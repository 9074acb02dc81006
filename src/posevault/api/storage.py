import uuid

from fastapi import APIRouter, Depends, File, UploadFile
from fastapi.responses import Response

from posevault.auth_utils import get_current_owner_id
from posevault.dependencies import get_s3_client
from posevault.exceptions import AccessDenied
from posevault.s3_service import AsyncS3Client
from posevault.schemas.storage import ObjectDeleteResponse, ObjectUploadResponse
from posevault.services.storage_keys import is_owned_key, owner_upload_key

router = APIRouter(prefix="/objects", tags=["objects"])

OWNER_CACHE_CONTROL = "private, max-age=31536000, immutable"


def _require_owned(key: str, owner_id: uuid.UUID) -> None:
    # Checked before the store is touched, so foreign keys leak nothing about existence
    if not is_owned_key(key, owner_id):
        raise AccessDenied("Key is outside your namespace")


@router.post("", response_model=ObjectUploadResponse)
async def upload_object(
    file: UploadFile = File(...),
    owner_id: uuid.UUID = Depends(get_current_owner_id),
    s3_client: AsyncS3Client = Depends(get_s3_client),
):
    key = owner_upload_key(owner_id, file.filename or "upload")
    body = await file.read()
    size = await s3_client.put_object(key, body, file.content_type)
    return ObjectUploadResponse(key=key, size=size)


@router.get("/{key:path}")
async def get_object(key: str, owner_id: uuid.UUID = Depends(get_current_owner_id), s3_client: AsyncS3Client = Depends(get_s3_client)):
    _require_owned(key, owner_id)
    obj = await s3_client.get_object(key)
    return Response(content=obj.body, media_type=obj.content_type, headers={"Cache-Control": OWNER_CACHE_CONTROL})


@router.delete("/{key:path}", response_model=ObjectDeleteResponse)
async def delete_object(key: str, owner_id: uuid.UUID = Depends(get_current_owner_id), s3_client: AsyncS3Client = Depends(get_s3_client)):
    _require_owned(key, owner_id)
    await s3_client.delete_object(key)
    return ObjectDeleteResponse(key=key)
