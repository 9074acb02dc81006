import logging
import uuid
from dataclasses import dataclass

from sqlalchemy.exc import SQLAlchemyError

from posevault.exceptions import (
    AccessDenied,
    FileTooLarge,
    InputError,
    MissingFields,
    PoseVaultError,
    UploadLimitReached,
    UploadsDisabled,
    UpstreamError,
)
from posevault.logger import logger as audit_logger
from posevault.models.notification import NotificationType
from posevault.models.share import ShareUpload
from posevault.repositories import ShareActivityRepository, ShareRepository
from posevault.s3_service import AsyncS3Client
from posevault.services.notifications import NotificationDispatcher, notify_best_effort
from posevault.services.share_access import open_share
from posevault.services.storage_keys import share_upload_key

logger = logging.getLogger(__name__)

MESSAGE_APPROVED = "Upload added to gallery"
MESSAGE_PENDING = "Upload submitted for approval"


@dataclass
class UploadOutcome:
    upload: ShareUpload
    approved: bool
    message: str


def _parse_uuid(value: uuid.UUID | str, field: str) -> uuid.UUID:
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except ValueError:
        raise InputError(f"Invalid {field}", code="invalid_input") from None


class ShareUploadGate:
    """Admits viewer uploads into a share.

    Preconditions are checked in a fixed order and the first failure wins.
    The object is written before the record; when the record cannot be
    written the object is deleted again before the error is raised.
    """

    def __init__(
        self,
        shares: ShareRepository,
        activity: ShareActivityRepository,
        store: AsyncS3Client,
        dispatcher: NotificationDispatcher | None = None,
    ):
        self.shares = shares
        self.activity = activity
        self.store = store
        self.dispatcher = dispatcher

    async def upload(
        self,
        token: str | None,
        file_bytes: bytes | None,
        filename: str | None,
        content_type: str | None,
        viewer_id: uuid.UUID | str | None,
        shared_gallery_id: uuid.UUID | str | None,
        password: str | None = None,
    ) -> UploadOutcome:
        share = open_share(self.shares, token, password)

        if not share.allow_uploads:
            raise UploadsDisabled("Uploads are not enabled for this gallery")

        if file_bytes is None or not viewer_id or not shared_gallery_id:
            raise MissingFields("Missing required fields: file, viewer_id, shared_gallery_id")

        if _parse_uuid(shared_gallery_id, "shared_gallery_id") != share.id:
            raise AccessDenied("Upload target does not match this share")

        viewer = self.activity.get_viewer(_parse_uuid(viewer_id, "viewer_id"), share.id)
        if viewer is None:
            raise AccessDenied("Viewer is not registered for this share")

        if len(file_bytes) > share.max_upload_bytes:
            raise FileTooLarge(f"File too large. Maximum size is {share.max_upload_size_mb}MB")

        if share.max_uploads_per_viewer is not None:
            count = self.activity.count_uploads(share.id, viewer.id)
            if count >= share.max_uploads_per_viewer:
                raise UploadLimitReached(f"Upload limit reached. Maximum {share.max_uploads_per_viewer} uploads per viewer")

        original_filename = filename or "upload"
        key = share_upload_key(share.owner_id, share.id, original_filename)
        await self.store.put_object(key, file_bytes, content_type)

        approved = not share.require_upload_approval
        try:
            record = self.activity.create_upload(
                shared_gallery_id=share.id,
                viewer_id=viewer.id,
                storage_key=key,
                original_filename=original_filename,
                file_size=len(file_bytes),
                approved=approved,
            )
        except SQLAlchemyError as e:
            self.activity.db.rollback()
            logger.error("Failed to record share upload %s: %s", key, e)
            await self._remove_orphan(key)
            raise UpstreamError("Failed to record upload", detail=str(e)) from e

        audit_logger.share_event("share_upload", share, viewer_id=viewer.id, key=key, size=len(file_bytes), approved=approved)

        if not approved:
            notify_best_effort(self.dispatcher, share.id, NotificationType.UPLOAD_PENDING, viewer_name=viewer.display_name)

        return UploadOutcome(upload=record, approved=approved, message=MESSAGE_APPROVED if approved else MESSAGE_PENDING)

    async def _remove_orphan(self, key: str) -> None:
        try:
            await self.store.delete_object(key)
        except PoseVaultError as e:
            logger.error("Compensating delete failed for %s: %s", key, e)

