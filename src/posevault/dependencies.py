"""
Dependency injection

The object-store client is created once during application startup and shared
across requests; repositories are built per request around the request's
database session.
"""

import logging
from collections.abc import AsyncGenerator

from fastapi import Depends
from sqlalchemy.orm import Session, sessionmaker

from posevault.models.db import get_db, get_session_maker
from posevault.repositories import GalleryRepository, NotificationRepository, ShareActivityRepository, ShareRepository
from posevault.s3_service import AsyncS3Client
from posevault.services import ActivityAggregator, NotificationDispatcher, ShareUploadGate, ShareViewerService

logger = logging.getLogger(__name__)

# Set by the application lifespan
_s3_client_instance: AsyncS3Client | None = None


async def get_s3_client() -> AsyncGenerator[AsyncS3Client]:
    """FastAPI dependency yielding the shared object-store client."""
    if _s3_client_instance is None:
        raise RuntimeError("S3 client not initialized. Make sure the application lifespan is properly configured.")
    yield _s3_client_instance


def set_s3_client_instance(client: AsyncS3Client | None) -> None:
    global _s3_client_instance
    _s3_client_instance = client
    logger.info("S3 client instance set globally")


def get_s3_client_instance() -> AsyncS3Client:
    """Get the shared client outside of request handling."""
    if _s3_client_instance is None:
        raise RuntimeError("S3 client not initialized. Make sure the application lifespan is properly configured.")
    return _s3_client_instance


def get_db_session_maker() -> sessionmaker[Session]:
    """Session factory for work that needs its own sessions (parallel reads)."""
    return get_session_maker()


def get_share_repository(db: Session = Depends(get_db)) -> ShareRepository:
    return ShareRepository(db)


def get_activity_repository(db: Session = Depends(get_db)) -> ShareActivityRepository:
    return ShareActivityRepository(db)


def get_gallery_repository(db: Session = Depends(get_db)) -> GalleryRepository:
    return GalleryRepository(db)


def get_notification_repository(db: Session = Depends(get_db)) -> NotificationRepository:
    return NotificationRepository(db)


def get_notification_dispatcher(db: Session = Depends(get_db)) -> NotificationDispatcher:
    return NotificationDispatcher.from_session(db)


def get_share_upload_gate(
    shares: ShareRepository = Depends(get_share_repository),
    activity: ShareActivityRepository = Depends(get_activity_repository),
    s3_client: AsyncS3Client = Depends(get_s3_client),
    dispatcher: NotificationDispatcher = Depends(get_notification_dispatcher),
) -> ShareUploadGate:
    return ShareUploadGate(shares, activity, s3_client, dispatcher)


def get_share_viewer_service(
    shares: ShareRepository = Depends(get_share_repository),
    activity: ShareActivityRepository = Depends(get_activity_repository),
    dispatcher: NotificationDispatcher = Depends(get_notification_dispatcher),
) -> ShareViewerService:
    return ShareViewerService(shares, activity, dispatcher)


def get_activity_aggregator(session_maker: sessionmaker[Session] = Depends(get_db_session_maker)) -> ActivityAggregator:
    return ActivityAggregator(session_maker)
