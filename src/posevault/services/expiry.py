import logging
from collections.abc import Callable
from dataclasses import asdict, dataclass
from datetime import datetime

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from posevault.exceptions import PoseVaultError
from posevault.logger import logger as audit_logger
from posevault.models.db import utcnow
from posevault.models.notification import NotificationType
from posevault.repositories import ShareRepository
from posevault.services.notifications import NotificationDispatcher

logger = logging.getLogger(__name__)


@dataclass
class SweepResult:
    deactivated: int = 0
    notified: int = 0

    def to_dict(self) -> dict[str, int]:
        return asdict(self)


def sweep_expired_shares(
    db: Session,
    dispatcher_factory: Callable[[Session], NotificationDispatcher] = NotificationDispatcher.from_session,
    now: datetime | None = None,
) -> SweepResult:
    """Deactivate every active share whose expiry has passed and tell its owner.

    Shares are handled one at a time. A failure on one share is logged and
    the sweep moves on; a notification failure never undoes the share's
    deactivation, which is already committed.
    """
    now = now or utcnow()
    shares = ShareRepository(db)
    dispatcher = dispatcher_factory(db)
    result = SweepResult()

    expired = shares.find_expired_active(now)
    if expired:
        logger.info("Found %d expired shares to deactivate", len(expired))

    for share in expired:
        share_id = share.id
        try:
            if not shares.deactivate(share_id):
                continue
        except SQLAlchemyError as e:
            db.rollback()
            logger.error("Failed to deactivate share %s: %s", share_id, e)
            continue

        result.deactivated += 1
        audit_logger.log_event("share_deactivated", share_id=str(share_id), extra={"reason": "expired"})

        try:
            dispatched = dispatcher.dispatch(share_id, NotificationType.SHARE_EXPIRED)
        except (PoseVaultError, SQLAlchemyError) as e:
            db.rollback()
            logger.error("Failed to notify owner of expired share %s: %s", share_id, e)
            continue
        if not dispatched.skipped:
            result.notified += 1

    return result
