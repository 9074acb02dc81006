import logging

from posevault.celery_app import celery_app
from posevault.services.expiry import sweep_expired_shares
from posevault.task_utils import task_db_session

logger = logging.getLogger(__name__)


@celery_app.task(name="expire_shares")
def expire_shares_task() -> dict:
    """Hourly sweep: deactivate shares past their expiry and notify their owners.

    Returns:
        dict with the number of deactivated shares and notifications created
    """
    logger.info("Starting expired share sweep")
    with task_db_session() as db:
        result = sweep_expired_shares(db)
    logger.info("Expired share sweep finished: %d deactivated, %d notified", result.deactivated, result.notified)
    return result.to_dict()
