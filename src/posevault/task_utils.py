import logging
from collections.abc import Generator
from contextlib import contextmanager

from sqlalchemy.orm import Session

from posevault.models.db import get_session_maker

logger = logging.getLogger(__name__)


@contextmanager
def task_db_session() -> Generator[Session]:
    """Context manager for database sessions in Celery tasks."""
    session_maker = get_session_maker()
    with session_maker() as session:
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
