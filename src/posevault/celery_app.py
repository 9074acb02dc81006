"""Celery application configuration"""

import logging

from celery import Celery
from celery.schedules import crontab
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


class CelerySettings(BaseSettings):
    broker_url: str = Field(default="redis://localhost:6379/0", alias="CELERY_BROKER_URL")
    result_backend: str = Field(default="redis://localhost:6379/0", alias="CELERY_RESULT_BACKEND")

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
    )


def create_celery_app() -> Celery:
    """Create and configure the Celery application from the current environment."""
    settings = CelerySettings()

    app = Celery(
        "posevault",
        broker=settings.broker_url,
        backend=settings.result_backend,
        include=["posevault.background_tasks"],
    )

    app.conf.update(
        task_serializer="json",
        accept_content=["json"],
        result_serializer="json",
        timezone="UTC",
        enable_utc=True,
        task_track_started=True,
        task_time_limit=30 * 60,
        task_soft_time_limit=25 * 60,
        task_acks_late=True,
        task_reject_on_worker_lost=True,
        broker_pool_limit=None,
        broker_connection_retry_on_startup=True,
        broker_connection_max_retries=10,
    )

    app.conf.beat_schedule = {
        "expire-shares-every-hour": {
            "task": "expire_shares",
            "schedule": crontab(minute=0),
        },
    }

    return app


_celery_app: Celery | None = None


def _get_celery_app() -> Celery:
    """Create the app on first use so settings are read after test fixtures set the environment."""
    global _celery_app
    if _celery_app is None:
        _celery_app = create_celery_app()
    return _celery_app


class _CeleryAppProxy:
    """Forwards attribute access to the lazily created Celery app."""

    def __getattr__(self, name: str):
        return getattr(_get_celery_app(), name)

    def __setattr__(self, name: str, value):
        return setattr(_get_celery_app(), name, value)

    def __dir__(self):
        return dir(_get_celery_app())


celery_app = _CeleryAppProxy()


__all__ = ["celery_app", "create_celery_app"]
