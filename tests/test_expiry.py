"""Tests for the expired-share sweep and its Celery task."""

from datetime import UTC, datetime, timedelta
from unittest.mock import MagicMock, patch

from celery.schedules import crontab
from freezegun.api import FrozenDateTimeFactory
from sqlalchemy import select
from sqlalchemy.exc import OperationalError

from posevault.background_tasks import expire_shares_task
from posevault.celery_app import celery_app
from posevault.exceptions import UpstreamError
from posevault.models.notification import Notification
from posevault.models.share import SharedGallery
from posevault.repositories import NotificationRepository, ShareRepository
from posevault.services.expiry import SweepResult, sweep_expired_shares
from posevault.services.notifications import DispatchResult, NotificationDispatcher
from tests.helpers import make_share


def _past(hours: int = 1) -> datetime:
    return datetime.now(UTC) - timedelta(hours=hours)


def _future(hours: int = 1) -> datetime:
    return datetime.now(UTC) + timedelta(hours=hours)


def _is_active(db_session, share: SharedGallery) -> bool:
    db_session.expire_all()
    return db_session.get(SharedGallery, share.id).is_active


class TestSweepExpiredShares:
    def test_deactivates_and_notifies_expired_shares(self, db_session, gallery):
        """Test deactivates and notifies expired shares."""
        expired = make_share(db_session, gallery, expires_at=_past())
        current = make_share(db_session, gallery, expires_at=_future())
        open_ended = make_share(db_session, gallery)

        result = sweep_expired_shares(db_session)

        assert result == SweepResult(deactivated=1, notified=1)
        assert _is_active(db_session, expired) is False
        assert _is_active(db_session, current) is True
        assert _is_active(db_session, open_ended) is True

        [notification] = db_session.execute(select(Notification)).scalars().all()
        assert notification.type == "share_expired"
        assert notification.shared_gallery_id == expired.id
        assert notification.message == 'Your share link for "Studio Poses" has expired'

    def test_second_sweep_does_nothing(self, db_session, gallery):
        """Test second sweep does nothing."""
        make_share(db_session, gallery, expires_at=_past())

        assert sweep_expired_shares(db_session).to_dict() == {"deactivated": 1, "notified": 1}
        assert sweep_expired_shares(db_session).to_dict() == {"deactivated": 0, "notified": 0}
        assert len(db_session.execute(select(Notification)).scalars().all()) == 1

    def test_inactive_expired_share_is_left_alone(self, db_session, gallery):
        """Test inactive expired share is left alone."""
        make_share(db_session, gallery, expires_at=_past(), is_active=False)
        assert sweep_expired_shares(db_session) == SweepResult()

    def test_quiet_owner_is_deactivated_without_notification(self, db_session, gallery, owner_id):
        """Test quiet owner is deactivated without notification."""
        share = make_share(db_session, gallery, expires_at=_past())
        NotificationRepository(db_session).upsert_preference(owner_id, None, {"quiet_mode": True})

        result = sweep_expired_shares(db_session)

        assert result == SweepResult(deactivated=1, notified=0)
        assert _is_active(db_session, share) is False
        assert db_session.execute(select(Notification)).scalars().all() == []

    def test_notification_failure_does_not_stop_the_sweep(self, db_session, gallery):
        """Test notification failure does not stop the sweep."""
        first = make_share(db_session, gallery, expires_at=_past(hours=3))
        second = make_share(db_session, gallery, expires_at=_past(hours=2))
        third = make_share(db_session, gallery, expires_at=_past(hours=1))

        dispatcher = MagicMock(spec=NotificationDispatcher)
        dispatcher.dispatch.side_effect = [DispatchResult(), UpstreamError("Failed to create notification"), DispatchResult()]

        result = sweep_expired_shares(db_session, dispatcher_factory=lambda db: dispatcher)

        assert result == SweepResult(deactivated=3, notified=2)
        assert [call.args[0] for call in dispatcher.dispatch.call_args_list] == [first.id, second.id, third.id]
        # Deactivation was committed before the failed dispatch
        assert _is_active(db_session, second) is False

    def test_deactivation_failure_skips_only_that_share(self, db_session, gallery):
        """Test deactivation failure skips only that share."""
        first = make_share(db_session, gallery, expires_at=_past(hours=2))
        second = make_share(db_session, gallery, expires_at=_past(hours=1))
        dispatcher = MagicMock(spec=NotificationDispatcher)
        dispatcher.dispatch.return_value = DispatchResult()

        real_deactivate = ShareRepository.deactivate

        def flaky_deactivate(self, share_id):
            if share_id == first.id:
                raise OperationalError("UPDATE shared_galleries", {}, Exception("deadlock"))
            return real_deactivate(self, share_id)

        with patch.object(ShareRepository, "deactivate", flaky_deactivate):
            result = sweep_expired_shares(db_session, dispatcher_factory=lambda db: dispatcher)

        assert result == SweepResult(deactivated=1, notified=1)
        assert _is_active(db_session, first) is True
        assert _is_active(db_session, second) is False

    def test_expiry_follows_the_clock(self, db_session, gallery, freezer: FrozenDateTimeFactory):
        """Test expiry follows the clock."""
        freezer.move_to(datetime(2026, 5, 1, 9, 30, tzinfo=UTC))
        share = make_share(db_session, gallery, expires_at=datetime(2026, 5, 1, 10, 0, tzinfo=UTC))

        assert sweep_expired_shares(db_session).deactivated == 0

        freezer.tick(timedelta(minutes=31))
        assert sweep_expired_shares(db_session).deactivated == 1
        assert _is_active(db_session, share) is False


class TestExpireSharesTask:
    def test_task_sweeps_with_its_own_session(self, session_maker, db_session, gallery):
        """Test task sweeps with its own session."""
        share = make_share(db_session, gallery, expires_at=_past())

        with patch("posevault.task_utils.get_session_maker", return_value=session_maker):
            result = expire_shares_task()

        assert result == {"deactivated": 1, "notified": 1}
        assert _is_active(db_session, share) is False

    def test_task_is_scheduled_hourly(self):
        """Test task is scheduled hourly."""
        entry = celery_app.conf.beat_schedule["expire-shares-every-hour"]
        assert entry["task"] == "expire_shares"
        assert entry["schedule"] == crontab(minute=0)
        assert expire_shares_task.name == "expire_shares"
