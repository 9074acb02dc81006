"""Tests for preference resolution and notification dispatch."""

import uuid
from datetime import UTC, datetime, timedelta
from unittest.mock import patch

import pytest
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from posevault.exceptions import InputError, ShareNotFound, UpstreamError
from posevault.models.notification import Notification, NotificationType
from posevault.repositories import NotificationRepository
from posevault.services.notifications import (
    SKIP_PREFERENCE_DISABLED,
    SKIP_QUIET_MODE,
    EffectivePreferences,
    NotificationDispatcher,
    notify_best_effort,
    resolve_preferences,
)
from tests.helpers import make_gallery, make_share, make_viewer


@pytest.fixture
def dispatcher(db_session):
    return NotificationDispatcher.from_session(db_session)


@pytest.fixture
def prefs(db_session):
    return NotificationRepository(db_session)


def _notifications(db_session):
    return db_session.execute(select(Notification)).scalars().all()


class TestResolvePreferences:
    def test_defaults_without_rows(self, prefs, owner_id, share):
        """Test defaults without rows."""
        resolved = resolve_preferences(prefs, owner_id, share.id)
        assert resolved == EffectivePreferences()
        assert resolved.allows(NotificationType.VIEW) is False
        assert resolved.allows(NotificationType.FAVORITE) is True

    def test_global_row_applies_to_every_share(self, prefs, owner_id, share):
        """Test global row applies to every share."""
        prefs.upsert_preference(owner_id, None, {"notify_on_view": True})
        assert resolve_preferences(prefs, owner_id, share.id).notify_on_view is True

    def test_share_row_overrides_global(self, prefs, owner_id, share):
        """Test share row overrides global."""
        prefs.upsert_preference(owner_id, None, {"notify_on_favorite": False, "quiet_mode": True})
        prefs.upsert_preference(owner_id, share.id, {"notify_on_favorite": True})

        resolved = resolve_preferences(prefs, owner_id, share.id)
        # The share row wins as a whole; nothing is inherited from the global row
        assert resolved.notify_on_favorite is True
        assert resolved.quiet_mode is False


class TestDispatch:
    def test_view_is_off_by_default(self, db_session, dispatcher, share):
        """Test view is off by default."""
        result = dispatcher.dispatch(share.id, "view", viewer_name="Alice")

        assert result.skipped is True
        assert result.reason == SKIP_PREFERENCE_DISABLED
        assert result.to_response() == {"ok": True, "skipped": True, "reason": "preference_disabled"}
        assert _notifications(db_session) == []

    def test_favorite_creates_notification(self, db_session, dispatcher, share, owner_id, viewer):
        """Test favorite creates notification."""
        result = dispatcher.dispatch(share.id, "favorite", viewer_name="Alice", image_id=7)

        assert result.to_response() == {"ok": True}
        [notification] = _notifications(db_session)
        assert notification.user_id == owner_id
        assert notification.shared_gallery_id == share.id
        assert notification.type == "favorite"
        assert notification.message == 'Alice favorited an image in "Studio Poses"'
        assert notification.viewer_id == viewer.id
        assert notification.image_id == 7
        assert notification.is_read is False

    def test_quiet_mode_on_share_skips_everything(self, db_session, dispatcher, prefs, owner_id, share):
        """Test quiet mode on share skips everything."""
        prefs.upsert_preference(owner_id, share.id, {"quiet_mode": True})

        for notification_type in NotificationType:
            result = dispatcher.dispatch(share.id, notification_type)
            assert result.skipped is True
            assert result.reason == SKIP_QUIET_MODE
        assert _notifications(db_session) == []

    def test_share_row_enables_view_despite_global(self, db_session, dispatcher, prefs, owner_id, share):
        """Test share row enables view despite global."""
        prefs.upsert_preference(owner_id, None, {"quiet_mode": True})
        prefs.upsert_preference(owner_id, share.id, {"notify_on_view": True})

        result = dispatcher.dispatch(share.id, NotificationType.VIEW)

        assert result.skipped is False
        assert result.notification.message == 'Someone viewed "Studio Poses"'

    def test_global_disable_applies_when_no_share_row(self, dispatcher, prefs, owner_id, share):
        """Test global disable applies when no share row."""
        prefs.upsert_preference(owner_id, None, {"notify_on_comment": False})

        result = dispatcher.dispatch(share.id, NotificationType.COMMENT, viewer_name="Alice")
        assert result.reason == SKIP_PREFERENCE_DISABLED

    def test_missing_gallery_name_falls_back(self, db_session, dispatcher, share):
        """Test missing gallery name falls back."""
        with patch.object(dispatcher.galleries, "get_gallery_name", return_value=None):
            result = dispatcher.dispatch(share.id, NotificationType.SHARE_EXPIRED)

        assert result.notification.message == 'Your share link for "a gallery" has expired'

    def test_unmatched_viewer_name_leaves_viewer_unset(self, dispatcher, share):
        """Test unmatched viewer name leaves viewer unset."""
        result = dispatcher.dispatch(share.id, NotificationType.COMMENT, viewer_name="Nobody")

        assert result.notification.message == 'Nobody commented on an image in "Studio Poses"'
        assert result.notification.viewer_id is None

    def test_duplicate_names_resolve_to_latest_viewer(self, db_session, dispatcher, share):
        """Test duplicate names resolve to latest viewer."""
        now = datetime.now(UTC)
        make_viewer(db_session, share, "Sam", created_at=now - timedelta(days=2))
        latest = make_viewer(db_session, share, "Sam", created_at=now - timedelta(minutes=5))
        make_viewer(db_session, share, "Sam", created_at=now - timedelta(days=1))

        result = dispatcher.dispatch(share.id, NotificationType.FAVORITE, viewer_name="Sam")
        assert result.notification.viewer_id == latest.id

    def test_viewer_name_is_matched_within_the_share_only(self, db_session, dispatcher, gallery, share):
        """Test viewer name is matched within the share only."""
        other_share = make_share(db_session, gallery)
        make_viewer(db_session, other_share, "Elsewhere")

        result = dispatcher.dispatch(share.id, NotificationType.FAVORITE, viewer_name="Elsewhere")
        assert result.notification.viewer_id is None

    def test_owner_of_other_gallery_is_not_notified(self, db_session, dispatcher, share, owner_id):
        """Test owner of other gallery is not notified."""
        other_owner = uuid.uuid4()
        other_share = make_share(db_session, make_gallery(db_session, other_owner, name="Other"))

        dispatcher.dispatch(other_share.id, NotificationType.FAVORITE)

        [notification] = _notifications(db_session)
        assert notification.user_id == other_owner
        assert notification.message == 'Someone favorited an image in "Other"'

    def test_unknown_type_is_rejected(self, dispatcher, share):
        """Test unknown type is rejected."""
        with pytest.raises(InputError) as exc_info:
            dispatcher.dispatch(share.id, "poke")
        assert exc_info.value.code == "invalid_notification_type"

    def test_unknown_share(self, dispatcher):
        """Test unknown share."""
        with pytest.raises(ShareNotFound):
            dispatcher.dispatch(uuid.uuid4(), NotificationType.FAVORITE)

    def test_insert_failure_is_upstream_error(self, db_session, dispatcher, share):
        """Test insert failure is upstream error."""
        with patch.object(dispatcher.notifications, "create_notification", side_effect=SQLAlchemyError("disk full")):
            with pytest.raises(UpstreamError) as exc_info:
                dispatcher.dispatch(share.id, NotificationType.FAVORITE)

        assert exc_info.value.to_payload() == {"ok": False, "error": "Failed to create notification", "code": "upstream_error", "details": "disk full"}


class TestNotifyBestEffort:
    def test_without_dispatcher(self, share):
        """Test without dispatcher."""
        assert notify_best_effort(None, share.id, NotificationType.FAVORITE) is None

    def test_failure_is_swallowed_and_logged(self, dispatcher, caplog):
        """Test failure is swallowed and logged."""
        result = notify_best_effort(dispatcher, uuid.uuid4(), NotificationType.FAVORITE, viewer_name="Alice")

        assert result is None
        assert "not sent" in caplog.text

    def test_success_returns_result(self, db_session, dispatcher, share):
        """Test success returns result."""
        result = notify_best_effort(dispatcher, share.id, NotificationType.FAVORITE)
        assert result.notification is not None
        assert len(_notifications(db_session)) == 1
