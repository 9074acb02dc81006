from posevault.services.activity import ActivityAggregator
from posevault.services.expiry import SweepResult, sweep_expired_shares
from posevault.services.notifications import DispatchResult, EffectivePreferences, NotificationDispatcher, resolve_preferences
from posevault.services.share_access import open_share, validate_share_token
from posevault.services.share_uploads import ShareUploadGate, UploadOutcome
from posevault.services.viewer_activity import ShareViewerService

__all__ = [
    "ActivityAggregator",
    "DispatchResult",
    "EffectivePreferences",
    "NotificationDispatcher",
    "ShareUploadGate",
    "ShareViewerService",
    "SweepResult",
    "UploadOutcome",
    "open_share",
    "resolve_preferences",
    "sweep_expired_shares",
    "validate_share_token",
]
