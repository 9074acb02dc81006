import json
import logging
import uuid
from datetime import UTC, datetime

from posevault.logging_config import AUDIT_LOGGER


class StructuredLogger:
    """Emits share audit events as one JSON document per log line.

    The JSON is written as the message so it flows through whatever handlers
    ``configure_logging`` installed.
    """

    def __init__(self, name: str = AUDIT_LOGGER):
        self._logger = logging.getLogger(name)

    def log_event(self, event: str, **kwargs) -> None:
        """Emit a structured event, e.g.

        logger.log_event("share_upload", share_id=..., extra={"approved": True})
        """
        payload = {"timestamp": datetime.now(UTC).isoformat(), "event": event}

        # `extra` dicts are flattened into the top level
        for k, v in kwargs.items():
            if k == "extra" and isinstance(v, dict):
                payload.update(v)
            else:
                payload[k] = v

        try:
            self._logger.info(json.dumps(payload, default=str))
        except (TypeError, ValueError):
            self._logger.info("%s %s", event, kwargs)

    def share_event(self, event: str, share, viewer_id: uuid.UUID | None = None, **fields) -> None:
        """Audit event about one share; share and owner ids are always included."""
        ids = {"share_id": str(share.id), "owner_id": str(share.owner_id)}
        if viewer_id is not None:
            ids["viewer_id"] = str(viewer_id)
        self.log_event(event, **ids, extra=fields)


logger = StructuredLogger()

__all__ = ["logger", "StructuredLogger"]
