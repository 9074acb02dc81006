"""Object-store key layout.

Every object lives under ``users/<owner_id>/``; that prefix is the only
authorization boundary for direct object access.
"""

import re
import time
import uuid

_UNSAFE_FILENAME_CHARS = re.compile(r"[^A-Za-z0-9._-]")


def sanitize_filename(filename: str) -> str:
    """Replace every character outside ``[A-Za-z0-9._-]`` with ``_``."""
    return _UNSAFE_FILENAME_CHARS.sub("_", filename) or "file"


def owner_prefix(owner_id: uuid.UUID | str) -> str:
    return f"users/{owner_id}/"


def is_owned_key(key: str, owner_id: uuid.UUID | str) -> bool:
    return key.startswith(owner_prefix(owner_id))


def owner_upload_key(owner_id: uuid.UUID | str, filename: str) -> str:
    return f"{owner_prefix(owner_id)}{uuid.uuid4()}-{sanitize_filename(filename)}"


def share_upload_key(owner_id: uuid.UUID | str, shared_gallery_id: uuid.UUID | str, filename: str, timestamp_ms: int | None = None) -> str:
    if timestamp_ms is None:
        timestamp_ms = int(time.time() * 1000)
    return f"{owner_prefix(owner_id)}share-uploads/{shared_gallery_id}/{timestamp_ms}-{sanitize_filename(filename)}"
