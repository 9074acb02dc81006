"""Error taxonomy for the share-access core.

Every error carries an HTTP status code and a stable machine-readable ``code``.
The FastAPI exception handlers in ``posevault.main`` turn them into the
``{"ok": false, "error": ..., "code": ...}`` envelope.
"""


class PoseVaultError(Exception):
    status_code: int = 500
    code: str = "internal_error"

    def __init__(self, message: str | None = None, *, code: str | None = None):
        self.message = message or self.default_message()
        if code is not None:
            self.code = code
        super().__init__(self.message)

    @classmethod
    def default_message(cls) -> str:
        return cls.code.replace("_", " ").capitalize()

    def to_payload(self) -> dict:
        return {"ok": False, "error": self.message, "code": self.code}


class InputError(PoseVaultError):
    status_code = 400
    code = "invalid_input"


class MissingFields(InputError):
    code = "missing_fields"


class AuthError(PoseVaultError):
    status_code = 401
    code = "unauthorized"


class AccessDenied(PoseVaultError):
    status_code = 403
    code = "access_denied"


class ShareInactive(AccessDenied):
    code = "share_inactive"


class ShareExpired(AccessDenied):
    code = "share_expired"


class UploadsDisabled(AccessDenied):
    code = "uploads_disabled"


class FileTooLarge(AccessDenied):
    code = "file_too_large"


class UploadLimitReached(AccessDenied):
    code = "upload_limit_reached"


class NotFound(PoseVaultError):
    status_code = 404
    code = "not_found"


class ShareNotFound(NotFound):
    code = "share_not_found"


class ObjectNotFound(NotFound):
    code = "object_not_found"


class UpstreamError(PoseVaultError):
    """A datastore or object-store call failed.

    ``detail`` keeps the upstream message for diagnostics.
    """

    status_code = 500
    code = "upstream_error"

    def __init__(self, message: str | None = None, *, detail: str | None = None, code: str | None = None):
        super().__init__(message, code=code)
        self.detail = detail

    def to_payload(self) -> dict:
        payload = super().to_payload()
        if self.detail:
            payload["details"] = self.detail
        return payload


class InternalError(PoseVaultError):
    status_code = 500
    code = "internal_error"


__all__ = [
    "AccessDenied",
    "AuthError",
    "FileTooLarge",
    "InputError",
    "InternalError",
    "MissingFields",
    "NotFound",
    "ObjectNotFound",
    "PoseVaultError",
    "ShareExpired",
    "ShareInactive",
    "ShareNotFound",
    "UploadLimitReached",
    "UploadsDisabled",
    "UpstreamError",
]
