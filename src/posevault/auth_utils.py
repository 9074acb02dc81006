import logging
import secrets
import uuid
from functools import lru_cache
from typing import Protocol

import jwt
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic_settings import BaseSettings, SettingsConfigDict

from posevault.exceptions import AuthError

logger = logging.getLogger(__name__)


class AuthSettings(BaseSettings):
    """Settings for authentication, loaded from environment variables.

    ``jwt_secret_key`` is the signing secret of the identity provider that
    issues owner sessions; ``service_role_key`` authenticates scheduled jobs
    and trusted internal callers.
    """

    jwt_secret_key: str = "change-me"
    jwt_algorithm: str = "HS256"
    jwt_audience: str | None = "authenticated"
    service_role_key: str = "change-me-service"

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")


@lru_cache(maxsize=1)
def get_auth_settings() -> AuthSettings:
    return AuthSettings()


class TokenVerifier(Protocol):
    def verify(self, credential: str) -> uuid.UUID:
        """Return the subject id of a valid credential or raise ``AuthError``."""
        ...


class JWTTokenVerifier:
    """Verifies signature, expiry and audience before trusting the ``sub`` claim."""

    def __init__(self, secret: str, algorithm: str = "HS256", audience: str | None = None):
        self.secret = secret
        self.algorithm = algorithm
        self.audience = audience

    def verify(self, credential: str) -> uuid.UUID:
        options = {"require": ["exp", "sub"], "verify_aud": self.audience is not None}
        try:
            payload = jwt.decode(credential, self.secret, algorithms=[self.algorithm], audience=self.audience, options=options)
        except jwt.ExpiredSignatureError:
            raise AuthError("Token expired", code="token_expired") from None
        except jwt.InvalidTokenError:
            raise AuthError("Invalid token", code="invalid_token") from None

        try:
            return uuid.UUID(str(payload["sub"]))
        except ValueError:
            raise AuthError("Invalid token subject", code="invalid_token") from None


def get_token_verifier() -> TokenVerifier:
    settings = get_auth_settings()
    return JWTTokenVerifier(settings.jwt_secret_key, settings.jwt_algorithm, settings.jwt_audience)


security = HTTPBearer(auto_error=False)


def get_current_owner_id(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
    verifier: TokenVerifier = Depends(get_token_verifier),
) -> uuid.UUID:
    if not credentials:
        raise AuthError("Missing Authorization header", code="missing_credentials")
    return verifier.verify(credentials.credentials)


def require_service_credential(credentials: HTTPAuthorizationCredentials | None = Depends(security)) -> None:
    """Gate for internal endpoints: the bearer must equal the service role key."""
    if not credentials:
        raise AuthError("Missing Authorization header", code="missing_credentials")
    expected = get_auth_settings().service_role_key
    if not secrets.compare_digest(credentials.credentials.encode(), expected.encode()):
        logger.warning("Rejected call with invalid service credential")
        raise AuthError("Invalid service credential", code="invalid_credentials")
