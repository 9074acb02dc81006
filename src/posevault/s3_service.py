"""
Asynchronous object-store client

Async-first S3 client (aioboto3) for the R2/S3-compatible bucket that holds
gallery images. One instance is created at application startup and shared via
dependency injection. Every call is wrapped: a missing key becomes
``ObjectNotFound`` and any other failure becomes ``UpstreamError``.
"""

import io
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

import aioboto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError
from pydantic_settings import BaseSettings, SettingsConfigDict

from posevault.exceptions import ObjectNotFound, UpstreamError

logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from types_aiobotocore_s3 import S3Client

DEFAULT_CONTENT_TYPE = "application/octet-stream"
MISSING_KEY_CODES = frozenset({"NoSuchKey", "404", "NotFound"})


class S3Settings(BaseSettings):
    """Configuration for the S3-compatible bucket"""

    endpoint: str = "localhost:9000"
    access_key: str = "posevault"
    secret_key: str = "posevault"
    bucket: str = "posevault"
    region: str = "auto"
    use_ssl: bool = False
    signature_version: str = "s3v4"

    model_config = SettingsConfigDict(
        env_prefix="S3_",
        env_file=".env",
        extra="ignore",
    )


@dataclass
class StoredObject:
    body: bytes
    content_type: str
    size: int


def _is_missing_key(error: ClientError) -> bool:
    code = str(error.response.get("Error", {}).get("Code", ""))
    return code in MISSING_KEY_CODES


class AsyncS3Client:
    """Asynchronous S3 client

    Holds one shared aioboto3.Session; individual clients are opened per
    operation with ``async with`` so connections are always released.
    """

    def __init__(self, settings: S3Settings | None = None):
        self.settings = settings or S3Settings()
        self._session: aioboto3.Session | None = None
        self._endpoint_url = self._get_endpoint_url()
        self._config = Config(
            signature_version=self.settings.signature_version,
            max_pool_connections=50,
            retries={"max_attempts": 1, "mode": "standard"},
            connect_timeout=10,
            read_timeout=60,
            s3={"addressing_style": "path"},
        )
        logger.info("AsyncS3Client initialized: endpoint=%s, bucket=%s, region=%s", self._endpoint_url, self.settings.bucket, self.settings.region)

    def _get_endpoint_url(self) -> str:
        endpoint = self.settings.endpoint
        if not endpoint.startswith(("http://", "https://")):
            protocol = "https" if self.settings.use_ssl else "http"
            return f"{protocol}://{endpoint}"
        return endpoint

    @property
    def session(self) -> aioboto3.Session:
        """Shared aioboto3 session, created on first use."""
        if self._session is None:
            self._session = aioboto3.Session(
                aws_access_key_id=self.settings.access_key,
                aws_secret_access_key=self.settings.secret_key,
                region_name=self.settings.region,
            )
        return self._session

    def _get_s3_client(self) -> "S3Client":
        """Usage: async with self._get_s3_client() as s3:"""
        return self.session.client("s3", endpoint_url=self._endpoint_url, config=self._config)

    async def put_object(self, key: str, body: bytes, content_type: str | None = None) -> int:
        """Store ``body`` under ``key``.

        Returns:
            Number of bytes written

        Raises:
            UpstreamError: If the store rejects the write
        """
        extra_args: dict[str, str] = {"ContentType": content_type or DEFAULT_CONTENT_TYPE}
        try:
            async with self._get_s3_client() as s3:
                await s3.upload_fileobj(io.BytesIO(body), self.settings.bucket, key, ExtraArgs=extra_args)
        except (ClientError, BotoCoreError) as e:
            logger.error("Failed to upload object %s: %s", key, e)
            raise UpstreamError("Object store upload failed", detail=str(e)) from e
        logger.info("Successfully uploaded object: %s (%d bytes)", key, len(body))
        return len(body)

    async def get_object(self, key: str) -> StoredObject:
        """Fetch an object and its content type.

        Raises:
            ObjectNotFound: If nothing is stored under ``key``
            UpstreamError: On any other store failure
        """
        try:
            async with self._get_s3_client() as s3:
                response = await s3.get_object(Bucket=self.settings.bucket, Key=key)
                body = response.get("Body")
                if body is None:
                    raise UpstreamError("Object store returned no body", detail=key)
                content: bytes = await body.read()
        except ClientError as e:
            if _is_missing_key(e):
                raise ObjectNotFound("Object not found") from e
            logger.error("Failed to get object %s: %s", key, e)
            raise UpstreamError("Object store read failed", detail=str(e)) from e
        except BotoCoreError as e:
            logger.error("Failed to get object %s: %s", key, e)
            raise UpstreamError("Object store read failed", detail=str(e)) from e

        return StoredObject(body=content, content_type=response.get("ContentType") or DEFAULT_CONTENT_TYPE, size=len(content))

    async def delete_object(self, key: str) -> None:
        """Delete an object; deleting a missing key is not an error in S3."""
        try:
            async with self._get_s3_client() as s3:
                await s3.delete_object(Bucket=self.settings.bucket, Key=key)
        except (ClientError, BotoCoreError) as e:
            logger.error("Failed to delete object %s: %s", key, e)
            raise UpstreamError("Object store delete failed", detail=str(e)) from e
        logger.info("Successfully deleted object: %s", key)

    async def close(self) -> None:
        if self._session is not None:
            logger.info("Closing AsyncS3Client session")
            self._session = None
