import asyncio
import uuid
from pathlib import PurePosixPath
from typing import Any, BinaryIO
from urllib.parse import quote

import boto3
from boto3.exceptions import Boto3Error
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from app.logging.logger import Log
from app.storage.base import BaseObjectStore
from app.storage.exceptions import StorageError

_BOTO_CONFIG = Config(
    retries={"max_attempts": 5, "mode": "standard"},
    connect_timeout=3,
    read_timeout=30,
)

_CREDENTIAL_ERROR_CODES = frozenset(
    {"AccessDenied", "InvalidAccessKeyId", "SignatureDoesNotMatch", "ExpiredToken"}
)
_QUOTA_ERROR_CODES = frozenset({"QuotaExceeded", "ServiceQuotaExceededException", "SlowDown"})


class S3ObjectStore(BaseObjectStore):
    """Stores uploads in S3 and grants public read access per object."""

    def __init__(
        self,
        *,
        bucket: str,
        region: str,
        key_prefix: str = "uploads/",
        public_base_url: str = "",
        endpoint_url: str | None = None,
        client: Any | None = None,
    ) -> None:
        self._bucket = bucket
        self._region = region
        self._key_prefix = key_prefix
        self._public_base_url = public_base_url.rstrip("/")
        self._client = (
            client
            if client is not None
            else boto3.client(
                "s3",
                region_name=region,
                endpoint_url=endpoint_url,
                config=_BOTO_CONFIG,
            )
        )

    async def store(self, name: str, content_type: str, content: BinaryIO) -> str:
        key = self._object_key(name)
        await asyncio.to_thread(self._upload, key, content_type, content)
        await asyncio.to_thread(self._grant_public_read, key)
        locator = self._public_url(key)
        Log.info(f"Stored object {key} in bucket {self._bucket}", locator=locator)
        return locator

    def _upload(self, key: str, content_type: str, content: BinaryIO) -> None:
        try:
            self._client.upload_fileobj(
                content,
                self._bucket,
                key,
                ExtraArgs={"ContentType": content_type},
            )
        except (ClientError, BotoCoreError, Boto3Error) as exc:
            raise StorageError(
                f"S3 upload failed for {key}: {_describe(exc)}", object_key=key
            ) from exc

    def _grant_public_read(self, key: str) -> None:
        try:
            self._client.put_object_acl(Bucket=self._bucket, Key=key, ACL="public-read")
        except (ClientError, BotoCoreError) as exc:
            raise StorageError(
                f"Object {key} was created but public access was not granted: "
                f"{_describe(exc)}",
                object_key=key,
            ) from exc

    def _object_key(self, name: str) -> str:
        filename = PurePosixPath(name.replace("\\", "/")).name or "file"
        return f"{self._key_prefix}{uuid.uuid4().hex}/{filename}"

    def _public_url(self, key: str) -> str:
        if self._public_base_url:
            return f"{self._public_base_url}/{quote(key)}"
        return f"https://{self._bucket}.s3.{self._region}.amazonaws.com/{quote(key)}"


def _describe(exc: Exception) -> str:
    if not isinstance(exc, ClientError):
        return str(exc)
    error = exc.response.get("Error", {}) or {}
    code = error.get("Code", "")
    message = error.get("Message", "") or str(exc)
    if code in _CREDENTIAL_ERROR_CODES:
        return f"credentials rejected ({code}): {message}"
    if code in _QUOTA_ERROR_CODES:
        return f"quota exceeded ({code}): {message}"
    return f"{code}: {message}" if code else message
