import io
from unittest.mock import MagicMock

import pytest
from botocore.exceptions import ClientError

from app.storage.exceptions import StorageError
from app.storage.s3_adapter import S3ObjectStore


def _make_store(client: MagicMock, public_base_url: str = "") -> S3ObjectStore:
    return S3ObjectStore(
        bucket="shared-files",
        region="eu-west-1",
        key_prefix="uploads/",
        public_base_url=public_base_url,
        client=client,
    )


def _client_error(code: str, operation: str) -> ClientError:
    return ClientError({"Error": {"Code": code, "Message": "nope"}}, operation)


class TestStore:
    @pytest.mark.asyncio
    async def test_uploads_then_grants_public_read(self) -> None:
        client = MagicMock()
        store = _make_store(client)

        locator = await store.store("report.pdf", "application/pdf", io.BytesIO(b"abc"))

        _content, bucket, key = client.upload_fileobj.call_args.args
        assert bucket == "shared-files"
        assert key.startswith("uploads/") and key.endswith("/report.pdf")
        assert client.upload_fileobj.call_args.kwargs["ExtraArgs"] == {
            "ContentType": "application/pdf"
        }
        client.put_object_acl.assert_called_once_with(
            Bucket="shared-files", Key=key, ACL="public-read"
        )
        assert locator == f"https://shared-files.s3.eu-west-1.amazonaws.com/{key}"

    @pytest.mark.asyncio
    async def test_uses_public_base_url_when_configured(self) -> None:
        client = MagicMock()
        store = _make_store(client, public_base_url="https://cdn.example.com/")

        locator = await store.store("my report.pdf", "application/pdf", io.BytesIO(b"abc"))

        assert locator.startswith("https://cdn.example.com/uploads/")
        assert locator.endswith("/my%20report.pdf")

    @pytest.mark.asyncio
    async def test_same_name_gets_distinct_keys(self) -> None:
        client = MagicMock()
        store = _make_store(client)

        first = await store.store("a.txt", "text/plain", io.BytesIO(b"1"))
        second = await store.store("a.txt", "text/plain", io.BytesIO(b"1"))

        assert first != second


class TestStoreFailures:
    @pytest.mark.asyncio
    async def test_upload_failure_raises_storage_error(self) -> None:
        client = MagicMock()
        client.upload_fileobj.side_effect = _client_error("InvalidAccessKeyId", "PutObject")
        store = _make_store(client)

        with pytest.raises(StorageError, match="credentials rejected"):
            await store.store("a.txt", "text/plain", io.BytesIO(b"1"))
        client.put_object_acl.assert_not_called()

    @pytest.mark.asyncio
    async def test_acl_failure_raises_storage_error_with_key(self) -> None:
        client = MagicMock()
        client.put_object_acl.side_effect = _client_error("AccessDenied", "PutObjectAcl")
        store = _make_store(client)

        with pytest.raises(StorageError, match="public access was not granted") as exc_info:
            await store.store("a.txt", "text/plain", io.BytesIO(b"1"))
        assert exc_info.value.object_key is not None
        assert exc_info.value.object_key.endswith("/a.txt")

    @pytest.mark.asyncio
    async def test_quota_error_is_described(self) -> None:
        client = MagicMock()
        client.upload_fileobj.side_effect = _client_error("SlowDown", "PutObject")
        store = _make_store(client)

        with pytest.raises(StorageError, match="quota exceeded"):
            await store.store("a.txt", "text/plain", io.BytesIO(b"1"))
