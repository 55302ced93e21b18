"""Unit tests for S3StorageService"""

import io
from datetime import UTC, datetime, timedelta
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from botocore.exceptions import ClientError

from src.infrastructure.exceptions import (StorageDownloadError,
                                           StorageListError,
                                           StorageNotFoundError,
                                           StorageUploadError)
from src.infrastructure.external.storage.s3_storage import S3StorageService


@pytest.fixture
def s3_service():
    """Provides an S3StorageService instance for testing."""
    return S3StorageService(
        bucket="test-bucket",
        region="us-east-1",
        endpoint_url="http://localhost:9000",  # MinIO
        access_key="test-access-key",
        secret_key="test-secret-key",
    )


@pytest.fixture
def sample_file_data():
    """Provides sample file data for testing."""
    content = b"Hello, World! This is test content."
    return io.BytesIO(content)


@pytest.fixture
def sample_checksum():
    """
    Provides the SHA-256 checksum for the sample file data.

    Computed from: b"Hello, World! This is test content."
    """
    return "86c08faf3a17b36d3922b3b012d0b9188724aef3356336e0fc518c1f04bac2af"


def _not_found(operation: str) -> ClientError:
    return ClientError({"Error": {"Code": "404"}}, operation)


class TestS3StoragePut:
    """Tests for S3StorageService put functionality."""

    @pytest.mark.asyncio
    async def test_put_success(self, s3_service, sample_file_data, sample_checksum):
        """
        GIVEN a file stream
        WHEN putting it to S3
        THEN the object should be written with checksum metadata
        """
        # GIVEN
        storage_key = "h1/abc123-test.pdf"
        mock_s3_client = AsyncMock()
        mock_s3_client.head_object = AsyncMock(
            return_value={"ContentLength": 35, "LastModified": datetime.now(UTC)}
        )

        # WHEN
        with patch.object(s3_service.session, "client") as mock_client:
            mock_client.return_value.__aenter__.return_value = mock_s3_client

            result = await s3_service.put(
                storage_key,
                sample_file_data,
                "application/pdf",
                metadata={"owner_id": "h1"},
            )

        # THEN
        assert result["storage_key"] == storage_key
        assert result["checksum"] == sample_checksum
        assert result["size"] == 35
        assert "uploaded_at" in result

        call_kwargs = mock_s3_client.put_object.call_args.kwargs
        assert call_kwargs["Bucket"] == "test-bucket"
        assert call_kwargs["Key"] == storage_key
        assert call_kwargs["ContentType"] == "application/pdf"
        assert call_kwargs["Metadata"]["sha256"] == sample_checksum
        assert call_kwargs["Metadata"]["owner-id"] == "h1"

    @pytest.mark.asyncio
    async def test_put_failure_wrapped(self, s3_service, sample_file_data):
        """
        GIVEN S3 rejecting the write
        WHEN putting an object
        THEN StorageUploadError should be raised
        """
        mock_s3_client = AsyncMock()
        mock_s3_client.put_object = AsyncMock(
            side_effect=ClientError({"Error": {"Code": "500"}}, "put_object")
        )

        with patch.object(s3_service.session, "client") as mock_client:
            mock_client.return_value.__aenter__.return_value = mock_s3_client

            with pytest.raises(StorageUploadError):
                await s3_service.put("h1/a.pdf", sample_file_data, "application/pdf")


class TestS3StorageGet:
    """Tests for S3StorageService get functionality."""

    @pytest.mark.asyncio
    async def test_get_success(self, s3_service):
        """
        GIVEN an existing object
        WHEN reading it
        THEN the streamed chunks should be joined
        """
        stream = AsyncMock()
        stream.read = AsyncMock(side_effect=[b"Hello, ", b"World!", b""])
        body = MagicMock()
        body.__aenter__.return_value = stream

        mock_s3_client = AsyncMock()
        mock_s3_client.get_object = AsyncMock(return_value={"Body": body})

        with patch.object(s3_service.session, "client") as mock_client:
            mock_client.return_value.__aenter__.return_value = mock_s3_client

            content = await s3_service.get("h1/a.pdf")

        assert content == b"Hello, World!"

    @pytest.mark.asyncio
    async def test_get_not_found(self, s3_service):
        """
        GIVEN a missing object
        WHEN reading it
        THEN StorageNotFoundError should be raised
        """
        mock_s3_client = AsyncMock()
        mock_s3_client.get_object = AsyncMock(
            side_effect=ClientError({"Error": {"Code": "NoSuchKey"}}, "get_object")
        )

        with patch.object(s3_service.session, "client") as mock_client:
            mock_client.return_value.__aenter__.return_value = mock_s3_client

            with pytest.raises(StorageNotFoundError):
                await s3_service.get("h1/missing.pdf")


class TestS3StorageDelete:
    """Tests for S3StorageService delete functionality."""

    @pytest.mark.asyncio
    async def test_delete_success(self, s3_service):
        """
        GIVEN an existing object
        WHEN deleting it
        THEN delete_object should be called
        """
        mock_s3_client = AsyncMock()
        mock_s3_client.head_object = AsyncMock(return_value={"ContentLength": 10})

        with patch.object(s3_service.session, "client") as mock_client:
            mock_client.return_value.__aenter__.return_value = mock_s3_client

            await s3_service.delete("h1/a.pdf")

        mock_s3_client.delete_object.assert_called_once_with(
            Bucket="test-bucket", Key="h1/a.pdf"
        )

    @pytest.mark.asyncio
    async def test_delete_not_found(self, s3_service):
        """
        GIVEN a missing object
        WHEN deleting it
        THEN StorageNotFoundError should be raised and nothing deleted
        """
        mock_s3_client = AsyncMock()
        mock_s3_client.head_object = AsyncMock(side_effect=_not_found("head_object"))

        with patch.object(s3_service.session, "client") as mock_client:
            mock_client.return_value.__aenter__.return_value = mock_s3_client

            with pytest.raises(StorageNotFoundError):
                await s3_service.delete("h1/missing.pdf")

        mock_s3_client.delete_object.assert_not_called()


class TestS3StorageList:
    """Tests for S3StorageService list functionality."""

    @pytest.mark.asyncio
    async def test_list_paginates(self, s3_service):
        """
        GIVEN keys spread over two result pages
        WHEN listing a prefix
        THEN all keys should be returned sorted
        """

        async def pages():
            yield {"Contents": [{"Key": "h1/b.pdf"}]}
            yield {"Contents": [{"Key": "h1/a.pdf"}]}

        paginator = MagicMock()
        paginator.paginate = MagicMock(return_value=pages())
        mock_s3_client = AsyncMock()
        mock_s3_client.get_paginator = MagicMock(return_value=paginator)

        with patch.object(s3_service.session, "client") as mock_client:
            mock_client.return_value.__aenter__.return_value = mock_s3_client

            keys = await s3_service.list("h1/")

        assert keys == ["h1/a.pdf", "h1/b.pdf"]
        paginator.paginate.assert_called_once_with(Bucket="test-bucket", Prefix="h1/")

    @pytest.mark.asyncio
    async def test_list_failure_wrapped(self, s3_service):
        """
        GIVEN S3 failing to list
        WHEN listing a prefix
        THEN StorageListError should be raised
        """
        mock_s3_client = AsyncMock()
        mock_s3_client.get_paginator = MagicMock(side_effect=RuntimeError("boom"))

        with patch.object(s3_service.session, "client") as mock_client:
            mock_client.return_value.__aenter__.return_value = mock_s3_client

            with pytest.raises(StorageListError):
                await s3_service.list("h1/")


class TestS3StorageExists:
    """Tests for S3StorageService exists functionality."""

    @pytest.mark.asyncio
    async def test_exists_true(self, s3_service):
        mock_s3_client = AsyncMock()
        mock_s3_client.head_object = AsyncMock(return_value={"ContentLength": 1})

        with patch.object(s3_service.session, "client") as mock_client:
            mock_client.return_value.__aenter__.return_value = mock_s3_client

            assert await s3_service.exists("h1/a.pdf") is True

    @pytest.mark.asyncio
    async def test_exists_false(self, s3_service):
        mock_s3_client = AsyncMock()
        mock_s3_client.head_object = AsyncMock(side_effect=_not_found("head_object"))

        with patch.object(s3_service.session, "client") as mock_client:
            mock_client.return_value.__aenter__.return_value = mock_s3_client

            assert await s3_service.exists("h1/a.pdf") is False

    @pytest.mark.asyncio
    async def test_exists_error(self, s3_service):
        """
        GIVEN S3 denying the head request
        WHEN checking existence
        THEN StorageDownloadError should be raised
        """
        mock_s3_client = AsyncMock()
        mock_s3_client.head_object = AsyncMock(
            side_effect=ClientError({"Error": {"Code": "403"}}, "head_object")
        )

        with patch.object(s3_service.session, "client") as mock_client:
            mock_client.return_value.__aenter__.return_value = mock_s3_client

            with pytest.raises(StorageDownloadError):
                await s3_service.exists("h1/a.pdf")


class TestS3StorageDownloadUrl:
    """Tests for S3StorageService pre-signed URLs."""

    @pytest.mark.asyncio
    async def test_generate_download_url(self, s3_service):
        """
        GIVEN an existing object
        WHEN generating a download URL
        THEN a pre-signed get_object URL should be returned
        """
        mock_s3_client = AsyncMock()
        mock_s3_client.head_object = AsyncMock(return_value={"ContentLength": 1})
        mock_s3_client.generate_presigned_url = AsyncMock(
            return_value="https://s3.example.com/h1/a.pdf?X-Amz-Signature=abc"
        )

        with patch.object(s3_service.session, "client") as mock_client:
            mock_client.return_value.__aenter__.return_value = mock_s3_client

            url = await s3_service.generate_download_url(
                "h1/a.pdf", expiration=timedelta(minutes=5)
            )

        assert url.startswith("https://s3.example.com/h1/a.pdf")
        mock_s3_client.generate_presigned_url.assert_called_once_with(
            "get_object",
            Params={"Bucket": "test-bucket", "Key": "h1/a.pdf"},
            ExpiresIn=300,
        )

    @pytest.mark.asyncio
    async def test_generate_download_url_not_found(self, s3_service):
        mock_s3_client = AsyncMock()
        mock_s3_client.head_object = AsyncMock(side_effect=_not_found("head_object"))

        with patch.object(s3_service.session, "client") as mock_client:
            mock_client.return_value.__aenter__.return_value = mock_s3_client

            with pytest.raises(StorageNotFoundError):
                await s3_service.generate_download_url("h1/missing.pdf")
