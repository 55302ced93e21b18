"""Unit tests for LocalStorageService"""
import io
import json

import pytest

from src.application.services.storage_key_policy import StorageKeyPolicy
from src.infrastructure.exceptions import (StorageNotFoundError,
                                           StorageNotSupportedError,
                                           StoragePermissionError)
from src.infrastructure.external.storage.local_storage import (
    METADATA_SUFFIX, LocalStorageService)


@pytest.fixture
def temp_storage_root(tmp_path):
    """Provides a temporary storage root directory."""
    storage_root = tmp_path / "storage"
    storage_root.mkdir()
    return str(storage_root)


@pytest.fixture
def storage_service(temp_storage_root):
    """Provides a LocalStorageService instance with temporary storage."""
    return LocalStorageService(storage_root=temp_storage_root)


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


class TestLocalStoragePut:
    """Tests for LocalStorageService put functionality."""

    @pytest.mark.asyncio
    async def test_put_success(self, storage_service, sample_file_data, sample_checksum):
        """
        GIVEN a file stream
        WHEN putting it under an owner key
        THEN file and sidecar should be written with checksum and size
        """
        # GIVEN
        storage_key = "h1/abc123-test.pdf"

        # WHEN
        result = await storage_service.put(
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

        file_path = storage_service._get_full_path(storage_key)
        assert file_path.read_bytes() == sample_file_data.getvalue()

        sidecar = json.loads(
            file_path.with_name(file_path.name + METADATA_SUFFIX).read_text()
        )
        assert sidecar["content_type"] == "application/pdf"
        assert sidecar["custom"] == {"owner_id": "h1"}

    @pytest.mark.asyncio
    async def test_put_bytes_replaces_existing(self, storage_service):
        """
        GIVEN an existing object
        WHEN putting new bytes at the same key
        THEN the new content should replace the old
        """
        # GIVEN
        await storage_service.put("h1/a.pdf", b"old", "application/pdf")

        # WHEN
        await storage_service.put("h1/a.pdf", b"new content", "application/pdf")

        # THEN
        assert await storage_service.get("h1/a.pdf") == b"new content"

    @pytest.mark.asyncio
    async def test_put_path_traversal_rejected(self, storage_service, sample_file_data):
        """
        GIVEN a key escaping the storage root
        WHEN putting it
        THEN StoragePermissionError should be raised
        """
        with pytest.raises(StoragePermissionError):
            await storage_service.put("../../etc/passwd", sample_file_data, "text/plain")


class TestLocalStorageGet:
    """Tests for LocalStorageService get functionality."""

    @pytest.mark.asyncio
    async def test_get_round_trip(self, storage_service, sample_file_data):
        """
        GIVEN a stored object
        WHEN reading it back
        THEN the exact bytes should be returned
        """
        await storage_service.put("h1/doc.pdf", sample_file_data, "application/pdf")

        content = await storage_service.get("h1/doc.pdf")

        assert content == b"Hello, World! This is test content."

    @pytest.mark.asyncio
    async def test_get_missing(self, storage_service):
        """
        GIVEN no object at a key
        WHEN reading it
        THEN StorageNotFoundError should be raised
        """
        with pytest.raises(StorageNotFoundError):
            await storage_service.get("h1/missing.pdf")


class TestLocalStorageDelete:
    """Tests for LocalStorageService delete functionality."""

    @pytest.mark.asyncio
    async def test_delete_removes_file_sidecar_and_empty_dir(
        self, storage_service, sample_file_data
    ):
        """
        GIVEN a stored object
        WHEN deleting it
        THEN file, sidecar and the emptied owner directory should be gone
        """
        await storage_service.put("h1/doc.pdf", sample_file_data, "application/pdf")
        file_path = storage_service._get_full_path("h1/doc.pdf")

        await storage_service.delete("h1/doc.pdf")

        assert not file_path.exists()
        assert not file_path.with_name(file_path.name + METADATA_SUFFIX).exists()
        assert not file_path.parent.exists()
        assert await storage_service.exists("h1/doc.pdf") is False

    @pytest.mark.asyncio
    async def test_delete_missing(self, storage_service):
        """
        GIVEN no object at a key
        WHEN deleting it
        THEN StorageNotFoundError should be raised
        """
        with pytest.raises(StorageNotFoundError):
            await storage_service.delete("h1/missing.pdf")


class TestLocalStorageList:
    """Tests for LocalStorageService list functionality."""

    @pytest.mark.asyncio
    async def test_list_prefix_excludes_sidecars(self, storage_service):
        """
        GIVEN objects of two owners
        WHEN listing one owner's prefix
        THEN only that owner's keys should be returned, without sidecars
        """
        await storage_service.put("h1/b.pdf", b"b", "application/pdf")
        await storage_service.put("h1/a.pdf", b"a", "application/pdf")
        await storage_service.put("h10/c.pdf", b"c", "application/pdf")

        keys = await storage_service.list("h1/")

        assert keys == ["h1/a.pdf", "h1/b.pdf"]

    @pytest.mark.asyncio
    async def test_list_includes_derived_key_for_sidecar_like_name(self, storage_service):
        """
        GIVEN a client file named like a sidecar, stored under a derived key
        WHEN listing the owner's prefix
        THEN the blob should be listed and its sidecar kept separate
        """
        storage_key = StorageKeyPolicy().derive_key("h1", "x.meta.json")
        await storage_service.put(storage_key, b"{}", "application/pdf")

        keys = await storage_service.list("h1/")

        assert keys == [storage_key]
        assert not storage_key.endswith(METADATA_SUFFIX)

    @pytest.mark.asyncio
    async def test_list_empty(self, storage_service):
        """
        GIVEN an empty store
        WHEN listing a prefix
        THEN an empty list should be returned
        """
        assert await storage_service.list("h1/") == []


class TestLocalStorageDownloadUrl:
    """Tests for LocalStorageService direct URLs."""

    @pytest.mark.asyncio
    async def test_generate_download_url_not_supported(self, storage_service):
        """
        GIVEN a stored object
        WHEN asking for a direct URL
        THEN StorageNotSupportedError should be raised
        """
        await storage_service.put("h1/doc.pdf", b"data", "application/pdf")

        with pytest.raises(StorageNotSupportedError):
            await storage_service.generate_download_url("h1/doc.pdf")

    @pytest.mark.asyncio
    async def test_generate_download_url_missing(self, storage_service):
        """
        GIVEN no object at a key
        WHEN asking for a direct URL
        THEN StorageNotFoundError should be raised
        """
        with pytest.raises(StorageNotFoundError):
            await storage_service.generate_download_url("h1/missing.pdf")
