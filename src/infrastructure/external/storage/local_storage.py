"""
Filesystem blob store for single-node deployments.

Keys map to paths below the storage root; every write lands in a temp file
first and is renamed into place, and a JSON sidecar keeps checksum and
content type next to the object.
"""

from __future__ import annotations

import hashlib
import json
import os
import tempfile
from datetime import UTC, datetime, timedelta
from pathlib import Path
from typing import Any, BinaryIO

import aiofiles
import aiofiles.os

from src.infrastructure.exceptions import (StorageDeleteError,
                                           StorageDownloadError,
                                           StorageListError,
                                           StorageNotFoundError,
                                           StorageNotSupportedError,
                                           StoragePermissionError,
                                           StorageUploadError)

METADATA_SUFFIX = ".meta.json"
TEMP_PREFIX = ".tmp_"

FILE_MODE = 0o640
DIR_MODE = 0o750


class LocalStorageService:
    """
    Blob store on the local filesystem.

    Layout: {storage_root}/{owner_id}/{cuid}-{file name}
    plus a {file name}.meta.json sidecar per object.
    """

    CHUNK_SIZE = 64 * 1024

    def __init__(self, storage_root: str) -> None:
        self.storage_root = Path(storage_root).resolve()
        self.storage_root.mkdir(parents=True, exist_ok=True, mode=DIR_MODE)

    def _get_full_path(self, storage_key: str) -> Path:
        """
        Resolve a key to a path strictly inside the storage root.

        Raises:
            StoragePermissionError: key resolves to the root itself or outside it
        """
        full_path = (self.storage_root / storage_key).resolve()

        if full_path == self.storage_root or not full_path.is_relative_to(self.storage_root):
            raise StoragePermissionError(storage_key, "path_validation")

        return full_path

    @staticmethod
    def _metadata_path(file_path: Path) -> Path:
        return file_path.with_name(file_path.name + METADATA_SUFFIX)

    @staticmethod
    def _is_blob(path: Path) -> bool:
        return (
            path.is_file()
            and not path.name.endswith(METADATA_SUFFIX)
            and not path.name.startswith(TEMP_PREFIX)
        )

    async def _write_atomic(self, target_path: Path, content: bytes) -> None:
        target_path.parent.mkdir(parents=True, exist_ok=True, mode=DIR_MODE)
        fd, temp_path = tempfile.mkstemp(dir=target_path.parent, prefix=TEMP_PREFIX)
        os.close(fd)

        try:
            async with aiofiles.open(temp_path, "wb") as f:
                await f.write(content)
            os.chmod(temp_path, FILE_MODE)
            os.replace(temp_path, target_path)
        finally:
            if os.path.exists(temp_path):
                os.unlink(temp_path)

    async def put(
        self,
        storage_key: str,
        file_data: BinaryIO | bytes,
        content_type: str,
        metadata: dict[str, str] | None = None,
    ) -> dict[str, Any]:
        """
        Store an object, replacing whatever was at the key.

        Raises:
            StoragePermissionError: key escapes the storage root
            StorageUploadError: the write failed
        """
        target_path = self._get_full_path(storage_key)

        if isinstance(file_data, bytes):
            content = file_data
        else:
            file_data.seek(0)
            content = file_data.read()
        checksum = hashlib.sha256(content).hexdigest()
        uploaded_at = datetime.now(UTC).isoformat()

        sidecar = {
            "storage_key": storage_key,
            "checksum": checksum,
            "size": len(content),
            "content_type": content_type,
            "uploaded_at": uploaded_at,
            "custom": metadata or {},
        }

        try:
            await self._write_atomic(target_path, content)
            await self._write_atomic(
                self._metadata_path(target_path),
                json.dumps(sidecar, indent=2).encode("utf-8"),
            )
        except OSError as e:
            raise StorageUploadError(storage_key, f"Upload failed: {e}") from e

        return {
            "storage_key": storage_key,
            "checksum": checksum,
            "size": len(content),
            "uploaded_at": uploaded_at,
        }

    async def get(self, storage_key: str) -> bytes:
        """
        Raises:
            StorageNotFoundError: nothing stored at the key
            StorageDownloadError: the read failed
        """
        file_path = self._get_full_path(storage_key)
        if not file_path.is_file():
            raise StorageNotFoundError(storage_key)

        chunks: list[bytes] = []
        try:
            async with aiofiles.open(file_path, "rb") as f:
                while True:
                    chunk = await f.read(self.CHUNK_SIZE)
                    if not chunk:
                        break
                    chunks.append(chunk)
        except OSError as e:
            raise StorageDownloadError(storage_key, f"Download failed: {e}") from e

        return b"".join(chunks)

    async def delete(self, storage_key: str) -> None:
        """
        Remove an object, its sidecar and any directories left empty.

        Raises:
            StorageNotFoundError: nothing stored at the key
            StorageDeleteError: the removal failed
        """
        file_path = self._get_full_path(storage_key)
        if not file_path.is_file():
            raise StorageNotFoundError(storage_key)

        try:
            await aiofiles.os.remove(file_path)
            metadata_path = self._metadata_path(file_path)
            if metadata_path.exists():
                await aiofiles.os.remove(metadata_path)
        except OSError as e:
            raise StorageDeleteError(storage_key, f"Delete failed: {e}") from e

        self._prune_empty_dirs(file_path.parent)

    def _prune_empty_dirs(self, directory: Path) -> None:
        while directory != self.storage_root:
            try:
                directory.rmdir()
            except OSError:
                # Not empty (or already gone)
                return
            directory = directory.parent

    async def list(self, prefix: str) -> list[str]:
        """
        Keys starting with prefix, sorted. Sidecars and temp files are skipped.

        Raises:
            StorageListError: the directory walk failed
        """
        try:
            keys = [
                path.relative_to(self.storage_root).as_posix()
                for path in self.storage_root.rglob("*")
                if self._is_blob(path)
            ]
        except OSError as e:
            raise StorageListError(prefix, f"List failed: {e}") from e

        return sorted(key for key in keys if key.startswith(prefix))

    async def exists(self, storage_key: str) -> bool:
        return self._get_full_path(storage_key).is_file()

    async def generate_download_url(
        self, storage_key: str, expiration: timedelta = timedelta(hours=1)
    ) -> str:
        """
        Local files have no direct URL; they are served through the API.

        Raises:
            StorageNotFoundError: nothing stored at the key
            StorageNotSupportedError: for every existing key
        """
        if not await self.exists(storage_key):
            raise StorageNotFoundError(storage_key)
        raise StorageNotSupportedError("generate_download_url", "local")
