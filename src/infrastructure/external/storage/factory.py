"""Blob store selection from settings."""
from src.application.interfaces.storage import IBlobStore
from src.infrastructure.config.settings import Settings
from src.infrastructure.external.storage.local_storage import LocalStorageService


class StorageFactory:
    """Builds the blob store named by STORAGE_BACKEND."""

    @staticmethod
    def create_blob_store(settings: Settings) -> IBlobStore:
        """
        Args:
            settings: Application settings with storage configuration

        Returns:
            IBlobStore: local filesystem or S3-compatible store

        Raises:
            ValueError: Unknown backend or missing backend configuration
        """
        backend = settings.storage_backend.lower()

        if backend == "local":
            if not settings.storage_root:
                raise ValueError("STORAGE_ROOT required for local backend")
            return LocalStorageService(storage_root=settings.storage_root)

        if backend == "s3":
            from src.infrastructure.external.storage.s3_storage import S3StorageService

            if not settings.s3_bucket:
                raise ValueError("S3_BUCKET required for s3 backend")
            return S3StorageService(
                bucket=settings.s3_bucket,
                region=settings.s3_region,
                endpoint_url=settings.s3_endpoint_url,
                access_key=settings.s3_access_key,
                secret_key=settings.s3_secret_key,
            )

        raise ValueError(f"Unknown storage backend: {backend}. Supported: 'local', 's3'")
