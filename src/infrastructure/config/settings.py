from functools import lru_cache

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from src.application.services.upload_validator import (DEFAULT_ALLOWED_MIME_TYPES,
                                                       DEFAULT_MAX_PAYLOAD_BYTES,
                                                       UploadPolicy)


class Settings(BaseSettings):
    # App
    app_name: str = "Helper Documents"
    app_version: str = "1.0.0"
    debug: bool = False

    # Database
    database_url: str = ""  # Loaded from environment, validated in model_validator
    database_echo: bool = False

    # Security
    secret_key: str = ""  # Loaded from environment, validated in model_validator
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 480  # 8 hours

    # CORS - comma-separated list of allowed origins
    allowed_origins: str = "http://localhost:3000,http://localhost:8080"

    # Storage
    storage_backend: str = "local"  # Options: "local", "s3"
    storage_root: str = "/var/helper-documents/storage"  # For local backend
    s3_bucket: str | None = None  # Required for S3 backend
    s3_region: str = "us-east-1"
    s3_endpoint_url: str | None = None  # For MinIO/Supabase S3 endpoint
    s3_access_key: str | None = None  # Optional, uses IAM role if not provided
    s3_secret_key: str | None = None  # Optional, uses IAM role if not provided

    # Upload limits
    max_upload_size: int = DEFAULT_MAX_PAYLOAD_BYTES  # 50MB
    allowed_mime_types: str = ",".join(DEFAULT_ALLOWED_MIME_TYPES)
    multipart_overhead: int = 1024 * 1024  # slack on top of max_upload_size for the request body

    # Request handling
    request_timeout_seconds: float = 60.0

    # Server
    api_host: str = "0.0.0.0"
    api_port: int = 8000

    @model_validator(mode="after")
    def validate_storage_config(self) -> "Settings":
        """Validate storage backend and required configuration"""
        # Validate required fields are loaded from environment
        if not self.database_url:
            raise ValueError("DATABASE_URL is required. Set in environment or .env file.")
        if not self.secret_key:
            raise ValueError("SECRET_KEY is required. Generate with: openssl rand -hex 32")

        # Validate storage backend
        if self.storage_backend == "s3":
            if not self.s3_bucket:
                raise ValueError(
                    "s3_bucket is required when storage_backend is 's3'. "
                    "Set S3_BUCKET environment variable or update .env file."
                )
        elif self.storage_backend not in ("local", "s3"):
            raise ValueError(
                f"Invalid storage_backend '{self.storage_backend}'. "
                f"Must be one of: 'local', 's3'"
            )

        if self.max_upload_size <= 0:
            raise ValueError("max_upload_size must be positive")
        return self

    @property
    def max_request_size(self) -> int:
        """Content-Length ceiling for a whole multipart request"""
        return self.max_upload_size + self.multipart_overhead

    def upload_policy(self) -> UploadPolicy:
        """Build the upload policy handed to UploadValidator"""
        allowed = frozenset(
            t.strip().lower() for t in self.allowed_mime_types.split(",") if t.strip()
        )
        return UploadPolicy(
            max_payload_bytes=self.max_upload_size,
            allowed_mime_types=allowed,
        )

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="allow", case_sensitive=False
    )


@lru_cache
def get_settings() -> Settings:
    return Settings()
