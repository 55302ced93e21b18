"""FastAPI dependencies: caller identity, owner scoping and service wiring"""
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from src.application.interfaces.storage import IBlobStore
from src.application.services.upload_validator import UploadValidator
from src.application.use_cases.documents.document_operations import DocumentService
from src.infrastructure.config.settings import get_settings
from src.infrastructure.external.storage.factory import StorageFactory
from src.infrastructure.persistence.database import get_db, get_db_transactional
from src.infrastructure.persistence.repositories import (
    DocumentRepository,
    HelperRepository,
)
from src.infrastructure.security.jwt import verify_token
from src.presentation.api.v1.schemas.token import TokenPayload
from src.shared.telemetry.logging import get_logger

logger = get_logger(__name__)

security = HTTPBearer()

# Process-wide blob store, built on first use
_storage_service: IBlobStore | None = None


def get_storage_service() -> IBlobStore:
    """Blob store dependency (singleton)"""
    global _storage_service
    if _storage_service is None:
        _storage_service = StorageFactory.create_blob_store(get_settings())
    return _storage_service


def set_storage_service(storage_service: IBlobStore | None) -> None:
    """Replace the process-wide blob store (None resets to settings on next use)"""
    global _storage_service
    _storage_service = storage_service


def get_upload_validator() -> UploadValidator:
    return UploadValidator(get_settings().upload_policy())


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
) -> TokenPayload:
    """
    Authenticated caller from the bearer token.

    Raises 401 for expired, badly signed or malformed tokens.
    """
    try:
        return TokenPayload(**verify_token(credentials.credentials))
    except ValueError as e:
        # pydantic's ValidationError is a ValueError too
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"Invalid authentication credentials: {e}",
            headers={"WWW-Authenticate": "Bearer"},
        ) from e


async def get_owner_scope(
    owner_id: str,
    user: TokenPayload = Depends(get_current_user),
) -> str:
    """
    Owner namespace the request may act on.

    Helper callers (and unknown roles) may only address their own helper id;
    privileged callers may address any helper.
    """
    if user.caller_role.is_privileged or (user.helper_id and user.helper_id == owner_id):
        return owner_id

    logger.warning(
        "Owner scope refused",
        extra={"subject": user.sub, "helper_id": user.helper_id, "owner_id": owner_id},
    )
    raise HTTPException(
        status_code=status.HTTP_403_FORBIDDEN,
        detail={
            "error": "FORBIDDEN",
            "message": "Helpers may only access their own documents",
            "details": {"owner_id": owner_id},
        },
    )


def _build_document_service(
    db: AsyncSession, blob_store: IBlobStore, validator: UploadValidator
) -> DocumentService:
    return DocumentService(
        blob_store=blob_store,
        metadata_store=DocumentRepository(db),
        helper_directory=HelperRepository(db),
        validator=validator,
    )


async def get_document_service(
    db: AsyncSession = Depends(get_db),
    blob_store: IBlobStore = Depends(get_storage_service),
    validator: UploadValidator = Depends(get_upload_validator),
) -> DocumentService:
    """Document service for read operations"""
    return _build_document_service(db, blob_store, validator)


async def get_document_service_transactional(
    db: AsyncSession = Depends(get_db_transactional),
    blob_store: IBlobStore = Depends(get_storage_service),
    validator: UploadValidator = Depends(get_upload_validator),
) -> DocumentService:
    """Document service whose metadata writes commit with the request"""
    return _build_document_service(db, blob_store, validator)
