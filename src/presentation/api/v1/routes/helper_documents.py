from datetime import date, timedelta
from typing import Annotated
from urllib.parse import quote

from fastapi import (APIRouter, Body, Depends, HTTPException, Query, Request,
                     Response, status)
from pydantic import TypeAdapter, ValidationError
from starlette.datastructures import FormData, UploadFile

from src.application.use_cases.documents.document_operations import DocumentService
from src.domain.entities.document import DocumentFields
from src.domain.enums import DocumentType
from src.domain.exceptions import (CaseworkException, DocumentNotFoundError,
                                   ForbiddenError, InvalidOwnerIdError,
                                   OwnerNotFoundError, PayloadTooLargeError,
                                   UnsupportedMediaTypeError,
                                   ValidationException)
from src.infrastructure.config.settings import get_settings
from src.infrastructure.exceptions import (StorageException,
                                           StorageNotFoundError,
                                           StorageNotSupportedError,
                                           StoragePermissionError)
from src.presentation.api.dependencies import (
    get_current_user,
    get_document_service,
    get_document_service_transactional,
    get_owner_scope,
)
from src.presentation.api.v1.schemas.document import (
    DocumentDeleteRequest,
    DocumentDeleteResponse,
    DocumentResponse,
    DocumentUploadResponse,
    DocumentUrlResponse,
)
from src.presentation.api.v1.schemas.token import TokenPayload
from src.shared.telemetry.logging import get_logger

logger = get_logger(__name__)

router = APIRouter()

_BOOL_FIELD = TypeAdapter(bool)

# Most specific class first; StorageException is the transient catch-all
_ERROR_STATUS: list[tuple[type[CaseworkException], int]] = [
    (InvalidOwnerIdError, status.HTTP_400_BAD_REQUEST),
    (OwnerNotFoundError, status.HTTP_404_NOT_FOUND),
    (UnsupportedMediaTypeError, status.HTTP_415_UNSUPPORTED_MEDIA_TYPE),
    (PayloadTooLargeError, status.HTTP_413_REQUEST_ENTITY_TOO_LARGE),
    (ForbiddenError, status.HTTP_403_FORBIDDEN),
    (StoragePermissionError, status.HTTP_403_FORBIDDEN),
    (DocumentNotFoundError, status.HTTP_404_NOT_FOUND),
    (StorageNotFoundError, status.HTTP_404_NOT_FOUND),
    (StorageNotSupportedError, status.HTTP_501_NOT_IMPLEMENTED),
    (ValidationException, status.HTTP_422_UNPROCESSABLE_ENTITY),
    (StorageException, status.HTTP_503_SERVICE_UNAVAILABLE),
]


def _http_error(exc: CaseworkException) -> HTTPException:
    """Translate a domain/storage error into a stable status + error code"""
    for error_type, status_code in _ERROR_STATUS:
        if isinstance(exc, error_type):
            break
    else:
        status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    if status_code >= 500:
        logger.error(f"Document operation failed: {exc.message}", extra=exc.details)
    return HTTPException(status_code=status_code, detail=exc.to_dict())


def _parse_valid_until(value: str | None) -> date | None:
    if not value:
        return None
    try:
        return date.fromisoformat(value[:10])
    except ValueError as e:
        raise ValidationException(
            f"validUntil must be an ISO date, got '{value}'", field="validUntil"
        ) from e


def _parse_visibility(value: str | None) -> bool:
    if value is None or value == "":
        return False
    try:
        return _BOOL_FIELD.validate_python(value)
    except ValidationError as e:
        raise ValidationException(
            f"isVisibleToHelper must be a boolean, got '{value}'",
            field="isVisibleToHelper",
        ) from e


def _text_field(form: FormData, key: str) -> str | None:
    value = form.get(key)
    if value is None or isinstance(value, str):
        return value
    raise ValidationException(f"{key} must be a text field", field=key)


async def _read_upload_form(request: Request) -> FormData:
    """
    Parse the multipart body.

    Text parts may grow up to the request ceiling so that oversized form
    fields reach UploadValidator and come back as PAYLOAD_TOO_LARGE.
    """
    return await request.form(max_part_size=get_settings().max_request_size)


@router.post(
    "/{owner_id}/documents",
    response_model=DocumentUploadResponse,
    status_code=status.HTTP_201_CREATED,
    openapi_extra={
        "requestBody": {
            "required": True,
            "content": {
                "multipart/form-data": {
                    "schema": {
                        "type": "object",
                        "required": ["document"],
                        "properties": {
                            "document": {"type": "string", "format": "binary"},
                            "uploadedBy": {"type": "string"},
                            "isVisibleToHelper": {"type": "boolean"},
                            "documentType": {"type": "string"},
                            "name": {"type": "string"},
                            "validUntil": {"type": "string", "format": "date"},
                        },
                    }
                }
            },
        }
    },
)
async def upload_document(
    request: Request,
    owner_id: Annotated[str, Depends(get_owner_scope)],
    doc_service: Annotated[
        DocumentService, Depends(get_document_service_transactional)
    ],
    current_user: Annotated[TokenPayload, Depends(get_current_user)],
):
    """
    Upload a document for a helper.

    Multipart fields: document (file), uploadedBy, isVisibleToHelper,
    documentType, name, validUntil.

    Security:
    - Helper callers may only upload into their own namespace
    - Validates MIME type against the allow-list
    - Validates file and form field sizes against the payload ceiling
    - Storage key is generated server side: {owner_id}/{cuid}-{file name}
    """
    form = await _read_upload_form(request)
    try:
        document = form.get("document")
        if not isinstance(document, UploadFile):
            raise ValidationException("A file is required in field 'document'", field="document")

        uploaded_by = _text_field(form, "uploadedBy")
        document_type = _text_field(form, "documentType")
        name = _text_field(form, "name")
        valid_until = _text_field(form, "validUntil")
        visible = _text_field(form, "isVisibleToHelper")

        text_fields = [uploaded_by, document_type, name, valid_until, visible]
        field_size = max((len(v.encode("utf-8")) for v in text_fields if v), default=0)

        fields = DocumentFields(
            uploaded_by=uploaded_by or current_user.caller_role.value,
            visible_to_owner=_parse_visibility(visible),
            document_type=DocumentType.from_value(document_type),
            display_name=name or "",
            valid_until=_parse_valid_until(valid_until),
        )

        created = await doc_service.upload(
            owner_id=owner_id,
            file_data=document.file,
            filename=document.filename,
            content_type=document.content_type,
            fields=fields,
            field_size_bytes=field_size,
        )
    except CaseworkException as e:
        raise _http_error(e) from e
    finally:
        await form.close()

    return DocumentUploadResponse(document=DocumentResponse.model_validate(created))


@router.get("/{owner_id}/documents", response_model=list[DocumentResponse])
async def list_documents(
    owner_id: Annotated[str, Depends(get_owner_scope)],
    doc_service: Annotated[DocumentService, Depends(get_document_service)],
    current_user: Annotated[TokenPayload, Depends(get_current_user)],
):
    """List a helper's documents filtered by the caller's role"""
    try:
        documents = await doc_service.list(owner_id, current_user.caller_role)
    except CaseworkException as e:
        raise _http_error(e) from e
    return [DocumentResponse.model_validate(doc) for doc in documents]


@router.delete("/{owner_id}/documents", response_model=DocumentDeleteResponse)
async def delete_document(
    owner_id: Annotated[str, Depends(get_owner_scope)],
    doc_service: Annotated[
        DocumentService, Depends(get_document_service_transactional)
    ],
    current_user: Annotated[TokenPayload, Depends(get_current_user)],
    body: Annotated[DocumentDeleteRequest, Body()],
):
    """
    Delete a document (blob and metadata).

    Security: filePath must lie in the "{owner_id}/" namespace. Documents
    hidden from the helper are not found for helper callers.
    """
    try:
        await doc_service.delete(
            body.file_path or "", owner_id, current_user.caller_role
        )
    except CaseworkException as e:
        raise _http_error(e) from e
    return DocumentDeleteResponse()


@router.get("/{owner_id}/documents/download")
async def download_document(
    owner_id: Annotated[str, Depends(get_owner_scope)],
    doc_service: Annotated[DocumentService, Depends(get_document_service)],
    current_user: Annotated[TokenPayload, Depends(get_current_user)],
    file_path: str | None = Query(None, alias="filePath"),
):
    """
    Download a document file.

    Returns the raw bytes with Content-Disposition for browser download.
    """
    try:
        download = await doc_service.download(
            file_path or "", owner_id, current_user.caller_role
        )
    except CaseworkException as e:
        raise _http_error(e) from e

    encoded_name = quote(download.file_name, safe="!~*'()")
    return Response(
        content=download.content,
        media_type=download.mime_type,
        headers={
            "Content-Disposition": (
                f"attachment; filename=\"{encoded_name}\"; filename*=UTF-8''{encoded_name}"
            ),
            "Content-Length": str(download.size_bytes),
            "Cache-Control": "no-cache",
        },
    )


@router.get("/{owner_id}/documents/url", response_model=DocumentUrlResponse)
async def get_document_url(
    owner_id: Annotated[str, Depends(get_owner_scope)],
    doc_service: Annotated[DocumentService, Depends(get_document_service)],
    current_user: Annotated[TokenPayload, Depends(get_current_user)],
    file_path: str | None = Query(None, alias="filePath"),
    expires_in: int = Query(3600, alias="expiresIn", ge=60, le=7 * 24 * 3600),
):
    """Pre-signed direct-read URL (object store backends only)"""
    try:
        url = await doc_service.download_url(
            file_path or "",
            owner_id,
            current_user.caller_role,
            expiration=timedelta(seconds=expires_in),
        )
    except CaseworkException as e:
        raise _http_error(e) from e
    return DocumentUrlResponse(url=url, expires_in=expires_in)
