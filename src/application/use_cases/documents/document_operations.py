"""
Document operations use case.

Orchestrates helper document upload/list/download/delete, coordinating the
blob store with the metadata store.
"""

from __future__ import annotations

import logging
from datetime import timedelta
from typing import TYPE_CHECKING, BinaryIO

from src.application.services.storage_key_policy import StorageKeyPolicy
from src.application.services.upload_validator import (UploadValidator,
                                                       normalize_content_type)
from src.domain.entities.document import (DocumentDownload, DocumentFields,
                                          ReconciliationReport)
from src.domain.enums import CallerRole
from src.domain.exceptions import (DocumentNotFoundError, ForbiddenError,
                                   OwnerNotFoundError, ValidationException)
from src.infrastructure.exceptions import StorageException, StorageNotFoundError

if TYPE_CHECKING:
    from src.application.interfaces.services import (IDocumentMetadataStore,
                                                     IHelperDirectory)
    from src.application.interfaces.storage import IBlobStore
    from src.infrastructure.persistence.models.document import HelperDocument

logger = logging.getLogger(__name__)

DEFAULT_MIME_TYPE = "application/octet-stream"

# Response content type is inferred from the key's extension
EXTENSION_MIME_TYPES = {
    "pdf": "application/pdf",
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "png": "image/png",
    "gif": "image/gif",
    "doc": "application/msword",
    "docx": "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
}


def infer_mime_type(file_name: str) -> str:
    """Map a file extension to a content type, defaulting to octet-stream"""
    _, dot, extension = file_name.rpartition(".")
    if not dot:
        return DEFAULT_MIME_TYPE
    return EXTENSION_MIME_TYPES.get(extension.lower(), DEFAULT_MIME_TYPE)


def _payload_size(file_data: BinaryIO) -> int:
    file_data.seek(0, 2)  # Seek to end
    size = file_data.tell()
    file_data.seek(0)  # Reset
    return size


class DocumentService:
    """
    Orchestrates helper document storage coordinating blob store + metadata store.

    Responsibilities:
    - Validate uploads before any byte is persisted
    - Generate owner-scoped storage keys
    - Write blob before metadata, compensating on metadata failure
    - Filter listings by caller role
    - Fail closed on ownership mismatches before touching any backend
    """

    def __init__(
        self,
        blob_store: IBlobStore,
        metadata_store: IDocumentMetadataStore,
        helper_directory: IHelperDirectory,
        validator: UploadValidator | None = None,
        key_policy: StorageKeyPolicy | None = None,
    ) -> None:
        self.blob_store = blob_store
        self.metadata_store = metadata_store
        self.helper_directory = helper_directory
        self.validator = validator or UploadValidator()
        self.key_policy = key_policy or StorageKeyPolicy()

    async def upload(
        self,
        owner_id: str,
        file_data: BinaryIO,
        filename: str | None,
        content_type: str | None,
        fields: DocumentFields,
        field_size_bytes: int = 0,
    ) -> HelperDocument:
        """
        Store a new document for a helper.

        Workflow:
        1. Validate owner id and confirm the helper exists
        2. Validate content type and sizes
        3. Derive a fresh storage key
        4. Write bytes to the blob store
        5. Create the metadata record (compensating blob delete on failure)

        Args:
            owner_id: Helper the document belongs to
            file_data: File binary data
            filename: Client-supplied file name
            content_type: Client-declared MIME type
            fields: Accompanying form fields
            field_size_bytes: Size of the largest accompanying form field

        Returns:
            HelperDocument: Created metadata record

        Raises:
            InvalidOwnerIdError, OwnerNotFoundError: Bad target helper
            UnsupportedMediaTypeError, PayloadTooLargeError, ValidationException: Rejected upload
            StorageException: Blob store failure
        """
        from src.infrastructure.persistence.models.document import HelperDocument

        self.key_policy.validate_owner_id(owner_id)
        try:
            fields.validate()
        except ValueError as e:
            raise ValidationException(str(e), field="uploadedBy") from e

        if not await self.helper_directory.exists(owner_id):
            raise OwnerNotFoundError(owner_id)

        size_bytes = _payload_size(file_data)
        self.validator.validate(content_type, size_bytes, field_size_bytes)
        mime_type = normalize_content_type(content_type)

        storage_key = self.key_policy.derive_key(owner_id, filename)

        result = await self.blob_store.put(
            storage_key,
            file_data,
            mime_type,
            metadata={"owner_id": owner_id, "uploaded_by": fields.uploaded_by},
        )

        document = HelperDocument(
            owner_id=owner_id,
            storage_key=storage_key,
            document_type=fields.document_type.value,
            display_name=fields.display_name,
            original_filename=filename or self.key_policy.file_name(storage_key),
            mime_type=mime_type,
            size_bytes=result["size"],
            checksum=result["checksum"],
            uploaded_by=fields.uploaded_by,
            visible_to_owner=fields.visible_to_owner,
            valid_until=fields.valid_until,
        )

        try:
            created = await self.metadata_store.create(document)
        except Exception:
            await self._discard_orphan(storage_key)
            raise

        logger.info(
            "Document uploaded",
            extra={"owner_id": owner_id, "storage_key": storage_key, "size_bytes": result["size"]},
        )
        return created

    async def _discard_orphan(self, storage_key: str) -> None:
        """Single best-effort delete of a blob whose metadata write failed."""
        try:
            await self.blob_store.delete(storage_key)
            logger.warning(
                "Metadata write failed, orphaned blob removed",
                extra={"storage_key": storage_key},
            )
        except StorageException as cleanup_error:
            logger.error(
                f"Metadata write failed and orphaned blob could not be removed: {cleanup_error}",
                extra={"storage_key": storage_key},
            )

    async def list(self, owner_id: str, caller_role: CallerRole) -> list[HelperDocument]:
        """
        Documents of a helper visible to the caller, most recent first.

        Helpers (and unknown roles) only see documents marked visible to the owner.
        """
        self.key_policy.validate_owner_id(owner_id)
        documents = await self.metadata_store.list_by_owner(owner_id)

        if caller_role.is_privileged:
            return documents
        return [doc for doc in documents if doc.visible_to_owner]

    def _require_ownership(self, storage_key: str, owner_id: str) -> None:
        if not storage_key:
            raise ValidationException("filePath is required", field="filePath")
        if not self.key_policy.verify_ownership(storage_key, owner_id):
            logger.warning(
                "Storage key outside owner namespace",
                extra={"storage_key": storage_key, "owner_id": owner_id},
            )
            raise ForbiddenError(storage_key, owner_id)

    async def _get_readable_record(
        self, storage_key: str, owner_id: str, caller_role: CallerRole
    ) -> HelperDocument:
        document = await self.metadata_store.get_by_key(storage_key)
        if document is None:
            raise DocumentNotFoundError(storage_key)
        if document.owner_id != owner_id:
            logger.warning(
                "Document record belongs to another owner",
                extra={"storage_key": storage_key, "owner_id": owner_id},
            )
            raise ForbiddenError(storage_key, owner_id)
        if not caller_role.is_privileged and not document.visible_to_owner:
            # Hidden documents do not exist from the helper's point of view
            raise DocumentNotFoundError(storage_key)
        return document

    async def download(
        self,
        storage_key: str,
        requesting_owner_id: str,
        caller_role: CallerRole = CallerRole.HELPER,
    ) -> DocumentDownload:
        """
        Fetch document bytes for an authorized owner.

        Raises:
            ForbiddenError: Key outside the owner's namespace (no backend call made)
            DocumentNotFoundError: No record, or blob missing
            StorageException: Blob store failure
        """
        self._require_ownership(storage_key, requesting_owner_id)
        await self._get_readable_record(storage_key, requesting_owner_id, caller_role)

        try:
            content = await self.blob_store.get(storage_key)
        except StorageNotFoundError as e:
            raise DocumentNotFoundError(storage_key) from e

        file_name = self.key_policy.file_name(storage_key)
        return DocumentDownload(
            content=content,
            mime_type=infer_mime_type(file_name),
            file_name=file_name,
        )

    async def download_url(
        self,
        storage_key: str,
        requesting_owner_id: str,
        caller_role: CallerRole = CallerRole.HELPER,
        expiration: timedelta = timedelta(hours=1),
    ) -> str:
        """Direct-read URL for an authorized owner (same checks as download)"""
        self._require_ownership(storage_key, requesting_owner_id)
        await self._get_readable_record(storage_key, requesting_owner_id, caller_role)

        try:
            return await self.blob_store.generate_download_url(storage_key, expiration)
        except StorageNotFoundError as e:
            raise DocumentNotFoundError(storage_key) from e

    async def delete(
        self,
        storage_key: str,
        requesting_owner_id: str,
        caller_role: CallerRole = CallerRole.HELPER,
    ) -> None:
        """
        Remove blob and metadata for a document.

        Converges to "nothing remains": if only one side exists it is still
        removed and the call succeeds.

        Raises:
            ForbiddenError: Key outside the owner's namespace (no backend call made)
            DocumentNotFoundError: Neither blob nor record exists, or the record
                is hidden from a helper caller
            StorageException: Blob store failure
        """
        self._require_ownership(storage_key, requesting_owner_id)

        document = await self.metadata_store.get_by_key(storage_key)
        if document is not None and document.owner_id != requesting_owner_id:
            logger.warning(
                "Document record belongs to another owner",
                extra={"storage_key": storage_key, "owner_id": requesting_owner_id},
            )
            raise ForbiddenError(storage_key, requesting_owner_id)
        if (
            document is not None
            and not caller_role.is_privileged
            and not document.visible_to_owner
        ):
            raise DocumentNotFoundError(storage_key)

        blob_removed = True
        try:
            await self.blob_store.delete(storage_key)
        except StorageNotFoundError:
            blob_removed = False

        record_removed = False
        if document is not None:
            await self.metadata_store.delete_by_key(storage_key)
            record_removed = True

        if not blob_removed and not record_removed:
            raise DocumentNotFoundError(storage_key)

        if blob_removed != record_removed:
            logger.warning(
                "Deleted half-present document",
                extra={
                    "storage_key": storage_key,
                    "blob_removed": blob_removed,
                    "record_removed": record_removed,
                },
            )
        logger.info("Document deleted", extra={"storage_key": storage_key})

    async def reconcile(self, owner_id: str, purge: bool = False) -> ReconciliationReport:
        """
        Compare the owner's blob listing with metadata records.

        Orphan blobs (no record) are deleted when purge is set; dangling
        records (no blob) are only reported.
        """
        prefix = self.key_policy.owner_prefix(owner_id)
        blob_keys = set(await self.blob_store.list(prefix))
        record_keys = set(await self.metadata_store.list_keys_by_owner(owner_id))

        report = ReconciliationReport(
            owner_id=owner_id,
            orphan_blobs=sorted(blob_keys - record_keys),
            dangling_records=sorted(record_keys - blob_keys),
        )

        if purge:
            for storage_key in report.orphan_blobs:
                try:
                    await self.blob_store.delete(storage_key)
                except StorageNotFoundError:
                    continue
                report.purged_blobs.append(storage_key)
                logger.info("Orphan blob purged", extra={"storage_key": storage_key})

        return report
