"""
Document domain values.

These represent the business shapes exchanged with the document service,
independent of how records are stored in the database.
"""

from dataclasses import dataclass, field
from datetime import date

from src.domain.enums import DocumentType


@dataclass(frozen=True)
class DocumentFields:
    """Form fields accompanying an uploaded file."""

    uploaded_by: str
    visible_to_owner: bool = False
    document_type: DocumentType = DocumentType.OTHER
    display_name: str = ""
    valid_until: date | None = None

    def validate(self) -> bool:
        """Validate upload field rules"""
        if not self.uploaded_by:
            raise ValueError("uploaded_by is required")
        return True


@dataclass(frozen=True)
class DocumentDownload:
    """Materialized document content ready for an HTTP response."""

    content: bytes
    mime_type: str
    file_name: str

    @property
    def size_bytes(self) -> int:
        return len(self.content)


@dataclass
class ReconciliationReport:
    """Result of comparing blob listings against metadata for one owner."""

    owner_id: str
    orphan_blobs: list[str] = field(default_factory=list)
    dangling_records: list[str] = field(default_factory=list)
    purged_blobs: list[str] = field(default_factory=list)

    @property
    def is_consistent(self) -> bool:
        return not self.orphan_blobs and not self.dangling_records

    @property
    def needs_attention(self) -> bool:
        """Dangling records, or orphan blobs that were not purged"""
        unpurged = set(self.orphan_blobs) - set(self.purged_blobs)
        return bool(self.dangling_records or unpurged)
