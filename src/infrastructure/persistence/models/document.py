from datetime import date

from sqlalchemy import BigInteger, Boolean, Date, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from src.domain.enums import DocumentType
from src.infrastructure.persistence.database import Base
from src.infrastructure.persistence.models.mixins import (CreatedAtMixin,
                                                          CuidMixin)


class HelperDocument(CuidMixin, CreatedAtMixin, Base):
    """
    Metadata record for one stored helper attachment.

    Inherits:
        - id: CUID primary key
        - created_at: Creation timestamp (write-once)

    Records are never updated in place; a replacement is a new record
    with a new storage key.
    """

    __tablename__ = "helper_document"

    owner_id: Mapped[str] = mapped_column(String, nullable=False, index=True)

    # Storage ("{owner_id}/{generated file name}")
    storage_key: Mapped[str] = mapped_column(String, nullable=False, unique=True)

    # Classification
    document_type: Mapped[str] = mapped_column(
        String, nullable=False, default=DocumentType.OTHER.value
    )
    display_name: Mapped[str] = mapped_column(String, nullable=False, default="")

    # File metadata
    original_filename: Mapped[str] = mapped_column(String, nullable=False)
    mime_type: Mapped[str] = mapped_column(String, nullable=False)
    size_bytes: Mapped[int] = mapped_column(BigInteger, nullable=False)
    checksum: Mapped[str] = mapped_column(String(64), nullable=False)  # SHA-256

    # Access and audit
    uploaded_by: Mapped[str] = mapped_column(String, nullable=False)
    visible_to_owner: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False
    )
    valid_until: Mapped[date | None] = mapped_column(Date, nullable=True)

    __table_args__ = (Index("ix_helper_document_owner_created", "owner_id", "created_at"),)
