"""
SQLAlchemy mixins for common model patterns.

These mixins provide reusable column definitions to follow DRY principles
and ensure consistency across all models.
"""
from datetime import UTC, datetime

from sqlalchemy import DateTime, String
from sqlalchemy.orm import Mapped, declared_attr, mapped_column
from sqlalchemy.sql import func

from src.shared.utils.generators import generate_cuid


def _utc_now() -> datetime:
    return datetime.now(UTC)


class CuidMixin:
    """
    Mixin for models using CUID as primary key.

    Provides:
        - id: String primary key with automatic CUID generation
    """

    @declared_attr
    def id(cls) -> Mapped[str]:
        return mapped_column(String, primary_key=True, default=generate_cuid)


class CreatedAtMixin:
    """
    Mixin for write-once records.

    Provides:
        - created_at: Timestamp set on creation, never updated

    Note: The client-side default keeps sub-second ordering on backends
    whose CURRENT_TIMESTAMP has only second resolution.
    """

    @declared_attr
    def created_at(cls) -> Mapped[datetime]:
        return mapped_column(
            DateTime(timezone=True),
            default=_utc_now,
            server_default=func.now(),
            nullable=False,
            index=True,
        )
