from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from src.infrastructure.persistence.database import Base


class Helper(Base):
    """
    Read-only mapping of the helper directory table.

    The table is owned by the case-management backend; this service only
    checks that an upload targets an existing helper.
    """

    __tablename__ = "helfer"

    id: Mapped[str] = mapped_column("helfer_id", String, primary_key=True)
    name: Mapped[str | None] = mapped_column(String, nullable=True)
