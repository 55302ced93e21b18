"""Domain entities."""

from src.domain.entities.document import (DocumentDownload, DocumentFields,
                                          ReconciliationReport)

__all__ = [
    "DocumentDownload",
    "DocumentFields",
    "ReconciliationReport",
]
