"""Domain enumerations for the helper document service."""

from enum import Enum


class CallerRole(str, Enum):
    """Role of the authenticated caller"""

    HELPER = "helper"
    JUGENDAMT = "jugendamt"
    ADMIN = "admin"

    @classmethod
    def values(cls) -> list[str]:
        """Get all valid values"""
        return [role.value for role in cls]

    @classmethod
    def from_value(cls, value: str | None) -> "CallerRole":
        """Parse a role claim; anything unrecognized is least-privileged."""
        if value is None:
            return cls.HELPER
        try:
            return cls(value.strip().lower())
        except ValueError:
            return cls.HELPER

    @property
    def is_privileged(self) -> bool:
        """Privileged roles see documents hidden from the owning helper."""
        return self in (CallerRole.JUGENDAMT, CallerRole.ADMIN)


class DocumentType(str, Enum):
    """Document classification"""

    CERTIFICATE = "certificate"
    CONTRACT = "contract"
    ID_PROOF = "id_proof"
    OTHER = "other"

    @classmethod
    def values(cls) -> list[str]:
        """Get all valid values"""
        return [doc_type.value for doc_type in cls]

    @classmethod
    def from_value(cls, value: str | None) -> "DocumentType":
        """Parse a free-form label, falling back to OTHER."""
        if not value:
            return cls.OTHER
        try:
            return cls(value.strip().lower().replace("-", "_"))
        except ValueError:
            return cls.OTHER
