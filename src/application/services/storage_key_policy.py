"""
Storage key policy.

Every blob belonging to a helper lives under "{owner_id}/". The prefix is
the only authorization anchor for download and delete, so it is always built
from a verified owner id and never taken from client input.
"""

from src.domain.exceptions import InvalidOwnerIdError
from src.shared.utils.generators import generate_cuid
from src.shared.utils.sanitization import sanitize_filename

SEPARATOR = "/"


class StorageKeyPolicy:
    """Derives and verifies owner-scoped storage keys."""

    def validate_owner_id(self, owner_id: str) -> str:
        """
        Ensure an owner id can serve as a namespace root.

        Raises:
            InvalidOwnerIdError: empty, or contains a separator or ".."
        """
        if (
            not owner_id
            or not owner_id.strip()
            or SEPARATOR in owner_id
            or "\\" in owner_id
            or ".." in owner_id
        ):
            raise InvalidOwnerIdError(owner_id)
        return owner_id

    def owner_prefix(self, owner_id: str) -> str:
        return f"{self.validate_owner_id(owner_id)}{SEPARATOR}"

    def derive_key(self, owner_id: str, original_filename: str | None) -> str:
        """
        Build a fresh key for a new upload.

        Format: {owner_id}/{cuid}-{sanitized original name}

        Args:
            owner_id: Verified helper id
            original_filename: Client-supplied file name

        Returns:
            str: Storage key unique to this upload
        """
        safe_name = sanitize_filename(original_filename)
        return f"{self.owner_prefix(owner_id)}{generate_cuid()}-{safe_name}"

    def verify_ownership(self, storage_key: str, owner_id: str) -> bool:
        """
        True iff storage_key sits directly in owner_id's namespace.

        Invalid owner ids and malformed remainders (traversal, backslashes,
        empty segments) never verify.
        """
        try:
            prefix = self.owner_prefix(owner_id)
        except InvalidOwnerIdError:
            return False

        if not storage_key or not storage_key.startswith(prefix):
            return False

        remainder = storage_key[len(prefix):]
        if not remainder or "\\" in remainder:
            return False

        segments = remainder.split(SEPARATOR)
        return all(segment and segment not in (".", "..") for segment in segments)

    @staticmethod
    def file_name(storage_key: str) -> str:
        """Final path segment of a key"""
        return storage_key.rsplit(SEPARATOR, 1)[-1]
