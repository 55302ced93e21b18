"""Input sanitization utilities."""

import re
import unicodedata


class InputSanitizer:
    """Sanitize client-supplied names before they reach storage keys."""

    # Characters allowed in a stored file name
    UNSAFE_FILENAME_CHARS = re.compile(r"[^A-Za-z0-9._-]+")

    MAX_FILENAME_LENGTH = 200
    FALLBACK_FILENAME = "document"

    # Local blob store keeps its sidecars under this suffix
    RESERVED_SUFFIX = ".meta.json"

    @classmethod
    def sanitize_filename(cls, value: str | None) -> str:
        """
        Reduce a client file name to a safe single path segment.

        - Keeps only the final segment (both / and \\ separators)
        - Transliterates accents (Zeugnis_Müller.pdf -> Zeugnis_Muller.pdf)
        - Replaces any other character run with "_"
        - Strips leading dots so no hidden or relative names survive
        - Caps the length while keeping the extension
        - Renames a trailing ".meta.json" so the name never collides with a sidecar
        """
        if not value:
            return cls.FALLBACK_FILENAME

        name = re.split(r"[\\/]", value)[-1]
        name = (
            unicodedata.normalize("NFKD", name)
            .encode("ascii", "ignore")
            .decode("ascii")
        )
        name = cls.UNSAFE_FILENAME_CHARS.sub("_", name).lstrip(".")

        if not name.strip("_"):
            return cls.FALLBACK_FILENAME

        if len(name) > cls.MAX_FILENAME_LENGTH:
            stem, dot, extension = name.rpartition(".")
            if dot and 0 < len(extension) < 16:
                keep = cls.MAX_FILENAME_LENGTH - len(extension) - 1
                name = f"{stem[:keep]}.{extension}"
            else:
                name = name[: cls.MAX_FILENAME_LENGTH]

        if name.lower().endswith(cls.RESERVED_SUFFIX):
            name = name[: -len(cls.RESERVED_SUFFIX)] + "_meta.json"

        return name


# Convenience functions
def sanitize_filename(value: str | None) -> str:
    """Sanitize a client-supplied file name."""
    return InputSanitizer.sanitize_filename(value)

