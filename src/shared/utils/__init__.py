from src.shared.utils.generators import generate_cuid
from src.shared.utils.sanitization import sanitize_filename

__all__ = [
    "generate_cuid",
    "sanitize_filename",
]
