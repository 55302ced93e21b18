from src.infrastructure.persistence.models.document import HelperDocument
from src.infrastructure.persistence.models.helper import Helper
# Mixins for model composition
from src.infrastructure.persistence.models.mixins import (CreatedAtMixin,
                                                          CuidMixin)

__all__ = [
    # Models
    "Helper",
    "HelperDocument",
    # Mixins
    "CuidMixin",
    "CreatedAtMixin",
]
