"""Tag generation and reconciliation modules."""

from .reconciler import (
    SIMILARITY_THRESHOLD,
    find_similar_tag,
    reconcile,
    similarity,
)
from .service import (
    ConnectivityResult,
    TagGenerationService,
    generate_tags,
)

__all__ = [
    "SIMILARITY_THRESHOLD",
    "find_similar_tag",
    "reconcile",
    "similarity",
    "ConnectivityResult",
    "TagGenerationService",
    "generate_tags",
]
