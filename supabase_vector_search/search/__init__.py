"""Vector search: backend adapter and retrying search manager."""

from .adapter import SimilarityBackendAdapter, SingleVectorRequest, WeightedVectorRequest
from .manager import SearchManager

__all__ = [
    'SimilarityBackendAdapter',
    'SingleVectorRequest',
    'WeightedVectorRequest',
    'SearchManager',
]
