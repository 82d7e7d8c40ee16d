"""Supabase Vector Search - single-vector and weighted multi-vector search over pgvector."""

from .base import (
    Embedding,
    Slot,
    Document,
    DocumentSections,
    DocumentEmbeddings,
    SearchQuery,
    WeightedSearchQuery,
    SearchResult,
    SimilarityBackend,
)
from .exceptions import (
    VectorSearchException,
    ValidationError,
    InvalidWeights,
    EmbeddingValidationError,
    InvalidEmbeddingType,
    DimensionMismatch,
    InvalidEmbeddingValues,
    SearchError,
    BackendError,
    EmbeddingError,
)
from .config import SupabaseConfig, setup_logging
from .weights import SlotWeights, normalize_weights
from .validation import validate_embedding_dimensions, validate_document_embeddings
from .utils.retry import RetryOptions, with_retry, with_conditional_retry, is_retryable_error
from .search import SimilarityBackendAdapter, SearchManager
from .storage import SupabaseSimilarityBackend, InMemorySimilarityBackend
from .documents import DocumentManager
from .client import VectorSearchClient, create_vector_search_client

__version__ = "1.0.0"

__all__ = [
    'Embedding',
    'Slot',
    'Document',
    'DocumentSections',
    'DocumentEmbeddings',
    'SearchQuery',
    'WeightedSearchQuery',
    'SearchResult',
    'SimilarityBackend',
    'VectorSearchException',
    'ValidationError',
    'InvalidWeights',
    'EmbeddingValidationError',
    'InvalidEmbeddingType',
    'DimensionMismatch',
    'InvalidEmbeddingValues',
    'SearchError',
    'BackendError',
    'EmbeddingError',
    'SupabaseConfig',
    'setup_logging',
    'SlotWeights',
    'normalize_weights',
    'validate_embedding_dimensions',
    'validate_document_embeddings',
    'RetryOptions',
    'with_retry',
    'with_conditional_retry',
    'is_retryable_error',
    'SimilarityBackendAdapter',
    'SearchManager',
    'SupabaseSimilarityBackend',
    'InMemorySimilarityBackend',
    'DocumentManager',
    'VectorSearchClient',
    'create_vector_search_client',
]
