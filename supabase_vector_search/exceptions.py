"""Custom exceptions for vector search operations."""

from typing import Optional


class VectorSearchException(Exception):
    """Base exception for vector search errors."""
    pass


class ValidationError(VectorSearchException):
    """Raised when caller-supplied input is structurally invalid."""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.field = field


class InvalidWeights(ValidationError):
    """Raised when slot weights cannot be normalized."""

    def __init__(self, message: str, field: Optional[str] = "weights"):
        super().__init__(message, field)


class EmbeddingValidationError(ValidationError):
    """Raised when a vector has the wrong shape or content."""

    code = "INVALID_EMBEDDING"

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message, field)


class InvalidEmbeddingType(EmbeddingValidationError):
    """Raised when an embedding is not an ordered sequence of numbers."""

    code = "INVALID_EMBEDDING_TYPE"


class DimensionMismatch(EmbeddingValidationError):
    """Raised when an embedding has the wrong number of dimensions."""

    code = "DIMENSION_MISMATCH"


class InvalidEmbeddingValues(EmbeddingValidationError):
    """Raised when an embedding contains non-numeric, NaN or infinite values."""

    code = "INVALID_EMBEDDING_VALUES"


class SearchError(VectorSearchException):
    """Raised when the backend fails or an unexpected error occurs while talking to it."""

    def __init__(self, message: str, code: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.code = code


class BackendError(VectorSearchException):
    """Raised by similarity backends when the engine reports a failure."""

    def __init__(self, message: str, code: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.code = code


class EmbeddingError(VectorSearchException):
    """Raised when embedding generation fails."""

    def __init__(self, message: str, code: Optional[str] = None, provider: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.code = code
        self.provider = provider
