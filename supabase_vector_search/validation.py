# validation.py
"""
Embedding shape and content checks applied before vectors reach a backend.
"""

from __future__ import annotations

import math
import numbers
from collections.abc import Mapping, Sequence, Set
from typing import Any, Optional

import numpy as np

from .base import Document
from .exceptions import DimensionMismatch, InvalidEmbeddingType, InvalidEmbeddingValues


def _is_vector(value: Any) -> bool:
    if isinstance(value, np.ndarray):
        return value.ndim == 1
    if isinstance(value, (str, bytes, bytearray, Mapping, Set)):
        return False
    return isinstance(value, Sequence)


def _is_finite_number(value: Any) -> bool:
    if isinstance(value, (bool, np.bool_)) or not isinstance(value, numbers.Real):
        return False
    return math.isfinite(value)


def validate_embedding_dimensions(
    embedding: Any,
    expected_dimensions: int,
    field: Optional[str] = None,
) -> None:
    """
    Validate embedding dimensions and values.

    Args:
        embedding: Embedding vector to validate
        expected_dimensions: Expected number of dimensions
        field: Name reported on failure (e.g. "query_section_1")

    Raises:
        InvalidEmbeddingType: If the value is not an ordered sequence
        DimensionMismatch: If the length differs from expected_dimensions
        InvalidEmbeddingValues: If a component is non-numeric, NaN or infinite
    """
    if not _is_vector(embedding):
        raise InvalidEmbeddingType(
            f"Embedding must be a sequence of numbers, got {type(embedding).__name__}",
            field,
        )

    if len(embedding) != expected_dimensions:
        raise DimensionMismatch(
            f"Expected {expected_dimensions} dimensions but got {len(embedding)}",
            field,
        )

    for index, value in enumerate(embedding):
        if not _is_finite_number(value):
            raise InvalidEmbeddingValues(
                f"Embedding must contain only valid numbers (index {index}: {value!r})",
                field,
            )


def validate_document_embeddings(document: Document, expected_dimensions: int) -> None:
    """Run validate_embedding_dimensions on every embedding the document carries."""
    for slot, vector in document.embeddings().items():
        validate_embedding_dimensions(vector, expected_dimensions, field=slot.column)
