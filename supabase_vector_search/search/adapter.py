# search/adapter.py
"""
Translates search queries into similarity-backend calls and maps the rows
back into SearchResult objects.

Weighted scoring contract the backends implement:
    for each slot (main, section_1..3) present on both the query and the
    document, similarity = 1 - cosine_distance; the aggregate is the sum of
    similarity * weight over those slots. Absent slots add nothing and are
    reported as None. Rows with aggregate >= threshold whose metadata
    contains the filter are returned, best first, capped at the count.
"""

from __future__ import annotations

import asyncio
import logging
import numbers
from dataclasses import dataclass
from collections.abc import Sequence
from typing import Any, Awaitable, Dict, List, Optional, Tuple

import numpy as np

from ..base import (
    SECTION_SLOTS,
    Embedding,
    SearchQuery,
    SearchResult,
    SimilarityBackend,
    Slot,
    WeightedSearchQuery,
)
from ..config import DEFAULT_MATCH_COUNT, DEFAULT_MATCH_THRESHOLD
from ..exceptions import BackendError, InvalidEmbeddingType, SearchError, ValidationError
from ..validation import validate_embedding_dimensions
from ..weights import SlotWeights, normalize_weights


@dataclass(frozen=True)
class SingleVectorRequest:
    vector: Embedding
    threshold: float
    limit: int
    metadata_filter: Optional[Dict[str, Any]]


@dataclass(frozen=True)
class WeightedVectorRequest:
    main_vector: Embedding
    section_vectors: Tuple[Optional[Embedding], ...]
    weights: SlotWeights
    threshold: float
    limit: int
    metadata_filter: Optional[Dict[str, Any]]


def _require_sequence(vector: Any, field: str) -> None:
    if not isinstance(vector, (Sequence, np.ndarray)) or isinstance(vector, (str, bytes)):
        raise InvalidEmbeddingType(
            f"Embedding must be a sequence of numbers, got {type(vector).__name__}", field
        )


def _require_query_embedding(vector: Optional[Embedding]) -> None:
    if vector is None:
        raise ValidationError("Query embedding is required", Slot.MAIN.query_param)
    _require_sequence(vector, Slot.MAIN.query_param)
    if len(vector) == 0:
        raise ValidationError("Query embedding is required", Slot.MAIN.query_param)


def _resolve_threshold(value: Optional[float]) -> float:
    if value is None:
        return DEFAULT_MATCH_THRESHOLD
    if isinstance(value, bool) or not isinstance(value, numbers.Real) or not 0.0 <= value <= 1.0:
        raise ValidationError(f"match_threshold must be between 0 and 1, got {value}", "match_threshold")
    return float(value)


def _resolve_count(value: Optional[int]) -> int:
    if value is None:
        return DEFAULT_MATCH_COUNT
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise ValidationError(f"match_count must be a positive integer, got {value!r}", "match_count")
    return value


class SimilarityBackendAdapter:
    """
    Validates queries, normalizes weights and talks to a SimilarityBackend.

    prepare_* never touch the backend; dispatch_* perform exactly one
    backend round trip. The search methods do both.
    """

    def __init__(
        self,
        backend: SimilarityBackend,
        logger: Optional[logging.Logger] = None,
        request_timeout: Optional[float] = None,
    ):
        """
        Args:
            backend: Similarity engine to delegate to
            logger: Logger for search events (module logger by default)
            request_timeout: Seconds allowed per backend call (None = no limit)
        """
        self.backend = backend
        self.logger = logger or logging.getLogger(__name__)
        self.request_timeout = request_timeout

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def prepare_single(
        self, query: SearchQuery, expected_dimensions: Optional[int] = None
    ) -> SingleVectorRequest:
        _require_query_embedding(query.query_embedding)
        if expected_dimensions is not None:
            validate_embedding_dimensions(query.query_embedding, expected_dimensions, Slot.MAIN.query_param)

        return SingleVectorRequest(
            vector=list(query.query_embedding),
            threshold=_resolve_threshold(query.match_threshold),
            limit=_resolve_count(query.match_count),
            metadata_filter=query.filter_metadata or None,
        )

    def prepare_weighted(
        self, query: WeightedSearchQuery, expected_dimensions: Optional[int] = None
    ) -> WeightedVectorRequest:
        _require_query_embedding(query.query_embedding)
        for slot in SECTION_SLOTS:
            if query.query_for(slot) is not None:
                _require_sequence(query.query_for(slot), slot.query_param)
        if expected_dimensions is not None:
            for slot in Slot:
                vector = query.query_for(slot)
                if vector is not None:
                    validate_embedding_dimensions(vector, expected_dimensions, slot.query_param)

        weights = normalize_weights(
            query.weight_main,
            query.weight_section_1,
            query.weight_section_2,
            query.weight_section_3,
            log=self.logger,
        )

        section_vectors = tuple(
            list(query.query_for(slot)) if query.query_for(slot) is not None else None
            for slot in SECTION_SLOTS
        )

        return WeightedVectorRequest(
            main_vector=list(query.query_embedding),
            section_vectors=section_vectors,
            weights=weights,
            threshold=_resolve_threshold(query.match_threshold),
            limit=_resolve_count(query.match_count),
            metadata_filter=query.filter_metadata or None,
        )

    # ------------------------------------------------------------------
    # Backend calls
    # ------------------------------------------------------------------

    async def _run(self, call: Awaitable[List[Dict[str, Any]]], label: str) -> List[SearchResult]:
        try:
            if self.request_timeout is not None:
                rows = await asyncio.wait_for(call, timeout=self.request_timeout)
            else:
                rows = await call
        except (ValidationError, SearchError):
            raise
        except BackendError as e:
            raise SearchError(f"{label} failed: {e.message}", e.code) from e
        except asyncio.TimeoutError as e:
            raise SearchError(f"{label} timed out", "TIMEOUT") from e
        except Exception as e:
            raise SearchError(f"Unexpected error during {label.lower()}: {e}") from e

        return [SearchResult.from_row(row) for row in rows or []]

    async def dispatch_single(self, request: SingleVectorRequest) -> List[SearchResult]:
        results = await self._run(
            self.backend.find_by_single_vector(
                request.vector,
                request.threshold,
                request.limit,
                request.metadata_filter,
            ),
            "Search",
        )
        for result in results:
            # every row matched on its main embedding
            if result.similarity_main is None:
                result.similarity_main = result.similarity
        self.logger.info(
            f"Found {len(results)} matching documents "
            f"(threshold={request.threshold}, limit={request.limit})"
        )
        return results

    async def dispatch_weighted(self, request: WeightedVectorRequest) -> List[SearchResult]:
        results = await self._run(
            self.backend.find_by_weighted_vectors(
                request.main_vector,
                list(request.section_vectors),
                request.weights.as_list(),
                request.threshold,
                request.limit,
                request.metadata_filter,
            ),
            "Weighted search",
        )
        self.logger.info(
            f"Found {len(results)} matching documents with weights {request.weights.as_list()} "
            f"(threshold={request.threshold}, limit={request.limit})"
        )
        return results

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def single_vector_search(
        self, query: SearchQuery, expected_dimensions: Optional[int] = None
    ) -> List[SearchResult]:
        """
        Search for documents using single-vector similarity.

        Args:
            query: Query vector, threshold (default 0.5), count (default 10), filter
            expected_dimensions: Validate the query vector against this size

        Returns:
            Matching documents, best first (possibly empty)

        Raises:
            ValidationError: If the query is malformed
            SearchError: If the backend call fails
        """
        return await self.dispatch_single(self.prepare_single(query, expected_dimensions))

    async def weighted_vector_search(
        self, query: WeightedSearchQuery, expected_dimensions: Optional[int] = None
    ) -> List[SearchResult]:
        """
        Search for documents using weighted multi-vector similarity.

        Weights are normalized to sum to 1.0 before dispatch.

        Raises:
            ValidationError: If a query vector or the weights are invalid
            SearchError: If the backend call fails
        """
        return await self.dispatch_weighted(self.prepare_weighted(query, expected_dimensions))
