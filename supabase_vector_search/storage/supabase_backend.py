# storage/supabase_backend.py
"""
Supabase similarity backend.

Scoring runs inside Postgres (pgvector) through the match_documents and
match_documents_weighted functions from supabase/migrations.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Sequence

from postgrest.exceptions import APIError
from supabase import AsyncClient

from ..base import SECTION_SLOTS, Embedding, Slot
from ..config import MATCH_DOCUMENTS_FUNCTION, MATCH_DOCUMENTS_WEIGHTED_FUNCTION
from ..exceptions import BackendError

logger = logging.getLogger(__name__)


class SupabaseSimilarityBackend:
    """
    Runs vector similarity search through Supabase RPC calls.

    The client is shared with other components; this class holds no
    per-call state.
    """

    def __init__(
        self,
        client: AsyncClient,
        match_function: str = MATCH_DOCUMENTS_FUNCTION,
        weighted_match_function: str = MATCH_DOCUMENTS_WEIGHTED_FUNCTION,
    ):
        """
        Args:
            client: Async Supabase client
            match_function: Postgres function for single-vector search
            weighted_match_function: Postgres function for weighted search
        """
        self.client = client
        self.match_function = match_function
        self.weighted_match_function = weighted_match_function

    async def _call(self, fn: str, params: Dict[str, Any]) -> List[Dict[str, Any]]:
        try:
            response = await self.client.rpc(fn, params).execute()
        except APIError as e:
            logger.error(f"❌ {fn} failed: {e.message} (code={e.code})")
            raise BackendError(e.message or str(e), e.code) from e

        results = response.data if hasattr(response, "data") else []
        return results or []

    async def find_by_single_vector(
        self,
        vector: Embedding,
        threshold: float,
        limit: int,
        metadata_filter: Optional[Dict[str, Any]],
    ) -> List[Dict[str, Any]]:
        return await self._call(
            self.match_function,
            {
                "query_embedding": vector,
                "match_threshold": threshold,
                "match_count": limit,
                "filter_metadata": metadata_filter,
            },
        )

    async def find_by_weighted_vectors(
        self,
        main_vector: Embedding,
        section_vectors: Sequence[Optional[Embedding]],
        weights: Sequence[float],
        threshold: float,
        limit: int,
        metadata_filter: Optional[Dict[str, Any]],
    ) -> List[Dict[str, Any]]:
        params: Dict[str, Any] = {Slot.MAIN.query_param: main_vector}
        for slot, vector in zip(SECTION_SLOTS, section_vectors):
            params[slot.query_param] = vector
        for slot, weight in zip(Slot, weights):
            params[slot.weight_param] = weight
        params.update(
            {
                "match_threshold": threshold,
                "match_count": limit,
                "filter_metadata": metadata_filter,
            }
        )
        return await self._call(self.weighted_match_function, params)
