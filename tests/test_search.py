"""
Tests for the backend adapter and the retrying search manager.
"""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest
from postgrest.exceptions import APIError

from supabase_vector_search.base import Document, SearchQuery, SearchResult, WeightedSearchQuery
from supabase_vector_search.exceptions import (
    BackendError,
    DimensionMismatch,
    InvalidEmbeddingType,
    InvalidWeights,
    SearchError,
    ValidationError,
)
from supabase_vector_search.search import SearchManager, SimilarityBackendAdapter
from supabase_vector_search.storage import InMemorySimilarityBackend, SupabaseSimilarityBackend
from supabase_vector_search.utils.retry import RetryOptions

from .conftest import response

MATCH_ROW = {"id": "1", "content": "Doc", "metadata": {}, "similarity": 0.9}


def api_error(message="canceling statement due to statement timeout", code="PGRST301"):
    return APIError({"message": message, "code": code, "hint": None, "details": None})


@pytest.fixture
def fake_backend():
    backend = MagicMock(name="backend")
    backend.find_by_single_vector = AsyncMock(return_value=[MATCH_ROW])
    backend.find_by_weighted_vectors = AsyncMock(return_value=[MATCH_ROW])
    return backend


class TestSingleVectorSearch:

    @pytest.mark.asyncio
    async def test_rpc_parameters_and_result(self, supabase_client, fast_retry):
        """Query [0.1, 0.2, 0.3] at threshold 0.8, count 5 returns the backend row unchanged."""
        supabase_client.rpc_builder.execute.return_value = response([MATCH_ROW])
        manager = SearchManager(SupabaseSimilarityBackend(supabase_client), retry_options=fast_retry)

        results = await manager.search(
            SearchQuery(query_embedding=[0.1, 0.2, 0.3], match_threshold=0.8, match_count=5)
        )

        supabase_client.rpc.assert_called_once_with(
            "match_documents",
            {
                "query_embedding": [0.1, 0.2, 0.3],
                "match_threshold": 0.8,
                "match_count": 5,
                "filter_metadata": None,
            },
        )
        assert results == [
            SearchResult(id="1", content="Doc", similarity=0.9, metadata={}, similarity_main=0.9)
        ]

    @pytest.mark.asyncio
    async def test_defaults(self, fake_backend):
        adapter = SimilarityBackendAdapter(fake_backend)

        await adapter.single_vector_search(SearchQuery(query_embedding=[0.1, 0.2]))

        fake_backend.find_by_single_vector.assert_awaited_once_with([0.1, 0.2], 0.5, 10, None)

    @pytest.mark.asyncio
    async def test_empty_result(self, fake_backend):
        fake_backend.find_by_single_vector.return_value = []
        adapter = SimilarityBackendAdapter(fake_backend)

        assert await adapter.single_vector_search(SearchQuery(query_embedding=[0.1])) == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize("query", [
        SearchQuery(query_embedding=[]),
        SearchQuery(query_embedding=None),
        SearchQuery(query_embedding=[0.1], match_threshold=1.5),
        SearchQuery(query_embedding=[0.1], match_count=0),
    ])
    async def test_invalid_query_never_reaches_backend(self, fake_backend, fast_retry, query):
        manager = SearchManager(fake_backend, retry_options=fast_retry)

        with pytest.raises(ValidationError):
            await manager.search(query)

        fake_backend.find_by_single_vector.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_dimension_mismatch_not_retried(self, fake_backend, fast_retry):
        manager = SearchManager(fake_backend, retry_options=fast_retry, expected_dimensions=3)

        with pytest.raises(DimensionMismatch):
            await manager.search(SearchQuery(query_embedding=[0.1, 0.2]))

        fake_backend.find_by_single_vector.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_empty_filter_sent_as_none(self, fake_backend):
        adapter = SimilarityBackendAdapter(fake_backend)

        await adapter.single_vector_search(SearchQuery(query_embedding=[0.1], filter_metadata={}))

        assert fake_backend.find_by_single_vector.await_args.args[3] is None

    @pytest.mark.asyncio
    async def test_main_similarity_reported(self, fast_retry):
        backend = InMemorySimilarityBackend([Document(id="doc", content="match", embedding=[0.6, 0.8])])
        manager = SearchManager(backend, retry_options=fast_retry)

        results = await manager.search(SearchQuery(query_embedding=[0.6, 0.8]))

        assert results[0].similarity == pytest.approx(1.0)
        assert results[0].similarity_main == results[0].similarity
        assert results[0].similarity_section_1 is None

    @pytest.mark.asyncio
    @pytest.mark.parametrize("vector", [5, 0.3, "0.1,0.2"])
    async def test_non_vector_query_rejected(self, fake_backend, vector):
        adapter = SimilarityBackendAdapter(fake_backend)

        with pytest.raises(InvalidEmbeddingType) as exc_info:
            await adapter.single_vector_search(SearchQuery(query_embedding=vector))

        assert exc_info.value.field == "query_embedding"
        fake_backend.find_by_single_vector.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_zero_dimensions_override_is_not_ignored(self, fake_backend, fast_retry):
        manager = SearchManager(fake_backend, retry_options=fast_retry, expected_dimensions=1)

        with pytest.raises(DimensionMismatch):
            await manager.search(SearchQuery(query_embedding=[0.1]), expected_dimensions=0)

    def test_request_timeout_applies_to_given_adapter(self, fake_backend):
        adapter = SimilarityBackendAdapter(fake_backend)

        manager = SearchManager(adapter, request_timeout=2.5)

        assert manager.adapter is adapter
        assert adapter.request_timeout == 2.5


class TestRetries:

    @pytest.mark.asyncio
    async def test_transient_failure_then_success(self, supabase_client, fast_retry):
        supabase_client.rpc_builder.execute.side_effect = [api_error(), response([MATCH_ROW])]
        on_retry = MagicMock()
        options = RetryOptions(max_retries=3, initial_delay=0, max_delay=0, on_retry=on_retry)
        manager = SearchManager(SupabaseSimilarityBackend(supabase_client), retry_options=options)

        results = await manager.search(SearchQuery(query_embedding=[0.1, 0.2, 0.3]))

        assert [r.id for r in results] == ["1"]
        assert supabase_client.rpc_builder.execute.await_count == 2
        assert on_retry.call_count == 1

    @pytest.mark.asyncio
    async def test_exhausted_retries_raise_search_error(self, supabase_client, fast_retry, caplog):
        supabase_client.rpc_builder.execute.side_effect = api_error()
        manager = SearchManager(SupabaseSimilarityBackend(supabase_client), retry_options=fast_retry)

        with pytest.raises(SearchError) as exc_info:
            await manager.search(SearchQuery(query_embedding=[0.1, 0.2, 0.3]))

        assert exc_info.value.code == "PGRST301"
        assert "statement timeout" in str(exc_info.value)
        assert supabase_client.rpc_builder.execute.await_count == 4
        assert "Retrying search (attempt 3/3)" in caplog.text

    @pytest.mark.asyncio
    async def test_only_transient_errors_retried_when_asked(self, fake_backend, fast_retry):
        fake_backend.find_by_single_vector.side_effect = BackendError("permission denied", "42501")
        manager = SearchManager(fake_backend, retry_options=fast_retry, retry_only_transient=True)

        with pytest.raises(SearchError) as exc_info:
            await manager.search(SearchQuery(query_embedding=[0.1]))

        assert exc_info.value.code == "42501"
        assert fake_backend.find_by_single_vector.await_count == 1

    @pytest.mark.asyncio
    async def test_timeout_counts_as_failed_attempt(self, fake_backend, fast_retry):
        calls = []

        async def slow_then_fast(*args):
            calls.append(args)
            if len(calls) == 1:
                await asyncio.sleep(1)
            return [MATCH_ROW]

        fake_backend.find_by_single_vector.side_effect = slow_then_fast
        manager = SearchManager(fake_backend, retry_options=fast_retry, request_timeout=0.01)

        results = await manager.search(SearchQuery(query_embedding=[0.1]))

        assert [r.id for r in results] == ["1"]
        assert fake_backend.find_by_single_vector.await_count == 2

    @pytest.mark.asyncio
    async def test_unexpected_error_wrapped(self, fake_backend):
        fake_backend.find_by_single_vector.side_effect = KeyError("similarity")
        adapter = SimilarityBackendAdapter(fake_backend)

        with pytest.raises(SearchError, match="Unexpected error during search"):
            await adapter.single_vector_search(SearchQuery(query_embedding=[0.1]))


class TestWeightedSearch:

    @pytest.mark.asyncio
    async def test_weights_normalized_before_dispatch(self, fake_backend, fast_retry):
        manager = SearchManager(fake_backend, retry_options=fast_retry)

        await manager.search_weighted(WeightedSearchQuery(
            query_embedding=[0.1, 0.2],
            query_section_2=[0.3, 0.4],
            weight_main=50,
            weight_section_1=0,
            weight_section_2=50,
            weight_section_3=0,
        ))

        args = fake_backend.find_by_weighted_vectors.await_args.args
        assert args[0] == [0.1, 0.2]
        assert args[1] == [None, [0.3, 0.4], None]
        assert args[2] == [0.5, 0.0, 0.5, 0.0]

    @pytest.mark.asyncio
    async def test_rpc_parameters(self, supabase_client, fast_retry):
        supabase_client.rpc_builder.execute.return_value = response([
            dict(MATCH_ROW, similarity_main=0.9, similarity_section_1=None,
                 similarity_section_2=None, similarity_section_3=None),
        ])
        manager = SearchManager(SupabaseSimilarityBackend(supabase_client), retry_options=fast_retry)

        results = await manager.search_weighted(WeightedSearchQuery(
            query_embedding=[0.1, 0.2],
            query_section_1=[0.2, 0.1],
            match_threshold=0.7,
            match_count=3,
            filter_metadata={"category": "science"},
        ))

        name, params = supabase_client.rpc.call_args.args
        assert name == "match_documents_weighted"
        assert params == {
            "query_embedding": [0.1, 0.2],
            "query_section_1": [0.2, 0.1],
            "query_section_2": None,
            "query_section_3": None,
            "weight_main": 0.25,
            "weight_section_1": 0.25,
            "weight_section_2": 0.25,
            "weight_section_3": 0.25,
            "match_threshold": 0.7,
            "match_count": 3,
            "filter_metadata": {"category": "science"},
        }
        assert results[0].similarity_main == 0.9
        assert results[0].similarity_section_1 is None

    @pytest.mark.asyncio
    async def test_zero_weights_rejected_before_backend(self, fake_backend, fast_retry):
        manager = SearchManager(fake_backend, retry_options=fast_retry)

        with pytest.raises(InvalidWeights):
            await manager.search_weighted(WeightedSearchQuery(
                query_embedding=[0.1],
                weight_main=0,
                weight_section_1=0,
                weight_section_2=0,
                weight_section_3=0,
            ))

        fake_backend.find_by_weighted_vectors.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_section_dimensions_checked(self, fake_backend, fast_retry):
        manager = SearchManager(fake_backend, retry_options=fast_retry, expected_dimensions=2)

        with pytest.raises(DimensionMismatch) as exc_info:
            await manager.search_weighted(WeightedSearchQuery(
                query_embedding=[0.1, 0.2],
                query_section_3=[0.1, 0.2, 0.3],
            ))

        assert exc_info.value.field == "query_section_3"

    @pytest.mark.asyncio
    async def test_non_vector_section_rejected(self, fake_backend, fast_retry):
        manager = SearchManager(fake_backend, retry_options=fast_retry)

        with pytest.raises(InvalidEmbeddingType) as exc_info:
            await manager.search_weighted(WeightedSearchQuery(
                query_embedding=[0.1, 0.2],
                query_section_2=0.5,
            ))

        assert exc_info.value.field == "query_section_2"
        fake_backend.find_by_weighted_vectors.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_partial_document_against_memory_backend(self, fast_retry):
        """Query supplies section 1, the document does not: that slot is None and adds 0."""
        backend = InMemorySimilarityBackend([
            Document(id="doc", content="partial", embedding=[1.0, 0.0], embedding_section_2=[0.0, 1.0]),
        ])
        manager = SearchManager(backend, retry_options=fast_retry)

        results = await manager.search_weighted(WeightedSearchQuery(
            query_embedding=[1.0, 0.0],
            query_section_1=[1.0, 0.0],
            query_section_2=[0.0, 1.0],
            weight_main=0.5,
            weight_section_1=0.25,
            weight_section_2=0.25,
            weight_section_3=0,
            match_threshold=0.1,
        ))

        assert len(results) == 1
        assert results[0].similarity_section_1 is None
        assert results[0].similarity_main == pytest.approx(1.0)
        assert results[0].similarity == pytest.approx(0.75)
