"""Shared fixtures: a fake async Supabase client and fast retry options."""

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest

from supabase_vector_search.embeddings import EmbeddingResult
from supabase_vector_search.utils.retry import RetryOptions


def response(data=None, count=None):
    """Shape of a postgrest APIResponse as far as the library reads it."""
    return SimpleNamespace(data=data, count=count)


def make_query_builder(result=None):
    """
    Query builder whose chained calls return itself and whose execute()
    is an AsyncMock, mirroring postgrest's fluent API.
    """
    builder = MagicMock(name="query_builder")
    for method in ("select", "insert", "update", "delete", "eq", "single", "contains"):
        getattr(builder, method).return_value = builder
    builder.execute = AsyncMock(return_value=result if result is not None else response([]))
    return builder


@pytest.fixture
def fast_retry():
    """Retry policy with no waiting between attempts."""
    return RetryOptions(max_retries=3, initial_delay=0, max_delay=0)


@pytest.fixture
def query_builder():
    return make_query_builder()


@pytest.fixture
def supabase_client(query_builder):
    """Fake AsyncClient: table() hands out query_builder, rpc() its own builder."""
    client = MagicMock(name="supabase_client")
    client.table.return_value = query_builder
    client.rpc_builder = make_query_builder()
    client.rpc.return_value = client.rpc_builder
    return client


class FakeProvider:
    """Deterministic embeddings provider: each text maps to [len(text), 1.0]."""

    name = "fake"
    dimensions = 2

    def __init__(self):
        self.calls = []

    async def embed_texts(self, texts):
        self.calls.append(list(texts))
        return EmbeddingResult(
            vectors=[[float(len(t)), 1.0] for t in texts],
            model="fake-model",
            dimension=self.dimensions,
            provider=self.name,
        )
