# client.py
"""
Vector Search Client - one entry point for search and document storage.

Wires a SupabaseSimilarityBackend, a SearchManager and a DocumentManager
around a single async Supabase client, and optionally an embeddings
provider for text queries and embedding generation on insert.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from supabase import AsyncClient, acreate_client

from .base import Document, DocumentSections, SearchQuery, SearchResult, WeightedSearchQuery
from .config import DEFAULT_BATCH_SIZE, DEFAULT_TABLE_NAME, SupabaseConfig
from .documents.manager import DocumentManager, ProgressCallback
from .embeddings.base import EmbeddingsProvider
from .embeddings.runner import generate_document_embeddings, generate_embedding
from .exceptions import EmbeddingError
from .search.manager import SearchManager
from .storage.supabase_backend import SupabaseSimilarityBackend
from .utils.retry import RetryOptions


class VectorSearchClient:
    """
    Facade over search, document storage and embedding generation.

    Usage:
        client = await create_vector_search_client(embedding_provider=build_provider())
        results = await client.search_text("photosynthesis", match_count=5)
    """

    def __init__(
        self,
        client: AsyncClient,
        table_name: str = DEFAULT_TABLE_NAME,
        embedding_provider: Optional[EmbeddingsProvider] = None,
        logger: Optional[logging.Logger] = None,
        retry_options: Optional[RetryOptions] = None,
        expected_dimensions: Optional[int] = None,
    ):
        """
        Initialize the client.

        Args:
            client: Async Supabase client, shared by every component
            table_name: Table holding the documents
            embedding_provider: Provider used by search_text and insert_document
            logger: Logger passed to every component
            retry_options: Retry policy for searches and document calls
            expected_dimensions: Embedding size to validate against
                (falls back to the provider's dimensions)
        """
        self.client = client
        self.table_name = table_name
        self.logger = logger or logging.getLogger(__name__)
        self.embedding_provider = embedding_provider

        if expected_dimensions is None and embedding_provider is not None:
            expected_dimensions = embedding_provider.dimensions
        self.expected_dimensions = expected_dimensions

        self.backend = SupabaseSimilarityBackend(client)
        self.search_manager = SearchManager(
            self.backend,
            logger=self.logger,
            retry_options=retry_options,
            expected_dimensions=expected_dimensions,
        )
        self.document_manager = DocumentManager(
            client,
            table_name=table_name,
            logger=self.logger,
            retry_options=retry_options,
            expected_dimensions=expected_dimensions,
        )

    # ------------------------------------------------------------------
    # Embedding provider
    # ------------------------------------------------------------------

    def set_embedding_provider(self, provider: EmbeddingsProvider) -> None:
        self.embedding_provider = provider

    def get_embedding_provider(self) -> Optional[EmbeddingsProvider]:
        return self.embedding_provider

    def _require_provider(self) -> EmbeddingsProvider:
        if self.embedding_provider is None:
            raise EmbeddingError(
                "No embedding provider configured. Call set_embedding_provider() first.",
                "NO_PROVIDER",
            )
        return self.embedding_provider

    # ------------------------------------------------------------------
    # Search
    # ------------------------------------------------------------------

    async def search(self, query: SearchQuery) -> List[SearchResult]:
        """Single-vector similarity search."""
        return await self.search_manager.search(query)

    async def search_weighted(self, query: WeightedSearchQuery) -> List[SearchResult]:
        """Weighted multi-vector similarity search."""
        return await self.search_manager.search_weighted(query)

    async def search_text(
        self,
        text: str,
        match_threshold: Optional[float] = None,
        match_count: Optional[int] = None,
        filter_metadata: Optional[Dict[str, Any]] = None,
    ) -> List[SearchResult]:
        """
        Embed text with the configured provider, then run a single-vector search.

        Raises:
            EmbeddingError: If no provider is set or embedding fails
            ValidationError: If the search parameters are invalid
            SearchError: If the search fails after all retries
        """
        vector = await generate_embedding(text, self._require_provider())
        return await self.search(
            SearchQuery(
                query_embedding=vector,
                match_threshold=match_threshold,
                match_count=match_count,
                filter_metadata=filter_metadata,
            )
        )

    # ------------------------------------------------------------------
    # Documents
    # ------------------------------------------------------------------

    async def insert_document(
        self,
        document: Document,
        generate_embeddings: bool = False,
        sections: Optional[DocumentSections] = None,
    ) -> Document:
        """
        Insert a document.

        Args:
            document: Document to store
            generate_embeddings: Fill missing embeddings with the provider
            sections: Section texts to embed (defaults to the document content
                as the main section)

        Returns:
            The stored document with its id
        """
        if generate_embeddings:
            sections = sections or DocumentSections(main=document.content)
            generated = await generate_document_embeddings(sections, self._require_provider())
            for column, vector in generated.as_dict().items():
                if vector is not None and getattr(document, column) is None:
                    setattr(document, column, vector)

        return await self.document_manager.insert(document)

    async def insert_documents_batch(
        self,
        documents: List[Document],
        batch_size: int = DEFAULT_BATCH_SIZE,
        on_progress: Optional[ProgressCallback] = None,
    ) -> List[Document]:
        return await self.document_manager.insert_batch(documents, batch_size, on_progress)

    async def get_document(self, document_id: str) -> Optional[Document]:
        return await self.document_manager.get(document_id)

    async def update_document(self, document_id: str, updates: Dict[str, Any]) -> Document:
        return await self.document_manager.update(document_id, updates)

    async def delete_document(self, document_id: str) -> None:
        await self.document_manager.delete(document_id)

    async def count_documents(self, filter_metadata: Optional[Dict[str, Any]] = None) -> int:
        return await self.document_manager.count(filter_metadata)


async def create_vector_search_client(
    config: Optional[SupabaseConfig] = None,
    embedding_provider: Optional[EmbeddingsProvider] = None,
    **kwargs: Any,
) -> VectorSearchClient:
    """
    Connect to Supabase and build a VectorSearchClient.

    Args:
        config: Connection settings (read from the environment when omitted)
        embedding_provider: Optional embeddings provider
        **kwargs: Passed through to VectorSearchClient (logger, retry_options,
            expected_dimensions)

    Raises:
        ValidationError: If the Supabase URL or key is missing
    """
    config = config or SupabaseConfig.from_env()
    supabase = await acreate_client(config.url, config.key)
    return VectorSearchClient(
        supabase,
        table_name=config.table_name,
        embedding_provider=embedding_provider,
        **kwargs,
    )
