# documents/manager.py
"""
Document Manager - CRUD operations for documents stored in Supabase.

Every call goes through with_retry; PostgREST errors surface as
SearchError with the PostgREST code preserved.
"""

from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable, Dict, List, Optional, TypeVar

from postgrest.exceptions import APIError
from supabase import AsyncClient

from ..base import Document, Slot
from ..config import DEFAULT_BATCH_SIZE, DEFAULT_TABLE_NAME
from ..exceptions import SearchError, ValidationError
from ..utils.retry import RetryOptions, with_retry
from ..validation import validate_document_embeddings, validate_embedding_dimensions

T = TypeVar("T")

ProgressCallback = Callable[[int, int], None]

# PostgREST: "JSON object requested, multiple (or no) rows returned"
NOT_FOUND_CODE = "PGRST116"


class DocumentManager:
    """
    Manages documents and their embeddings in a Supabase table.

    Features:
    - Single and batch inserts (batch progress reporting)
    - Get / partial update / delete by id
    - Counting with metadata containment filters
    - Retries with exponential backoff on every call
    """

    def __init__(
        self,
        client: AsyncClient,
        table_name: str = DEFAULT_TABLE_NAME,
        logger: Optional[logging.Logger] = None,
        retry_options: Optional[RetryOptions] = None,
        expected_dimensions: Optional[int] = None,
    ):
        """
        Initialize document manager.

        Args:
            client: Async Supabase client (shared, not owned)
            table_name: Table holding the documents
            logger: Logger for document events
            retry_options: Retry policy (3 retries by default)
            expected_dimensions: Validate embeddings against this size on write
        """
        self.client = client
        self.table_name = table_name
        self.logger = logger or logging.getLogger(__name__)
        self.retry_options = retry_options or RetryOptions()
        self.expected_dimensions = expected_dimensions

    def _table(self):
        return self.client.table(self.table_name)

    def _options_for(self, operation: str) -> RetryOptions:
        def log_retry(attempt: int, error: BaseException) -> None:
            self.logger.warning(
                f"⏸️  Retrying {operation} (attempt {attempt}/{self.retry_options.max_retries}): {error}"
            )

        return self.retry_options.chained(log_retry)

    async def _run(self, operation: str, call: Callable[[], Awaitable[T]]) -> T:
        try:
            return await with_retry(call, self._options_for(operation))
        except (ValidationError, SearchError) as e:
            self.logger.error(f"❌ {operation.capitalize()} failed: {e}")
            raise
        except Exception as e:
            self.logger.error(f"❌ Unexpected error during {operation}: {e}", exc_info=True)
            raise SearchError(f"Unexpected error during {operation}: {e}") from e

    def _validate(self, document: Document) -> None:
        if not document.content or not document.content.strip():
            raise ValidationError("Document content is required", "content")
        if self.expected_dimensions is not None:
            validate_document_embeddings(document, self.expected_dimensions)

    # ------------------------------------------------------------------
    # Create
    # ------------------------------------------------------------------

    async def insert(self, document: Document) -> Document:
        """
        Insert a single document.

        Returns:
            The stored document, including its generated id

        Raises:
            ValidationError: If content is empty or an embedding is malformed
            SearchError: If the insert fails after all retries
        """
        self._validate(document)
        record = document.to_record()

        async def attempt() -> Document:
            try:
                response = await self._table().insert(record).execute()
            except APIError as e:
                raise SearchError(f"Failed to insert document: {e.message}", e.code) from e
            if not response.data:
                raise SearchError("Failed to insert document: no row returned")
            return Document.from_row(response.data[0])

        inserted = await self._run("document insert", attempt)
        self.logger.info(f"✅ Inserted document {inserted.id}")
        return inserted

    async def insert_batch(
        self,
        documents: List[Document],
        batch_size: int = DEFAULT_BATCH_SIZE,
        on_progress: Optional[ProgressCallback] = None,
    ) -> List[Document]:
        """
        Insert documents in fixed-size chunks, one chunk at a time.

        A failing chunk stops the run; chunks already written stay written.

        Args:
            documents: Documents to insert
            batch_size: Documents per insert call (default 100)
            on_progress: Called with (completed, total) after each chunk

        Returns:
            Inserted documents in input order
        """
        if batch_size <= 0:
            raise ValidationError("batch_size must be a positive integer", "batch_size")
        if not documents:
            return []

        for document in documents:
            self._validate(document)

        total = len(documents)
        results: List[Document] = []
        completed = 0

        for start in range(0, total, batch_size):
            batch = documents[start:start + batch_size]
            records = [doc.to_record() for doc in batch]

            async def attempt(records=records) -> List[Document]:
                try:
                    response = await self._table().insert(records).execute()
                except APIError as e:
                    raise SearchError(f"Failed to insert batch: {e.message}", e.code) from e
                return [Document.from_row(row) for row in response.data or []]

            results.extend(await self._run("batch insert", attempt))
            completed += len(batch)
            self.logger.info(f"   Inserted {completed}/{total} documents")

            if on_progress:
                on_progress(completed, total)

        return results

    # ------------------------------------------------------------------
    # Read / update / delete
    # ------------------------------------------------------------------

    async def get(self, document_id: str) -> Optional[Document]:
        """Get a document by id, or None if it does not exist."""

        async def attempt() -> Optional[Document]:
            try:
                response = await self._table().select("*").eq("id", document_id).single().execute()
            except APIError as e:
                if e.code == NOT_FOUND_CODE:
                    return None
                raise SearchError(f"Failed to get document: {e.message}", e.code) from e
            return Document.from_row(response.data) if response.data else None

        return await self._run("document get", attempt)

    async def update(self, document_id: str, updates: Dict[str, Any]) -> Document:
        """
        Partially update a document.

        Args:
            document_id: Id of the document to change
            updates: Columns to change (content, metadata, embedding, embedding_section_N)

        Returns:
            The updated document
        """
        changes = dict(updates)
        if not changes:
            raise ValidationError("No fields to update", "updates")
        if "content" in changes and (not changes["content"] or not str(changes["content"]).strip()):
            raise ValidationError("Document content cannot be empty", "content")
        if self.expected_dimensions is not None:
            for slot in Slot:
                vector = changes.get(slot.column)
                if vector is not None:
                    validate_embedding_dimensions(vector, self.expected_dimensions, slot.column)

        async def attempt() -> Document:
            try:
                response = await self._table().update(changes).eq("id", document_id).execute()
            except APIError as e:
                raise SearchError(f"Failed to update document: {e.message}", e.code) from e
            if not response.data:
                raise SearchError(f"Failed to update document: {document_id} not found", NOT_FOUND_CODE)
            return Document.from_row(response.data[0])

        return await self._run("document update", attempt)

    async def delete(self, document_id: str) -> None:
        """Delete a document by id."""

        async def attempt() -> None:
            try:
                await self._table().delete().eq("id", document_id).execute()
            except APIError as e:
                raise SearchError(f"Failed to delete document: {e.message}", e.code) from e

        await self._run("document delete", attempt)
        self.logger.info(f"🗑️  Deleted document {document_id}")

    async def count(self, filter_metadata: Optional[Dict[str, Any]] = None) -> int:
        """
        Count documents, optionally only those whose metadata contains filter_metadata.
        """

        async def attempt() -> int:
            query = self._table().select("*", count="exact", head=True)
            if filter_metadata:
                query = query.contains("metadata", filter_metadata)
            try:
                response = await query.execute()
            except APIError as e:
                raise SearchError(f"Failed to count documents: {e.message}", e.code) from e
            return response.count or 0

        return await self._run("document count", attempt)
