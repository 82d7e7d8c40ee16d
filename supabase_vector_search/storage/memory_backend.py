# storage/memory_backend.py
"""
In-memory similarity backend implementing the same scoring as the
Postgres functions, for tests and local experiments.
"""

from __future__ import annotations

import uuid
from typing import Any, Dict, Iterable, List, Optional, Sequence

from ..base import SECTION_SLOTS, Document, Embedding, Slot
from ..embeddings.vectors import cosine_similarity
from ..validation import validate_document_embeddings


def metadata_contains(metadata: Any, expected: Any) -> bool:
    """
    Structural containment in the style of Postgres ``jsonb @>``.

    Nested mappings match recursively, lists match when every expected
    element is contained in some candidate element, scalars by equality.
    """
    if isinstance(expected, dict):
        if not isinstance(metadata, dict):
            return False
        return all(
            key in metadata and metadata_contains(metadata[key], value)
            for key, value in expected.items()
        )
    if isinstance(expected, list):
        if not isinstance(metadata, list):
            return False
        return all(
            any(metadata_contains(candidate, item) for candidate in metadata)
            for item in expected
        )
    return metadata == expected


class InMemorySimilarityBackend:
    """Brute-force cosine similarity over documents held in a dict."""

    def __init__(self, documents: Optional[Iterable[Document]] = None, dimensions: Optional[int] = None):
        self.dimensions = dimensions
        self._documents: Dict[str, Document] = {}
        for document in documents or []:
            self.add(document)

    def add(self, document: Document) -> Document:
        """Store a document, assigning an id if it has none."""
        if self.dimensions is not None:
            validate_document_embeddings(document, self.dimensions)
        if document.id is None:
            document.id = str(uuid.uuid4())
        self._documents[document.id] = document
        return document

    def delete(self, document_id: str) -> None:
        self._documents.pop(document_id, None)

    def __len__(self) -> int:
        return len(self._documents)

    def _candidates(self, metadata_filter: Optional[Dict[str, Any]]) -> Iterable[Document]:
        for document in self._documents.values():
            if metadata_filter is None or metadata_contains(document.metadata, metadata_filter):
                yield document

    @staticmethod
    def _rank(rows: List[Dict[str, Any]], threshold: float, limit: int) -> List[Dict[str, Any]]:
        matches = [row for row in rows if row["similarity"] >= threshold]
        matches.sort(key=lambda row: row["similarity"], reverse=True)
        return matches[:limit]

    async def find_by_single_vector(
        self,
        vector: Embedding,
        threshold: float,
        limit: int,
        metadata_filter: Optional[Dict[str, Any]],
    ) -> List[Dict[str, Any]]:
        rows = []
        for document in self._candidates(metadata_filter):
            if document.embedding is None:
                continue
            rows.append({
                "id": document.id,
                "content": document.content,
                "metadata": document.metadata,
                "similarity": cosine_similarity(document.embedding, vector),
            })
        return self._rank(rows, threshold, limit)

    async def find_by_weighted_vectors(
        self,
        main_vector: Embedding,
        section_vectors: Sequence[Optional[Embedding]],
        weights: Sequence[float],
        threshold: float,
        limit: int,
        metadata_filter: Optional[Dict[str, Any]],
    ) -> List[Dict[str, Any]]:
        queries: Dict[Slot, Optional[Embedding]] = {Slot.MAIN: main_vector}
        queries.update(zip(SECTION_SLOTS, section_vectors))
        slot_weights = dict(zip(Slot, weights))

        rows = []
        for document in self._candidates(metadata_filter):
            row: Dict[str, Any] = {
                "id": document.id,
                "content": document.content,
                "metadata": document.metadata,
            }
            aggregate = 0.0
            for slot in Slot:
                query = queries.get(slot)
                stored = document.embedding_for(slot)
                if query is None or stored is None:
                    # Absent on either side: no contribution, not applicable
                    row[slot.similarity_column] = None
                    continue
                similarity = cosine_similarity(stored, query)
                row[slot.similarity_column] = similarity
                aggregate += similarity * slot_weights[slot]
            row["similarity"] = aggregate
            rows.append(row)

        return self._rank(rows, threshold, limit)
