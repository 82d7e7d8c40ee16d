"""Core data model and backend interface for vector search."""

from __future__ import annotations

import json
from dataclasses import dataclass, field, fields
from enum import Enum
from typing import Any, Dict, List, Optional, Protocol, Sequence

# Vector embedding (dimensions vary by model)
Embedding = List[float]


class Slot(Enum):
    """Embedding positions that take part in weighted search."""
    MAIN = "main"
    SECTION_1 = "section_1"
    SECTION_2 = "section_2"
    SECTION_3 = "section_3"

    @property
    def column(self) -> str:
        """Document column holding this slot's embedding."""
        return "embedding" if self is Slot.MAIN else f"embedding_{self.value}"

    @property
    def query_param(self) -> str:
        return "query_embedding" if self is Slot.MAIN else f"query_{self.value}"

    @property
    def weight_param(self) -> str:
        return f"weight_{self.value}"

    @property
    def similarity_column(self) -> str:
        return f"similarity_{self.value}"


SECTION_SLOTS = (Slot.SECTION_1, Slot.SECTION_2, Slot.SECTION_3)


@dataclass
class Document:
    """Document with a main embedding and up to three section embeddings."""
    content: str
    metadata: Dict[str, Any] = field(default_factory=dict)
    id: Optional[str] = None
    embedding: Optional[Embedding] = None
    embedding_section_1: Optional[Embedding] = None
    embedding_section_2: Optional[Embedding] = None
    embedding_section_3: Optional[Embedding] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    def embedding_for(self, slot: Slot) -> Optional[Embedding]:
        return getattr(self, slot.column)

    def embeddings(self) -> Dict[Slot, Embedding]:
        """Present embeddings keyed by slot."""
        return {
            slot: self.embedding_for(slot)
            for slot in Slot
            if self.embedding_for(slot) is not None
        }

    def to_record(self) -> Dict[str, Any]:
        """Row for insertion. Absent embeddings are stored as NULL."""
        record: Dict[str, Any] = {
            "content": self.content,
            "metadata": self.metadata or {},
        }
        for slot in Slot:
            vector = self.embedding_for(slot)
            record[slot.column] = list(vector) if vector is not None else None
        if self.id is not None:
            record["id"] = self.id
        return record

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "Document":
        known = {f.name for f in fields(cls)}
        values = {k: v for k, v in row.items() if k in known}
        values["metadata"] = values.get("metadata") or {}
        for slot in Slot:
            vector = values.get(slot.column)
            if isinstance(vector, str):
                # PostgREST serializes pgvector columns as "[0.1,0.2,...]"
                values[slot.column] = [float(x) for x in json.loads(vector)]
        return cls(**values)


@dataclass
class DocumentSections:
    """Texts to embed for a multi-vector document."""
    main: str
    section_1: Optional[str] = None
    section_2: Optional[str] = None
    section_3: Optional[str] = None

    def text_for(self, slot: Slot) -> Optional[str]:
        return getattr(self, slot.value)


@dataclass
class DocumentEmbeddings:
    """Embeddings generated for each section of a document."""
    embedding: Optional[Embedding] = None
    embedding_section_1: Optional[Embedding] = None
    embedding_section_2: Optional[Embedding] = None
    embedding_section_3: Optional[Embedding] = None

    def as_dict(self) -> Dict[str, Optional[Embedding]]:
        return {slot.column: getattr(self, slot.column) for slot in Slot}


@dataclass
class SearchQuery:
    """Single-vector similarity search."""
    query_embedding: Embedding
    match_threshold: Optional[float] = None  # default 0.5
    match_count: Optional[int] = None  # default 10
    filter_metadata: Optional[Dict[str, Any]] = None


@dataclass
class WeightedSearchQuery:
    """
    Multi-vector search combining the main embedding with up to three sections.

    Unset weights default to an equal share (0.25) before normalization.
    """
    query_embedding: Embedding
    query_section_1: Optional[Embedding] = None
    query_section_2: Optional[Embedding] = None
    query_section_3: Optional[Embedding] = None
    weight_main: Optional[float] = None
    weight_section_1: Optional[float] = None
    weight_section_2: Optional[float] = None
    weight_section_3: Optional[float] = None
    match_threshold: Optional[float] = None
    match_count: Optional[int] = None
    filter_metadata: Optional[Dict[str, Any]] = None

    def query_for(self, slot: Slot) -> Optional[Embedding]:
        return getattr(self, slot.query_param)

    def weight_for(self, slot: Slot) -> Optional[float]:
        return getattr(self, slot.weight_param)


@dataclass
class SearchResult:
    """
    A ranked match.

    ``similarity`` is the aggregate score. Per-slot similarities are None
    when the query or the document lacks that slot's embedding.
    """
    id: str
    content: str
    similarity: float
    metadata: Dict[str, Any] = field(default_factory=dict)
    similarity_main: Optional[float] = None
    similarity_section_1: Optional[float] = None
    similarity_section_2: Optional[float] = None
    similarity_section_3: Optional[float] = None

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "SearchResult":
        return cls(
            id=row["id"],
            content=row.get("content", ""),
            similarity=row["similarity"],
            metadata=row.get("metadata") or {},
            similarity_main=row.get("similarity_main"),
            similarity_section_1=row.get("similarity_section_1"),
            similarity_section_2=row.get("similarity_section_2"),
            similarity_section_3=row.get("similarity_section_3"),
        )

    def slot_similarities(self) -> Dict[Slot, Optional[float]]:
        return {slot: getattr(self, slot.similarity_column) for slot in Slot}


class SimilarityBackend(Protocol):
    """Similarity-search engine consumed as a black box."""

    async def find_by_single_vector(
        self,
        vector: Embedding,
        threshold: float,
        limit: int,
        metadata_filter: Optional[Dict[str, Any]],
    ) -> List[Dict[str, Any]]:
        ...

    async def find_by_weighted_vectors(
        self,
        main_vector: Embedding,
        section_vectors: Sequence[Optional[Embedding]],
        weights: Sequence[float],
        threshold: float,
        limit: int,
        metadata_filter: Optional[Dict[str, Any]],
    ) -> List[Dict[str, Any]]:
        ...
