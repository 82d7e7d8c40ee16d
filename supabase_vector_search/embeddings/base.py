# embeddings/base.py
from __future__ import annotations
from dataclasses import dataclass
from typing import List, Protocol


@dataclass
class EmbeddingResult:
    vectors: List[List[float]]   # one vector per non-empty input text
    model: str                   # e.g., "text-embedding-3-small"
    dimension: int               # e.g., 1536
    provider: str                # e.g., "openai"


class EmbeddingsProvider(Protocol):
    """Minimal provider-agnostic interface."""
    name: str
    dimensions: int

    async def embed_texts(self, texts: List[str]) -> EmbeddingResult:
        ...
