from __future__ import annotations

from typing import Sequence

import numpy as np

from ..base import Embedding
from ..exceptions import DimensionMismatch, EmbeddingError


def cosine_similarity(embedding1: Sequence[float], embedding2: Sequence[float]) -> float:
    """
    Cosine similarity between two embeddings (1 - cosine distance).

    A zero vector on either side yields 0.0.
    """
    a = np.asarray(embedding1, dtype=np.float64)
    b = np.asarray(embedding2, dtype=np.float64)
    if a.shape != b.shape:
        raise DimensionMismatch("Embeddings must have same dimensions")

    norm_a = np.linalg.norm(a)
    norm_b = np.linalg.norm(b)
    if norm_a == 0 or norm_b == 0:
        return 0.0
    return float(np.dot(a, b) / (norm_a * norm_b))


def normalize_embedding(embedding: Sequence[float]) -> Embedding:
    """Scale an embedding to unit length."""
    vector = np.asarray(embedding, dtype=np.float64)
    magnitude = np.linalg.norm(vector)
    if magnitude == 0:
        raise EmbeddingError("Cannot normalize zero vector", "ZERO_VECTOR")
    return (vector / magnitude).tolist()
