# embeddings/runner.py
"""
Embedding generation helpers for single texts, multi-section documents
and large batches.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Callable, List, Optional, Tuple

from .base import EmbeddingsProvider
from ..base import DocumentEmbeddings, DocumentSections, Embedding, Slot
from ..config import DEFAULT_BATCH_SIZE
from ..exceptions import EmbeddingError

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int], None]


async def generate_embedding(text: str, provider: EmbeddingsProvider) -> Embedding:
    """
    Generate a single embedding for text.

    Raises:
        EmbeddingError: If text is blank or the provider fails
    """
    if not text or not text.strip():
        raise EmbeddingError("Text cannot be empty", "EMPTY_INPUT")

    try:
        result = await provider.embed_texts([text.strip()])
    except EmbeddingError:
        raise
    except Exception as e:
        raise EmbeddingError(f"Failed to generate embedding: {e}", "GENERATION_FAILED") from e
    return result.vectors[0]


async def generate_document_embeddings(
    sections: DocumentSections,
    provider: EmbeddingsProvider,
) -> DocumentEmbeddings:
    """
    Generate embeddings for every non-empty section of a document.

    Sections are embedded concurrently; the first failure propagates.

    Args:
        sections: Document sections to embed
        provider: Embedding provider to use

    Returns:
        DocumentEmbeddings with None for sections that were not supplied

    Raises:
        EmbeddingError: If every section is empty or generation fails
    """
    entries: List[Tuple[Slot, str]] = []
    for slot in Slot:
        text = sections.text_for(slot)
        if text and text.strip():
            entries.append((slot, text.strip()))

    if not entries:
        raise EmbeddingError("At least one non-empty section is required", "EMPTY_SECTIONS")

    async def embed(slot: Slot, text: str) -> Tuple[Slot, Embedding]:
        result = await provider.embed_texts([text])
        return slot, result.vectors[0]

    try:
        results = await asyncio.gather(*(embed(slot, text) for slot, text in entries))
    except EmbeddingError:
        raise
    except Exception as e:
        raise EmbeddingError(
            f"Failed to generate document embeddings: {e}", "GENERATION_FAILED"
        ) from e

    embeddings = DocumentEmbeddings()
    for slot, vector in results:
        setattr(embeddings, slot.column, vector)
    return embeddings


async def generate_embeddings_batch(
    texts: List[str],
    provider: EmbeddingsProvider,
    batch_size: int = DEFAULT_BATCH_SIZE,
    delay: float = 0.0,
    on_progress: Optional[ProgressCallback] = None,
) -> List[Embedding]:
    """
    Generate embeddings for many texts, one provider call per batch.

    Blank texts are skipped, so the result can be shorter than ``texts``.

    Args:
        texts: Texts to embed
        provider: Embedding provider to use
        batch_size: Texts per provider call (default 100)
        delay: Seconds to wait between batches, to stay under rate limits
        on_progress: Called with (completed, total) after each batch

    Returns:
        Embeddings in input order
    """
    if batch_size <= 0:
        raise ValueError("batch_size must be a positive integer")
    if not texts:
        return []

    results: List[Embedding] = []
    completed = 0
    total = len(texts)

    try:
        for start in range(0, total, batch_size):
            batch = texts[start:start + batch_size]
            valid = [t for t in batch if t and t.strip()]

            if valid:
                result = await provider.embed_texts(valid)
                results.extend(result.vectors)

            completed += len(batch)
            logger.info(f"Embedded {completed}/{total} texts")
            if on_progress:
                on_progress(completed, total)

            if delay > 0 and start + batch_size < total:
                await asyncio.sleep(delay)
    except EmbeddingError:
        raise
    except Exception as e:
        raise EmbeddingError(
            f"Failed to generate batch embeddings: {e}", "BATCH_GENERATION_FAILED"
        ) from e

    return results
