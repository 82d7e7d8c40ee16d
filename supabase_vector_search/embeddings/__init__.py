# embeddings/__init__.py
"""
Embeddings package for generating vector embeddings from text.
"""

from .base import EmbeddingsProvider, EmbeddingResult
from .openai_embedder import OpenAIProvider, OpenAIConfig, SUPPORTED_OPENAI_MODELS
from .cohere_embedder import CohereProvider, CohereConfig, SUPPORTED_COHERE_MODELS
from .registry import build_provider
from .runner import generate_embedding, generate_document_embeddings, generate_embeddings_batch
from .vectors import cosine_similarity, normalize_embedding

__all__ = [
    'EmbeddingsProvider',
    'EmbeddingResult',
    'OpenAIProvider',
    'OpenAIConfig',
    'SUPPORTED_OPENAI_MODELS',
    'CohereProvider',
    'CohereConfig',
    'SUPPORTED_COHERE_MODELS',
    'build_provider',
    'generate_embedding',
    'generate_document_embeddings',
    'generate_embeddings_batch',
    'cosine_similarity',
    'normalize_embedding',
]
