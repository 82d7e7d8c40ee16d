# storage/__init__.py
"""
Similarity backends: Supabase (pgvector) and an in-memory reference.
"""

from .supabase_backend import SupabaseSimilarityBackend
from .memory_backend import InMemorySimilarityBackend, metadata_contains

__all__ = ['SupabaseSimilarityBackend', 'InMemorySimilarityBackend', 'metadata_contains']
