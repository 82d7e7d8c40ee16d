from __future__ import annotations
from typing import Any, Callable, Dict
from .base import EmbeddingsProvider
from .cohere_embedder import CohereConfig, CohereProvider
from .openai_embedder import OpenAIProvider, OpenAIConfig
from ..config import DEFAULT_EMBED_MODEL, DEFAULT_EMBED_PROVIDER


def _openai(**kwargs: Any) -> EmbeddingsProvider:
    return OpenAIProvider(OpenAIConfig(
        model=kwargs.get("model", DEFAULT_EMBED_MODEL),
        dimensions=kwargs.get("dimensions"),
        api_key_env=kwargs.get("api_key_env", "OPENAI_API_KEY"),
        max_retries=kwargs.get("max_retries", 3),
        timeout=kwargs.get("timeout", 60.0),
    ))


def _cohere(**kwargs: Any) -> EmbeddingsProvider:
    return CohereProvider(CohereConfig(
        model=kwargs.get("model", "embed-english-v3.0"),
        api_key_env=kwargs.get("api_key_env", "COHERE_API_KEY"),
        input_type=kwargs.get("input_type", "search_document"),
        truncate=kwargs.get("truncate", "END"),
        max_retries=kwargs.get("max_retries", 3),
        timeout=kwargs.get("timeout", 60.0),
    ))


PROVIDERS: Dict[str, Callable[..., EmbeddingsProvider]] = {
    "openai": _openai,
    "cohere": _cohere,
}


def build_provider(name: str = DEFAULT_EMBED_PROVIDER, **kwargs: Any) -> EmbeddingsProvider:
    """
    Build an embeddings provider by name; vendor modules stay behind this factory.

    Examples:
      build_provider()  -> openai text-embedding-3-small (1536)
      build_provider("openai", model="text-embedding-3-large", dimensions=1024)
      build_provider("cohere", model="embed-english-light-v3.0", input_type="search_query")
    """
    key = (name or DEFAULT_EMBED_PROVIDER).lower()
    if key not in PROVIDERS:
        raise ValueError(
            f"Unknown embeddings provider: {name}. Available: {', '.join(PROVIDERS)}"
        )
    return PROVIDERS[key](**kwargs)
