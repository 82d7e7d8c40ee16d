from __future__ import annotations
import logging
import os
from typing import List
from dataclasses import dataclass
from langchain_openai import OpenAIEmbeddings
from openai import APIError
from .base import EmbeddingResult
from ..exceptions import EmbeddingError

logger = logging.getLogger(__name__)


SUPPORTED_OPENAI_MODELS = {
    "text-embedding-ada-002": 1536,
    "text-embedding-3-small": 1536,
    "text-embedding-3-large": 3072,
}


@dataclass
class OpenAIConfig:
    model: str = "text-embedding-3-small"
    dimensions: int | None = None
    api_key_env: str = "OPENAI_API_KEY"
    max_retries: int = 3
    timeout: float = 60.0


class OpenAIProvider:
    name = "openai"

    def __init__(self, cfg: OpenAIConfig = OpenAIConfig()):
        if cfg.model not in SUPPORTED_OPENAI_MODELS:
            raise EmbeddingError(
                f"Unsupported OpenAI model: {cfg.model}. "
                f"Supported models: {', '.join(SUPPORTED_OPENAI_MODELS)}",
                "INVALID_MODEL",
                self.name,
            )

        api_key = os.getenv(cfg.api_key_env)
        if not api_key:
            raise EmbeddingError(
                f"{cfg.api_key_env} not set. Add it to your environment or .env file.",
                "MISSING_API_KEY",
                self.name,
            )

        default_dim = SUPPORTED_OPENAI_MODELS[cfg.model]
        if cfg.dimensions is not None:
            if cfg.dimensions <= 0:
                raise ValueError("Dimensions override must be a positive integer.")
            if cfg.dimensions > default_dim:
                # OpenAI v3 embeddings support shortening to <= default dimension.
                raise ValueError(
                    f"Dimensions override ({cfg.dimensions}) must be ≤ model's default ({default_dim})."
                )

        extra_args = {}
        if cfg.dimensions is not None:
            extra_args["dimensions"] = cfg.dimensions  # OpenAI supports this

        self._model_id = cfg.model
        self.dimensions = cfg.dimensions or default_dim
        self._emb = OpenAIEmbeddings(
            model=cfg.model,
            api_key=api_key,
            max_retries=cfg.max_retries,
            timeout=cfg.timeout,
            **extra_args,
        )

    async def embed_texts(self, texts: List[str]) -> EmbeddingResult:
        if not texts:
            raise EmbeddingError("Input cannot be empty", "EMPTY_INPUT", self.name)

        valid = [t for t in texts if t and t.strip()]
        if not valid:
            raise EmbeddingError("All input strings are empty", "EMPTY_INPUT", self.name)

        try:
            vectors = await self._emb.aembed_documents(valid)
        except APIError as e:
            logger.error(f"❌ OpenAI embeddings request failed: {e}")
            raise EmbeddingError(f"OpenAI API error: {e}", e.code or "API_ERROR", self.name) from e

        for vec in vectors:
            if len(vec) != self.dimensions:
                raise EmbeddingError(
                    f"Expected {self.dimensions} dimensions but got {len(vec)}",
                    "DIMENSION_MISMATCH",
                    self.name,
                )

        return EmbeddingResult(
            vectors=vectors,
            model=self._model_id,
            dimension=self.dimensions,
            provider=self.name,
        )
