from __future__ import annotations
import logging
import os
from typing import List
from dataclasses import dataclass
from cohere.core.api_error import ApiError
from langchain_cohere import CohereEmbeddings
from .base import EmbeddingResult
from ..exceptions import EmbeddingError

logger = logging.getLogger(__name__)


SUPPORTED_COHERE_MODELS = {
    "embed-english-v3.0": 1024,
    "embed-multilingual-v3.0": 1024,
    "embed-english-light-v3.0": 384,
    "embed-multilingual-light-v3.0": 384,
}

COHERE_INPUT_TYPES = ("search_document", "search_query", "classification", "clustering")
COHERE_TRUNCATE_MODES = ("NONE", "START", "END")


@dataclass
class CohereConfig:
    model: str = "embed-english-v3.0"
    api_key_env: str = "COHERE_API_KEY"
    input_type: str = "search_document"   # use "search_query" when embedding queries
    truncate: str = "END"
    max_retries: int = 3
    timeout: float = 60.0


class CohereProvider:
    name = "cohere"

    def __init__(self, cfg: CohereConfig = CohereConfig()):
        if cfg.model not in SUPPORTED_COHERE_MODELS:
            raise EmbeddingError(
                f"Unsupported Cohere model: {cfg.model}. "
                f"Supported models: {', '.join(SUPPORTED_COHERE_MODELS)}",
                "INVALID_MODEL",
                self.name,
            )
        if cfg.input_type not in COHERE_INPUT_TYPES:
            raise ValueError(f"input_type must be one of {', '.join(COHERE_INPUT_TYPES)}")
        if cfg.truncate not in COHERE_TRUNCATE_MODES:
            raise ValueError(f"truncate must be one of {', '.join(COHERE_TRUNCATE_MODES)}")

        api_key = os.getenv(cfg.api_key_env)
        if not api_key:
            raise EmbeddingError(
                f"{cfg.api_key_env} not set. Add it to your environment or .env file.",
                "MISSING_API_KEY",
                self.name,
            )

        self._model_id = cfg.model
        self.input_type = cfg.input_type
        self.dimensions = SUPPORTED_COHERE_MODELS[cfg.model]
        self._emb = CohereEmbeddings(
            model=cfg.model,
            cohere_api_key=api_key,
            truncate=cfg.truncate,
            max_retries=cfg.max_retries,
            request_timeout=cfg.timeout,
        )

    async def embed_texts(self, texts: List[str]) -> EmbeddingResult:
        if not texts:
            raise EmbeddingError("Input cannot be empty", "EMPTY_INPUT", self.name)

        valid = [t for t in texts if t and t.strip()]
        if not valid:
            raise EmbeddingError("All input strings are empty", "EMPTY_INPUT", self.name)

        try:
            vectors = await self._emb.aembed(valid, input_type=self.input_type)
        except ApiError as e:
            logger.error(f"❌ Cohere embed request failed: {e}")
            code = f"HTTP_{e.status_code}" if e.status_code else "API_ERROR"
            raise EmbeddingError(f"Cohere API error: {e}", code, self.name) from e

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
