# config.py
"""
Library defaults and Supabase connection settings.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

from .exceptions import ValidationError

# Table and Postgres functions created by supabase/migrations
DEFAULT_TABLE_NAME = "documents"
MATCH_DOCUMENTS_FUNCTION = "match_documents"
MATCH_DOCUMENTS_WEIGHTED_FUNCTION = "match_documents_weighted"

# Search defaults
DEFAULT_MATCH_THRESHOLD = 0.5
DEFAULT_MATCH_COUNT = 10

# Weighted search: four slots share the score equally unless told otherwise
DEFAULT_SLOT_WEIGHT = 0.25
WEIGHT_SUM_TOLERANCE = 0.01

# Document batches
DEFAULT_BATCH_SIZE = 100

# Retry policy (seconds)
DEFAULT_MAX_RETRIES = 3
DEFAULT_INITIAL_DELAY = 1.0
DEFAULT_MAX_DELAY = 10.0

# Embedding provider + model defaults
DEFAULT_EMBED_PROVIDER = "openai"
DEFAULT_EMBED_MODEL = "text-embedding-3-small"


@dataclass
class SupabaseConfig:
    """Connection settings for a Supabase project."""
    url: str
    key: str
    table_name: str = DEFAULT_TABLE_NAME

    def __post_init__(self):
        if not self.url or not self.key:
            raise ValidationError("Supabase URL and key are required", "url")

    @classmethod
    def from_env(cls, table_name: Optional[str] = None) -> "SupabaseConfig":
        """
        Build a config from SUPABASE_URL / SUPABASE_KEY / SUPABASE_TABLE.

        A local .env file is loaded first, if present.

        Raises:
            ValidationError: If the URL or key is not set
        """
        load_dotenv()
        return cls(
            url=os.getenv("SUPABASE_URL", ""),
            key=os.getenv("SUPABASE_KEY", ""),
            table_name=table_name or os.getenv("SUPABASE_TABLE") or DEFAULT_TABLE_NAME,
        )


def setup_logging(level: int = logging.INFO) -> logging.Logger:
    """
    Configure base logging for applications using the library.
    """
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    return logging.getLogger("supabase_vector_search")
