# search/manager.py
"""
Search Manager - single-vector and weighted multi-vector search

Pipeline per call:
    validate -> normalize weights (weighted only) -> retried backend call -> results

Validation failures are raised before the backend is touched and are
never retried.
"""

import logging
from typing import Awaitable, Callable, List, Optional, TypeVar, Union

from ..base import SearchQuery, SearchResult, SimilarityBackend, WeightedSearchQuery
from ..utils.retry import RetryOptions, with_conditional_retry, with_retry
from .adapter import SimilarityBackendAdapter

T = TypeVar("T")


class SearchManager:
    """
    Runs searches against a similarity backend with retries.

    Holds no per-call state; the backend, logger and retry policy are
    fixed at construction.
    """

    def __init__(
        self,
        backend: Union[SimilarityBackend, SimilarityBackendAdapter],
        logger: Optional[logging.Logger] = None,
        retry_options: Optional[RetryOptions] = None,
        expected_dimensions: Optional[int] = None,
        retry_only_transient: bool = False,
        request_timeout: Optional[float] = None,
    ):
        """
        Initialize search manager.

        Args:
            backend: Similarity backend, or an adapter already wrapping one
            logger: Logger for search and retry events
            retry_options: Retry policy for backend calls (3 retries by default)
            expected_dimensions: Default embedding size to validate queries against
            retry_only_transient: Retry only errors that look transient
            request_timeout: Seconds allowed per backend attempt
        """
        self.logger = logger or logging.getLogger(__name__)
        if isinstance(backend, SimilarityBackendAdapter):
            self.adapter = backend
            if request_timeout is not None:
                self.adapter.request_timeout = request_timeout
        else:
            self.adapter = SimilarityBackendAdapter(
                backend, logger=self.logger, request_timeout=request_timeout
            )
        self.retry_options = retry_options or RetryOptions()
        self.expected_dimensions = expected_dimensions
        self.retry_only_transient = retry_only_transient

    def _dimensions(self, override: Optional[int]) -> Optional[int]:
        return override if override is not None else self.expected_dimensions

    def _options_for(self, operation: str) -> RetryOptions:
        def log_retry(attempt: int, error: BaseException) -> None:
            self.logger.warning(
                f"⏸️  Retrying {operation} (attempt {attempt}/{self.retry_options.max_retries}): {error}"
            )

        return self.retry_options.chained(log_retry)

    async def _execute(self, operation: str, call: Callable[[], Awaitable[T]]) -> T:
        runner = with_conditional_retry if self.retry_only_transient else with_retry
        try:
            return await runner(call, self._options_for(operation))
        except Exception as e:
            self.logger.error(f"❌ {operation.capitalize()} failed: {e}")
            raise

    async def search(
        self, query: SearchQuery, expected_dimensions: Optional[int] = None
    ) -> List[SearchResult]:
        """
        Search for documents using single-vector similarity.

        Args:
            query: Search query
            expected_dimensions: Overrides the manager's expected dimensions

        Returns:
            Matching documents, best first

        Raises:
            ValidationError: If the query is malformed (backend not called)
            SearchError: If every attempt against the backend failed
        """
        request = self.adapter.prepare_single(query, self._dimensions(expected_dimensions))
        return await self._execute("search", lambda: self.adapter.dispatch_single(request))

    async def search_weighted(
        self, query: WeightedSearchQuery, expected_dimensions: Optional[int] = None
    ) -> List[SearchResult]:
        """
        Search for documents using weighted multi-vector similarity.

        Raises:
            ValidationError: If a vector or the weights are invalid (backend not called)
            SearchError: If every attempt against the backend failed
        """
        request = self.adapter.prepare_weighted(query, self._dimensions(expected_dimensions))
        return await self._execute("weighted search", lambda: self.adapter.dispatch_weighted(request))
