"""Shared utilities."""

from .retry import (
    RetryOptions,
    with_retry,
    with_conditional_retry,
    is_retryable_error,
)

__all__ = [
    'RetryOptions',
    'with_retry',
    'with_conditional_retry',
    'is_retryable_error',
]
