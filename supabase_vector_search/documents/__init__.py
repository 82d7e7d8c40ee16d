"""Document storage (CRUD + batch insert)."""

from .manager import DocumentManager

__all__ = ['DocumentManager']
