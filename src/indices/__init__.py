"""Index implementations."""

from .search_index import SearchIndex

__all__ = ['SearchIndex']
