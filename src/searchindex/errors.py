"""
Exceptions raised by the search index.
"""


class SearchIndexError(Exception):
    """Base class for search index errors."""


class ModeLockedError(SearchIndexError, RuntimeError):
    """Raised when the index mode is changed after indexing has started."""

    def __init__(self, current_mode, requested_mode):
        self.current_mode = current_mode
        self.requested_mode = requested_mode
        super().__init__(
            f"Cannot change index mode from {current_mode.name} to {requested_mode.name}: "
            f"documents have already been indexed"
        )
