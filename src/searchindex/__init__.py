"""
Search index core: key derivation, inverted index, mode lock and AND query evaluation.
"""

from .errors import SearchIndexError, ModeLockedError
from .mode_manager import ModeManager
from .key_builders import (
    KEY_BUILDERS,
    exact_word_keys,
    prefix_keys,
    substring_keys,
    get_key_builder
)
from .inverted_index import InvertedIndex, DocumentRegistry
from .boolean_ops import BooleanOperations
from .query_processor import QueryProcessor

__all__ = [
    'SearchIndexError',
    'ModeLockedError',
    'ModeManager',

    'KEY_BUILDERS',
    'exact_word_keys',
    'prefix_keys',
    'substring_keys',
    'get_key_builder',

    'InvertedIndex',
    'DocumentRegistry',
    'BooleanOperations',
    'QueryProcessor',
]
