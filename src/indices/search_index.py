"""
SearchIndex: in-memory multi-field text search.

Integrates the preprocessing pipeline, the mode lock, key derivation and the
AND query processor behind the IndexBase interface.
"""

import logging
from collections.abc import Hashable as HashableABC
from typing import Any, Dict, Hashable, Iterable, List, Optional, Tuple

from src.index_base import IndexBase, IndexMode
from src.searchindex import (
    InvertedIndex,
    DocumentRegistry,
    ModeManager,
    QueryProcessor,
    get_key_builder
)
from src.preprocessing.text_preprocessor import TextPreprocessor

logger = logging.getLogger(__name__)


class SearchIndex(IndexBase):
    """
    In-memory text index over opaque document ids.

    Supports three index modes:
    - SUBSTRINGS (default): a query token matches any indexed token containing it
    - PREFIXES: a query token matches indexed tokens starting with it
    - EXACT_WORDS: a query token matches equal indexed tokens

    A document may be indexed several times (once per field); queries match
    on the union of its tokens. Not safe for concurrent writers.
    """

    def __init__(self, config: Optional[Dict[str, Any]] = None, *, index_mode=None,
                 tokenize=None, sanitize=None):
        """
        Initialize SearchIndex.

        Args:
            config: Optional mapping with keys index_mode, tokenize, sanitize
            index_mode: Overrides config['index_mode']
            tokenize: Overrides config['tokenize'] (callable or preset name)
            sanitize: Overrides config['sanitize'] (callable or preset name)
        """
        config = config or {}
        if index_mode is None:
            index_mode = config.get('index_mode') or IndexMode.SUBSTRINGS
        if tokenize is None:
            tokenize = config.get('tokenize')
        if sanitize is None:
            sanitize = config.get('sanitize')

        self.mode_manager = ModeManager(index_mode)
        super().__init__(core='SearchIndex', mode=self.mode_manager.mode)

        # Text preprocessing
        self.preprocessor = TextPreprocessor(tokenize=tokenize, sanitize=sanitize)

        # Core components
        self.inverted_index = InvertedIndex()
        self.registry = DocumentRegistry()
        self.query_processor = QueryProcessor(self.inverted_index, self.registry, self.preprocessor)

        logger.info(f"Initialized SearchIndex with mode={self.mode_manager.mode.name}")

    @classmethod
    def from_config(cls, config) -> 'SearchIndex':
        """
        Build from a Hydra config.

        Args:
            config: Hydra config object with index.mode and a preprocessing section
        """
        index_cfg = config.get('index') or {}
        preprocessing = config.get('preprocessing') or {}
        return cls(
            index_mode=index_cfg.get('mode', IndexMode.SUBSTRINGS.name),
            tokenize=preprocessing.get('tokenizer'),
            sanitize=preprocessing.get('sanitizer'),
        )

    def get_index_mode(self) -> IndexMode:
        return self.mode_manager.mode

    def set_index_mode(self, mode) -> None:
        """
        Change the index mode.

        Raises:
            ValueError: unknown mode
            ModeLockedError: a document has already been indexed
        """
        new_mode = self.mode_manager.set_mode(mode)
        self._set_identifiers(new_mode)

    def index_document(self, document_id: Hashable, text: Optional[str] = None) -> None:
        """
        Index one field of a document.

        The mode is locked before the arguments are looked at.

        Args:
            document_id: Opaque, hashable document id
            text: Field text; None registers the id without tokens

        Raises:
            TypeError: document_id is unhashable or text is not a string
        """
        self.mode_manager.lock()

        if not isinstance(document_id, HashableABC):
            raise TypeError(f"Document id must be hashable, got {type(document_id).__name__}")
        if text is not None and not isinstance(text, str):
            raise TypeError(f"Text must be a string, got {type(text).__name__}")

        if self.registry.register(document_id):
            logger.debug(f"Registered document {document_id!r}")

        build_keys = get_key_builder(self.mode_manager.mode)
        tokens = self.preprocessor.preprocess(text)
        added = 0
        for token in tokens:
            added += self.inverted_index.add_keys(document_id, build_keys(token))

        logger.debug(f"Indexed {len(tokens)} tokens for {document_id!r} ({added} new postings)")

    def index_documents(self, documents: Iterable[Tuple[Hashable, Optional[str]]]) -> int:
        """
        Index (document_id, text) pairs.

        Returns:
            Number of index_document calls made
        """
        count = 0
        for document_id, text in documents:
            self.index_document(document_id, text)
            count += 1
        logger.info(f"Indexed {count} fields for {len(self.registry)} documents")
        return count

    def search(self, query: str) -> List[Hashable]:
        """
        Find documents matching every token of the query.

        An empty query (no tokens) matches every indexed document.

        Args:
            query: Free-text query

        Returns:
            New list of deduplicated ids, ascending
        """
        return self.query_processor.process_query(query)

    def list_indexed_documents(self) -> List[Hashable]:
        """Document ids in the order they were first indexed."""
        return self.registry.get_ids_in_order()

    def get_statistics(self) -> Dict[str, Any]:
        """Get index statistics."""
        return {
            'index_mode': self.mode_manager.mode.name,
            'mode_state': self.mode_manager.state.name,
            'num_documents': self.registry.get_document_count(),
            **self.inverted_index.get_statistics(),
        }

    def __len__(self) -> int:
        return len(self.registry)

    def __contains__(self, document_id) -> bool:
        return document_id in self.registry
