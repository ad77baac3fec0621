"""
Query processing: tokenize the query, gather candidates per token, AND them.
"""

from typing import Hashable, List
import logging

from src.preprocessing.text_preprocessor import TextPreprocessor
from .inverted_index import InvertedIndex, DocumentRegistry
from .boolean_ops import BooleanOperations

logger = logging.getLogger(__name__)


class QueryProcessor:
    """
    Multi-token AND query evaluator.

    Every lookup-key population already contains the keys a query token must
    hit (all substrings, all prefixes, or the word itself), so each query token
    is looked up directly regardless of mode.
    """

    def __init__(self, index: InvertedIndex, registry: DocumentRegistry,
                 preprocessor: TextPreprocessor):
        """
        Initialize query processor.

        Args:
            index: InvertedIndex to query
            registry: Registry of all indexed document ids
            preprocessor: Same pipeline used at index time
        """
        self.index = index
        self.registry = registry
        self.preprocessor = preprocessor

    def process_query(self, query: str) -> List[Hashable]:
        """
        Process a query.

        Algorithm:
        1. Sanitize and tokenize the query
        2. No tokens: every indexed document matches
        3. Otherwise look up each distinct token's candidate set
        4. Intersect all candidate sets
        5. Order the result deterministically

        Args:
            query: Query text

        Returns:
            Deduplicated, ordered list of document ids
        """
        query_terms = self.preprocessor.preprocess(query)

        if not query_terms:
            matches = self.registry.get_all_ids()
        else:
            candidate_sets = [
                self.index.get_candidates(term) for term in dict.fromkeys(query_terms)
            ]
            matches = BooleanOperations.intersect_many(candidate_sets)

        results = BooleanOperations.order_ids(matches, self.registry.first_seen_rank())
        logger.debug(f"Query {query!r} -> terms {query_terms} -> {len(results)} results")
        return results
