"""
Core inverted index data structure: lookup key -> set of document ids.
"""

from typing import Dict, FrozenSet, Hashable, Iterable, List, Set
import logging

logger = logging.getLogger(__name__)


class InvertedIndex:
    """
    Maps lookup keys to the set of documents that produced them.
    Append-only: there is no removal.
    """

    def __init__(self):
        """Initialize empty inverted index."""
        # Key -> document id set
        self.dictionary: Dict[str, Set[Hashable]] = {}

        # Statistics
        self.num_tokens = 0
        self.num_postings = 0

    def add_keys(self, doc_id: Hashable, keys: Iterable[str]) -> int:
        """
        Register keys for a document.

        Args:
            doc_id: Document identifier
            keys: Lookup keys derived from one token

        Returns:
            Number of new key->document associations
        """
        added = 0
        for key in keys:
            doc_ids = self.dictionary.get(key)
            if doc_ids is None:
                doc_ids = self.dictionary[key] = set()
            if doc_id not in doc_ids:
                doc_ids.add(doc_id)
                added += 1

        self.num_tokens += 1
        self.num_postings += added
        return added

    def get_candidates(self, key: str) -> FrozenSet[Hashable]:
        """
        Get the documents registered under a key.

        Args:
            key: The key to look up

        Returns:
            Frozen copy of the document id set (empty if the key is unknown)
        """
        doc_ids = self.dictionary.get(key)
        return frozenset(doc_ids) if doc_ids else frozenset()

    def contains_key(self, key: str) -> bool:
        """Check if key exists in the index."""
        return key in self.dictionary

    def get_vocabulary_size(self) -> int:
        """Get number of distinct lookup keys."""
        return len(self.dictionary)

    def get_statistics(self) -> Dict:
        """Get index statistics."""
        return {
            'num_keys': len(self.dictionary),
            'num_postings': self.num_postings,
            'num_tokens': self.num_tokens,
            'avg_candidate_set_size': (
                self.num_postings / len(self.dictionary) if self.dictionary else 0
            ),
        }


class DocumentRegistry:
    """
    Every document id ever indexed, in first-seen order.
    Separate from the inverted index so documents without tokens still count.
    """

    def __init__(self):
        """Initialize document registry."""
        # Insertion-ordered: value is number of index calls for the id
        self._calls: Dict[Hashable, int] = {}
        self._rank: Dict[Hashable, int] = {}

    def register(self, doc_id: Hashable) -> bool:
        """
        Record an indexing call for a document.

        Returns:
            True if the id had not been seen before
        """
        is_new = doc_id not in self._calls
        if is_new:
            self._rank[doc_id] = len(self._rank)
        self._calls[doc_id] = self._calls.get(doc_id, 0) + 1
        return is_new

    def __contains__(self, doc_id) -> bool:
        try:
            return doc_id in self._calls
        except TypeError:
            return False

    def __len__(self) -> int:
        return len(self._calls)

    def get_all_ids(self) -> Set[Hashable]:
        """Get set of all document ids."""
        return set(self._calls)

    def get_ids_in_order(self) -> List[Hashable]:
        """Get all document ids in first-seen order."""
        return list(self._calls)

    def first_seen_rank(self) -> Dict[Hashable, int]:
        """Map each id to its first-seen position."""
        return self._rank

    def get_call_count(self, doc_id: Hashable) -> int:
        """Number of index_document calls made for an id."""
        return self._calls.get(doc_id, 0)

    def get_document_count(self) -> int:
        """Get total number of documents."""
        return len(self._calls)
