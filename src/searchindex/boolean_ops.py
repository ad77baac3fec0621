"""
Boolean operations on candidate sets.
Implements the AND across query tokens and deterministic result ordering.
"""

from typing import AbstractSet, Dict, Hashable, Iterable, List, Optional, Sequence
import logging

logger = logging.getLogger(__name__)


class BooleanOperations:
    """Implements boolean operations on document id sets."""

    @staticmethod
    def intersect(set1: AbstractSet, set2: AbstractSet) -> frozenset:
        """
        Intersect two candidate sets (AND operation).
        Iterates over the smaller set.

        Args:
            set1: First candidate set
            set2: Second candidate set

        Returns:
            New frozenset containing documents in both sets
        """
        if len(set1) > len(set2):
            set1, set2 = set2, set1
        return frozenset(doc_id for doc_id in set1 if doc_id in set2)

    @staticmethod
    def intersect_many(candidate_sets: Sequence[AbstractSet]) -> frozenset:
        """
        Intersect multiple candidate sets.
        Optimizes by processing shortest set first.

        Args:
            candidate_sets: List of candidate sets

        Returns:
            frozenset of documents present in all sets
        """
        if not candidate_sets:
            return frozenset()

        # Sort by size (shortest first for efficiency)
        sorted_sets = sorted(candidate_sets, key=len)

        result = frozenset(sorted_sets[0])

        for candidates in sorted_sets[1:]:
            # Early termination if result becomes empty
            if not result:
                break
            result = BooleanOperations.intersect(result, candidates)

        return result

    @staticmethod
    def order_ids(doc_ids: Iterable[Hashable],
                  first_seen: Optional[Dict[Hashable, int]] = None) -> List[Hashable]:
        """
        Order document ids deterministically.

        Ids are sorted ascending by their natural order. When the ids are not
        mutually comparable (mixed or opaque types), they are ordered by the
        position at which each was first indexed.

        Args:
            doc_ids: Deduplicated document ids
            first_seen: Map from id to first-seen position

        Returns:
            New list of ids
        """
        doc_ids = list(doc_ids)
        try:
            return sorted(doc_ids)
        except TypeError:
            if first_seen is None:
                raise
            logger.debug("Document ids are not mutually orderable, using first-seen order")
            return sorted(doc_ids, key=first_seen.__getitem__)
