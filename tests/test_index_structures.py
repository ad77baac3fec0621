"""
Unit tests for the index core: key builders, inverted index, registry,
boolean operations and the mode state machine
Run with: pytest tests/test_index_structures.py -v
"""

import pytest
import sys
from pathlib import Path

# Add repo root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from src.index_base import IndexMode, ModeState
from src.searchindex import (
    ModeLockedError,
    SearchIndexError,
    ModeManager,
    KEY_BUILDERS,
    exact_word_keys,
    prefix_keys,
    substring_keys,
    get_key_builder,
    InvertedIndex,
    DocumentRegistry,
    BooleanOperations
)


class TestKeyBuilders:
    """Test lookup-key derivation per mode."""

    def test_exact_word_keys(self):
        assert exact_word_keys("second") == {"second"}

    def test_prefix_keys(self):
        assert prefix_keys("first") == {"f", "fi", "fir", "firs", "first"}

    def test_substring_keys(self):
        assert substring_keys("abc") == {"a", "b", "c", "ab", "bc", "abc"}

    def test_substring_keys_deduplicate_repeats(self):
        assert substring_keys("aa") == {"a", "aa"}

    def test_substring_key_count_is_quadratic(self):
        token = "abcdefgh"
        n = len(token)
        assert len(substring_keys(token)) == n * (n + 1) // 2

    def test_second_is_reachable_by_infixes(self):
        keys = substring_keys("second")
        for fragment in ["sec", "eco", "cond", "second"]:
            assert fragment in keys

    @pytest.mark.parametrize("builder", [exact_word_keys, prefix_keys, substring_keys])
    def test_empty_token_has_no_keys(self, builder):
        assert builder("") == set()

    def test_keys_respect_character_boundaries(self):
        """Multi-byte characters are atomic units of the key."""
        assert substring_keys("堦ヴ礯") == {"堦", "ヴ", "礯", "堦ヴ", "ヴ礯", "堦ヴ礯"}
        assert prefix_keys("楌ぴ") == {"楌", "楌ぴ"}

    def test_get_key_builder(self):
        assert get_key_builder(IndexMode.PREFIXES) is prefix_keys
        assert get_key_builder("exact_words") is exact_word_keys
        assert set(KEY_BUILDERS) == set(IndexMode)


class TestIndexMode:
    """Test IndexMode parsing."""

    def test_parse_member(self):
        assert IndexMode.parse(IndexMode.PREFIXES) is IndexMode.PREFIXES

    @pytest.mark.parametrize("name", ["SUBSTRINGS", "substrings", " Substrings "])
    def test_parse_name(self, name):
        assert IndexMode.parse(name) is IndexMode.SUBSTRINGS

    @pytest.mark.parametrize("value", ["FUZZY", 1, None])
    def test_parse_invalid(self, value):
        with pytest.raises(ValueError):
            IndexMode.parse(value)


class TestInvertedIndex:
    """Test the key -> id set mapping."""

    def setup_method(self):
        self.index = InvertedIndex()

    def test_empty_index(self):
        assert self.index.get_vocabulary_size() == 0
        assert self.index.get_candidates("missing") == frozenset()
        assert self.index.get_statistics()['avg_candidate_set_size'] == 0

    def test_add_keys_unions_ids(self):
        self.index.add_keys(1, {"a", "ab"})
        self.index.add_keys(2, {"a"})

        assert self.index.get_candidates("a") == {1, 2}
        assert self.index.get_candidates("ab") == {1}
        assert self.index.contains_key("ab")
        assert not self.index.contains_key("b")

    def test_re_adding_is_idempotent(self):
        assert self.index.add_keys(1, {"x", "y"}) == 2
        assert self.index.add_keys(1, {"x", "y"}) == 0

        stats = self.index.get_statistics()
        assert stats['num_keys'] == 2
        assert stats['num_postings'] == 2
        assert stats['num_tokens'] == 2

    def test_candidates_are_copies(self):
        self.index.add_keys(1, {"k"})
        candidates = self.index.get_candidates("k")
        self.index.add_keys(2, {"k"})

        assert candidates == {1}
        assert self.index.get_candidates("k") == {1, 2}

    def test_average_candidate_set_size(self):
        self.index.add_keys(1, {"a", "b"})
        self.index.add_keys(2, {"a"})
        assert self.index.get_statistics()['avg_candidate_set_size'] == pytest.approx(1.5)


class TestDocumentRegistry:
    """Test the registry of indexed ids."""

    def test_first_seen_order(self):
        registry = DocumentRegistry()
        for doc_id in ["c", "a", "c", "b"]:
            registry.register(doc_id)

        assert registry.get_ids_in_order() == ["c", "a", "b"]
        assert registry.first_seen_rank() == {"c": 0, "a": 1, "b": 2}
        assert registry.get_document_count() == 3
        assert len(registry) == 3

    def test_register_reports_new_ids(self):
        registry = DocumentRegistry()
        assert registry.register(1) is True
        assert registry.register(1) is False
        assert registry.get_call_count(1) == 2
        assert registry.get_call_count(2) == 0

    def test_contains(self):
        registry = DocumentRegistry()
        registry.register(("tuple", 1))
        assert ("tuple", 1) in registry
        assert "other" not in registry
        assert [] not in registry


class TestBooleanOperations:
    """Test set operations and ordering."""

    def test_intersect(self):
        assert BooleanOperations.intersect({1, 2, 3}, {2, 3, 4}) == {2, 3}
        assert BooleanOperations.intersect(set(), {1}) == frozenset()

    def test_intersect_many(self):
        result = BooleanOperations.intersect_many([{1, 2, 3, 5}, {3, 5}, {1, 3, 5, 7}])
        assert result == {3, 5}

    def test_intersect_many_empty_input(self):
        assert BooleanOperations.intersect_many([]) == frozenset()

    def test_intersect_many_single_set(self):
        assert BooleanOperations.intersect_many([{4, 2}]) == {2, 4}

    def test_intersect_many_stops_on_empty(self):
        assert BooleanOperations.intersect_many([{1}, set(), {1}]) == frozenset()

    def test_order_ids_sorts_naturally(self):
        assert BooleanOperations.order_ids({3, 1, 2}) == [1, 2, 3]
        assert BooleanOperations.order_ids({"b", "a"}) == ["a", "b"]

    def test_order_ids_falls_back_to_first_seen(self):
        first_seen = {"x": 0, 2: 1, ("t",): 2}
        assert BooleanOperations.order_ids({("t",), 2, "x"}, first_seen) == ["x", 2, ("t",)]

    def test_order_ids_unorderable_without_ranks_raises(self):
        with pytest.raises(TypeError):
            BooleanOperations.order_ids({"x", 2})


class TestModeManager:
    """Test the CONFIGURABLE -> LOCKED state machine."""

    def test_defaults(self):
        manager = ModeManager()
        assert manager.mode is IndexMode.SUBSTRINGS
        assert manager.state is ModeState.CONFIGURABLE
        assert not manager.is_locked

    def test_set_mode_while_configurable(self):
        manager = ModeManager()
        assert manager.set_mode("PREFIXES") is IndexMode.PREFIXES
        manager.set_mode(IndexMode.EXACT_WORDS)

        assert manager.mode is IndexMode.EXACT_WORDS
        assert manager.state is ModeState.CONFIGURABLE

    def test_lock_blocks_mode_changes(self):
        manager = ModeManager(IndexMode.PREFIXES)
        manager.lock()

        with pytest.raises(ModeLockedError) as exc_info:
            manager.set_mode(IndexMode.EXACT_WORDS)

        assert manager.mode is IndexMode.PREFIXES
        assert manager.state is ModeState.LOCKED
        assert exc_info.value.current_mode is IndexMode.PREFIXES
        assert exc_info.value.requested_mode is IndexMode.EXACT_WORDS

    def test_locked_rejects_even_same_mode(self):
        manager = ModeManager()
        manager.lock()
        with pytest.raises(ModeLockedError):
            manager.set_mode(IndexMode.SUBSTRINGS)

    def test_lock_is_idempotent(self):
        manager = ModeManager()
        manager.lock()
        manager.lock()
        assert manager.is_locked

    def test_invalid_mode_leaves_mode_unchanged(self):
        manager = ModeManager()
        with pytest.raises(ValueError):
            manager.set_mode("FUZZY")
        assert manager.mode is IndexMode.SUBSTRINGS

    def test_error_hierarchy(self):
        assert issubclass(ModeLockedError, SearchIndexError)
        assert issubclass(ModeLockedError, RuntimeError)
