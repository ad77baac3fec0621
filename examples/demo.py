#!/usr/bin/env python
"""
Demo script for the search index.

Indexes a handful of two-field documents under each mode and runs a few queries.
Run with: python examples/demo.py
"""

import sys
from pathlib import Path

# Add repo root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from src.index_base import IndexMode
from src.indices import SearchIndex
from src.searchindex import ModeLockedError

DOCUMENTS = [
    (1, "One", "The first document"),
    (2, "Two", "The second document"),
    (3, "Three", "The third document"),
    (4, "楌ぴ", "堦ヴ礯 ラ蝥曣んを 檨儯饨䶧"),
    (5, "ㄨ穯ゆ姎囥", "楌ぴ 堦ヴ礯 ラ蝥曣んを 檨儯饨䶧䏤"),
    (6, "Six", "Este es el sexto/6o documento"),
]


def build(mode: IndexMode) -> SearchIndex:
    index = SearchIndex(index_mode=mode)
    for doc_id, name, description in DOCUMENTS:
        index.index_document(doc_id, name)
        index.index_document(doc_id, description)
    return index


def demo_modes():
    """Demo 1: the same queries under each index mode."""
    print("=" * 60)
    print("DEMO 1: Index modes")
    print("=" * 60)

    queries = ["the", "sec", "second", "irst", "the second", "three document", "楌", ""]

    for mode in IndexMode:
        index = build(mode)
        stats = index.get_statistics()
        print(f"\n{mode.name}: {stats['num_keys']} keys, {stats['num_postings']} postings")
        for query in queries:
            print(f"  {query!r:20s} -> {index.search(query)}")


def demo_mode_lock():
    """Demo 2: the mode can only change before the first document."""
    print("\n" + "=" * 60)
    print("DEMO 2: Mode lock")
    print("=" * 60)

    index = SearchIndex()
    index.set_index_mode(IndexMode.PREFIXES)
    print(f"Mode before indexing: {index.get_index_mode().name}")

    index.index_document("a", "alpha")
    try:
        index.set_index_mode(IndexMode.EXACT_WORDS)
    except ModeLockedError as e:
        print(f"After indexing: {e}")


def demo_custom_pipeline():
    """Demo 3: injected tokenizer and sanitizer."""
    print("\n" + "=" * 60)
    print("DEMO 3: Custom pipeline")
    print("=" * 60)

    index = SearchIndex(index_mode=IndexMode.EXACT_WORDS, tokenize='ascii', sanitize=str.strip)
    for doc_id, name, description in DOCUMENTS:
        index.index_document(doc_id, name)
        index.index_document(doc_id, description)

    for query in ["first", "First", "sexto", "6o"]:
        print(f"  {query!r:10s} -> {index.search(query)}")


if __name__ == "__main__":
    demo_modes()
    demo_mode_lock()
    demo_custom_pipeline()
