#!/usr/bin/env python
"""
Validate that every index mode returns exactly the documents a naive scan finds.

For each generated query, a document matches if every query token matches at
least one of the document's tokens: equality (EXACT_WORDS), startswith
(PREFIXES) or containment (SUBSTRINGS).
"""

import sys
from collections import defaultdict
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent))

import fire

from src.config import load_config, setup_logging
from src.index_base import IndexMode
from src.indices.search_index import SearchIndex
from src.data.data_loader import DataLoader
from src.utils.query_generator import QueryGenerator

MATCH_RULES = {
    IndexMode.EXACT_WORDS: lambda indexed, query: indexed == query,
    IndexMode.PREFIXES: lambda indexed, query: indexed.startswith(query),
    IndexMode.SUBSTRINGS: lambda indexed, query: query in indexed,
}


def naive_search(doc_tokens, query_tokens, mode):
    """Scan every document's tokens; no index involved."""
    if not query_tokens:
        return set(doc_tokens)
    rule = MATCH_RULES[mode]
    return {
        doc_id for doc_id, tokens in doc_tokens.items()
        if all(any(rule(token, q) for token in tokens) for q in query_tokens)
    }


def validate(source_file: str = None, num_queries: int = 200):
    overrides = [f"dataset.source_file={source_file}"] if source_file else []
    cfg = load_config(overrides)
    setup_logging(cfg)

    fields = list(DataLoader(cfg).load_dataset())

    print("=" * 60)
    print("CORRECTNESS VALIDATION")
    print("=" * 60)

    failures = 0
    for mode in IndexMode:
        index = SearchIndex.from_config(cfg)
        index.set_index_mode(mode)
        index.index_documents(fields)

        doc_tokens = defaultdict(set)
        for doc_id, text in fields:
            doc_tokens[doc_id].update(index.preprocessor.preprocess(text))
        vocabulary = {token for tokens in doc_tokens.values() for token in tokens}

        queries = QueryGenerator(cfg, vocabulary, seed=cfg.benchmark.seed).generate_queries(num_queries)
        queries.append('')

        mismatches = 0
        for query in queries:
            expected = naive_search(doc_tokens, index.preprocessor.preprocess(query), mode)
            actual = index.search(query)
            if set(actual) != expected or len(actual) != len(expected):
                mismatches += 1
                print(f"  ❌ {mode.name} {query!r}: expected {sorted(expected, key=str)}, got {actual}")

        status = "✓" if mismatches == 0 else "❌"
        print(f"{status} {mode.name:12s}: {len(queries) - mismatches}/{len(queries)} queries agree")
        failures += mismatches

    return failures


def main(source_file: str = None, num_queries: int = 200):
    failures = validate(source_file, num_queries)
    sys.exit(1 if failures else 0)


if __name__ == "__main__":
    fire.Fire(main)
