"""
Unit tests for the host layer: config, data loading, query generation,
benchmarking, plotting and the CLI
Run with: pytest tests/test_host.py -v
"""

import json
import pytest
import sys
from pathlib import Path

import fire

# Add repo root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from src.config import REPO_ROOT, load_config
from src.data import data_loader
from src.data.data_loader import DataLoader
from src.indices.search_index import SearchIndex
from src.preprocessing.text_preprocessor import TextPreprocessor
from src.utils.benchmark import Benchmarker, BenchmarkResults
from src.utils.query_generator import QueryGenerator
from src.utils.plotting import Plotter


SAMPLE_LINES = [
    {"id": 1, "name": "One", "description": "The first document"},
    {"id": 2, "name": "Two", "description": "The second document"},
    {"id": 3, "name": "Three", "description": "The third document"},
]


@pytest.fixture
def dataset(tmp_path):
    path = tmp_path / "docs.jsonl"
    lines = [json.dumps(doc) for doc in SAMPLE_LINES]
    lines.insert(1, "{not json")
    lines.insert(2, "")
    lines.append(json.dumps({"name": "No id", "description": None}))
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return path


@pytest.fixture
def cfg(tmp_path, dataset):
    return load_config([
        f"dataset.source_file={dataset}",
        f"paths.results_dir={tmp_path / 'results'}",
        "benchmark.num_queries=40",
        "benchmark.warmup_queries=5",
    ])


class TestConfig:
    """Test Hydra config composition."""

    def test_defaults(self):
        cfg = load_config()
        assert cfg.index.mode == "SUBSTRINGS"
        assert cfg.preprocessing.tokenizer == "unicode"
        assert cfg.preprocessing.sanitizer == "lowercase"
        assert list(cfg.dataset.fields.text_fields) == ["name", "description"]

    def test_default_dataset_is_anchored_at_repo_root(self, monkeypatch, tmp_path):
        monkeypatch.delenv("SEARCH_DATASET", raising=False)
        monkeypatch.chdir(tmp_path)
        source = Path(load_config().dataset.source_file)
        assert source.is_absolute()
        assert source == REPO_ROOT / "data" / "sample_documents.jsonl"
        assert source.exists()

    def test_overrides(self):
        cfg = load_config(["index.mode=PREFIXES"])
        assert cfg.index.mode == "PREFIXES"
        assert cfg.experiment.name == "sample_PREFIXES"

    def test_env_resolver(self, monkeypatch):
        monkeypatch.setenv("SEARCH_DATASET", "/tmp/elsewhere.jsonl")
        cfg = load_config()
        assert cfg.dataset.source_file == "/tmp/elsewhere.jsonl"

    def test_index_from_config(self):
        index = SearchIndex.from_config(load_config(["index.mode=EXACT_WORDS"]))
        assert index.get_index_mode().name == "EXACT_WORDS"


class TestDataLoader:
    """Test JSONL loading."""

    def test_load_documents_skips_bad_lines(self, cfg):
        docs = list(DataLoader(cfg).load_documents())
        assert [doc["id"] for doc in docs] == [1, 2, 3, "doc_5"]

    def test_load_dataset_yields_one_pair_per_field(self, cfg):
        pairs = list(DataLoader(cfg).load_dataset())
        assert pairs[:2] == [(1, "One"), (1, "The first document")]
        assert ("doc_5", "No id") in pairs
        assert len(pairs) == 7

    def test_sample_size(self, tmp_path, dataset):
        cfg = load_config([f"dataset.source_file={dataset}", "dataset.sample_size=2"])
        docs = list(DataLoader(cfg).load_documents())
        assert [doc["id"] for doc in docs] == [1, 2]

    def test_missing_file(self, tmp_path):
        cfg = load_config([f"dataset.source_file={tmp_path / 'missing.jsonl'}"])
        with pytest.raises(FileNotFoundError):
            list(DataLoader(cfg).load_dataset())

    def test_sample_texts(self, cfg):
        assert DataLoader(cfg).load_sample_texts(3) == ["One", "The first document", "Two"]

    def test_progress_bar_closed_when_stopping_early(self, cfg, monkeypatch):
        bars = []

        class RecordingBar:
            def __init__(self, *args, **kwargs):
                self.closed = False
                bars.append(self)

            def update(self, n):
                pass

            def close(self):
                self.closed = True

        monkeypatch.setattr(data_loader, "tqdm", RecordingBar)
        DataLoader(cfg).load_sample_texts(1)

        assert len(bars) == 1
        assert bars[0].closed

    def test_unhashable_ids_are_skipped(self, tmp_path):
        path = tmp_path / "ids.jsonl"
        lines = [
            {"id": {"nested": 1}, "name": "Dict id"},
            {"id": [1, {"x": 2}], "name": "List with dict"},
            {"id": [7, 8], "name": "List id"},
            {"id": 9, "name": "Plain"},
        ]
        path.write_text("\n".join(json.dumps(doc) for doc in lines) + "\n", encoding="utf-8")
        cfg = load_config([f"dataset.source_file={path}"])

        assert list(DataLoader(cfg).load_dataset()) == [((7, 8), "List id"), (9, "Plain")]


class TestQueryGenerator:
    """Test query generation."""

    VOCABULARY = ["first", "second", "third", "document"]

    def test_reproducible(self, cfg):
        a = QueryGenerator(cfg, self.VOCABULARY, seed=7).generate_queries(50)
        b = QueryGenerator(cfg, reversed(self.VOCABULARY), seed=7).generate_queries(50)
        assert a == b
        assert len(a) == 50

    def test_fragments_come_from_vocabulary(self, cfg):
        queries = QueryGenerator(cfg, self.VOCABULARY).generate_queries(
            100, {'prefix': 0.5, 'infix': 0.5}
        )
        for query in queries:
            assert any(query in word for word in self.VOCABULARY)

    def test_unknown_query_type(self, cfg):
        with pytest.raises(ValueError):
            QueryGenerator(cfg, self.VOCABULARY).generate_queries(10, {'phrase': 1.0})

    def test_empty_vocabulary(self, cfg):
        assert QueryGenerator(cfg, []).generate_queries(3) == ["", "", ""]

    def test_save_and_load(self, cfg, tmp_path):
        generator = QueryGenerator(cfg, self.VOCABULARY)
        queries = generator.generate_queries(10)
        path = tmp_path / "queries.json"
        generator.save_queries(queries, path)
        assert generator.load_queries(path) == queries

    def test_statistics(self, cfg):
        stats = QueryGenerator(cfg, self.VOCABULARY).get_query_statistics(["a", "a b", ""])
        assert stats['total_queries'] == 3
        assert stats['single_token'] == 1
        assert stats['multi_token'] == 1
        assert stats['empty'] == 1
        assert stats['unique_tokens'] == 2


class TestBenchmark:
    """Test benchmark bookkeeping."""

    def test_results_statistics(self):
        results = BenchmarkResults("exp")
        results.add_query_result("a", 1.0, 10.0, 2)
        results.add_query_result("b", 3.0, 12.0, 0)

        stats = results.get_statistics()
        assert stats['total_queries'] == 2
        assert stats['latency_ms']['mean'] == pytest.approx(2.0)
        assert stats['memory_mb']['max'] == pytest.approx(12.0)
        assert stats['results']['empty'] == 1
        assert stats['throughput_qps'] == pytest.approx(500.0)

    def test_empty_results_statistics(self):
        assert BenchmarkResults("exp").get_statistics()['total_queries'] == 0

    def test_results_save(self, tmp_path):
        results = BenchmarkResults("exp")
        results.add_query_result("楌", 1.0, 10.0, 1)
        results.save(tmp_path)
        assert (tmp_path / "exp_detailed.json").exists()
        assert (tmp_path / "exp_stats.json").exists()

    def test_benchmark_indexing_and_queries(self, cfg):
        fields = list(DataLoader(cfg).load_dataset())
        index = SearchIndex.from_config(cfg)
        benchmarker = Benchmarker(cfg)

        indexing = benchmarker.benchmark_indexing(index, fields, "unit")
        assert indexing['document_count'] == 4
        assert indexing['field_count'] == 7
        assert indexing['index_mode'] == "SUBSTRINGS"
        assert (Path(cfg.paths.results_dir) / "unit.json").exists()

        queries = benchmarker.generate_test_queries((t for _, t in fields), index.preprocessor)
        assert len(queries) == 40

        results = benchmarker.benchmark_queries(index, queries, "unit")
        assert results.get_statistics()['total_queries'] == 40
        assert all(n >= 0 for n in results.results_count)


class TestPlotter:
    """Smoke tests for plots."""

    def test_mode_comparison_and_latency(self, cfg, tmp_path):
        plotter = Plotter(cfg)
        path = plotter.plot_mode_comparison({
            'SUBSTRINGS': {'key_count': 100, 'indexing_time_seconds': 0.2, 'mean_latency_ms': 0.01},
            'PREFIXES': {'key_count': 40, 'indexing_time_seconds': 0.1, 'mean_latency_ms': 0.01},
        })
        assert path.exists()
        assert plotter.plot_latency_distribution([0.1, 0.2, 0.3]).exists()

    def test_token_frequencies(self, cfg):
        freq = TextPreprocessor().get_token_frequencies(["the first", "the second"])
        assert Plotter(cfg).plot_token_frequencies(freq).exists()

    def test_empty_latencies(self, cfg):
        with pytest.raises(ValueError):
            Plotter(cfg).plot_latency_distribution([])


class TestCLI:
    """Test the Fire CLI object directly."""

    def test_search(self, dataset, capsys):
        from main import SearchCLI

        ids = SearchCLI().search("the second", source_file=str(dataset))
        assert ids == [2]
        output = json.loads(capsys.readouterr().out)
        assert output['ids'] == [2]
        assert output['mode'] == "SUBSTRINGS"

    def test_search_with_mode(self, dataset):
        from main import SearchCLI

        assert SearchCLI().search("sec", mode="exact_words", source_file=str(dataset)) == []

    def test_stats(self, dataset):
        from main import SearchCLI

        stats = SearchCLI().stats(mode="PREFIXES", source_file=str(dataset))
        assert stats['num_documents'] == 4
        assert stats['index_mode'] == "PREFIXES"

    def test_numeric_query_from_command_line(self, monkeypatch):
        from main import SearchCLI

        monkeypatch.delenv("SEARCH_DATASET", raising=False)
        assert fire.Fire(SearchCLI, command=['search', '6']) == [6]

    def test_default_dataset_outside_repo_root(self, monkeypatch, tmp_path):
        from main import SearchCLI

        monkeypatch.delenv("SEARCH_DATASET", raising=False)
        monkeypatch.chdir(tmp_path)
        assert fire.Fire(SearchCLI, command=['search', 'first']) == [1]
