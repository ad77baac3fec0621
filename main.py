#!/usr/bin/env python
"""
Main entry point for the search index.
Uses Fire for CLI and Hydra for configuration management.
"""

import sys
import json
import logging
from pathlib import Path
import fire
from omegaconf import OmegaConf

# Add repo root to path
sys.path.insert(0, str(Path(__file__).parent))

from src.config import load_config, setup_logging
from src.index_base import IndexMode
from src.indices.search_index import SearchIndex
from src.data.data_loader import DataLoader
from src.utils.benchmark import Benchmarker
from src.utils.plotting import Plotter


class SearchCLI:
    """CLI for the in-memory search index."""

    def __init__(self, config_dir: str = None, config_name: str = "config"):
        """
        Initialize CLI with configuration.

        Args:
            config_dir: Path to config directory (default: conf/ next to this file)
            config_name: Name of main config file
        """
        self.config_dir = config_dir
        self.config_name = config_name
        self.config = None
        self.logger = logging.getLogger(__name__)

    def _init_config(self, mode: str = None, source_file: str = None, overrides=None):
        """Initialize Hydra configuration."""
        overrides = list(overrides or [])
        if mode:
            overrides.append(f"index.mode={IndexMode.parse(mode).name}")
        if source_file:
            overrides.append(f"dataset.source_file={source_file}")

        self.config = load_config(overrides, config_dir=self.config_dir, config_name=self.config_name)
        setup_logging(self.config)

    def _build_index(self, fields=None) -> SearchIndex:
        """Create an index and fill it from the configured dataset."""
        index = SearchIndex.from_config(self.config)
        if fields is None:
            fields = DataLoader(self.config).load_dataset()
        index.index_documents(fields)
        return index

    def search(self, query: str = "", mode: str = None, source_file: str = None):
        """
        Index the dataset and run one query.

        Args:
            query: Query string (empty matches every document)
            mode: Index mode (SUBSTRINGS, PREFIXES, EXACT_WORDS)
            source_file: JSONL dataset to index

        Returns:
            Matching document ids
        """
        # Fire parses numeric arguments, e.g. `search 6`
        query = str(query)
        self._init_config(mode, source_file)
        index = self._build_index()

        results = index.search(query)
        self.logger.info(f"Query {query!r} ({index.get_index_mode().name}) matched {len(results)} documents")
        print(json.dumps({
            'query': query,
            'mode': index.get_index_mode().name,
            'total_hits': len(results),
            'ids': results,
        }, ensure_ascii=False, default=str))
        return results

    def stats(self, mode: str = None, source_file: str = None):
        """
        Index the dataset and print index statistics.

        Args:
            mode: Index mode
            source_file: JSONL dataset to index
        """
        self._init_config(mode, source_file)
        index = self._build_index()

        stats = index.get_statistics()
        print(json.dumps(stats, indent=2))
        return stats

    def benchmark(self, mode: str = None, source_file: str = None, num_queries: int = None,
                  plot: bool = False):
        """
        Benchmark indexing and querying for one mode.

        Args:
            mode: Index mode
            source_file: JSONL dataset to index
            num_queries: Number of generated queries
            plot: Save a latency distribution plot
        """
        self._init_config(mode, source_file)
        return self._run_benchmark(num_queries, plot)

    def _run_benchmark(self, num_queries: int = None, plot: bool = False):
        experiment_name = self.config.experiment.name
        self.logger.info("=" * 60)
        self.logger.info(f"RUNNING BENCHMARK: {experiment_name}")
        self.logger.info("=" * 60)

        fields = list(DataLoader(self.config).load_dataset())
        index = SearchIndex.from_config(self.config)

        benchmarker = Benchmarker(self.config)
        indexing = benchmarker.benchmark_indexing(index, fields)

        queries = benchmarker.generate_test_queries(
            (text for _, text in fields), index.preprocessor, num_queries
        )
        results = benchmarker.benchmark_queries(index, queries, experiment_name)

        if self.config.experiment.save_results:
            results.save(Path(self.config.paths.results_dir))

        if plot and results.latencies:
            Plotter(self.config).plot_latency_distribution(
                results.latencies,
                title=f"Query Latency Distribution - {experiment_name}",
                filename=f"{experiment_name}_latency.png"
            )

        return {'indexing': indexing, 'queries': results.get_statistics()}

    def compare_modes(self, source_file: str = None, num_queries: int = None):
        """
        Benchmark every index mode on the same dataset and plot the comparison.

        Args:
            source_file: JSONL dataset to index
            num_queries: Number of generated queries per mode
        """
        comparison = {}
        for mode in IndexMode:
            self._init_config(mode.name, source_file)
            summary = self._run_benchmark(num_queries)
            latency = summary['queries'].get('latency_ms', {})
            comparison[mode.name] = {
                'key_count': summary['indexing']['key_count'],
                'indexing_time_seconds': summary['indexing']['indexing_time_seconds'],
                'mean_latency_ms': latency.get('mean', 0.0),
            }

        Plotter(self.config).plot_mode_comparison(comparison)
        print(json.dumps(comparison, indent=2))
        return comparison

    def show_config(self, mode: str = None):
        """
        Display current configuration.

        Args:
            mode: Index mode override to apply
        """
        self._init_config(mode)

        self.logger.info("=" * 60)
        self.logger.info("CURRENT CONFIGURATION")
        self.logger.info("=" * 60)
        print(OmegaConf.to_yaml(self.config, resolve=True))


def main():
    """Main entry point."""
    fire.Fire(SearchCLI)


if __name__ == "__main__":
    main()
