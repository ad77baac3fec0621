import time
import psutil
import logging
import json
from typing import Any, Dict, Iterable, List, Optional, Tuple
from pathlib import Path
import numpy as np
from datetime import datetime

logger = logging.getLogger(__name__)


class BenchmarkResults:
    """Container for benchmark results."""

    def __init__(self, experiment_name: str):
        self.experiment_name = experiment_name
        self.timestamp = datetime.now().isoformat()
        self.queries = []
        self.latencies = []
        self.memory_usage = []
        self.results_count = []

    def add_query_result(self, query: str, latency: float, memory_mb: float, num_results: int):
        """Add a single query result."""
        self.queries.append(query)
        self.latencies.append(latency)
        self.memory_usage.append(memory_mb)
        self.results_count.append(num_results)

    def get_statistics(self) -> Dict[str, Any]:
        """Calculate and return statistics."""
        stats = {
            "experiment_name": self.experiment_name,
            "timestamp": self.timestamp,
            "total_queries": len(self.queries),
        }
        if not self.latencies:
            return stats

        latencies = np.array(self.latencies)
        total_ms = float(np.sum(latencies))

        stats.update({
            "latency_ms": {
                "mean": float(np.mean(latencies)),
                "median": float(np.median(latencies)),
                "std": float(np.std(latencies)),
                "min": float(np.min(latencies)),
                "max": float(np.max(latencies)),
                "p95": float(np.percentile(latencies, 95)),
                "p99": float(np.percentile(latencies, 99))
            },
            "memory_mb": {
                "mean": float(np.mean(self.memory_usage)),
                "max": float(np.max(self.memory_usage))
            },
            "results": {
                "mean": float(np.mean(self.results_count)),
                "empty": int(sum(1 for n in self.results_count if n == 0))
            },
            "throughput_qps": len(self.queries) / total_ms * 1000 if total_ms > 0 else 0
        })

        return stats

    def save(self, output_dir: Path):
        """Save benchmark results to disk."""
        output_dir.mkdir(parents=True, exist_ok=True)

        detailed_path = output_dir / f"{self.experiment_name}_detailed.json"
        detailed_data = {
            "experiment_name": self.experiment_name,
            "timestamp": self.timestamp,
            "queries": self.queries,
            "latencies_ms": self.latencies,
            "memory_mb": self.memory_usage,
            "results_count": self.results_count
        }

        with open(detailed_path, 'w', encoding='utf-8') as f:
            json.dump(detailed_data, f, indent=2, ensure_ascii=False)

        stats_path = output_dir / f"{self.experiment_name}_stats.json"
        with open(stats_path, 'w', encoding='utf-8') as f:
            json.dump(self.get_statistics(), f, indent=2)

        logger.info(f"Saved benchmark results to {output_dir}")


class Benchmarker:
    """Handles benchmarking of index operations."""

    def __init__(self, config):
        """
        Initialize benchmarker.

        Args:
            config: Hydra configuration object
        """
        self.config = config
        self.process = psutil.Process()

    def _memory_mb(self) -> float:
        return self.process.memory_info().rss / 1024 / 1024

    def benchmark_queries(
        self,
        index_instance,
        queries: List[str],
        experiment_name: Optional[str] = None
    ) -> BenchmarkResults:
        """
        Benchmark a set of queries.

        Args:
            index_instance: SearchIndex to query
            queries: List of query strings
            experiment_name: Name for this experiment

        Returns:
            BenchmarkResults object
        """
        if experiment_name is None:
            experiment_name = self.config.experiment.name

        results = BenchmarkResults(experiment_name)

        logger.info(f"Starting benchmark: {experiment_name}")
        logger.info(f"Total queries: {len(queries)}")

        warmup_count = min(self.config.benchmark.warmup_queries, len(queries))
        logger.info(f"Running {warmup_count} warmup queries...")
        for query in queries[:warmup_count]:
            index_instance.search(query)

        for i, query in enumerate(queries):
            mem_before = self._memory_mb()

            start_time = time.perf_counter()
            matches = index_instance.search(query)
            end_time = time.perf_counter()

            mem_after = self._memory_mb()

            latency_ms = (end_time - start_time) * 1000
            results.add_query_result(query, latency_ms, max(mem_before, mem_after), len(matches))

            if (i + 1) % 100 == 0:
                logger.info(f"Processed {i + 1}/{len(queries)} queries")

        stats = results.get_statistics()
        if stats["total_queries"]:
            logger.info("=" * 50)
            logger.info("BENCHMARK RESULTS")
            logger.info("=" * 50)
            logger.info(f"Experiment: {experiment_name}")
            logger.info(f"Total Queries: {stats['total_queries']}")
            logger.info(f"Mean Latency: {stats['latency_ms']['mean']:.3f} ms")
            logger.info(f"P95 Latency: {stats['latency_ms']['p95']:.3f} ms")
            logger.info(f"Throughput: {stats['throughput_qps']:.2f} queries/sec")
            logger.info(f"Max Memory: {stats['memory_mb']['max']:.2f} MB")
            logger.info("=" * 50)

        return results

    def benchmark_indexing(
        self,
        index_instance,
        documents: Iterable[Tuple[Any, str]],
        experiment_name: Optional[str] = None
    ) -> Dict[str, Any]:
        """
        Benchmark indexing.

        Args:
            index_instance: SearchIndex to fill
            documents: (doc_id, field_text) pairs
            experiment_name: Name for this experiment

        Returns:
            Dictionary with benchmark results
        """
        if experiment_name is None:
            experiment_name = f"{self.config.experiment.name}_indexing"

        documents = list(documents)
        logger.info(f"Benchmarking indexing: {experiment_name} ({len(documents)} fields)")

        mem_before = self._memory_mb()

        start_time = time.perf_counter()
        index_instance.index_documents(documents)
        end_time = time.perf_counter()

        mem_after = self._memory_mb()

        indexing_time = end_time - start_time
        index_stats = index_instance.get_statistics()

        results = {
            "experiment_name": experiment_name,
            "timestamp": datetime.now().isoformat(),
            "index_mode": index_stats["index_mode"],
            "field_count": len(documents),
            "document_count": index_stats["num_documents"],
            "key_count": index_stats["num_keys"],
            "posting_count": index_stats["num_postings"],
            "indexing_time_seconds": indexing_time,
            "throughput_fields_per_sec": len(documents) / indexing_time if indexing_time > 0 else 0,
            "memory_before_mb": mem_before,
            "memory_after_mb": mem_after,
            "memory_increase_mb": mem_after - mem_before
        }

        logger.info("=" * 50)
        logger.info("INDEXING BENCHMARK RESULTS")
        logger.info("=" * 50)
        logger.info(f"Mode: {results['index_mode']}")
        logger.info(f"Documents: {results['document_count']}")
        logger.info(f"Keys: {results['key_count']}")
        logger.info(f"Time: {results['indexing_time_seconds']:.2f} seconds")
        logger.info(f"Memory increase: {results['memory_increase_mb']:.2f} MB")
        logger.info("=" * 50)

        if self.config.experiment.save_results:
            output_dir = Path(self.config.paths.results_dir)
            output_dir.mkdir(parents=True, exist_ok=True)

            output_path = output_dir / f"{experiment_name}.json"
            with open(output_path, 'w', encoding='utf-8') as f:
                json.dump(results, f, indent=2)

            logger.info(f"Saved indexing results to {output_path}")

        return results

    def generate_test_queries(self, texts: Iterable[str], preprocessor,
                              num_queries: Optional[int] = None) -> List[str]:
        """
        Generate test queries from the vocabulary of the given texts.

        Args:
            texts: Field texts that were indexed
            preprocessor: TextPreprocessor used by the index
            num_queries: Number of queries to generate

        Returns:
            List of query strings
        """
        if num_queries is None:
            num_queries = self.config.benchmark.num_queries

        # Import here to avoid circular dependency
        from src.utils.query_generator import QueryGenerator

        vocabulary = {token for text in texts for token in preprocessor.preprocess(text)}
        query_gen = QueryGenerator(self.config, vocabulary, seed=self.config.benchmark.seed)
        queries = query_gen.generate_queries(num_queries)

        stats = query_gen.get_query_statistics(queries)
        logger.info("Query Statistics:")
        logger.info(f"  Total queries: {stats['total_queries']}")
        logger.info(f"  Single token: {stats['single_token']}")
        logger.info(f"  Multi token: {stats['multi_token']}")
        logger.info(f"  Avg tokens per query: {stats['avg_tokens_per_query']:.2f}")

        return queries
