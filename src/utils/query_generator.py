import random
import json
import logging
from pathlib import Path
from typing import Dict, Iterable, List

logger = logging.getLogger(__name__)


class QueryGenerator:
    """
    Generate test queries from the vocabulary of an indexed corpus.
    Ensures reproducibility: the same vocabulary and seed give the same queries.
    """

    def __init__(self, config, vocabulary: Iterable[str], seed: int = 42):
        """
        Initialize query generator.

        Args:
            config: Hydra configuration object
            vocabulary: Sanitized tokens seen in the corpus
            seed: Random seed for reproducibility
        """
        self.config = config
        self.seed = seed
        self.rng = random.Random(seed)

        # Sorted so the draw order does not depend on set iteration order
        self.vocabulary = sorted(set(vocabulary))

        self.query_types = [
            'whole_word',
            'prefix',
            'infix',
            'suffix',
            'two_token',
            'three_token',
            'no_match',
        ]

    def generate_queries(self, num_queries: int = 1000,
                         query_type_distribution: Dict[str, float] = None) -> List[str]:
        """
        Generate test queries.

        Args:
            num_queries: Number of queries to generate
            query_type_distribution: Distribution of query types (if None, use default)

        Returns:
            List of query strings
        """
        dataset_name = self.config.dataset.name if self.config is not None else 'unknown'
        logger.info(f"Generating {num_queries} test queries for {dataset_name} dataset")

        if not self.vocabulary:
            logger.warning("Empty vocabulary, only empty queries can be generated")
            return [''] * num_queries

        if query_type_distribution is None:
            query_type_distribution = {
                'whole_word': 0.25,
                'prefix': 0.20,
                'infix': 0.15,
                'suffix': 0.10,
                'two_token': 0.15,
                'three_token': 0.10,
                'no_match': 0.05
            }

        generators = {
            'whole_word': self._whole_word,
            'prefix': self._prefix,
            'infix': self._infix,
            'suffix': self._suffix,
            'two_token': lambda: self._multi_token(2),
            'three_token': lambda: self._multi_token(3),
            'no_match': self._no_match,
        }

        queries = []
        for query_type, proportion in query_type_distribution.items():
            if query_type not in generators:
                raise ValueError(f"Unknown query type: {query_type}")
            count = int(num_queries * proportion)
            queries.extend(generators[query_type]() for _ in range(count))

        # Top up rounding losses with whole-word queries
        while len(queries) < num_queries:
            queries.append(self._whole_word())

        self.rng.shuffle(queries)
        queries = queries[:num_queries]

        logger.info(f"Generated {len(queries)} queries")
        return queries

    def _whole_word(self) -> str:
        return self.rng.choice(self.vocabulary)

    def _prefix(self) -> str:
        word = self._whole_word()
        return word[:self.rng.randint(1, len(word))]

    def _suffix(self) -> str:
        word = self._whole_word()
        return word[self.rng.randint(0, len(word) - 1):]

    def _infix(self) -> str:
        word = self._whole_word()
        start = self.rng.randint(0, len(word) - 1)
        end = self.rng.randint(start + 1, len(word))
        return word[start:end]

    def _multi_token(self, n: int) -> str:
        fragments = [self._infix() for _ in range(n)]
        return ' '.join(fragments)

    def _no_match(self) -> str:
        # Digits and letters never seen together are very unlikely to exist
        return 'zq' + str(self.rng.randint(10 ** 6, 10 ** 7)) + 'xj'

    def save_queries(self, queries: List[str], output_path: Path):
        """
        Save queries to file for reproducibility.

        Args:
            queries: List of query strings
            output_path: Path to save queries
        """
        output_path.parent.mkdir(parents=True, exist_ok=True)

        with open(output_path, 'w', encoding='utf-8') as f:
            json.dump({
                'seed': self.seed,
                'dataset': self.config.dataset.name if self.config is not None else None,
                'num_queries': len(queries),
                'queries': queries
            }, f, indent=2, ensure_ascii=False)

        logger.info(f"Saved {len(queries)} queries to {output_path}")

    def load_queries(self, input_path: Path) -> List[str]:
        """
        Load queries from file.

        Args:
            input_path: Path to load queries from

        Returns:
            List of query strings
        """
        with open(input_path, 'r', encoding='utf-8') as f:
            data = json.load(f)

        logger.info(f"Loaded {len(data['queries'])} queries from {input_path}")
        return data['queries']

    def get_query_statistics(self, queries: List[str]) -> Dict:
        """
        Get statistics about generated queries.

        Args:
            queries: List of query strings

        Returns:
            Dictionary with statistics
        """
        token_counts = [len(query.split()) for query in queries]
        unique_tokens = {token for query in queries for token in query.split()}

        return {
            'total_queries': len(queries),
            'single_token': sum(1 for n in token_counts if n == 1),
            'multi_token': sum(1 for n in token_counts if n > 1),
            'empty': sum(1 for n in token_counts if n == 0),
            'avg_tokens_per_query': sum(token_counts) / len(queries) if queries else 0,
            'unique_tokens': len(unique_tokens),
        }
