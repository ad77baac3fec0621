import json
import logging
from pathlib import Path
from typing import Any, Dict, Iterator, List, Tuple
from tqdm import tqdm

logger = logging.getLogger(__name__)


class DataLoader:
    """Loads JSONL documents and splits them into indexable fields."""

    def __init__(self, config):
        """
        Initialize data loader.

        Args:
            config: Hydra configuration object
        """
        self.config = config
        self.id_field = config.dataset.fields.id_field
        self.text_fields = list(config.dataset.fields.text_fields)

    def load_documents(self) -> Iterator[Dict[str, Any]]:
        """
        Load raw documents based on configuration.

        Yields:
            Parsed JSON objects, one per line

        Raises:
            FileNotFoundError: if the dataset file does not exist
        """
        dataset_path = Path(self.config.dataset.source_file)

        if not dataset_path.exists():
            raise FileNotFoundError(f"Dataset file not found: {dataset_path}")

        logger.info(f"Loading dataset from: {dataset_path}")

        total_lines = self._count_lines(dataset_path)

        # Apply sample size if specified
        max_docs = self.config.dataset.get('sample_size')
        if max_docs is not None:
            total_lines = min(total_lines, max_docs)

        logger.info(f"Loading {total_lines} documents")

        loaded = 0
        with open(dataset_path, 'r', encoding='utf-8') as f:
            pbar = tqdm(
                total=total_lines,
                desc="Loading documents",
                disable=not self.config.indexing.show_progress
            )

            try:
                for i, line in enumerate(f):
                    if max_docs is not None and loaded >= max_docs:
                        break
                    if not line.strip():
                        continue

                    try:
                        doc = json.loads(line)
                    except json.JSONDecodeError as e:
                        logger.warning(f"Error parsing line {i}: {e}")
                        continue

                    if not isinstance(doc, dict):
                        logger.warning(f"Skipping line {i}: expected a JSON object")
                        continue

                    doc.setdefault(self.id_field, f"doc_{i}")
                    loaded += 1
                    pbar.update(1)
                    yield doc
            finally:
                pbar.close()

    def load_dataset(self) -> Iterator[Tuple[Any, str]]:
        """
        Load dataset as indexable fields.

        Every configured text field becomes its own pair, so one document
        produces several index_document calls under the same id.

        Yields:
            Tuples of (doc_id, field_text)
        """
        documents = self.load_documents()
        try:
            for doc in documents:
                doc_id = doc[self.id_field]
                if isinstance(doc_id, list):
                    doc_id = tuple(doc_id)
                try:
                    hash(doc_id)
                except TypeError:
                    logger.warning(f"Skipping document with unhashable id: {doc_id!r}")
                    continue

                for field_name in self.text_fields:
                    value = doc.get(field_name)
                    if value is None:
                        continue
                    if not isinstance(value, str):
                        value = str(value)
                    yield (doc_id, value)
        finally:
            documents.close()

    def _count_lines(self, filepath: Path) -> int:
        """
        Count lines in a file efficiently.

        Args:
            filepath: Path to the file

        Returns:
            Number of lines in the file
        """
        count = 0
        with open(filepath, 'r', encoding='utf-8') as f:
            for _ in f:
                count += 1
        logger.debug(f"Found {count:,} lines in {filepath}")
        return count

    def load_sample_texts(self, sample_size: int = 1000) -> List[str]:
        """
        Load a sample of field texts for analysis.

        Args:
            sample_size: Number of texts to load

        Returns:
            List of text strings
        """
        texts = []

        fields = self.load_dataset()
        try:
            for _, text in fields:
                if len(texts) >= sample_size:
                    break
                if text:
                    texts.append(text)
        finally:
            fields.close()

        logger.info(f"Loaded {len(texts)} sample texts")
        return texts
