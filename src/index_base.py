from abc import ABC, abstractmethod
from typing import Hashable, Iterable, List, Optional
from enum import Enum

# Identifier enums for the index variants
class IndexMode(Enum):
    SUBSTRINGS = 1
    PREFIXES = 2
    EXACT_WORDS = 3

    @classmethod
    def parse(cls, mode) -> 'IndexMode':
        """
        Convert a mode name (any case) or member to an IndexMode.

        Raises:
            ValueError: if the value names no known mode
        """
        if isinstance(mode, cls):
            return mode
        if isinstance(mode, str):
            try:
                return cls[mode.strip().upper()]
            except KeyError:
                pass
        valid = ', '.join(m.name for m in cls)
        raise ValueError(f"Invalid index mode: {mode!r} (expected one of {valid})")

class ModeState(Enum):
    CONFIGURABLE = 'C'
    LOCKED = 'L'


class IndexBase(ABC):
    """
    Base index class with abstract methods to inherit for specific implementations.
    """
    def __init__(self, core, mode):
        """
        Initialize index identifiers.

        Sample usage:
            idx = SearchIndex(index_mode='PREFIXES')
            print(idx)

        Args:
            core: Core index type ('SearchIndex')
            mode: Index mode (SUBSTRINGS, PREFIXES, EXACT_WORDS) as enum or name
        """
        assert core == 'SearchIndex', f"Invalid core: {core}"
        self.core = core
        self._set_identifiers(IndexMode.parse(mode))

    def _set_identifiers(self, mode: IndexMode):
        self.identifier_long = "core={}|mode={}".format(self.core, mode)
        self.identifier_short = "{}_m{}".format(self.core, mode.value)

    def __repr__(self):
        return f"{self.identifier_short}: {self.identifier_long}"

    @abstractmethod
    def index_document(self, document_id: Hashable, text: Optional[str] = None) -> None:
        """
        Registers the tokens of a piece of text against a document id.

        Args:
            document_id: Opaque, hashable identifier supplied by the caller.
            text: Text of one field of the document.
        """
        pass

    @abstractmethod
    def search(self, query: str) -> List[Hashable]:
        """
        Finds the documents matching every token of the query.

        Args:
            query: Free-text query

        Returns:
            Deduplicated document ids in ascending order
        """
        pass

    @abstractmethod
    def get_index_mode(self) -> IndexMode:
        """Returns the active index mode."""
        pass

    @abstractmethod
    def set_index_mode(self, mode) -> None:
        """Changes the index mode. Only allowed before the first document is indexed."""
        pass

    @abstractmethod
    def list_indexed_documents(self) -> Iterable[Hashable]:
        """
        Lists all documents indexed so far.

        Returns:
            An iterable (list-like object) of document ids.
        """
        pass
