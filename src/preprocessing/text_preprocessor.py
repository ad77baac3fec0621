import logging
from typing import Callable, List, Optional
from nltk.tokenize import RegexpTokenizer, WhitespaceTokenizer

logger = logging.getLogger(__name__)

# Runs of Unicode letters and digits. Underscore is a word character for \w but not alphanumeric.
_unicode_tokenizer = RegexpTokenizer(r'[^\W_]+')
_ascii_tokenizer = RegexpTokenizer(r'[a-z0-9]+')
_whitespace_tokenizer = WhitespaceTokenizer()


def default_sanitize(text: str) -> str:
    """Lower-case the text. Whitespace is left untouched."""
    return text.lower()


def default_tokenize(text: str) -> List[str]:
    """
    Split text on runs of non-alphanumeric characters.

    Unicode letter and number classes count as alphanumeric, so scripts
    without ASCII word boundaries (e.g. CJK) come out as contiguous runs.
    """
    return _unicode_tokenizer.tokenize(text)


TOKENIZERS = {
    'unicode': default_tokenize,
    'whitespace': _whitespace_tokenizer.tokenize,
    'ascii': _ascii_tokenizer.tokenize,
}

SANITIZERS = {
    'lowercase': default_sanitize,
    'casefold': str.casefold,
    'strip': str.strip,
    'none': lambda text: text,
}


def resolve_tokenizer(tokenizer) -> Callable[[str], List[str]]:
    """Return the tokenizer callable for a preset name, or the callable itself."""
    return _resolve(tokenizer, TOKENIZERS, 'tokenizer', default_tokenize)


def resolve_sanitizer(sanitizer) -> Callable[[str], str]:
    """Return the sanitizer callable for a preset name, or the callable itself."""
    return _resolve(sanitizer, SANITIZERS, 'sanitizer', default_sanitize)


def _resolve(value, presets, kind, default):
    if value is None:
        return default
    if callable(value):
        return value
    if isinstance(value, str) and value in presets:
        return presets[value]
    raise ValueError(f"Unknown {kind}: {value!r} (expected a callable or one of {sorted(presets)})")


class TextPreprocessor:
    """Sanitize-then-tokenize pipeline shared by indexing and querying."""

    def __init__(self, tokenize=None, sanitize=None):
        """
        Initialize preprocessor.

        An injected function replaces the default entirely.

        Args:
            tokenize: Callable text -> tokens, or a preset name from TOKENIZERS
            sanitize: Callable text -> text, or a preset name from SANITIZERS
        """
        self.tokenize = resolve_tokenizer(tokenize)
        self.sanitize = resolve_sanitizer(sanitize)

    @classmethod
    def from_config(cls, config) -> 'TextPreprocessor':
        """
        Build from a Hydra config with a `preprocessing` section.

        Args:
            config: Hydra config object with preprocessing.tokenizer and preprocessing.sanitizer
        """
        preprocessing = config.get('preprocessing') or {}
        return cls(
            tokenize=preprocessing.get('tokenizer'),
            sanitize=preprocessing.get('sanitizer'),
        )

    def preprocess(self, text: Optional[str]) -> List[str]:
        """
        Preprocess text into tokens.

        Args:
            text: Input text string

        Returns:
            List of non-empty tokens, in order
        """
        if not text:
            return []

        tokens = [token for token in self.tokenize(self.sanitize(text)) if token]
        logger.debug(f"Preprocessed {len(text)} chars into {len(tokens)} tokens")
        return tokens

    def get_token_frequencies(self, texts: List[str]) -> dict:
        """
        Count token occurrences across multiple texts.

        Args:
            texts: List of text strings

        Returns:
            Dictionary mapping tokens to frequencies
        """
        token_freq = {}

        for text in texts:
            for token in self.preprocess(text):
                token_freq[token] = token_freq.get(token, 0) + 1

        return token_freq
