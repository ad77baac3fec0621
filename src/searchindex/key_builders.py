"""
Lookup-key derivation for each index mode.
"""

from typing import Callable, Dict, Set

from src.index_base import IndexMode


def exact_word_keys(token: str) -> Set[str]:
    """The token itself."""
    return {token} if token else set()


def prefix_keys(token: str) -> Set[str]:
    """Every non-empty prefix of the token, including the token."""
    return {token[:end] for end in range(1, len(token) + 1)}


def substring_keys(token: str) -> Set[str]:
    """
    Every non-empty contiguous substring of the token.

    O(len^2) keys per token. Slicing works on code points, so keys never
    split a multi-byte character.
    """
    length = len(token)
    return {
        token[start:end]
        for start in range(length)
        for end in range(start + 1, length + 1)
    }


KEY_BUILDERS: Dict[IndexMode, Callable[[str], Set[str]]] = {
    IndexMode.EXACT_WORDS: exact_word_keys,
    IndexMode.PREFIXES: prefix_keys,
    IndexMode.SUBSTRINGS: substring_keys,
}


def get_key_builder(mode: IndexMode) -> Callable[[str], Set[str]]:
    """Return the key builder for a mode."""
    return KEY_BUILDERS[IndexMode.parse(mode)]
