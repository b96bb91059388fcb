"""Pronunciation-tolerant comparison built on Double Metaphone codes."""

from __future__ import annotations

from typing import Tuple

from metaphone import doublemetaphone

CODE_LENGTH = 4


def double_metaphone(word: str | None) -> Tuple[str, str]:
    """Return ``(primary, alternate)`` codes for a single word, cut to four characters.

    The alternate code is empty when the word has only one pronunciation.
    """
    if not word:
        return "", ""
    primary, alternate = doublemetaphone(word)
    return primary[:CODE_LENGTH], alternate[:CODE_LENGTH]


def _codes_match(a: Tuple[str, str], b: Tuple[str, str]) -> bool:
    return any(code and code in b for code in a)


def phonetic_match(a: str | None, b: str | None) -> bool:
    """Compare two phrases word by word on their metaphone codes.

    Phrases with different word counts never match; words are compared
    position by position without realignment.
    """
    if not a or not b:
        return False

    words_a = a.split()
    words_b = b.split()
    if not words_a or len(words_a) != len(words_b):
        return False

    return all(
        _codes_match(double_metaphone(wa), double_metaphone(wb))
        for wa, wb in zip(words_a, words_b)
    )
