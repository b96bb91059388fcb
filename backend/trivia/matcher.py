"""Decide whether a free-text guess counts as the reference answer.

The checks run in a fixed order and the first one that applies decides the
verdict.  Vetoes (quoted hints, trivial words, numeric answers) sit ahead of
the lenient rules they guard against.
"""

from __future__ import annotations

import re
from typing import Optional

from .distance import is_within_edit_distance
from .normalizer import (
    basic_normalize,
    is_just_quoted_hint,
    is_whole_word,
    normalize,
    normalize_to_words,
    singularize_phrase,
)
from .phonetic import phonetic_match

MIN_CONTAINED_LENGTH = 3
SHORT_GUESS_LENGTH = 4
MIN_COMPLETENESS = 0.4

_NUMERIC_RE = re.compile(r"^\d+$")

TRIVIAL_WORDS = frozenset(
    {
        # articles, conjunctions, prepositions
        "a", "an", "the", "and", "or", "of", "in", "on", "at", "to", "for", "by", "with",
        # titles
        "mr", "mrs", "ms", "miss", "dr", "sir", "lord", "lady", "saint", "st",
        "king", "queen", "prince", "princess", "president", "general", "captain",
        # directions
        "north", "south", "east", "west", "northeast", "northwest", "southeast",
        "southwest", "left", "right", "up", "down",
        # colors
        "red", "orange", "yellow", "green", "blue", "purple", "violet", "pink",
        "brown", "black", "white", "gray", "grey", "gold", "silver",
        # words that open a lot of category-style answers
        "new", "old", "great", "little", "big", "san", "santa", "los", "las", "la",
        "le", "el", "de", "du", "von", "van", "mount", "mt", "lake", "river",
        "fort", "port", "cape", "city", "island", "isle", "bay", "sea",
    }
)


def _is_numeric(value: str) -> bool:
    return _NUMERIC_RE.match(value) is not None


def _contained(guess: str, correct: str) -> bool:
    if len(guess) < MIN_CONTAINED_LENGTH:
        return False
    if len(guess) / len(correct) < MIN_COMPLETENESS:
        return False
    if len(guess) < SHORT_GUESS_LENGTH:
        return is_whole_word(guess, correct)
    return guess in correct


def check_answer(user_answer: Optional[str], correct_answer: Optional[str], clue: Optional[str] = None) -> bool:
    if not user_answer or not correct_answer:
        return False

    user_basic = basic_normalize(user_answer)
    correct_basic = basic_normalize(correct_answer)
    if not user_basic or not correct_basic:
        return False

    user_digits = normalize(user_answer)
    correct_digits = normalize(correct_answer)
    same_words = normalize_to_words(user_answer) == normalize_to_words(correct_answer)
    is_answer = user_basic == correct_basic or user_digits == correct_digits or same_words

    # a quoted fragment of the clue only counts when it is the answer itself
    if clue and not is_answer and is_just_quoted_hint(user_answer, clue):
        return False

    if user_basic == correct_basic:
        return True

    if user_basic in TRIVIAL_WORDS:
        return False

    if user_digits == correct_digits or same_words:
        return True

    if singularize_phrase(user_digits) == singularize_phrase(correct_digits):
        return True

    if len(correct_digits) >= MIN_CONTAINED_LENGTH and correct_digits in user_digits:
        return True
    if len(user_digits) < SHORT_GUESS_LENGTH and is_whole_word(user_digits, correct_digits):
        return True

    # "1776" must never pass for "1876"
    if _is_numeric(user_digits) and _is_numeric(correct_digits):
        return False

    if _contained(user_digits, correct_digits):
        return True

    if phonetic_match(user_digits, correct_digits):
        return True

    return is_within_edit_distance(user_digits, correct_digits)
