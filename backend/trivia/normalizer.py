"""Deterministic text canonicalization used by the answer matcher."""

from __future__ import annotations

import re
from typing import List

NUMBER_WORDS = {
    "zero": "0",
    "one": "1",
    "two": "2",
    "three": "3",
    "four": "4",
    "five": "5",
    "six": "6",
    "seven": "7",
    "eight": "8",
    "nine": "9",
    "ten": "10",
    "eleven": "11",
    "twelve": "12",
    "thirteen": "13",
    "fourteen": "14",
    "fifteen": "15",
    "sixteen": "16",
    "seventeen": "17",
    "eighteen": "18",
    "nineteen": "19",
    "twenty": "20",
    "thirty": "30",
    "forty": "40",
    "fifty": "50",
    "sixty": "60",
    "seventy": "70",
    "eighty": "80",
    "ninety": "90",
    "hundred": "100",
    "thousand": "1000",
    "million": "1000000",
}

ORDINAL_WORDS = {
    "first": "1st",
    "second": "2nd",
    "third": "3rd",
    "fourth": "4th",
    "fifth": "5th",
    "sixth": "6th",
    "seventh": "7th",
    "eighth": "8th",
    "ninth": "9th",
    "tenth": "10th",
    "eleventh": "11th",
    "twelfth": "12th",
    "thirteenth": "13th",
    "fourteenth": "14th",
    "fifteenth": "15th",
    "sixteenth": "16th",
    "seventeenth": "17th",
    "eighteenth": "18th",
    "nineteenth": "19th",
    "twentieth": "20th",
}


def _word_patterns(table: dict[str, str], flags: int = re.IGNORECASE) -> list[tuple[re.Pattern[str], str]]:
    return [(re.compile(rf"\b{re.escape(src)}\b", flags), dst) for src, dst in table.items()]


# ordinals are listed first so "first" never decays into a cardinal fragment
_TO_DIGITS = _word_patterns(ORDINAL_WORDS) + _word_patterns(NUMBER_WORDS)
_TO_WORDS = _word_patterns({v: k for k, v in ORDINAL_WORDS.items()}) + _word_patterns(
    {v: k for k, v in NUMBER_WORDS.items()}, flags=0
)

_TAG_RE = re.compile(r"<[^>]*>")
_LEADING_ARTICLE_RE = re.compile(r"^(a|an|the)\s+")
_NON_ALNUM_RE = re.compile(r"[^a-z0-9\s]")
_WHITESPACE_RE = re.compile(r"\s+")

_STRAIGHT_QUOTED_RE = re.compile(r'"([^"]+)"')
_CURLY_QUOTED_RE = re.compile(r"“([^”]+)”")
_SINGLE_QUOTED_RE = re.compile(r"(?<![A-Za-z0-9])'([^']+)'(?![A-Za-z0-9])")


def basic_normalize(text: str | None) -> str:
    """Lowercase, drop tags, a leading article, punctuation and extra whitespace."""
    if not text:
        return ""

    result = text.lower()
    result = _TAG_RE.sub("", result)
    result = result.replace("&", " and ")
    result = _NON_ALNUM_RE.sub("", result)
    result = _WHITESPACE_RE.sub(" ", result).strip()

    # "the the who" must settle in one pass for the result to be idempotent
    stripped = _LEADING_ARTICLE_RE.sub("", result)
    while stripped != result:
        result = stripped
        stripped = _LEADING_ARTICLE_RE.sub("", result)
    return result


def words_to_digits(text: str) -> str:
    for pattern, digits in _TO_DIGITS:
        text = pattern.sub(digits, text)
    return text


def digits_to_words(text: str) -> str:
    for pattern, word in _TO_WORDS:
        text = pattern.sub(word, text)
    return text


def normalize(text: str | None) -> str:
    return words_to_digits(basic_normalize(text))


def normalize_to_words(text: str | None) -> str:
    return digits_to_words(basic_normalize(text))


def singularize(word: str) -> str:
    """Crude English singular form.

    Handles the regular plural endings only ("cities", "boxes", "cats");
    irregular plurals such as "mice" or "children" pass through unchanged.
    """
    if len(word) <= 3:
        return word
    if word.endswith("ies"):
        return word[:-3] + "y"
    if word.endswith("es") and word[:-2].endswith(("s", "x", "z", "ch", "sh")):
        return word[:-2]
    if word.endswith("s") and not word.endswith("ss"):
        return word[:-1]
    return word


def singularize_phrase(text: str) -> str:
    return " ".join(singularize(word) for word in text.split())


def is_whole_word(needle: str, haystack: str) -> bool:
    if not needle:
        return False
    return re.search(rf"\b{re.escape(needle)}\b", haystack) is not None


def _counts_as_quote(fragment: str) -> bool:
    # plain apostrophes ("Arthur's sword") would otherwise look like quotes
    stripped = fragment.strip()
    return (stripped.isupper() and any(c.isalpha() for c in stripped)) or len(stripped.split()) > 1


def extract_quoted_strings(clue: str | None) -> List[str]:
    if not clue:
        return []

    fragments = _STRAIGHT_QUOTED_RE.findall(clue) + _CURLY_QUOTED_RE.findall(clue)
    fragments += [f for f in _SINGLE_QUOTED_RE.findall(clue) if _counts_as_quote(f)]

    quoted: List[str] = []
    for fragment in fragments:
        normalized = basic_normalize(fragment)
        if normalized and normalized not in quoted:
            quoted.append(normalized)
    return quoted


def is_just_quoted_hint(user_answer: str, clue: str | None) -> bool:
    guess = basic_normalize(user_answer)
    if not guess:
        return False
    return guess in extract_quoted_strings(clue)
