"""Fuzzy matching of spoken place names against station names.

Speech recognition regularly produces near-misses for German station
names (dropped umlauts, "Frankfurt" for "Frankfurt (Main) Hbf", ...).
These helpers compare names on a normalized key and rank candidates by
similarity. Edit distances come from rapidfuzz.

Example
-------
    >>> normalize_text("Müller Straße")
    'muellerstrasse'
    >>> calculate_similarity("Frankfurt", "Frankfurt Hauptbahnhof")
    0.9
    >>> [m.item for m in find_best_matches("frankfurt", ["Wiesbaden Hbf", "Frankfurt Hbf"])]
    ['Frankfurt Hbf']

All functions are pure and never raise on string input.
"""

from __future__ import annotations

import re
import unicodedata
from typing import Callable, Iterable, List, Optional, TypeVar

from rapidfuzz.distance import Levenshtein, Prefix

from ..domain.models import Match

T = TypeVar("T")

# Applied before accent stripping, otherwise "ü" would decompose to "u".
GERMAN_SUBSTITUTIONS = {
    "ß": "ss",
    "ä": "ae",
    "ö": "oe",
    "ü": "ue",
}

EXACT_SCORE = 1.0
CONTAINMENT_SCORE = 0.9
PREFIX_BONUS_WEIGHT = 0.2

_NON_ALNUM = re.compile(r"[^a-z0-9\s]")


def normalize_words(text: str) -> List[str]:
    """Normalize ``text`` and split it into words.

    Lower-cases, transliterates German letters, strips diacritics and any
    character that is not a latin letter, digit or whitespace.
    """
    lowered = text.lower()
    for source, target in GERMAN_SUBSTITUTIONS.items():
        lowered = lowered.replace(source, target)

    decomposed = unicodedata.normalize("NFD", lowered)
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return _NON_ALNUM.sub("", stripped).split()


def normalize_text(text: str) -> str:
    """Return the canonical comparison key of ``text``.

    Whitespace is removed entirely, so "Bad Homburg" and "Badhomburg"
    compare equal. The function is idempotent.
    """
    return "".join(normalize_words(text))


def levenshtein_distance(first: str, second: str) -> int:
    """Unit-cost edit distance (insert, delete, substitute)."""
    return Levenshtein.distance(first, second)


def calculate_similarity(first: str, second: str) -> float:
    """Score how similar two place names are, from 0.0 to 1.0.

    - 1.0 when the normalized keys are equal (two empty keys included)
    - 0.0 when exactly one key is empty
    - 0.9 when one key contains the other
    - otherwise the Levenshtein ratio plus a bonus for a shared prefix,
      since mispronunciations tend to keep the start of a word intact
    """
    key_a = normalize_text(first)
    key_b = normalize_text(second)

    if key_a == key_b:
        return EXACT_SCORE
    if not key_a or not key_b:
        return 0.0
    if key_a in key_b or key_b in key_a:
        return CONTAINMENT_SCORE

    max_length = max(len(key_a), len(key_b))
    score = 1 - levenshtein_distance(key_a, key_b) / max_length
    prefix_bonus = Prefix.similarity(key_a, key_b) / max_length * PREFIX_BONUS_WEIGHT
    return min(EXACT_SCORE, score + prefix_bonus)


def find_best_matches(
    query: str,
    candidates: Iterable[T],
    key: Optional[Callable[[T], str]] = None,
    threshold: float = 0.5,
    limit: int = 5,
) -> List[Match[T]]:
    """Rank ``candidates`` by similarity to ``query``.

    Parameters
    ----------
    query : str
        The spoken or typed place name
    candidates : Iterable[T]
        Objects to rank (station names, StopLocation instances, ...)
    key : Callable[[T], str], optional
        Extracts the comparable text from a candidate (default: ``str``)
    threshold : float
        Candidates scoring below this are dropped
    limit : int
        Maximum number of matches returned

    Returns
    -------
    List[Match[T]]
        Best first. Ties keep the order of ``candidates``.
    """
    get_text = key or str
    scored = [Match(item, calculate_similarity(query, get_text(item))) for item in candidates]
    kept = [match for match in scored if match.score >= threshold]
    # sorted() is stable, so equal scores keep their input order
    kept = sorted(kept, key=lambda match: match.score, reverse=True)
    return kept[: max(limit, 0)]


def matches_any_word(query: str, target: str, threshold: float = 0.7) -> bool:
    """Check whether ``query`` resembles any single word of ``target``.

    Lets a single spoken word ("Hauptwache") match a multi-word station
    name ("Frankfurt (Main) Hauptwache").
    """
    normalized_query = normalize_text(query)
    return any(
        calculate_similarity(normalized_query, word) >= threshold
        for word in normalize_words(target)
    )
