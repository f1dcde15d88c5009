"""Phonetic variants for speech-to-text errors in German place names.

Speech recognition and non-native speakers confuse a handful of German
sounds: w/v, ch/sch/k, z/ts, plain vowels and umlauts, doubled
consonants, a final "e", and ei/ai. This module generates the spelling
variants a lookup should retry when the original name finds nothing.

Generation only: callers run their own search against each variant and
merge the results.

Example
-------
    >>> apply_phonetic_corrections("Wiesbaden")[:3]
    ['Wiesbaden', 'Viesbaden', 'Wiesbäden']
"""

import re
from typing import Callable, List, Tuple

from .fuzzy_search import normalize_text, normalize_words

_DOUBLE_CONSONANT = re.compile(r"([bcdfghjklmnpqrstvwxz])\1", re.IGNORECASE)

# (trigger found in the normalized query, pattern, replacement)
SUBSTITUTION_RULES: List[Tuple[str, str, str]] = [
    ("w", "w", "v"),
    ("v", "v", "w"),
    ("ch", "ch", "sch"),
    ("ch", "ch", "k"),
    ("sch", "sch", "ch"),
    ("z", "z", "ts"),
    ("ts", "ts", "z"),
    ("a", "a", "ä"),
    ("o", "o", "ö"),
    ("u", "u", "ü"),
]

VOWEL_PAIR_RULES: List[Tuple[str, str, str]] = [
    ("ei", "ei", "ai"),
    ("ai", "ai", "ei"),
]

UMLAUT_SPELLINGS = {"ae": "ä", "oe": "ö", "ue": "ü"}


def _keep_case(replacement: str) -> Callable[["re.Match[str]"], str]:
    def substitute(match: "re.Match[str]") -> str:
        if match.group(0)[0].isupper():
            return replacement[0].upper() + replacement[1:]
        return replacement

    return substitute


def _replace(text: str, pattern: str, replacement: str) -> str:
    """Case-insensitive replacement that keeps a leading capital."""
    return re.sub(re.escape(pattern), _keep_case(replacement), text, flags=re.IGNORECASE)


def _dedupe_keep_order(items: List[str]) -> List[str]:
    """Remove duplicates while keeping the original order."""
    seen: set[str] = set()
    out: List[str] = []
    for item in items:
        if item not in seen:
            out.append(item)
            seen.add(item)
    return out


def apply_phonetic_corrections(query: str) -> List[str]:
    """Generate likely mis-hearings of ``query``.

    Each rule is applied independently to the original text and only
    when the normalized query contains its trigger.

    Parameters
    ----------
    query : str
        The place name as recognized

    Returns
    -------
    List[str]
        The original first, followed by the unique variants
    """
    normalized = normalize_text(query)
    variants = [query]
    if not normalized:
        return variants

    for trigger, pattern, replacement in SUBSTITUTION_RULES:
        if trigger in normalized:
            variants.append(_replace(query, pattern, replacement))

    variants.append(_DOUBLE_CONSONANT.sub(r"\1", query))

    # Final "e" is often swallowed or added in speech
    if normalized.endswith("e"):
        variants.append(query[:-1])
    else:
        variants.append(query + "e")

    for trigger, pattern, replacement in VOWEL_PAIR_RULES:
        if trigger in normalized:
            variants.append(_replace(query, pattern, replacement))

    return _dedupe_keep_order(variants)


def umlaut_variants(query: str) -> List[str]:
    """Spelling variants for umlauts and sharp s.

    Returns the normalized query, the same with "ae/oe/ue" written as
    umlauts, and with "ss" written as "ß". The unchanged ``query`` is
    not part of the result.
    """
    base = " ".join(normalize_words(query))
    with_umlauts = base
    for spelled, umlaut in UMLAUT_SPELLINGS.items():
        with_umlauts = with_umlauts.replace(spelled, umlaut)
    with_sharp_s = base.replace("ss", "ß")

    return [
        variant
        for variant in _dedupe_keep_order([base, with_umlauts, with_sharp_s])
        if variant and variant != query
    ]
