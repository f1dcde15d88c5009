"""Intent extraction for spoken German travel requests.

This module turns one utterance into a TravelIntent: where the user
wants to go, where from, and optionally when. It is rule based: a time
phrase is cut out first, then a fixed list of route patterns is tried
in priority order and the first match wins.

Example
-------
    >>> parse_intent("Von hier nach Wiesbaden").as_dict()
    {'from': 'CURRENT_LOCATION', 'to': 'wiesbaden'}
    >>> parse_intent("nach Mainz von Frankfurt").as_dict()
    {'from': 'frankfurt', 'to': 'mainz'}
    >>> parse_intent("Ich möchte nach Darmstadt").as_dict()
    {'to': 'darmstadt'}
    >>> parse_intent("Wie ist das Wetter?").as_dict()
    {}
"""

import re
from datetime import datetime, timedelta
from typing import Callable, List, Optional, Tuple

from ..domain.models import CURRENT_LOCATION, TravelIntent

# Words introducing the destination / the origin
TO_WORDS = r"(?:nach|zum|zur|zu|richtung|bis)"
FROM_WORDS = r"(?:von|ab|aus|startend\s+(?:in|bei|an|am)|start\s+(?:in|bei|an|am))"

# Origin fragments that mean "where I am right now"
SELF_REFERENCES = [
    "hier",
    "mein standort",
    "meinem standort",
    "meinen standort",
    "aktueller standort",
    "aktuellen standort",
    "meine position",
    "meiner position",
    "aktuelle position",
    "aktuellen position",
    "wo ich bin",
    "wo ich gerade bin",
]

# Leading words that make the text before a to-word a command, not a station
FILLER_PREFIXES = [
    "ich will",
    "ich möchte",
    "ich moechte",
    "ich würde gerne",
    "ich würde",
    "ich wuerde",
    "ich muss",
    "ich fahre",
    "ich suche",
    "bitte",
    "fahr",
    "fahre",
    "fahren",
    "verbindung",
    "verbindungen",
    "suche",
    "such",
    "zeig",
    "zeige",
    "wie komme ich",
    "wie komm ich",
    "wann fährt",
    "wann faehrt",
]

_RELATIVE_TIME = re.compile(r"\bin\s+(?P<minutes>\d{1,3})\s*(?:minuten|minute|min)\b\.?")
_ABSOLUTE_TIME = re.compile(
    r"\bum\s+(?P<hour>\d{1,2})(?:[:.](?P<minute>\d{2}))?"
    r"(?:\s*uhr\b(?:\s+(?P<late_minute>\d{1,2})\b)?)?\b"
)

_HERE_TO = re.compile(rf"\b(?:(?:von|ab)\s+)?hier(?:\s+aus)?\s+{TO_WORDS}\s+(?P<to>.+)")
_FROM_TO = re.compile(rf"\b{FROM_WORDS}\s+(?P<from>.+?)\s+{TO_WORDS}\s+(?P<to>.+)")
_TO_FROM = re.compile(rf"\b{TO_WORDS}\s+(?P<to>.+?)\s+{FROM_WORDS}\s+(?P<from>.+)")
_IMPLICIT_FROM = re.compile(rf"^(?P<from>.+?)\s+{TO_WORDS}\s+(?P<to>.+)$")
_TO_ONLY = re.compile(rf"\b{TO_WORDS}\s+(?P<to>.+)")

_SELF_REFERENCE = re.compile(
    r"\b(?:" + "|".join(re.escape(phrase) for phrase in SELF_REFERENCES) + r")\b"
)
_FILLER_PREFIX = re.compile(
    r"^(?:" + "|".join(re.escape(prefix) for prefix in FILLER_PREFIXES) + r")\b"
)
_FROM_PREFIX = re.compile(rf"^{FROM_WORDS}\b")

# Politeness words trailing a place name ("nach Mainz bitte")
_TRAILING_FILLER = re.compile(r"(?:\s+(?:bitte|danke|jetzt))+$")

_TRAILING_PUNCTUATION = ".,;:!?\"' "

Route = Tuple[Optional[str], Optional[str]]


def _collapse_whitespace(text: str) -> str:
    return " ".join(text.split())


def _clean_fragment(fragment: Optional[str]) -> Optional[str]:
    """Trim whitespace and punctuation around a captured place name."""
    if fragment is None:
        return None
    cleaned = _collapse_whitespace(fragment).strip(_TRAILING_PUNCTUATION)
    cleaned = _TRAILING_FILLER.sub("", cleaned).strip(_TRAILING_PUNCTUATION)
    return cleaned or None


def _cut(text: str, match: "re.Match[str]") -> str:
    return _collapse_whitespace(text[: match.start()] + " " + text[match.end():])


def extract_time(text: str, now: datetime) -> Tuple[Optional[datetime], str]:
    """Find a time phrase in ``text`` and remove it.

    Parameters
    ----------
    text : str
        Lower-cased utterance
    now : datetime
        Anchor for relative and absolute times

    Returns
    -------
    Tuple[Optional[datetime], str]
        The requested time (or None) and the text without the phrase

    Notes
    -----
    "um 8 Uhr" always means today at 08:00, even if that lies in the
    past. Phrases with an hour above 23 or minutes above 59 are removed
    from the text but yield no time.
    """
    relative = _RELATIVE_TIME.search(text)
    if relative:
        return now + timedelta(minutes=int(relative.group("minutes"))), _cut(text, relative)

    absolute = _ABSOLUTE_TIME.search(text)
    if absolute:
        hour = int(absolute.group("hour"))
        minute_text = absolute.group("minute") or absolute.group("late_minute")
        minute = int(minute_text) if minute_text else 0
        remaining = _cut(text, absolute)
        if hour > 23 or minute > 59:
            return None, remaining
        return now.replace(hour=hour, minute=minute, second=0, microsecond=0), remaining

    return None, text


def _origin_or_current_location(origin: Optional[str]) -> Optional[str]:
    if origin is not None and _SELF_REFERENCE.search(origin):
        return CURRENT_LOCATION
    return origin


def _match_here_to(text: str) -> Optional[Route]:
    match = _HERE_TO.search(text)
    if not match:
        return None
    destination = _clean_fragment(match.group("to"))
    if destination is None:
        return None
    return CURRENT_LOCATION, destination


def _match_from_to(text: str) -> Optional[Route]:
    match = _FROM_TO.search(text)
    if not match:
        return None
    origin = _clean_fragment(match.group("from"))
    destination = _clean_fragment(match.group("to"))
    if origin is None or destination is None:
        return None
    return _origin_or_current_location(origin), destination


def _match_to_from(text: str) -> Optional[Route]:
    match = _TO_FROM.search(text)
    if not match:
        return None
    origin = _clean_fragment(match.group("from"))
    destination = _clean_fragment(match.group("to"))
    if origin is None or destination is None:
        return None
    return _origin_or_current_location(origin), destination


def _match_implicit_from(text: str) -> Optional[Route]:
    match = _IMPLICIT_FROM.match(text)
    if not match:
        return None
    origin = _clean_fragment(match.group("from"))
    destination = _clean_fragment(match.group("to"))
    if destination is None:
        return None
    # A from-word with nothing after it ("von nach Mainz") is not a place
    if origin is None or _FILLER_PREFIX.match(origin) or _FROM_PREFIX.match(origin):
        return None, destination
    return origin, destination


def _match_destination_only(text: str) -> Optional[Route]:
    match = _TO_ONLY.search(text)
    if not match:
        return None
    destination = _clean_fragment(match.group("to"))
    if destination is None:
        return None
    return None, destination


# Strict priority order, first match wins
ROUTE_MATCHERS: List[Callable[[str], Optional[Route]]] = [
    _match_here_to,
    _match_from_to,
    _match_to_from,
    _match_implicit_from,
    _match_destination_only,
]


def parse_intent(raw_text: str, now: Optional[datetime] = None) -> TravelIntent:
    """Extract origin, destination and time from a German utterance.

    Parameters
    ----------
    raw_text : str
        Transcribed or typed text, any casing
    now : datetime, optional
        Moment of parsing; defaults to ``datetime.now()``

    Returns
    -------
    TravelIntent
        Never raises. A missing ``destination`` means the request was
        not understood; the intent may still carry a ``time``.

    Examples
    --------
    >>> parse_intent("von Frankfurt nach Mainz").as_dict()
    {'from': 'frankfurt', 'to': 'mainz'}
    >>> parse_intent("").as_dict()
    {}
    """
    if not isinstance(raw_text, str) or not raw_text.strip():
        return TravelIntent()

    now = now or datetime.now()
    text = _collapse_whitespace(raw_text.lower())
    time, text = extract_time(text, now)

    for matcher in ROUTE_MATCHERS:
        route = matcher(text)
        if route is not None:
            origin, destination = route
            return TravelIntent(origin=origin, destination=destination, time=time)

    return TravelIntent(time=time)
