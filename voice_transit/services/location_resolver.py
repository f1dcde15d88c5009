"""Location resolver service - spoken place name to station.

Speech recognition rarely spells station names the way the journey
planner knows them ("Muenchen", "Viesbaden", "Frankfurt Hauptbahnhof
bitte"). The resolver asks the transit backend for a sequence of
spelling variants and stops at the first one that finds anything, then
ranks the hits against what was actually said.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterator, List, Optional, Sequence

from ..domain.errors import LocationNotFoundError, NoNearbyStationError, TransitApiError
from ..domain.models import GeoLocation, StopLocation
from ..nlp.fuzzy_search import calculate_similarity, find_best_matches, matches_any_word
from ..nlp.phonetic_correction import apply_phonetic_corrections, umlaut_variants
from ..ports.transit import TransitApiPort
from .retry import RetryPolicy

MIN_WORD_LENGTH = 3

_ROLE_LABELS = {"origin": "Startort", "destination": "Zielort"}


def lookup_variants(name: str) -> Iterator[str]:
    """Yield the search terms tried for ``name``, most faithful first.

    Order: the name itself, umlaut spellings, phonetic corrections,
    then each word of at least three letters on its own. Duplicates
    (ignoring case and surrounding whitespace) are skipped.
    """
    seen: set[str] = set()
    candidates: List[str] = [name]
    candidates.extend(umlaut_variants(name))
    candidates.extend(apply_phonetic_corrections(name))
    candidates.extend(word for word in name.split() if len(word) >= MIN_WORD_LENGTH)

    for candidate in candidates:
        key = candidate.strip().lower()
        if key and key not in seen:
            seen.add(key)
            yield candidate.strip()


@dataclass
class LocationResolverService:
    """Resolves place names and positions to stations.

    Attributes:
        transit: Backend used for station searches
        retry_policy: Retries for transient backend failures and the
            cap on variants tried per name
        nearby_radius_m: Default radius for nearby searches
        match_limit: Maximum stations returned by a search (None = all)
        match_threshold: Below this score a resolved station is logged as a
            weak match unless one of its words matches
        word_match_threshold: Score a single word needs to count as matching
    """

    transit: TransitApiPort
    retry_policy: RetryPolicy = field(default_factory=RetryPolicy)
    nearby_radius_m: int = 1000
    match_limit: Optional[int] = None
    match_threshold: float = 0.5
    word_match_threshold: float = 0.7

    _logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(__name__)

    def search(self, name: str) -> List[StopLocation]:
        """Find stations for ``name``, trying spelling variants in turn.

        Args:
            name: Place name as parsed from the utterance.

        Returns:
            Stations of the first variant with any hit, ranked by
            similarity to ``name``. Empty if nothing matched.

        Raises:
            TransitApiError: If every lookup failed with a backend error.
        """
        if not name or not name.strip():
            return []

        last_error: Optional[TransitApiError] = None
        succeeded = 0

        for attempt, variant in enumerate(lookup_variants(name)):
            if attempt >= self.retry_policy.max_lookups:
                self._logger.debug(
                    "Variant budget exhausted",
                    extra={"query": name, "max_lookups": self.retry_policy.max_lookups},
                )
                break

            try:
                results = self.retry_policy.call(self.transit.search_locations, variant)
            except TransitApiError as e:
                self._logger.warning(
                    "Location lookup failed",
                    extra={"query": name, "variant": variant, "error": str(e)},
                )
                last_error = e
                continue

            succeeded += 1
            if results:
                if variant != name:
                    self._logger.info(
                        "Location found via variant",
                        extra={"query": name, "variant": variant},
                    )
                return self._rank(name, results)

        if succeeded == 0 and last_error is not None:
            raise last_error
        return []

    def _rank(self, name: str, results: Sequence[StopLocation]) -> List[StopLocation]:
        ranked = find_best_matches(
            name,
            results,
            key=lambda stop: stop.name,
            threshold=0.0,
            limit=self.match_limit or len(results),
        )
        return [match.item for match in ranked]

    def resolve(self, name: str, role: str = "destination") -> StopLocation:
        """Return the best station for ``name``.

        Raises:
            LocationNotFoundError: If no variant found a station.
            TransitApiError: If every lookup failed with a backend error.
        """
        stations = self.search(name)
        if not stations:
            label = _ROLE_LABELS.get(role, "Ort")
            raise LocationNotFoundError(
                f'{label} "{name}" nicht gefunden.', query=name, role=role
            )
        best = stations[0]
        if calculate_similarity(name, best.name) < self.match_threshold and not matches_any_word(
            name, best.name, self.word_match_threshold
        ):
            self._logger.warning(
                "Weak station match",
                extra={"query": name, "station": best.name, "role": role},
            )
        return best

    def resolve_nearby(
        self, location: GeoLocation, radius_m: Optional[int] = None
    ) -> StopLocation:
        """Return the stop closest to ``location``.

        Raises:
            NoNearbyStationError: If no stop lies within the radius.
        """
        radius = radius_m if radius_m is not None else self.nearby_radius_m
        stops = self.retry_policy.call(self.transit.search_nearby, location, radius)
        if not stops:
            raise NoNearbyStationError(
                "Keine Haltestelle in der Nähe gefunden.",
                latitude=location.latitude,
                longitude=location.longitude,
            )
        nearest = stops[0]
        self._logger.info(
            "Nearest stop",
            extra={"stop": nearest.name, "distance_m": nearest.distance_m},
        )
        return nearest
