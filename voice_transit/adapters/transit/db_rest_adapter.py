"""Transit adapter for the community DB REST wrapper (HAFAS based).

Talks to https://v6.db.transport.rest, which needs no credentials and
returns FPTF-style JSON: locations with a ``type`` and nested
``location`` coordinates, journeys made of legs with ISO timestamps
and separate planned/prognosed times.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence

from ...config import TransitConfig, get_config
from ...domain.models import (
    GeoLocation,
    Journey,
    JourneyOptions,
    Leg,
    StopLocation,
    Stopover,
    TripProfile,
)
from ...ports.cache import CachePort
from ..cache.memory_cache import InMemoryCache
from .http_client import JsonHttpClient, parse_iso_datetime

STATION_TYPES = {"station", "stop"}

ACCESSIBILITY_BY_PROFILE = {
    TripProfile.WHEELCHAIR: "complete",
    TripProfile.MOBILITY_IMPAIRED: "partial",
}


def _geo_location(raw: Optional[Mapping[str, Any]]) -> Optional[GeoLocation]:
    if not raw:
        return None
    latitude = raw.get("latitude")
    longitude = raw.get("longitude")
    if latitude is None or longitude is None:
        return None
    return GeoLocation(latitude=float(latitude), longitude=float(longitude))


def _stop_location(raw: Mapping[str, Any]) -> StopLocation:
    distance = raw.get("distance")
    return StopLocation(
        id=str(raw.get("id", "")),
        name=str(raw.get("name", "")),
        location=_geo_location(raw.get("location")),
        distance_m=int(distance) if distance is not None else None,
    )


def _stopover(raw: Mapping[str, Any]) -> Stopover:
    stop = raw.get("stop") or {}
    return Stopover(
        name=str(stop.get("name", "")),
        arrival=parse_iso_datetime(raw.get("arrival")),
        departure=parse_iso_datetime(raw.get("departure")),
        platform=raw.get("arrivalPlatform") or raw.get("departurePlatform"),
    )


def _leg(raw: Mapping[str, Any]) -> Leg:
    line = raw.get("line") or {}
    walking = bool(raw.get("walking", False))
    planned_departure = parse_iso_datetime(raw.get("plannedDeparture"))
    planned_arrival = parse_iso_datetime(raw.get("plannedArrival"))

    return Leg(
        origin_name=str((raw.get("origin") or {}).get("name", "")),
        destination_name=str((raw.get("destination") or {}).get("name", "")),
        departure=parse_iso_datetime(raw.get("departure")) or planned_departure,
        arrival=parse_iso_datetime(raw.get("arrival")) or planned_arrival,
        planned_departure=planned_departure,
        planned_arrival=planned_arrival,
        departure_platform=raw.get("departurePlatform") or raw.get("plannedDeparturePlatform"),
        arrival_platform=raw.get("arrivalPlatform") or raw.get("plannedArrivalPlatform"),
        line_name=line.get("name") or ("Fußweg" if walking else "Zug"),
        mode=line.get("mode") or ("walking" if walking else "train"),
        direction=raw.get("direction"),
        walking=walking,
        distance_m=raw.get("distance"),
        stopovers=tuple(_stopover(s) for s in raw.get("stopovers") or []),
    )


def _journey(raw: Mapping[str, Any]) -> Journey:
    price = raw.get("price") or {}
    amount = price.get("amount")
    return Journey(
        legs=tuple(_leg(leg) for leg in raw.get("legs") or []),
        price=float(amount) if amount is not None else None,
    )


@dataclass
class DbRestTransitAdapter:
    """TransitApiPort implementation for v6.db.transport.rest.

    Attributes:
        config: Transit configuration
        cache: Cache for location searches
        http: HTTP client (replace in tests)
    """

    config: TransitConfig = field(default_factory=lambda: get_config().transit)
    cache: CachePort[Any] = field(default_factory=lambda: InMemoryCache(name="locations"))
    http: Optional[JsonHttpClient] = None

    _logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(__name__)
        if self.http is None:
            self.http = JsonHttpClient(
                backend=self.name,
                timeout_seconds=self.config.timeout_seconds,
                user_agent=self.config.user_agent,
            )

    @property
    def name(self) -> str:
        return "db_rest"

    def _url(self, path: str) -> str:
        return f"{self.config.db_rest_base_url.rstrip('/')}/{path}"

    def search_locations(self, query: str) -> Sequence[StopLocation]:
        """Search stations by name (cached per query)."""
        if not query or not query.strip():
            return ()

        cache_key = f"{self.name}:locations:{query.strip().lower()}"
        return self.cache.get_or_compute(cache_key, lambda: self._fetch_locations(query))

    def _fetch_locations(self, query: str) -> tuple[StopLocation, ...]:
        data = self.http.get_json(  # type: ignore[union-attr]
            self._url("locations"),
            params={
                "query": query,
                "results": self.config.location_results,
                "addresses": "false",
                "poi": "false",
            },
        )
        stops = tuple(
            _stop_location(loc)
            for loc in data or []
            if isinstance(loc, dict) and loc.get("type") in STATION_TYPES
        )
        self._logger.debug(
            "Location search",
            extra={"backend": self.name, "query": query, "results": len(stops)},
        )
        return stops

    def search_nearby(self, location: GeoLocation, radius_m: int) -> Sequence[StopLocation]:
        """Search stations around a position, nearest first."""
        data = self.http.get_json(  # type: ignore[union-attr]
            self._url("stops/nearby"),
            params={
                "latitude": location.latitude,
                "longitude": location.longitude,
                "distance": radius_m,
                "results": self.config.location_results,
            },
        )
        stops = [
            _stop_location(loc)
            for loc in data or []
            if isinstance(loc, dict) and loc.get("type") in STATION_TYPES
        ]
        stops.sort(key=lambda stop: stop.distance_m if stop.distance_m is not None else radius_m)
        return tuple(stops)

    def search_journeys(
        self,
        origin_id: str,
        destination_id: str,
        options: JourneyOptions,
    ) -> Sequence[Journey]:
        """Search journeys including stopovers."""
        params: Dict[str, Any] = {
            "from": origin_id,
            "to": destination_id,
            "results": options.results,
            "stopovers": "true",
        }
        if options.departure is not None:
            params["departure"] = options.departure.isoformat()
        accessibility = ACCESSIBILITY_BY_PROFILE.get(options.profile)
        if accessibility:
            params["accessibility"] = accessibility

        data = self.http.get_json(self._url("journeys"), params=params)  # type: ignore[union-attr]
        raw_journeys: List[Mapping[str, Any]] = (
            data.get("journeys") or [] if isinstance(data, dict) else []
        )
        journeys = tuple(_journey(j) for j in raw_journeys[: options.results])

        self._logger.info(
            "Journey search",
            extra={
                "backend": self.name,
                "origin": origin_id,
                "destination": destination_id,
                "results": len(journeys),
            },
        )
        return journeys
