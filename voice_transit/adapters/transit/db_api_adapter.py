"""Transit adapter for the official Deutsche Bahn API (Fahrplan Plus).

Requests go to apis.deutschebahn.com with the ``DB-Client-Id`` and
``DB-Api-Key`` headers. Responses follow the HAFAS ReST layout:
locations with ``extId``/``lat``/``lon``, journeys as ``Trip`` entries
whose ``LegList.Leg`` endpoints carry separate ``date`` and ``time``
strings plus optional realtime ``rtDate``/``rtTime``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional, Sequence
from urllib.parse import quote

from ...config import TransitConfig, get_config
from ...domain.errors import ConfigurationError
from ...domain.models import (
    GeoLocation,
    Journey,
    JourneyOptions,
    Leg,
    StopLocation,
)
from ...ports.cache import CachePort
from ..cache.memory_cache import InMemoryCache
from .http_client import JsonHttpClient

STATION_TYPES = {"station", "ST"}
MAX_LOCATIONS = 10
WALKING_LEG_TYPES = {"WALK", "TRSF", "GIS", "KISS"}


def _as_list(value: Any) -> List[Any]:
    """HAFAS returns a bare object instead of a one-element list."""
    if value is None:
        return []
    if isinstance(value, list):
        return value
    return [value]


def _hafas_datetime(date: Optional[str], time: Optional[str]) -> Optional[datetime]:
    if not date or not time:
        return None
    for fmt in ("%Y-%m-%d %H:%M:%S", "%Y-%m-%d %H:%M"):
        try:
            return datetime.strptime(f"{date} {time}", fmt)
        except ValueError:
            continue
    return None


def _stop_location(raw: Mapping[str, Any]) -> StopLocation:
    latitude = raw.get("lat", raw.get("latitude"))
    longitude = raw.get("lon", raw.get("longitude"))
    distance = raw.get("dist", raw.get("distance"))
    location = None
    if latitude is not None and longitude is not None:
        location = GeoLocation(latitude=float(latitude), longitude=float(longitude))
    return StopLocation(
        id=str(raw.get("id") or raw.get("extId") or ""),
        name=str(raw.get("name", "")),
        location=location,
        distance_m=int(distance) if distance is not None else None,
    )


def _leg(raw: Mapping[str, Any]) -> Leg:
    origin = raw.get("Origin") or {}
    destination = raw.get("Destination") or {}
    leg_type = str(raw.get("type", ""))
    walking = leg_type in WALKING_LEG_TYPES

    planned_departure = _hafas_datetime(origin.get("date"), origin.get("time"))
    planned_arrival = _hafas_datetime(destination.get("date"), destination.get("time"))
    realtime_departure = _hafas_datetime(
        origin.get("rtDate") or origin.get("date"), origin.get("rtTime")
    )
    realtime_arrival = _hafas_datetime(
        destination.get("rtDate") or destination.get("date"), destination.get("rtTime")
    )

    return Leg(
        origin_name=str(origin.get("name", "")),
        destination_name=str(destination.get("name", "")),
        departure=realtime_departure or planned_departure,
        arrival=realtime_arrival or planned_arrival,
        planned_departure=planned_departure,
        planned_arrival=planned_arrival,
        departure_platform=origin.get("rtTrack") or origin.get("track"),
        arrival_platform=destination.get("rtTrack") or destination.get("track"),
        line_name=raw.get("name") or ("Fußweg" if walking else "Transfer"),
        mode="walking" if walking else leg_type.lower(),
        direction=raw.get("direction"),
        walking=walking,
        distance_m=raw.get("dist"),
    )


def _journey(raw: Mapping[str, Any]) -> Journey:
    legs = _as_list((raw.get("LegList") or {}).get("Leg"))
    return Journey(legs=tuple(_leg(leg) for leg in legs if leg))


@dataclass
class DbApiTransitAdapter:
    """TransitApiPort implementation for the DB Fahrplan Plus API.

    Attributes:
        config: Transit configuration (base URL and credentials)
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
        return "db_api"

    def _url(self, path: str) -> str:
        return f"{self.config.db_api_base_url.rstrip('/')}/{path}"

    def _headers(self) -> Dict[str, str]:
        """Authentication headers.

        Raises:
            ConfigurationError: If the client id or API key is missing.
        """
        if not self.config.db_client_id:
            raise ConfigurationError(
                "DB client id is not configured", setting_name="VT_TRANSIT_DB_CLIENT_ID"
            )
        if self.config.db_api_key is None:
            raise ConfigurationError(
                "DB API key is not configured", setting_name="VT_TRANSIT_DB_API_KEY"
            )
        return {
            "DB-Client-Id": self.config.db_client_id,
            "DB-Api-Key": self.config.db_api_key.get_secret_value(),
            "Accept": "application/json",
        }

    def _get(self, path: str, params: Optional[Mapping[str, Any]] = None) -> Any:
        return self.http.get_json(  # type: ignore[union-attr]
            self._url(path), params=params, headers=self._headers()
        )

    def _stations(self, data: Any) -> List[StopLocation]:
        return [
            _stop_location(loc)
            for loc in _as_list(data)
            if isinstance(loc, dict) and loc.get("type") in STATION_TYPES
        ][:MAX_LOCATIONS]

    def search_locations(self, query: str) -> Sequence[StopLocation]:
        """Search stations by name (cached per query)."""
        if not query or not query.strip():
            return ()

        cache_key = f"{self.name}:locations:{query.strip().lower()}"
        return self.cache.get_or_compute(
            cache_key,
            lambda: tuple(self._stations(self._get(f"location/{quote(query.strip())}"))),
        )

    def search_nearby(self, location: GeoLocation, radius_m: int) -> Sequence[StopLocation]:
        """Search stations around a position, dropping those beyond ``radius_m``."""
        data = self._get(
            "location/nearby",
            params={"lat": location.latitude, "lon": location.longitude},
        )
        stops = [
            stop
            for stop in self._stations(data)
            if stop.distance_m is None or stop.distance_m <= radius_m
        ]
        stops.sort(key=lambda stop: stop.distance_m if stop.distance_m is not None else radius_m)
        return tuple(stops)

    def search_journeys(
        self,
        origin_id: str,
        destination_id: str,
        options: JourneyOptions,
    ) -> Sequence[Journey]:
        """Search journeys between two stations."""
        params: Dict[str, Any] = {"originId": origin_id, "destId": destination_id}
        if options.departure is not None:
            params["date"] = options.departure.strftime("%Y-%m-%d")
            params["time"] = options.departure.strftime("%H:%M")

        data = self._get("journey", params=params)
        trips = _as_list(data.get("Trip")) if isinstance(data, dict) else []
        journeys = tuple(_journey(trip) for trip in trips[: options.results])

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
