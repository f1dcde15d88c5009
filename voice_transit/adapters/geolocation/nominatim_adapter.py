"""Position provider geocoding a configured address with Nominatim.

Used when the caller's position is known as a postal address
(VT_GEO_ADDRESS) rather than coordinates. The address is geocoded once
through geopy with rate limiting and the result is cached.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Optional

from geopy.exc import GeocoderServiceError
from geopy.extra.rate_limiter import RateLimiter
from geopy.geocoders import Nominatim

from ...config import GeolocationConfig, get_config
from ...domain.errors import GeolocationError
from ...domain.models import GeoLocation
from ...ports.cache import CachePort
from ..cache.memory_cache import InMemoryCache


@dataclass
class NominatimPositionProvider:
    """PositionProviderPort backed by OpenStreetMap Nominatim.

    Attributes:
        address: Address to geocode (e.g. "Taunusanlage 1, Frankfurt")
        config: Geolocation configuration
        cache: Cache for the geocoded position
    """

    address: str
    config: GeolocationConfig = field(default_factory=lambda: get_config().geolocation)
    cache: CachePort[GeoLocation] = field(
        default_factory=lambda: InMemoryCache(name="position")
    )

    _geocode_fn: Optional[Any] = field(default=None, repr=False)
    _logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(__name__)

    def _get_geocoder(self) -> Any:
        """Get or initialize the geocoder with rate limiting."""
        if self._geocode_fn is not None:
            return self._geocode_fn

        geolocator = Nominatim(
            user_agent=self.config.user_agent,
            timeout=self.config.timeout_seconds,
        )
        self._geocode_fn = RateLimiter(
            geolocator.geocode,
            min_delay_seconds=self.config.rate_limit_delay,
            max_retries=self.config.max_retries,
            error_wait_seconds=self.config.error_wait_seconds,
        )
        return self._geocode_fn

    def current_position(self) -> GeoLocation:
        """Geocode the configured address.

        Raises:
            GeolocationError: If the address is empty, unknown, or the
                service is unavailable.
        """
        if not self.address or not self.address.strip():
            raise GeolocationError("No address configured", provider="nominatim")

        cache_key = f"nominatim:{self.address.strip().lower()}"
        cached = self.cache.get(cache_key)
        if cached is not None:
            return cached

        try:
            result = self._get_geocoder()(self.address, language="de")
        except GeocoderServiceError as e:
            self._logger.warning(
                "Geocoding service error",
                extra={"address": self.address, "error": str(e)},
            )
            raise GeolocationError(
                "Standort konnte nicht ermittelt werden", provider="nominatim", cause=e
            )

        if result is None:
            raise GeolocationError(
                f"Adresse '{self.address}' nicht gefunden", provider="nominatim"
            )

        position = GeoLocation(
            latitude=float(result.latitude), longitude=float(result.longitude)
        )
        self._logger.debug(
            "Address geocoded",
            extra={"address": self.address, "lat": position.latitude, "lon": position.longitude},
        )
        self.cache.set(cache_key, position)
        return position
