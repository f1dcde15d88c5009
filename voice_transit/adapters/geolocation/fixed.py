"""Position provider returning configured coordinates."""

from __future__ import annotations

from dataclasses import dataclass

from ...domain.models import GeoLocation


@dataclass(frozen=True)
class FixedPositionProvider:
    """PositionProviderPort for a device that does not move (kiosk, desktop).

    Coordinates come from VT_GEO_LATITUDE / VT_GEO_LONGITUDE.
    """

    latitude: float
    longitude: float

    def current_position(self) -> GeoLocation:
        return GeoLocation(latitude=self.latitude, longitude=self.longitude)
