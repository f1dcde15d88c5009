"""Geolocation port - Resolves the CURRENT_LOCATION sentinel.

An utterance like "von hier nach Mainz" carries no station name for the
origin. A position provider supplies coordinates instead, which are then
used for a nearby-station search.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from ..domain.models import GeoLocation


class PositionProviderPort(Protocol):
    """Port for "where is the caller right now".

    Implementations:
    - adapters/geolocation/fixed.py (FixedPositionProvider)
    - adapters/geolocation/nominatim_adapter.py (NominatimPositionProvider)
    """

    def current_position(self) -> GeoLocation:
        """Return the caller's position.

        Raises:
            GeolocationError: If no position can be determined.
        """
        ...
