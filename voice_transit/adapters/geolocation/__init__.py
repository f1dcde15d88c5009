"""Geolocation adapters - Implementations of PositionProviderPort.

Available implementations:
- FixedPositionProvider: configured coordinates
- NominatimPositionProvider: geocoded address (OpenStreetMap Nominatim)
"""

from .fixed import FixedPositionProvider
from .nominatim_adapter import NominatimPositionProvider

__all__ = ["FixedPositionProvider", "NominatimPositionProvider"]
