"""Ports layer - Abstract interfaces (Protocols) for the application.

Ports define the contracts between the application core and external
adapters: the remote journey planner, the caller's position, speech
recognition and caching. They enable dependency injection and keep
the services testable without network access.
"""

from .asr import ASRModelPort
from .cache import CachePort
from .geolocation import PositionProviderPort
from .transit import TransitApiPort

__all__ = [
    "TransitApiPort",
    "PositionProviderPort",
    "ASRModelPort",
    "CachePort",
]
