"""Domain layer - Core business models and errors.

This module contains immutable domain models and typed errors
used throughout the application. No external dependencies.
"""

from .errors import (
    ASRError,
    ConfigurationError,
    DestinationNotUnderstoodError,
    GeolocationError,
    LocationNotFoundError,
    NoJourneysFoundError,
    NoNearbyStationError,
    SpeechRecognitionError,
    TransitApiError,
    TripPlannerError,
)
from .models import (
    CURRENT_LOCATION,
    GeoLocation,
    Journey,
    JourneyOptions,
    Leg,
    Match,
    StopLocation,
    Stopover,
    TranscriptionResult,
    TranscriptionSegment,
    TravelIntent,
    TripPlan,
    TripProfile,
    format_clock,
)

__all__ = [
    # Models
    "CURRENT_LOCATION",
    "TravelIntent",
    "Match",
    "GeoLocation",
    "StopLocation",
    "TripProfile",
    "JourneyOptions",
    "Stopover",
    "Leg",
    "Journey",
    "TripPlan",
    "TranscriptionSegment",
    "TranscriptionResult",
    "format_clock",
    # Errors
    "TripPlannerError",
    "DestinationNotUnderstoodError",
    "LocationNotFoundError",
    "NoNearbyStationError",
    "NoJourneysFoundError",
    "TransitApiError",
    "GeolocationError",
    "ASRError",
    "SpeechRecognitionError",
    "ConfigurationError",
]
