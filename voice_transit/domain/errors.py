"""Typed domain errors for the trip planner.

The parsing and matching core never raises. These errors belong to the
collaborators around it (transit backends, geolocation, speech input)
and are converted to user-facing messages at the outermost layer.

All errors inherit from TripPlannerError and can optionally wrap a
root cause exception for debugging.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional


@dataclass
class TripPlannerError(Exception):
    """Base error for the trip planner domain.

    Attributes:
        message: Human-readable error description
        cause: Optional underlying exception that caused this error
    """

    message: str
    cause: Optional[Exception] = field(default=None, repr=False)

    def __str__(self) -> str:
        if self.cause:
            return f"{self.message}: {self.cause}"
        return self.message

    def __post_init__(self) -> None:
        super().__init__(self.message)


@dataclass
class DestinationNotUnderstoodError(TripPlannerError):
    """The utterance did not yield a destination.

    Attributes:
        text: The utterance that was parsed
    """

    text: str = ""


@dataclass
class LocationNotFoundError(TripPlannerError):
    """No station matched a spoken place name.

    Attributes:
        query: The place name as parsed from the utterance
        role: "origin" or "destination"
    """

    query: str = ""
    role: str = ""


@dataclass
class NoNearbyStationError(TripPlannerError):
    """No stop was found around the caller's position."""

    latitude: float = 0.0
    longitude: float = 0.0


@dataclass
class NoJourneysFoundError(TripPlannerError):
    """The backend returned no journeys between two stops."""

    origin_id: str = ""
    destination_id: str = ""


@dataclass
class TransitApiError(TripPlannerError):
    """A request to the remote journey planner failed.

    Attributes:
        backend: Name of the backend adapter
        status_code: HTTP status code if a response was received
    """

    backend: str = ""
    status_code: Optional[int] = None

    @property
    def is_transient(self) -> bool:
        """Return True for failures worth retrying (network, 429, 5xx)."""
        if self.status_code is None:
            return True
        return self.status_code == 429 or self.status_code >= 500


@dataclass
class GeolocationError(TripPlannerError):
    """The caller's current position could not be determined."""

    provider: str = ""


@dataclass
class ASRError(TripPlannerError):
    """ASR transcription failed.

    Attributes:
        model_id: The ASR model that failed
        device: The device the model was running on
        audio_path: Path to the audio file if relevant
    """

    model_id: str = ""
    device: str = ""
    audio_path: Optional[str] = None

    @property
    def is_unreadable_audio(self) -> bool:
        """Return True if the recording itself could not be opened."""
        return isinstance(self.cause, (PermissionError, FileNotFoundError, IsADirectoryError))


@dataclass
class SpeechRecognitionError(TripPlannerError):
    """Speech session misuse or failure.

    Attributes:
        code: Short machine-readable code ("no-speech", "not-listening", ...)
    """

    code: str = ""


@dataclass
class ConfigurationError(TripPlannerError):
    """Invalid or missing configuration.

    Attributes:
        setting_name: Name of the problematic setting
    """

    setting_name: str = ""
