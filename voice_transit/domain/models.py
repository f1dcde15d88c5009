"""Immutable domain models for the trip planner.

All models are frozen dataclasses with slots. They have no external
dependencies and are created per request: nothing here is persisted
or shared between requests.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Generic, Optional, TypeVar

T = TypeVar("T")

# Reserved origin value meaning "resolve via the device position".
CURRENT_LOCATION = "CURRENT_LOCATION"


def format_clock(value: Optional[datetime]) -> str:
    """Format a datetime as German wall-clock time (HH:MM)."""
    if value is None:
        return ""
    return value.strftime("%H:%M")


def _minutes_between(start: Optional[datetime], end: Optional[datetime]) -> int:
    if start is None or end is None:
        return 0
    return int((end - start).total_seconds() // 60)


@dataclass(frozen=True, slots=True)
class TravelIntent:
    """Travel intent extracted from one utterance.

    Attributes:
        origin: Place-name fragment, CURRENT_LOCATION, or None
        destination: Place-name fragment; None means "not understood"
        time: Requested departure, anchored to the moment of parsing
    """

    origin: Optional[str] = None
    destination: Optional[str] = None
    time: Optional[datetime] = None

    @property
    def has_destination(self) -> bool:
        """Check if a usable destination was found."""
        return bool(self.destination)

    @property
    def uses_current_location(self) -> bool:
        """Check if the origin must be resolved via geolocation."""
        return self.origin == CURRENT_LOCATION

    @property
    def is_empty(self) -> bool:
        """Check if nothing at all was extracted."""
        return self.origin is None and self.destination is None and self.time is None

    def as_dict(self) -> Dict[str, Any]:
        """Return only the extracted fields, keyed "from", "to" and "time"."""
        data: Dict[str, Any] = {}
        if self.origin is not None:
            data["from"] = self.origin
        if self.destination is not None:
            data["to"] = self.destination
        if self.time is not None:
            data["time"] = self.time
        return data


@dataclass(frozen=True, slots=True)
class Match(Generic[T]):
    """A candidate paired with its similarity score in [0, 1]."""

    item: T
    score: float


@dataclass(frozen=True, slots=True)
class GeoLocation:
    """GPS coordinates representing a geographic location."""

    latitude: float
    longitude: float

    def __post_init__(self) -> None:
        """Validate coordinate ranges."""
        if not -90 <= self.latitude <= 90:
            raise ValueError(
                f"Latitude must be between -90 and 90, got {self.latitude}"
            )
        if not -180 <= self.longitude <= 180:
            raise ValueError(
                f"Longitude must be between -180 and 180, got {self.longitude}"
            )


@dataclass(frozen=True, slots=True)
class StopLocation:
    """A station or stop as returned by the transit backend.

    Attributes:
        id: Backend-specific station identifier (e.g. IBNR '8000105')
        name: Human-readable station name
        location: Coordinates if the backend returned them
        distance_m: Distance from the search position (nearby searches only)
    """

    id: str
    name: str
    location: Optional[GeoLocation] = None
    distance_m: Optional[int] = None


class TripProfile(Enum):
    """Accessibility profile requested for a journey search."""

    STANDARD = "standard"
    WHEELCHAIR = "wheelchair"
    MOBILITY_IMPAIRED = "mobility_impaired"


@dataclass(frozen=True, slots=True)
class JourneyOptions:
    """Options passed to a journey search.

    Attributes:
        departure: Desired departure time (None = now)
        profile: Accessibility profile
        results: Maximum number of journeys to return
    """

    departure: Optional[datetime] = None
    profile: TripProfile = TripProfile.STANDARD
    results: int = 3


@dataclass(frozen=True, slots=True)
class Stopover:
    """An intermediate stop of a leg."""

    name: str
    arrival: Optional[datetime] = None
    departure: Optional[datetime] = None
    platform: Optional[str] = None


@dataclass(frozen=True, slots=True)
class Leg:
    """One leg of a journey (a single vehicle ride or a walk).

    ``departure``/``arrival`` carry the realtime prognosis when the backend
    knows it and fall back to the planned times otherwise.
    """

    origin_name: str
    destination_name: str
    departure: Optional[datetime] = None
    arrival: Optional[datetime] = None
    planned_departure: Optional[datetime] = None
    planned_arrival: Optional[datetime] = None
    departure_platform: Optional[str] = None
    arrival_platform: Optional[str] = None
    line_name: str = ""
    mode: str = ""
    direction: Optional[str] = None
    walking: bool = False
    distance_m: Optional[int] = None
    stopovers: tuple[Stopover, ...] = field(default_factory=tuple)

    @property
    def departure_delay_minutes(self) -> int:
        """Realtime minus planned departure in minutes (0 if unknown)."""
        return _minutes_between(self.planned_departure, self.departure)

    @property
    def arrival_delay_minutes(self) -> int:
        """Realtime minus planned arrival in minutes (0 if unknown)."""
        return _minutes_between(self.planned_arrival, self.arrival)

    @property
    def duration_minutes(self) -> Optional[int]:
        """Return the duration of this leg in whole minutes."""
        if self.departure is None or self.arrival is None:
            return None
        return _minutes_between(self.departure, self.arrival)


@dataclass(frozen=True, slots=True)
class Journey:
    """A candidate journey between two stops."""

    legs: tuple[Leg, ...]
    price: Optional[float] = None

    @property
    def departure(self) -> Optional[datetime]:
        """Departure of the first leg."""
        return self.legs[0].departure if self.legs else None

    @property
    def arrival(self) -> Optional[datetime]:
        """Arrival of the last leg."""
        return self.legs[-1].arrival if self.legs else None

    @property
    def duration_minutes(self) -> Optional[int]:
        """Total travel time in whole minutes."""
        if self.departure is None or self.arrival is None:
            return None
        return _minutes_between(self.departure, self.arrival)

    @property
    def transfers(self) -> int:
        """Number of vehicle changes (walking legs are not counted)."""
        rides = sum(1 for leg in self.legs if not leg.walking)
        return max(0, rides - 1)

    def transfer_minutes(self, index: int) -> Optional[int]:
        """Waiting time before leg ``index`` (None for the first leg)."""
        if index <= 0 or index >= len(self.legs):
            return None
        previous_arrival = self.legs[index - 1].arrival
        departure = self.legs[index].departure
        if previous_arrival is None or departure is None:
            return None
        return max(0, _minutes_between(previous_arrival, departure))


@dataclass(frozen=True, slots=True)
class TripPlan:
    """Result of planning a trip from one utterance.

    Attributes:
        intent: The parsed intent
        origin: Resolved start stop
        destination: Resolved destination stop
        journeys: Candidate journeys, soonest first
        origin_label: How the origin is referred to in messages
    """

    intent: TravelIntent
    origin: StopLocation
    destination: StopLocation
    journeys: tuple[Journey, ...] = field(default_factory=tuple)
    origin_label: Optional[str] = None

    @property
    def next_journey(self) -> Optional[Journey]:
        """Return the first candidate journey, if any."""
        return self.journeys[0] if self.journeys else None

    def announcement(self) -> str:
        """Return the German sentence spoken back to the user."""
        journey = self.next_journey
        if journey is None or not journey.legs:
            return f"Keine Verbindungen von {self.origin.name} nach {self.destination.name} gefunden."

        first_leg = journey.legs[0]
        sentence = (
            f"Die nächste Verbindung von {self.origin.name} nach {self.destination.name} "
            f"geht um {format_clock(first_leg.departure)} Uhr"
        )
        if first_leg.departure_platform:
            sentence += f" von Gleis {first_leg.departure_platform}"
        return sentence + "."


@dataclass(frozen=True, slots=True)
class TranscriptionSegment:
    """A segment of transcribed audio with timestamps."""

    start_seconds: float
    end_seconds: float
    text: str

    @property
    def duration_seconds(self) -> float:
        """Return the duration of this segment."""
        return self.end_seconds - self.start_seconds


@dataclass(frozen=True, slots=True)
class TranscriptionResult:
    """Result of ASR transcription.

    Attributes:
        full_text: Complete transcribed text
        segments: Individual transcription segments with timestamps
        language: Detected language code
        language_probability: Confidence in language detection
        duration_seconds: Total audio duration if available
    """

    full_text: str
    segments: tuple[TranscriptionSegment, ...] = field(default_factory=tuple)
    language: str = "de"
    language_probability: float = 1.0
    duration_seconds: Optional[float] = None
