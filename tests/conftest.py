"""Shared fakes for service and adapter tests."""

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional, Sequence

import pytest

from voice_transit.config import reset_config
from voice_transit.domain.errors import ASRError, TransitApiError
from voice_transit.domain.models import (
    GeoLocation,
    Journey,
    JourneyOptions,
    Leg,
    StopLocation,
    TranscriptionResult,
)
from voice_transit.services.retry import RetryPolicy

MAINZ = StopLocation(id="8000240", name="Mainz Hbf")
WIESBADEN = StopLocation(id="8000250", name="Wiesbaden Hbf")
FRANKFURT = StopLocation(id="8000105", name="Frankfurt (Main) Hbf")
KONSTABLERWACHE = StopLocation(id="8002052", name="Frankfurt (Main) Konstablerwache", distance_m=120)


def make_journey(departure: datetime, arrival: datetime, platform: Optional[str] = "4") -> Journey:
    return Journey(
        legs=(
            Leg(
                origin_name="Mainz Hbf",
                destination_name="Wiesbaden Hbf",
                departure=departure,
                arrival=arrival,
                departure_platform=platform,
                line_name="S 8",
                mode="train",
            ),
        )
    )


class FakeTransit:
    """In-memory TransitApiPort.

    Locations are looked up by lower-cased query. ``errors`` maps a
    lower-cased query (or "journeys" / "nearby") to an exception raised
    on every call.
    """

    def __init__(
        self,
        locations: Optional[Dict[str, Sequence[StopLocation]]] = None,
        nearby: Sequence[StopLocation] = (),
        journeys: Sequence[Journey] = (),
        errors: Optional[Dict[str, Exception]] = None,
    ) -> None:
        self.locations = {k.lower(): tuple(v) for k, v in (locations or {}).items()}
        self.nearby = tuple(nearby)
        self.journeys = tuple(journeys)
        self.errors = errors or {}
        self.location_calls: List[str] = []
        self.nearby_calls: List[tuple] = []
        self.journey_calls: List[tuple] = []

    @property
    def name(self) -> str:
        return "fake"

    def search_locations(self, query: str) -> Sequence[StopLocation]:
        self.location_calls.append(query)
        key = query.strip().lower()
        if key in self.errors:
            raise self.errors[key]
        return self.locations.get(key, ())

    def search_nearby(self, location: GeoLocation, radius_m: int) -> Sequence[StopLocation]:
        self.nearby_calls.append((location, radius_m))
        if "nearby" in self.errors:
            raise self.errors["nearby"]
        return self.nearby

    def search_journeys(
        self, origin_id: str, destination_id: str, options: JourneyOptions
    ) -> Sequence[Journey]:
        self.journey_calls.append((origin_id, destination_id, options))
        if "journeys" in self.errors:
            raise self.errors["journeys"]
        return self.journeys


class FakePositionProvider:
    def __init__(self, latitude: float = 50.1147, longitude: float = 8.6862) -> None:
        self.position = GeoLocation(latitude=latitude, longitude=longitude)
        self.calls = 0

    def current_position(self) -> GeoLocation:
        self.calls += 1
        return self.position


class FakeASR:
    """ASRModelPort returning queued transcripts or raising ASRError."""

    def __init__(self, *outcomes: object) -> None:
        self.outcomes = list(outcomes)
        self.calls: List[tuple] = []

    @property
    def model_id(self) -> str:
        return "fake"

    def transcribe(
        self, audio_path: Path, language: Optional[str] = "de", beam_size: int = 5
    ) -> TranscriptionResult:
        self.calls.append((audio_path, language, beam_size))
        outcome = self.outcomes.pop(0) if len(self.outcomes) > 1 else self.outcomes[0]
        if isinstance(outcome, Exception):
            raise outcome
        return TranscriptionResult(full_text=str(outcome))

    def unload(self) -> None:
        pass


def transit_error(status_code: Optional[int] = 503) -> TransitApiError:
    return TransitApiError("backend down", backend="fake", status_code=status_code)


def asr_error() -> ASRError:
    return ASRError("decoder crashed", model_id="fake", device="cpu")


@pytest.fixture
def no_wait_retry() -> RetryPolicy:
    """Retry policy that never sleeps."""
    return RetryPolicy(max_attempts=3, initial_wait_seconds=0, max_wait_seconds=0)


@pytest.fixture(autouse=True)
def fresh_config(monkeypatch):
    """Isolate tests from VT_* variables of the developer's shell."""
    import os

    for name in list(os.environ):
        if name.startswith("VT_"):
            monkeypatch.delenv(name)
    reset_config()
    yield
    reset_config()
