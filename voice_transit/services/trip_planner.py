"""Trip planner service - Main orchestrator.

Turns one recognized utterance into a TripPlan:
1. Intent parsing (origin, destination, departure time)
2. Origin resolution (named station, current position or default)
3. Destination resolution
4. Journey search
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, Tuple

from ..domain.errors import (
    ConfigurationError,
    DestinationNotUnderstoodError,
    GeolocationError,
    LocationNotFoundError,
    NoJourneysFoundError,
    NoNearbyStationError,
    TransitApiError,
)
from ..domain.models import (
    JourneyOptions,
    StopLocation,
    TravelIntent,
    TripPlan,
    TripProfile,
)
from ..nlp.intent import parse_intent
from ..ports.geolocation import PositionProviderPort
from ..ports.transit import TransitApiPort
from .location_resolver import LocationResolverService
from .retry import RetryPolicy

CURRENT_LOCATION_LABEL = "Deinem Standort"

MISSING_DESTINATION_MESSAGE = (
    "Ich konnte kein Ziel verstehen. Sag zum Beispiel: 'Nach Wiesbaden'"
)
NO_JOURNEYS_MESSAGE = "Keine Verbindungen gefunden."
NO_POSITION_MESSAGE = "Ich konnte deinen Standort nicht ermitteln."
BACKEND_UNAVAILABLE_MESSAGE = "Die Fahrplanauskunft ist gerade nicht erreichbar."
GENERIC_ERROR_MESSAGE = "Ein Fehler ist aufgetreten."


@dataclass
class TripPlannerService:
    """Plans a trip from a spoken or typed German request.

    Attributes:
        transit: Journey planner backend
        resolver: Place name and position to station resolution
        position_provider: Source of the caller's position for "von hier"
        retry_policy: Retries for transient backend failures
        default_origin: Start station when the request names none
        max_journeys: Number of journeys kept in the plan
    """

    transit: TransitApiPort
    resolver: LocationResolverService
    position_provider: Optional[PositionProviderPort] = None
    retry_policy: RetryPolicy = field(default_factory=RetryPolicy)
    default_origin: str = "Frankfurt Hauptbahnhof"
    max_journeys: int = 3

    _logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(__name__)

    def plan(
        self,
        text: str,
        profile: TripProfile = TripProfile.STANDARD,
        now: Optional[datetime] = None,
        departure: Optional[datetime] = None,
    ) -> TripPlan:
        """Plan a trip from a natural-language request.

        Args:
            text: The utterance, e.g. "Von Mainz nach Wiesbaden um 8 Uhr".
            profile: Accessibility profile for the journey search.
            now: Reference time for relative expressions ("in 10 Minuten").
            departure: Departure used when the utterance names no time.

        Returns:
            TripPlan with the resolved stations and journeys.

        Raises:
            DestinationNotUnderstoodError: If no destination was recognized.
            GeolocationError: If "von hier" was said and no position is available.
            NoNearbyStationError: If no stop is near the caller's position.
            LocationNotFoundError: If a place name matched no station.
            NoJourneysFoundError: If the backend returned no journeys.
            TransitApiError: If the backend kept failing.
        """
        self._logger.info(
            "Starting trip planning",
            extra={"text_length": len(text or ""), "profile": profile.value},
        )

        intent = parse_intent(text, now=now)
        self._logger.info("Intent parsed", extra=intent.as_dict())

        if not intent.has_destination:
            raise DestinationNotUnderstoodError(MISSING_DESTINATION_MESSAGE, text=text or "")

        origin, origin_label = self._resolve_origin(intent)
        destination = self.resolver.resolve(intent.destination or "", role="destination")

        options = JourneyOptions(
            departure=intent.time or departure,
            profile=profile,
            results=self.max_journeys,
        )
        journeys = self.retry_policy.call(
            self.transit.search_journeys, origin.id, destination.id, options
        )
        if not journeys:
            raise NoJourneysFoundError(
                NO_JOURNEYS_MESSAGE, origin_id=origin.id, destination_id=destination.id
            )

        self._logger.info(
            "Journeys found",
            extra={
                "origin": origin.name,
                "destination": destination.name,
                "journeys": len(journeys),
            },
        )
        return TripPlan(
            intent=intent,
            origin=origin,
            destination=destination,
            journeys=tuple(journeys[: self.max_journeys]),
            origin_label=origin_label,
        )

    def _resolve_origin(self, intent: TravelIntent) -> Tuple[StopLocation, Optional[str]]:
        if intent.uses_current_location:
            if self.position_provider is None:
                raise GeolocationError(NO_POSITION_MESSAGE, provider="none")
            position = self.position_provider.current_position()
            return self.resolver.resolve_nearby(position), CURRENT_LOCATION_LABEL

        name = intent.origin or self.default_origin
        if intent.origin is None:
            self._logger.debug("No origin given, using default", extra={"origin": name})
        return self.resolver.resolve(name, role="origin"), None

    def plan_safe(
        self,
        text: str,
        profile: TripProfile = TripProfile.STANDARD,
        now: Optional[datetime] = None,
        departure: Optional[datetime] = None,
    ) -> tuple[Optional[TripPlan], Optional[str]]:
        """Plan a trip, returning a German message instead of raising.

        Returns:
            Tuple of (TripPlan or None, message or None).
        """
        try:
            return self.plan(text, profile=profile, now=now, departure=departure), None
        except (DestinationNotUnderstoodError, LocationNotFoundError, NoNearbyStationError) as e:
            return None, e.message
        except GeolocationError as e:
            self._logger.warning("Position unavailable", extra={"error": str(e)})
            return None, NO_POSITION_MESSAGE
        except NoJourneysFoundError:
            return None, NO_JOURNEYS_MESSAGE
        except TransitApiError as e:
            self._logger.error(
                "Transit backend failed",
                extra={"backend": e.backend, "status_code": e.status_code, "error": str(e)},
            )
            return None, BACKEND_UNAVAILABLE_MESSAGE
        except ConfigurationError as e:
            self._logger.error(
                "Configuration error", extra={"setting": e.setting_name, "error": str(e)}
            )
            return None, f"Konfigurationsfehler: {e.message}"
        except Exception:
            self._logger.exception("Unexpected error in trip planning")
            return None, GENERIC_ERROR_MESSAGE
