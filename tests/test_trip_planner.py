"""Tests for the trip planner orchestration."""

from datetime import datetime

import pytest

from conftest import (
    FRANKFURT,
    KONSTABLERWACHE,
    MAINZ,
    WIESBADEN,
    FakePositionProvider,
    FakeTransit,
    make_journey,
    transit_error,
)
from voice_transit.domain.errors import (
    DestinationNotUnderstoodError,
    GeolocationError,
    NoJourneysFoundError,
)
from voice_transit.domain.models import CURRENT_LOCATION, TripProfile
from voice_transit.services.location_resolver import LocationResolverService
from voice_transit.services.trip_planner import (
    BACKEND_UNAVAILABLE_MESSAGE,
    MISSING_DESTINATION_MESSAGE,
    NO_JOURNEYS_MESSAGE,
    NO_POSITION_MESSAGE,
    TripPlannerService,
)

NOW = datetime(2025, 3, 14, 7, 0)

LOCATIONS = {
    "mainz": [MAINZ],
    "wiesbaden": [WIESBADEN],
    "frankfurt hauptbahnhof": [FRANKFURT],
}


def make_planner(transit, retry, position_provider=None, max_journeys=3):
    return TripPlannerService(
        transit=transit,
        resolver=LocationResolverService(transit, retry_policy=retry),
        position_provider=position_provider,
        retry_policy=retry,
        max_journeys=max_journeys,
    )


def test_plan_named_origin_and_destination(no_wait_retry):
    journey = make_journey(datetime(2025, 3, 14, 8, 12), datetime(2025, 3, 14, 8, 45))
    transit = FakeTransit(locations=LOCATIONS, journeys=[journey])
    planner = make_planner(transit, no_wait_retry)

    plan = planner.plan("Von Mainz nach Wiesbaden um 8 Uhr", now=NOW)

    assert plan.origin == MAINZ
    assert plan.destination == WIESBADEN
    assert plan.journeys == (journey,)
    origin_id, destination_id, options = transit.journey_calls[0]
    assert (origin_id, destination_id) == ("8000240", "8000250")
    assert options.departure == datetime(2025, 3, 14, 8, 0)
    assert options.profile is TripProfile.STANDARD
    assert plan.announcement() == (
        "Die nächste Verbindung von Mainz Hbf nach Wiesbaden Hbf geht um 08:12 Uhr von Gleis 4."
    )


def test_missing_origin_uses_default(no_wait_retry):
    journey = make_journey(datetime(2025, 3, 14, 7, 5), datetime(2025, 3, 14, 7, 40))
    transit = FakeTransit(locations=LOCATIONS, journeys=[journey])
    planner = make_planner(transit, no_wait_retry)

    plan = planner.plan("nach Wiesbaden", now=NOW)

    assert plan.origin == FRANKFURT
    assert plan.origin_label is None
    assert transit.location_calls[0] == "Frankfurt Hauptbahnhof"


def test_current_location_uses_nearest_stop(no_wait_retry):
    journey = make_journey(datetime(2025, 3, 14, 7, 5), datetime(2025, 3, 14, 7, 40))
    transit = FakeTransit(locations=LOCATIONS, nearby=[KONSTABLERWACHE], journeys=[journey])
    provider = FakePositionProvider()
    planner = make_planner(transit, no_wait_retry, position_provider=provider)

    plan = planner.plan("von hier nach Wiesbaden", now=NOW)

    assert plan.intent.origin == CURRENT_LOCATION
    assert plan.origin == KONSTABLERWACHE
    assert plan.origin_label == "Deinem Standort"
    assert provider.calls == 1
    assert transit.nearby_calls[0][0] == provider.position


def test_current_location_without_provider(no_wait_retry):
    planner = make_planner(FakeTransit(locations=LOCATIONS), no_wait_retry)

    with pytest.raises(GeolocationError):
        planner.plan("von hier nach Wiesbaden", now=NOW)
    assert planner.plan_safe("von hier nach Wiesbaden", now=NOW) == (None, NO_POSITION_MESSAGE)


def test_intent_time_wins_over_departure_argument(no_wait_retry):
    journey = make_journey(datetime(2025, 3, 14, 9, 0), datetime(2025, 3, 14, 9, 30))
    transit = FakeTransit(locations=LOCATIONS, journeys=[journey])
    planner = make_planner(transit, no_wait_retry)
    fallback = datetime(2025, 3, 15, 10, 0)

    planner.plan("in 10 Minuten nach Wiesbaden", now=NOW, departure=fallback)
    planner.plan("nach Wiesbaden", now=NOW, departure=fallback)

    assert transit.journey_calls[0][2].departure == datetime(2025, 3, 14, 7, 10)
    assert transit.journey_calls[1][2].departure == fallback


def test_wheelchair_profile_is_passed_on(no_wait_retry):
    journey = make_journey(datetime(2025, 3, 14, 7, 5), datetime(2025, 3, 14, 7, 40))
    transit = FakeTransit(locations=LOCATIONS, journeys=[journey])
    planner = make_planner(transit, no_wait_retry)

    planner.plan("nach Wiesbaden", profile=TripProfile.WHEELCHAIR, now=NOW)

    assert transit.journey_calls[0][2].profile is TripProfile.WHEELCHAIR


def test_journeys_are_truncated(no_wait_retry):
    journeys = [
        make_journey(datetime(2025, 3, 14, 7, m), datetime(2025, 3, 14, 7, m + 30))
        for m in (5, 15, 25)
    ]
    transit = FakeTransit(locations=LOCATIONS, journeys=journeys)
    planner = make_planner(transit, no_wait_retry, max_journeys=2)

    plan = planner.plan("nach Wiesbaden", now=NOW)

    assert plan.journeys == tuple(journeys[:2])
    assert transit.journey_calls[0][2].results == 2


def test_missing_destination(no_wait_retry):
    planner = make_planner(FakeTransit(locations=LOCATIONS), no_wait_retry)

    with pytest.raises(DestinationNotUnderstoodError) as excinfo:
        planner.plan("Wie ist das Wetter?", now=NOW)
    assert excinfo.value.message == MISSING_DESTINATION_MESSAGE
    assert planner.plan_safe("Wie ist das Wetter?", now=NOW) == (None, MISSING_DESTINATION_MESSAGE)


def test_unknown_destination_message(no_wait_retry):
    planner = make_planner(FakeTransit(locations=LOCATIONS), no_wait_retry)

    assert planner.plan_safe("nach Atlantis", now=NOW) == (
        None,
        'Zielort "atlantis" nicht gefunden.',
    )


def test_no_journeys(no_wait_retry):
    planner = make_planner(FakeTransit(locations=LOCATIONS), no_wait_retry)

    with pytest.raises(NoJourneysFoundError):
        planner.plan("nach Wiesbaden", now=NOW)
    assert planner.plan_safe("nach Wiesbaden", now=NOW) == (None, NO_JOURNEYS_MESSAGE)


def test_backend_failure_is_retried_then_reported(no_wait_retry):
    transit = FakeTransit(locations=LOCATIONS, errors={"journeys": transit_error(503)})
    planner = make_planner(transit, no_wait_retry)

    plan, message = planner.plan_safe("nach Wiesbaden", now=NOW)

    assert plan is None
    assert message == BACKEND_UNAVAILABLE_MESSAGE
    assert len(transit.journey_calls) == 3


def test_plan_safe_success(no_wait_retry):
    journey = make_journey(datetime(2025, 3, 14, 7, 5), datetime(2025, 3, 14, 7, 40), platform=None)
    transit = FakeTransit(locations=LOCATIONS, journeys=[journey])
    planner = make_planner(transit, no_wait_retry)

    plan, message = planner.plan_safe("von Mainz nach Wiesbaden", now=NOW)

    assert message is None
    assert plan.announcement() == (
        "Die nächste Verbindung von Mainz Hbf nach Wiesbaden Hbf geht um 07:05 Uhr."
    )
