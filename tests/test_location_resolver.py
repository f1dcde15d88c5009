"""Tests for place-name to station resolution."""

import pytest

from conftest import FRANKFURT, KONSTABLERWACHE, FakeTransit, transit_error
from voice_transit.domain.errors import LocationNotFoundError, NoNearbyStationError, TransitApiError
from voice_transit.domain.models import GeoLocation, StopLocation
from voice_transit.services.location_resolver import LocationResolverService, lookup_variants
from voice_transit.services.retry import RetryPolicy


def test_original_name_is_tried_first(no_wait_retry):
    transit = FakeTransit(locations={"Frankfurt": [FRANKFURT]})
    resolver = LocationResolverService(transit, retry_policy=no_wait_retry)

    assert resolver.resolve("Frankfurt") == FRANKFURT
    assert transit.location_calls == ["Frankfurt"]


def test_umlaut_spelling_is_tried_next(no_wait_retry):
    munich = StopLocation("8000261", "München Hbf")
    transit = FakeTransit(locations={"münchen": [munich]})
    resolver = LocationResolverService(transit, retry_policy=no_wait_retry)

    assert resolver.resolve("muenchen") == munich
    assert transit.location_calls == ["muenchen", "münchen"]


def test_phonetic_variant_finds_station(no_wait_retry):
    wiesbaden = StopLocation("8000250", "Wiesbaden Hbf")
    transit = FakeTransit(locations={"wiesbaden": [wiesbaden]})
    resolver = LocationResolverService(transit, retry_policy=no_wait_retry)

    assert resolver.resolve("Viesbaden") == wiesbaden
    assert transit.location_calls[-1] == "Wiesbaden"


def test_single_words_are_tried_last():
    transit = FakeTransit(locations={"frankfurt": [FRANKFURT]})
    resolver = LocationResolverService(
        transit, retry_policy=RetryPolicy(initial_wait_seconds=0, max_lookups=50)
    )

    assert resolver.resolve("Hauptwache Frankfurt") == FRANKFURT
    assert transit.location_calls[0] == "Hauptwache Frankfurt"
    assert transit.location_calls[-2:] == ["Hauptwache", "Frankfurt"]


def test_lookup_budget_is_respected():
    transit = FakeTransit()
    resolver = LocationResolverService(
        transit, retry_policy=RetryPolicy(initial_wait_seconds=0, max_lookups=2)
    )

    assert resolver.search("Wiesbaden") == []
    assert len(transit.location_calls) == 2


def test_lookup_variants_are_unique_ignoring_case():
    variants = list(lookup_variants("Mainz"))
    lowered = [v.lower() for v in variants]
    assert variants[0] == "Mainz"
    assert len(lowered) == len(set(lowered))


def test_results_are_ranked_against_spoken_name(no_wait_retry):
    ost = StopLocation("1", "Wiesbaden Ost")
    hbf = StopLocation("2", "Wiesbaden Hbf")
    exact = StopLocation("3", "Wiesbaden")
    transit = FakeTransit(locations={"wiesbaden": [ost, hbf, exact]})
    resolver = LocationResolverService(transit, retry_policy=no_wait_retry)

    assert resolver.search("Wiesbaden") == [exact, ost, hbf]


def test_backend_error_on_one_variant_continues(no_wait_retry):
    transit = FakeTransit(
        locations={"münchen": [StopLocation("8000261", "München Hbf")]},
        errors={"muenchen": transit_error(status_code=400)},
    )
    resolver = LocationResolverService(transit, retry_policy=no_wait_retry)

    assert resolver.resolve("muenchen").name == "München Hbf"


def test_all_lookups_failing_reraises(no_wait_retry):
    error = transit_error(status_code=400)
    transit = FakeTransit(errors={v.lower(): error for v in lookup_variants("Mainz")})
    resolver = LocationResolverService(transit, retry_policy=no_wait_retry)

    with pytest.raises(TransitApiError):
        resolver.search("Mainz")


def test_transient_errors_are_retried():
    transit = FakeTransit(errors={"mainz": transit_error(status_code=503)})
    resolver = LocationResolverService(
        transit,
        retry_policy=RetryPolicy(max_attempts=3, initial_wait_seconds=0, max_lookups=1),
    )

    with pytest.raises(TransitApiError):
        resolver.search("Mainz")
    assert transit.location_calls == ["Mainz", "Mainz", "Mainz"]


def test_not_found_message_names_the_role(no_wait_retry):
    resolver = LocationResolverService(FakeTransit(), retry_policy=no_wait_retry)

    with pytest.raises(LocationNotFoundError) as excinfo:
        resolver.resolve("atlantis", role="origin")
    assert excinfo.value.message == 'Startort "atlantis" nicht gefunden.'
    assert excinfo.value.query == "atlantis"
    assert excinfo.value.role == "origin"


def test_empty_name_finds_nothing(no_wait_retry):
    transit = FakeTransit()
    resolver = LocationResolverService(transit, retry_policy=no_wait_retry)

    assert resolver.search("  ") == []
    assert transit.location_calls == []


def test_resolve_nearby_returns_closest(no_wait_retry):
    transit = FakeTransit(nearby=[KONSTABLERWACHE, FRANKFURT])
    resolver = LocationResolverService(transit, retry_policy=no_wait_retry, nearby_radius_m=500)
    position = GeoLocation(50.1147, 8.6862)

    assert resolver.resolve_nearby(position) == KONSTABLERWACHE
    assert transit.nearby_calls == [(position, 500)]


def test_resolve_nearby_without_stops(no_wait_retry):
    resolver = LocationResolverService(FakeTransit(), retry_policy=no_wait_retry)

    with pytest.raises(NoNearbyStationError) as excinfo:
        resolver.resolve_nearby(GeoLocation(50.0, 8.0), radius_m=100)
    assert excinfo.value.message == "Keine Haltestelle in der Nähe gefunden."


def test_match_limit_caps_results(no_wait_retry):
    stops = [StopLocation(str(i), f"Mainz {i}") for i in range(8)]
    transit = FakeTransit(locations={"mainz": stops})
    resolver = LocationResolverService(transit, retry_policy=no_wait_retry, match_limit=5)

    assert resolver.search("Mainz") == stops[:5]


def test_weak_match_is_logged(no_wait_retry, caplog):
    transit = FakeTransit(locations={"xyz": [StopLocation("1", "Hanau Hbf")]})
    resolver = LocationResolverService(transit, retry_policy=no_wait_retry)

    with caplog.at_level("WARNING", logger="voice_transit.services.location_resolver"):
        assert resolver.resolve("xyz").name == "Hanau Hbf"
    assert "Weak station match" in caplog.text
