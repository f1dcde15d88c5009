"""Tests for environment-driven configuration."""

import pytest
from pydantic import ValidationError

from voice_transit.config import AppConfig, TransitConfig, get_config, reset_config


def test_defaults():
    config = AppConfig()
    assert config.transit.backend == "db_rest"
    assert config.transit.max_journeys == 3
    assert config.nlp.default_origin == "Frankfurt Hauptbahnhof"
    assert config.nlp.match_threshold == 0.5
    assert config.asr.language == "de"
    assert config.retry.max_lookups == 12
    assert not config.geolocation.has_coordinates


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("VT_TRANSIT_BACKEND", "db_api")
    monkeypatch.setenv("VT_TRANSIT_DB_API_KEY", "geheim")
    monkeypatch.setenv("VT_GEO_LATITUDE", "50.107")
    monkeypatch.setenv("VT_GEO_LONGITUDE", "8.664")
    monkeypatch.setenv("VT_RETRY_MAX_ATTEMPTS", "5")

    config = AppConfig()

    assert config.transit.backend == "db_api"
    assert config.transit.db_api_key.get_secret_value() == "geheim"
    assert "geheim" not in repr(config.transit)
    assert config.geolocation.has_coordinates
    assert config.retry.max_attempts == 5


def test_invalid_backend_is_rejected():
    with pytest.raises(ValidationError):
        TransitConfig(backend="sbb")


def test_get_config_is_cached_until_reset(monkeypatch):
    first = get_config()
    assert get_config() is first

    monkeypatch.setenv("VT_TRANSIT_MAX_JOURNEYS", "7")
    assert get_config().transit.max_journeys == 3

    reset_config()
    assert get_config().transit.max_journeys == 7
