"""Centralized configuration using Pydantic Settings.

This module is the single source of truth for tunable values: matching
thresholds, the transit backend and its credentials, the position used
for "von hier" requests, retry behaviour and logging.

Configuration can be overridden via environment variables:
- VT_TRANSIT_BACKEND=db_api
- VT_TRANSIT_DB_API_KEY=...
- VT_GEO_LATITUDE=50.1070 VT_GEO_LONGITUDE=8.6638
- VT_LOG_LEVEL=DEBUG
- etc.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal, Optional

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class NLPConfig(BaseSettings):
    """Intent parsing and fuzzy matching configuration.

    Environment variables prefixed with VT_NLP_.
    """

    model_config = SettingsConfigDict(env_prefix="VT_NLP_")

    match_threshold: float = Field(default=0.5, ge=0.0, le=1.0)
    match_limit: int = Field(default=5, ge=1)
    word_match_threshold: float = Field(default=0.7, ge=0.0, le=1.0)
    default_origin: str = "Frankfurt Hauptbahnhof"


class TransitConfig(BaseSettings):
    """Remote journey-planner configuration.

    Environment variables prefixed with VT_TRANSIT_.
    """

    model_config = SettingsConfigDict(env_prefix="VT_TRANSIT_")

    backend: Literal["db_rest", "db_api"] = "db_rest"
    db_rest_base_url: str = "https://v6.db.transport.rest"
    db_api_base_url: str = "https://apis.deutschebahn.com/fahrplan-plus/v1"
    db_client_id: Optional[str] = None
    db_api_key: Optional[SecretStr] = None
    timeout_seconds: float = 10.0
    location_results: int = 10
    max_journeys: int = 3
    nearby_radius_m: int = 1000
    user_agent: str = "voice-transit"
    cache_enabled: bool = True
    cache_ttl_seconds: Optional[float] = 3600.0
    cache_max_size: Optional[int] = 512


class GeolocationConfig(BaseSettings):
    """Configuration for resolving "my current location".

    Either fixed coordinates or a postal address that is geocoded once.
    Environment variables prefixed with VT_GEO_.
    """

    model_config = SettingsConfigDict(env_prefix="VT_GEO_")

    latitude: Optional[float] = None
    longitude: Optional[float] = None
    address: Optional[str] = None
    user_agent: str = "voice-transit"
    timeout_seconds: int = 10
    rate_limit_delay: float = 1.0
    max_retries: int = 2
    error_wait_seconds: float = 2.0

    @property
    def has_coordinates(self) -> bool:
        """Return True if both coordinates are configured."""
        return self.latitude is not None and self.longitude is not None


class ASRConfig(BaseSettings):
    """ASR-related configuration.

    Environment variables prefixed with VT_ASR_.
    """

    model_config = SettingsConfigDict(env_prefix="VT_ASR_")

    default_model: str = "small"
    device: Literal["cuda", "cpu", "auto"] = "auto"
    compute_type: str = "float16"
    fallback_device: str = "cpu"
    fallback_compute_type: str = "int8"
    beam_size: int = 5
    language: str = "de"


class RetryConfig(BaseSettings):
    """Bounded retry configuration for remote calls and variant lookups.

    Environment variables prefixed with VT_RETRY_.
    """

    model_config = SettingsConfigDict(env_prefix="VT_RETRY_")

    max_attempts: int = Field(default=3, ge=1)
    initial_wait_seconds: float = 0.5
    max_wait_seconds: float = 4.0
    max_lookups: int = Field(default=12, ge=1)


class ObservabilityConfig(BaseSettings):
    """Logging and observability configuration.

    Environment variables prefixed with VT_LOG_.
    """

    model_config = SettingsConfigDict(env_prefix="VT_LOG_")

    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    structured: bool = False  # Set True for JSON logging


class AppConfig(BaseSettings):
    """Main application configuration aggregating all sub-configs.

    Sub-configurations can be accessed via attributes:

        config = get_config()
        print(config.transit.backend)
        print(config.nlp.match_threshold)

    Environment variables prefixed with VT_.
    """

    model_config = SettingsConfigDict(env_prefix="VT_")

    nlp: NLPConfig = Field(default_factory=NLPConfig)
    transit: TransitConfig = Field(default_factory=TransitConfig)
    geolocation: GeolocationConfig = Field(default_factory=GeolocationConfig)
    asr: ASRConfig = Field(default_factory=ASRConfig)
    retry: RetryConfig = Field(default_factory=RetryConfig)
    observability: ObservabilityConfig = Field(default_factory=ObservabilityConfig)


@lru_cache(maxsize=1)
def get_config() -> AppConfig:
    """Get the singleton application configuration.

    Configuration is loaded once and cached. To reload configuration
    (e.g., in tests), use reset_config() first.

    Returns:
        The application configuration instance.
    """
    return AppConfig()


def reset_config() -> None:
    """Reset the configuration cache.

    Call this in tests to ensure a fresh configuration is loaded.
    """
    get_config.cache_clear()
