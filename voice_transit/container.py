"""Dependency injection container.

This module provides a simple DI container without external frameworks.
It allows registering and resolving dependencies for the application.

Adapters are instantiated on first use, so building the default
container never touches the network or loads a speech model.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional, TypeVar

from .config import AppConfig, get_config

T = TypeVar("T")


@dataclass
class Container:
    """Dependency injection container.

    Usage:
        # Production
        container = Container.create_default()
        planner = container.resolve(TripPlannerService)

        # Testing
        container = Container()
        container.register(TransitApiPort, lambda: FakeTransit())
        transit = container.resolve(TransitApiPort)

    Attributes:
        config: Application configuration
    """

    config: AppConfig = field(default_factory=get_config)

    _factories: Dict[type[Any], Callable[[], Any]] = field(
        default_factory=dict, repr=False
    )
    _singletons: Dict[type[Any], Any] = field(default_factory=dict, repr=False)
    _singleton_types: set[type[Any]] = field(default_factory=set, repr=False)
    _lock: threading.RLock = field(default_factory=threading.RLock, repr=False)

    def register(
        self,
        port_type: type[Any],
        factory: Callable[[], Any],
        singleton: bool = True,
    ) -> None:
        """Register a factory for a port type.

        Args:
            port_type: The type (usually a Protocol) to register.
            factory: A callable that creates instances of the type.
            singleton: If True, only one instance is created.
        """
        with self._lock:
            self._factories[port_type] = factory
            if singleton:
                self._singleton_types.add(port_type)
            else:
                self._singleton_types.discard(port_type)
            self._singletons.pop(port_type, None)

    def resolve(self, port_type: type[Any]) -> Any:
        """Resolve an instance of a port type.

        Raises:
            KeyError: If the type is not registered.
        """
        with self._lock:
            if port_type not in self._factories:
                raise KeyError(f"Type not registered: {port_type}")

            if port_type in self._singleton_types:
                if port_type not in self._singletons:
                    self._singletons[port_type] = self._factories[port_type]()
                return self._singletons[port_type]

            return self._factories[port_type]()

    def is_registered(self, port_type: type[Any]) -> bool:
        return port_type in self._factories

    def clear_singletons(self) -> None:
        """Clear all cached singletons."""
        with self._lock:
            self._singletons.clear()

    def clear_all(self) -> None:
        """Clear all registrations and singletons."""
        with self._lock:
            self._factories.clear()
            self._singletons.clear()
            self._singleton_types.clear()

    @classmethod
    def create_default(cls, config: Optional[AppConfig] = None) -> Container:
        """Create a container with default production bindings.

        Bindings:
            CachePort: InMemoryCache, or NullCache when caching is disabled
            TransitApiPort: adapter selected by ``transit.backend``
            PositionProviderPort: fixed coordinates if configured, else
                Nominatim if an address is configured, else None
            ASRModelPort: WhisperASRAdapter
            RetryPolicy, LocationResolverService, TripPlannerService

        Args:
            config: Optional configuration override.
        """
        from .adapters.asr import WhisperASRAdapter
        from .adapters.cache import InMemoryCache, NullCache
        from .adapters.geolocation import FixedPositionProvider, NominatimPositionProvider
        from .adapters.transit import DbApiTransitAdapter, DbRestTransitAdapter
        from .ports.asr import ASRModelPort
        from .ports.cache import CachePort
        from .ports.geolocation import PositionProviderPort
        from .ports.transit import TransitApiPort
        from .services import LocationResolverService, RetryPolicy, TripPlannerService

        config = config or get_config()
        container = cls(config=config)

        # Cache (shared across adapters)
        transit_config = config.transit
        cache: CachePort[Any]
        if transit_config.cache_enabled:
            cache = InMemoryCache(
                default_ttl_seconds=transit_config.cache_ttl_seconds,
                max_size=transit_config.cache_max_size,
                name="global",
            )
        else:
            cache = NullCache()
        container.register(CachePort, lambda: cache)

        def create_transit() -> TransitApiPort:
            if transit_config.backend == "db_api":
                return DbApiTransitAdapter(transit_config, cache)
            return DbRestTransitAdapter(transit_config, cache)

        container.register(TransitApiPort, create_transit)

        def create_position_provider() -> Optional[PositionProviderPort]:
            geo = config.geolocation
            if geo.has_coordinates:
                return FixedPositionProvider(geo.latitude, geo.longitude)  # type: ignore[arg-type]
            if geo.address:
                return NominatimPositionProvider(geo.address, geo, cache)
            return None

        container.register(PositionProviderPort, create_position_provider)

        container.register(ASRModelPort, lambda: WhisperASRAdapter(config.asr))
        container.register(RetryPolicy, lambda: RetryPolicy.from_config(config.retry))

        container.register(
            LocationResolverService,
            lambda: LocationResolverService(
                transit=container.resolve(TransitApiPort),
                retry_policy=container.resolve(RetryPolicy),
                nearby_radius_m=transit_config.nearby_radius_m,
                match_limit=config.nlp.match_limit,
                match_threshold=config.nlp.match_threshold,
                word_match_threshold=config.nlp.word_match_threshold,
            ),
        )

        def create_trip_planner() -> TripPlannerService:
            return TripPlannerService(
                transit=container.resolve(TransitApiPort),
                resolver=container.resolve(LocationResolverService),
                position_provider=container.resolve(PositionProviderPort),
                retry_policy=container.resolve(RetryPolicy),
                default_origin=config.nlp.default_origin,
                max_journeys=transit_config.max_journeys,
            )

        container.register(TripPlannerService, create_trip_planner)

        return container


# Global default container (lazy initialized)
_default_container: Optional[Container] = None
_container_lock = threading.Lock()


def get_container() -> Container:
    """Get the default application container."""
    global _default_container
    if _default_container is None:
        with _container_lock:
            if _default_container is None:
                _default_container = Container.create_default()
    return _default_container


def reset_container() -> None:
    """Reset the default container.

    Call this in tests to ensure a fresh container.
    """
    global _default_container
    with _container_lock:
        if _default_container is not None:
            _default_container.clear_all()
        _default_container = None
