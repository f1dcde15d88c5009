"""Transit port - Abstraction over the remote journey planner.

The journey-planning backend has been swapped several times (HAFAS via
a community REST wrapper, the official DB API, ...). Everything above
the adapters depends on this protocol only, never on a backend's
response shape.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, Sequence

if TYPE_CHECKING:
    from ..domain.models import GeoLocation, Journey, JourneyOptions, StopLocation


class TransitApiPort(Protocol):
    """Port for journey-planning backends.

    Implementations:
    - adapters/transit/db_rest_adapter.py (v6.db.transport.rest)
    - adapters/transit/db_api_adapter.py (apis.deutschebahn.com)

    All methods raise TransitApiError when the backend cannot be reached
    or answers with an error status.
    """

    @property
    def name(self) -> str:
        """Short backend name used in logs and errors."""
        ...

    def search_locations(self, query: str) -> Sequence[StopLocation]:
        """Search stations by name.

        Args:
            query: Free-text station or place name.

        Returns:
            Stations and stops only, in backend relevance order.
        """
        ...

    def search_nearby(self, location: GeoLocation, radius_m: int) -> Sequence[StopLocation]:
        """Search stations around a position.

        Args:
            location: Centre of the search.
            radius_m: Search radius in meters.

        Returns:
            Stations and stops, nearest first.
        """
        ...

    def search_journeys(
        self,
        origin_id: str,
        destination_id: str,
        options: JourneyOptions,
    ) -> Sequence[Journey]:
        """Search journeys between two stations.

        Args:
            origin_id: Backend station identifier of the start.
            destination_id: Backend station identifier of the destination.
            options: Departure time, accessibility profile, result count.

        Returns:
            At most ``options.results`` journeys, soonest first.
        """
        ...
