"""Transit adapters - Implementations of TransitApiPort.

Available implementations:
- DbRestTransitAdapter: community HAFAS wrapper (v6.db.transport.rest)
- DbApiTransitAdapter: official DB Fahrplan Plus API
"""

from .db_api_adapter import DbApiTransitAdapter
from .db_rest_adapter import DbRestTransitAdapter
from .http_client import JsonHttpClient

__all__ = ["DbRestTransitAdapter", "DbApiTransitAdapter", "JsonHttpClient"]
