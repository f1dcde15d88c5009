"""Small JSON-over-HTTP helper shared by the transit adapters.

Wraps a ``requests.Session`` so every backend gets the same timeout,
User-Agent and error translation: transport failures, error statuses
and undecodable bodies all surface as TransitApiError.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Mapping, Optional

import requests

from ...domain.errors import TransitApiError


def parse_iso_datetime(value: Optional[str]) -> Optional[datetime]:
    """Parse an ISO-8601 timestamp, tolerating a trailing 'Z'."""
    if not value:
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None


@dataclass
class JsonHttpClient:
    """GET requests returning decoded JSON.

    Attributes:
        backend: Backend name reported in errors
        timeout_seconds: Per-request timeout
        user_agent: User-Agent header sent with every request
        session: Shared requests session (connection pooling)
    """

    backend: str
    timeout_seconds: float = 10.0
    user_agent: str = "voice-transit"
    session: requests.Session = field(default_factory=requests.Session, repr=False)

    _logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(__name__)

    def get_json(
        self,
        url: str,
        params: Optional[Mapping[str, Any]] = None,
        headers: Optional[Mapping[str, str]] = None,
    ) -> Any:
        """GET ``url`` and return the decoded JSON body.

        Raises:
            TransitApiError: On network errors, HTTP errors or invalid JSON.
        """
        request_headers: Dict[str, str] = {"User-Agent": self.user_agent}
        if headers:
            request_headers.update(headers)

        try:
            response = self.session.get(
                url,
                params=dict(params or {}),
                headers=request_headers,
                timeout=self.timeout_seconds,
            )
        except requests.RequestException as e:
            self._logger.warning(
                "Transit request failed",
                extra={"backend": self.backend, "url": url, "error": str(e)},
            )
            raise TransitApiError(
                f"{self.backend} request failed",
                backend=self.backend,
                cause=e,
            )

        if not response.ok:
            self._logger.warning(
                "Transit backend returned an error status",
                extra={
                    "backend": self.backend,
                    "url": url,
                    "status": response.status_code,
                    "body": response.text[:200],
                },
            )
            raise TransitApiError(
                f"{self.backend} error: {response.status_code} {response.reason}",
                backend=self.backend,
                status_code=response.status_code,
            )

        try:
            return response.json()
        except ValueError as e:
            raise TransitApiError(
                f"{self.backend} returned invalid JSON",
                backend=self.backend,
                status_code=response.status_code,
                cause=e,
            )
