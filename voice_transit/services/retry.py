"""Bounded retries for remote calls.

Transit lookups and speech transcription both go over unreliable links.
RetryPolicy wraps a single call with tenacity: exponential backoff, a
hard attempt limit, and the final exception re-raised unchanged so the
caller's error handling sees the real failure.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Tuple, Type, TypeVar

from tenacity import (
    Retrying,
    before_sleep_log,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from ..config import RetryConfig
from ..domain.errors import ASRError, TransitApiError

R = TypeVar("R")

logger = logging.getLogger(__name__)


def _is_retryable(retry_on: Tuple[Type[BaseException], ...]) -> Callable[[BaseException], bool]:
    def predicate(error: BaseException) -> bool:
        if not isinstance(error, retry_on):
            return False
        # 4xx answers will not change on a second try
        if isinstance(error, TransitApiError):
            return error.is_transient
        if isinstance(error, ASRError):
            return not error.is_unreadable_audio
        return True

    return predicate


@dataclass(frozen=True)
class RetryPolicy:
    """Retry settings shared by the services.

    Attributes:
        max_attempts: Total attempts per call, including the first
        initial_wait_seconds: Backoff multiplier (0 disables sleeping)
        max_wait_seconds: Upper bound for a single backoff sleep
        max_lookups: Upper bound on name variants tried per location search
    """

    max_attempts: int = 3
    initial_wait_seconds: float = 0.5
    max_wait_seconds: float = 4.0
    max_lookups: int = 12

    @classmethod
    def from_config(cls, config: RetryConfig) -> "RetryPolicy":
        return cls(
            max_attempts=config.max_attempts,
            initial_wait_seconds=config.initial_wait_seconds,
            max_wait_seconds=config.max_wait_seconds,
            max_lookups=config.max_lookups,
        )

    def call(
        self,
        fn: Callable[..., R],
        *args: Any,
        retry_on: Tuple[Type[BaseException], ...] = (TransitApiError,),
        **kwargs: Any,
    ) -> R:
        """Call ``fn(*args, **kwargs)``, retrying on the given exception types.

        Args:
            fn: The callable to invoke.
            retry_on: Exception types that trigger another attempt.
                Non-transient TransitApiErrors (4xx) and ASRErrors for an
                unreadable recording are never retried.

        Returns:
            Whatever ``fn`` returns.

        Raises:
            The last exception raised by ``fn`` once attempts are exhausted,
            or immediately for exceptions not covered by ``retry_on``.
        """
        retrying = Retrying(
            stop=stop_after_attempt(self.max_attempts),
            wait=wait_exponential(
                multiplier=self.initial_wait_seconds, max=self.max_wait_seconds
            ),
            retry=retry_if_exception(_is_retryable(retry_on)),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True,
        )
        return retrying(fn, *args, **kwargs)
