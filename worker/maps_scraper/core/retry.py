"""Error taxonomy and the retry policy wrapped around each listing."""

from __future__ import annotations

import asyncio
import enum
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional, TypeVar

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError
from tenacity import AsyncRetrying, RetryCallState, retry_if_exception, stop_after_attempt, wait_exponential

from maps_scraper.core.config import Settings

logger = logging.getLogger(__name__)

T = TypeVar("T")

TRANSPORT_MARKERS = (
    "net::ERR_",
    "NS_ERROR_",
    "SSL_ERROR",
    "ERR_NAME_NOT_RESOLVED",
    "ECONNREFUSED",
    "ECONNRESET",
)


class ScraperError(RuntimeError):
    """Base class for scraping failures."""


class StructuralError(ScraperError):
    """Raised when a page loaded but its expected content is missing."""


class ErrorKind(enum.Enum):
    TRANSPORT = "transport"
    STRUCTURAL = "structural"
    UNCLASSIFIED = "unclassified"

    @property
    def retryable(self) -> bool:
        return self is not ErrorKind.UNCLASSIFIED


def classify_error(exc: BaseException) -> ErrorKind:
    if isinstance(exc, StructuralError):
        return ErrorKind.STRUCTURAL
    if isinstance(exc, PlaywrightTimeoutError):
        return ErrorKind.TRANSPORT
    if isinstance(exc, PlaywrightError):
        message = str(exc)
        if any(marker in message for marker in TRANSPORT_MARKERS):
            return ErrorKind.TRANSPORT
    return ErrorKind.UNCLASSIFIED


@dataclass(frozen=True)
class RetryPolicy:
    """Bounded retries with exponential backoff, independent of what they wrap.

    ``retries`` counts re-attempts, so an operation runs at most ``retries + 1``
    times. Waits grow from ``min_backoff_s`` by ``factor`` and are capped at
    ``max_backoff_s``.
    """

    retries: int = 3
    min_backoff_s: float = 30.0
    max_backoff_s: float = 60.0
    factor: float = 2.0

    @classmethod
    def from_settings(cls, settings: Settings) -> "RetryPolicy":
        return cls(
            retries=settings.retry_limit,
            min_backoff_s=settings.retry_min_backoff_ms / 1000,
            max_backoff_s=settings.retry_max_backoff_ms / 1000,
            factor=settings.retry_backoff_factor,
        )

    async def call(
        self,
        operation: Callable[[], Awaitable[T]],
        *,
        classify: Callable[[BaseException], ErrorKind] = classify_error,
        on_retry: Optional[Callable[[BaseException, int, int], Any]] = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> T:
        """Run ``operation`` until it succeeds, fails terminally, or runs out of retries.

        The last exception is re-raised in both failure cases. ``on_retry``
        receives the error, the attempt that failed and the retries left.
        """

        def before_sleep(state: RetryCallState) -> None:
            if on_retry is None or state.outcome is None:
                return
            on_retry(state.outcome.exception(), state.attempt_number, self.retries - state.attempt_number + 1)

        retrying = AsyncRetrying(
            stop=stop_after_attempt(self.retries + 1),
            wait=wait_exponential(
                multiplier=self.min_backoff_s,
                exp_base=self.factor,
                min=self.min_backoff_s,
                max=self.max_backoff_s,
            ),
            retry=retry_if_exception(lambda exc: classify(exc).retryable),
            before_sleep=before_sleep,
            sleep=sleep,
            reraise=True,
        )
        return await retrying(operation)
