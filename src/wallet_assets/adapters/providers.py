"""Status-aware retries and a circuit breaker for the node, matcher and market data APIs.

Transport errors and 5xx answers are retried with exponential backoff and
count against the upstream's breaker. A 4xx answer means the upstream is
healthy and the request itself is wrong (an unknown asset id, a bad pair),
so it is raised on the spot and the breaker is left alone.
"""

import asyncio
import logging
import urllib.error
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Client statuses that describe a transient condition rather than a bad request
TRANSIENT_CLIENT_STATUSES = frozenset({408, 425, 429})


class CircuitState(Enum):
    CLOSED = "closed"
    OPEN = "open"
    HALF_OPEN = "half_open"


def is_retryable(exc: BaseException) -> bool:
    """Tell whether ``exc`` is worth another attempt against the same upstream.

    ``HTTPError`` is checked first since it is also an ``OSError``.
    """
    if isinstance(exc, urllib.error.HTTPError):
        return exc.code >= 500 or exc.code in TRANSIENT_CLIENT_STATUSES
    return True


@dataclass
class RetryConfig:
    """Backoff policy for one upstream.

    Attributes:
        max_attempts: Attempts per request, the first one included
        backoff_factor: Multiplier applied to the delay after each failed attempt
        initial_delay_seconds: Delay before the second attempt
        max_delay_seconds: Upper bound of any single delay
    """

    max_attempts: int = 3
    backoff_factor: float = 2.0
    initial_delay_seconds: float = 1.0
    max_delay_seconds: float = 10.0

    def delay_after(self, attempt: int) -> float:
        """Seconds to wait after the zero-based ``attempt`` failed."""
        return min(
            self.initial_delay_seconds * self.backoff_factor**attempt, self.max_delay_seconds
        )


class CircuitBreaker:
    """Stops calling an upstream after ``failure_threshold`` failed requests in a row.

    Once open, requests are rejected until ``recovery_timeout_seconds`` have
    passed since the last failure; the next request then goes through as a
    trial (half-open) and its outcome closes or reopens the circuit.
    """

    def __init__(self, failure_threshold: int = 5, recovery_timeout_seconds: int = 60):
        self.failure_threshold = failure_threshold
        self.recovery_timeout_seconds = recovery_timeout_seconds
        self.failure_count = 0
        self.state = CircuitState.CLOSED
        self.last_failure_time: datetime | None = None

    def record_success(self) -> None:
        if self.state is not CircuitState.CLOSED:
            logger.info("Circuit breaker: closed after successful trial request")
        self.failure_count = 0
        self.state = CircuitState.CLOSED

    def record_failure(self) -> None:
        self.failure_count += 1
        self.last_failure_time = datetime.now()

        if self.state is CircuitState.HALF_OPEN or self.failure_count >= self.failure_threshold:
            self.state = CircuitState.OPEN
            logger.warning(f"Circuit breaker: open after {self.failure_count} failures")
        else:
            logger.debug(f"Circuit breaker: failure {self.failure_count}/{self.failure_threshold}")

    def can_attempt(self) -> bool:
        if self.state is not CircuitState.OPEN:
            return True

        if self.last_failure_time is None:
            return False
        elapsed = (datetime.now() - self.last_failure_time).total_seconds()
        if elapsed < self.recovery_timeout_seconds:
            return False

        self.state = CircuitState.HALF_OPEN
        logger.info("Circuit breaker: half-open, letting a trial request through")
        return True


async def fetch_with_retry(
    fetch_func: Callable[[], Awaitable[T]],
    retry_config: RetryConfig,
    operation_name: str = "fetch",
    retryable: Callable[[BaseException], bool] = is_retryable,
) -> T:
    """Await ``fetch_func`` until it succeeds, backing off between attempts.

    Args:
        fetch_func: Async callable issuing one request
        retry_config: Backoff policy
        operation_name: Label used in log messages
        retryable: Classifies a failure; ``False`` re-raises it immediately

    Raises:
        Exception: The first non-retryable error, or the last error once
            ``max_attempts`` is exhausted
    """
    if retry_config.max_attempts < 1:
        raise ValueError(f"{operation_name}: max_attempts must be at least 1")

    attempt = 0
    while True:
        try:
            result = await fetch_func()
        except Exception as e:
            if not retryable(e):
                logger.debug(f"{operation_name}: not retrying {e}")
                raise
            if attempt + 1 >= retry_config.max_attempts:
                logger.error(
                    f"{operation_name}: giving up after {retry_config.max_attempts} attempts: {e}"
                )
                raise

            delay = retry_config.delay_after(attempt)
            attempt += 1
            logger.warning(
                f"{operation_name}: attempt {attempt}/{retry_config.max_attempts} failed, "
                f"retrying in {delay:.1f}s: {e}"
            )
            await asyncio.sleep(delay)
            continue

        if attempt > 0:
            logger.info(f"{operation_name}: succeeded on attempt {attempt + 1}")
        return result


class ResilientCaller:
    """Sends every request to one upstream through its breaker and retry policy."""

    def __init__(
        self,
        name: str,
        retry_config: RetryConfig | None = None,
        circuit_breaker: CircuitBreaker | None = None,
        retryable: Callable[[BaseException], bool] = is_retryable,
    ):
        self.name = name
        self.retry_config = retry_config or RetryConfig()
        self.circuit_breaker = circuit_breaker or CircuitBreaker()
        self.retryable = retryable

    async def call(self, fetch_func: Callable[[], Awaitable[T]], operation_name: str) -> T:
        """Run ``fetch_func`` unless the circuit is open.

        Only retryable failures count against the breaker; a rejected
        request leaves its state as it was.

        Raises:
            RuntimeError: If the circuit is open
            Exception: Whatever ``fetch_func`` raised last
        """
        if not self.circuit_breaker.can_attempt():
            raise RuntimeError(f"{self.name}: Circuit breaker is OPEN, rejecting request")

        try:
            result = await fetch_with_retry(
                fetch_func,
                self.retry_config,
                operation_name=f"{self.name}.{operation_name}",
                retryable=self.retryable,
            )
        except Exception as e:
            if self.retryable(e):
                self.circuit_breaker.record_failure()
            raise

        self.circuit_breaker.record_success()
        return result

    def get_health_status(self) -> dict[str, Any]:
        breaker = self.circuit_breaker
        return {
            "upstream": self.name,
            "circuit_state": breaker.state.value,
            "failure_count": breaker.failure_count,
            "last_failure": breaker.last_failure_time.isoformat()
            if breaker.last_failure_time
            else None,
        }
