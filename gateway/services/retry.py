"""
RetryService - Backoff-and-retry wrapper around single outbound attempts.

Failures are classified as retryable (transient network errors, retryable
status codes, timeouts) or terminal. Retryable failures are retried with
fixed, linear or exponential backoff plus up to 10% jitter, capped at the
policy's max delay.

One instance is shared by the whole process so its counters aggregate
across adapters; each call may supply the adapter's own policy.
"""

import asyncio
import random
import threading
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, TypeVar

from loguru import logger

from gateway.services.models import BackoffStrategy, RetryPolicy

T = TypeVar("T")

JITTER_RATIO = 0.1


def _status_of(error: BaseException) -> int | None:
    status = getattr(error, "status_code", None)
    if isinstance(status, int):
        return status
    response = getattr(error, "response", None)
    status = getattr(response, "status_code", None)
    return status if isinstance(status, int) else None


class RetryService:
    """
    Executes async attempts under a retry policy and tracks outcomes.

    Usage:
        retry = RetryService(RetryPolicy(max_retries=2))

        result = await retry.execute(
            lambda: transport.send(request),
            policy=descriptor.retry,
            label="GET /ping",
        )
    """

    def __init__(
        self,
        default_policy: RetryPolicy | None = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
        rng: random.Random | None = None,
    ):
        self._default_policy = default_policy or RetryPolicy()
        self._sleep = sleep
        self._rng = rng or random.Random()
        self._lock = threading.Lock()
        self._stats = RetryStats()

        logger.info(
            f"Retry service initialized with {self._default_policy.max_retries} retries, "
            f"{self._default_policy.backoff_strategy.value} backoff"
        )

    @property
    def default_policy(self) -> RetryPolicy:
        return self._default_policy

    def backoff_delay(self, retry_count: int, policy: RetryPolicy | None = None) -> float:
        """Delay in seconds for the given 1-indexed retry, before jitter and cap."""
        policy = policy or self._default_policy

        if policy.backoff_strategy == BackoffStrategy.LINEAR:
            return policy.base_delay * retry_count
        if policy.backoff_strategy == BackoffStrategy.EXPONENTIAL:
            return policy.base_delay * (2 ** (retry_count - 1))
        return policy.base_delay

    def calculate_delay(self, retry_count: int, policy: RetryPolicy | None = None) -> float:
        """Backoff delay with jitter, clamped to the policy's max delay."""
        policy = policy or self._default_policy

        delay = self.backoff_delay(retry_count, policy)
        delay += delay * self._rng.uniform(0, JITTER_RATIO)
        return min(delay, policy.max_delay)

    def is_retryable(self, error: BaseException, policy: RetryPolicy | None = None) -> bool:
        """Classify a failed attempt as transient or terminal."""
        policy = policy or self._default_policy

        if not policy.enabled or isinstance(error, asyncio.CancelledError):
            return False

        code = getattr(error, "code", None)
        if isinstance(code, str) and code in policy.retryable_error_codes:
            return True

        # A known status is authoritative; the message may quote the body
        status = _status_of(error)
        if status is not None:
            return status in policy.retryable_status_codes

        message = str(error).lower()
        return "timeout" in message or "timed out" in message

    async def execute(
        self,
        attempt: Callable[[], Awaitable[T]],
        policy: RetryPolicy | None = None,
        label: str = "request",
    ) -> T:
        """
        Run ``attempt`` until it succeeds, fails terminally, or retries run out.

        Args:
            attempt: Zero-argument coroutine factory, called once per attempt
            policy: Retry policy to apply (service default if omitted)
            label: Description used in log messages

        Returns:
            The first successful result

        Raises:
            The error of the final attempt
        """
        policy = policy or self._default_policy
        retries = 0

        while True:
            try:
                result = await attempt()
            except asyncio.CancelledError:
                self._record_failure(exhausted=False)
                logger.warning(f"{label} cancelled after {retries} retries")
                raise
            except Exception as error:
                retryable = self.is_retryable(error, policy)
                if not retryable or retries >= policy.max_retries:
                    exhausted = retryable and retries > 0
                    self._record_failure(exhausted=exhausted)
                    if exhausted:
                        logger.error(
                            f"Max retries ({retries}) exceeded for {label}. "
                            f"Final error: {error}"
                        )
                    raise

                retries += 1
                delay = self.calculate_delay(retries, policy)
                self._record_retry()
                logger.warning(
                    f"Retry attempt {retries} for {label} after {delay:.3f}s delay. "
                    f"Error: {error}"
                )
            else:
                self._record_success(retried=retries > 0)
                return result

            try:
                await self._sleep(delay)
            except asyncio.CancelledError:
                self._record_failure(exhausted=False)
                logger.warning(f"{label} cancelled during backoff")
                raise

    def _record_success(self, retried: bool) -> None:
        with self._lock:
            self._stats.total_requests += 1
            self._stats.successful_requests += 1
            if retried:
                self._stats.retry_successes += 1

    def _record_failure(self, exhausted: bool) -> None:
        with self._lock:
            self._stats.total_requests += 1
            self._stats.failed_requests += 1
            if exhausted:
                self._stats.retry_failures += 1

    def _record_retry(self) -> None:
        with self._lock:
            self._stats.retry_attempts += 1

    def get_stats(self) -> "RetryStats":
        """Get a snapshot of retry statistics."""
        with self._lock:
            return RetryStats(**vars(self._stats))

    def reset_stats(self) -> None:
        """Zero all counters."""
        with self._lock:
            self._stats = RetryStats()
        logger.info("Retry statistics reset")


@dataclass
class RetryStats:
    """Retry statistics."""

    total_requests: int = 0
    successful_requests: int = 0
    failed_requests: int = 0
    retry_attempts: int = 0
    retry_successes: int = 0
    retry_failures: int = 0

    @property
    def average_retries_per_request(self) -> float:
        if self.total_requests == 0:
            return 0.0
        return round(self.retry_attempts / self.total_requests, 2)

    @property
    def success_rate(self) -> float:
        """Success rate as a percentage, rounded to 2 decimals."""
        if self.total_requests == 0:
            return 0.0
        return round(self.successful_requests / self.total_requests * 100, 2)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "total_requests": self.total_requests,
            "successful_requests": self.successful_requests,
            "failed_requests": self.failed_requests,
            "retry_attempts": self.retry_attempts,
            "retry_successes": self.retry_successes,
            "retry_failures": self.retry_failures,
            "average_retries_per_request": self.average_retries_per_request,
            "success_rate": self.success_rate,
        }
