"""Retry with exponential backoff and circuit breaking for provider calls."""

import functools
import random
import threading
import time
from enum import Enum
from typing import Any, Callable, Optional, TypeVar

from baassist.core.logging import get_logger

T = TypeVar("T")

logger = get_logger("baassist.retry")

JITTER_FRACTION = 0.1


class CircuitBreakerError(Exception):
    """The breaker is open; the call was not attempted."""

    pass


class BreakerState(str, Enum):
    CLOSED = "closed"
    OPEN = "open"
    HALF_OPEN = "half_open"


class CircuitBreaker:
    """
    Fails fast once a provider has failed repeatedly.

    After ``failure_threshold`` consecutive failures the breaker opens and
    every call raises CircuitBreakerError without reaching the provider. Once
    ``recovery_timeout`` seconds have passed a single trial call is let
    through: success closes the breaker, failure opens it again. Other
    callers are rejected while that trial is in flight.

    One breaker is shared by all request threads of a process.
    """

    def __init__(
        self,
        failure_threshold: int = 5,
        recovery_timeout: float = 60.0,
        expected_exception: type[Exception] = Exception,
    ):
        """
        Args:
            failure_threshold: Consecutive failures that open the breaker
            recovery_timeout: Seconds the breaker stays open before a trial call
            expected_exception: Only this exception type counts as a failure
        """
        self.failure_threshold = failure_threshold
        self.recovery_timeout = recovery_timeout
        self.expected_exception = expected_exception

        self.state = BreakerState.CLOSED
        self.failure_count = 0
        self.last_failure_time: Optional[float] = None
        self._trial_in_flight = False
        self._lock = threading.Lock()

    def _cooled_down(self) -> bool:
        if self.last_failure_time is None:
            return True
        return time.monotonic() - self.last_failure_time > self.recovery_timeout

    def _admit(self) -> None:
        with self._lock:
            if self.state == BreakerState.CLOSED:
                return
            if self.state == BreakerState.HALF_OPEN:
                if not self._trial_in_flight:
                    # Previous trial raised an uncounted exception.
                    self._trial_in_flight = True
                    return
                raise CircuitBreakerError("Circuit breaker is half-open; a trial call is in flight")
            if not self._cooled_down():
                raise CircuitBreakerError(
                    f"Circuit breaker is open after {self.failure_count} failures; "
                    f"retrying after {self.recovery_timeout}s"
                )
            self.state = BreakerState.HALF_OPEN
            self._trial_in_flight = True
            logger.info("Circuit breaker half-open, allowing a trial call")

    def _release_trial(self) -> None:
        with self._lock:
            self._trial_in_flight = False

    def _record_success(self) -> None:
        with self._lock:
            if self.state == BreakerState.HALF_OPEN:
                logger.info("Circuit breaker closed, trial call succeeded")
            self.state = BreakerState.CLOSED
            self.failure_count = 0
            self._trial_in_flight = False

    def _record_failure(self) -> None:
        with self._lock:
            self._trial_in_flight = False
            self.failure_count += 1
            self.last_failure_time = time.monotonic()
            tripped = self.failure_count >= self.failure_threshold
            if self.state == BreakerState.HALF_OPEN or tripped:
                if self.state != BreakerState.OPEN:
                    logger.warning(
                        f"Circuit breaker opened after {self.failure_count} failures",
                        context={"failure_count": self.failure_count},
                    )
                self.state = BreakerState.OPEN

    def call(self, func: Callable[..., T], *args: Any, **kwargs: Any) -> T:
        """
        Run ``func`` unless the breaker is open.

        Raises:
            CircuitBreakerError: If the breaker is open
        """
        self._admit()
        try:
            result = func(*args, **kwargs)
        except self.expected_exception:
            self._record_failure()
            raise
        except Exception:
            self._release_trial()
            raise
        self._record_success()
        return result


def backoff_delay(delay: float, jitter: bool = True) -> float:
    """Return ``delay`` plus up to 10% random jitter."""
    if not jitter:
        return delay
    return delay * (1 + JITTER_FRACTION * random.random())


def retry_with_circuit_breaker(
    circuit_breaker: Optional[CircuitBreaker] = None,
    max_retries: int = 3,
    initial_delay: float = 1.0,
    max_delay: float = 60.0,
    exponential_base: float = 2.0,
    jitter: bool = True,
    retryable_exceptions: tuple[type[Exception], ...] = (Exception,),
    should_retry: Optional[Callable[[Exception], bool]] = None,
) -> Callable[[Callable[..., T]], Callable[..., T]]:
    """
    Decorator retrying a call with exponential backoff behind a circuit breaker.

    The n-th retry waits ``initial_delay * exponential_base ** (n - 1)``
    seconds, capped at ``max_delay``, plus jitter. An open breaker is never
    retried.

    Args:
        circuit_breaker: Breaker guarding each attempt, if any
        max_retries: Attempts after the first one
        initial_delay: Wait before the first retry
        max_delay: Upper bound on any single wait
        exponential_base: Growth factor of the wait
        jitter: Add up to 10% random spread to each wait
        retryable_exceptions: Exception types eligible for retry
        should_retry: Predicate on a caught exception; False re-raises at once
    """

    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        name = getattr(func, "__name__", repr(func))

        def attempt_once(*args: Any, **kwargs: Any) -> T:
            if circuit_breaker is None:
                return func(*args, **kwargs)
            return circuit_breaker.call(func, *args, **kwargs)

        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> T:
            delay = initial_delay
            attempts = max_retries + 1
            for attempt in range(1, attempts + 1):
                try:
                    return attempt_once(*args, **kwargs)
                except CircuitBreakerError as e:
                    logger.error(f"{name} rejected: {e}", context={"function": name})
                    raise
                except retryable_exceptions as e:
                    if should_retry is not None and not should_retry(e):
                        raise
                    if attempt == attempts:
                        logger.error(
                            f"{name} failed after {attempts} attempts",
                            context={"function": name, "attempts": attempts, "error": str(e)},
                        )
                        raise
                    wait = backoff_delay(delay, jitter)
                    logger.warning(
                        f"{name} attempt {attempt}/{attempts} failed: {e}; retrying in {wait:.2f}s",
                        context={"function": name, "attempt": attempt, "delay": wait},
                    )
                    time.sleep(wait)
                    delay = min(delay * exponential_base, max_delay)
            raise AssertionError("unreachable")

        return wrapper

    return decorator
