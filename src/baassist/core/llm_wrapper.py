"""Completion client wrapper adding retry, circuit breaking and call logging."""

import time
from typing import Optional

from baassist.core.errors import ProviderError
from baassist.core.llm_base import CompletionClient
from baassist.core.logging import get_logger
from baassist.core.retry import CircuitBreaker, CircuitBreakerError, retry_with_circuit_breaker

logger = get_logger("baassist.llm_wrapper")


def _is_retryable(error: Exception) -> bool:
    return isinstance(error, ProviderError) and error.retryable


class ResilientCompletionClient:
    """
    Wraps a completion client with bounded retry and a circuit breaker.

    Only ProviderErrors flagged retryable (timeouts, connection errors,
    HTTP 429 and 5xx) are retried, with exponential backoff and jitter.
    While the breaker is open, calls fail fast with ProviderError.
    """

    def __init__(
        self,
        client: CompletionClient,
        max_retries: int = 2,
        initial_delay: float = 1.0,
        max_delay: float = 10.0,
        circuit_breaker: Optional[CircuitBreaker] = None,
    ):
        """
        Initialize the wrapper.

        Args:
            client: The underlying completion client
            max_retries: Retries after the first attempt (0 disables retry)
            initial_delay: Seconds before the first retry
            max_delay: Upper bound on the backoff delay
            circuit_breaker: Breaker shared by all calls through this wrapper
        """
        self.client = client
        self.provider = getattr(client, "provider", type(client).__name__)
        self.model = getattr(client, "model", "default")
        self.circuit_breaker = circuit_breaker or CircuitBreaker(expected_exception=ProviderError)
        self._complete_with_retry = retry_with_circuit_breaker(
            circuit_breaker=self.circuit_breaker,
            max_retries=max_retries,
            initial_delay=initial_delay,
            max_delay=max_delay,
            retryable_exceptions=(ProviderError,),
            should_retry=_is_retryable,
        )(self._attempt)

    def _attempt(self, instruction: str) -> str:
        start_time = time.time()
        try:
            response = self.client.complete(instruction)
        except ProviderError as e:
            logger.error(
                f"LLM call failed: {self.provider}/{self.model}",
                context={
                    "provider": self.provider,
                    "model": self.model,
                    "error": str(e),
                    "error_type": type(e).__name__,
                    "retryable": e.retryable,
                    "latency_ms": (time.time() - start_time) * 1000,
                    "prompt_length": len(instruction),
                },
            )
            raise

        logger.log_llm_call(
            provider=self.provider,
            model=self.model,
            prompt=instruction,
            response=response,
            latency_ms=(time.time() - start_time) * 1000,
        )
        return response

    def complete(self, instruction: str) -> str:
        """
        Send one instruction, retrying transient provider failures.

        Raises:
            ProviderError: If every attempt failed, the failure is not
                retryable, or the circuit is open
        """
        try:
            return self._complete_with_retry(instruction)
        except CircuitBreakerError as e:
            raise ProviderError(f"{self.provider} provider unavailable: {e}") from e

    def close(self) -> None:
        """Close the underlying client if it holds resources."""
        close = getattr(self.client, "close", None)
        if callable(close):
            close()
