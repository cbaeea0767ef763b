"""
Retry policy wrapped around the single-attempt transport.
"""

import dataclasses
import logging
import time
from typing import Callable

from tenacity import (
    RetryCallState,
    Retrying,
    retry_if_exception_type,
    retry_if_result,
    stop_after_attempt,
    wait_fixed,
)

from .exceptions import NetworkError, VaultError
from .transport import RawResponse

logger = logging.getLogger(__name__)


def is_retryable_status(status: int) -> bool:
    """Server-side failures are worth another attempt; client errors are not."""
    return 500 <= status <= 599


class RetryPolicy:
    """Re-issues a request on network failures and 5xx responses."""

    def __init__(
        self,
        max_retries: int = 0,
        retry_interval_milliseconds: int = 1000,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """
        Initialize the retry policy.

        Args:
            max_retries: Additional attempts after the first one
            retry_interval_milliseconds: Fixed pause between attempts
            sleep: Blocking sleep used between attempts
        """
        if max_retries < 0:
            raise ValueError("max_retries must be >= 0")
        self.max_retries = max_retries
        self.retry_interval_milliseconds = retry_interval_milliseconds
        self._sleep = sleep

    @property
    def max_attempts(self) -> int:
        return self.max_retries + 1

    def call(self, send: Callable[[], RawResponse], description: str = "request") -> RawResponse:
        """
        Run ``send`` until it succeeds, fails permanently, or attempts run out.

        A 5xx response left over after the last attempt is returned (tagged
        with the attempt count) so the caller can map it to an error. A
        ``NetworkError`` from the last attempt is re-raised with ``attempts`` set.
        """
        attempts = 0

        def attempt() -> RawResponse:
            nonlocal attempts
            attempts += 1
            try:
                response = send()
            except VaultError as e:
                e.attempts = attempts
                raise
            return dataclasses.replace(response, attempts=attempts)

        def log_retry(state: RetryCallState) -> None:
            outcome = state.outcome
            if outcome.failed:
                reason = type(outcome.exception()).__name__
            else:
                reason = f"HTTP {outcome.result().status}"
            logger.warning(
                f"{description} failed ({reason}) on attempt "
                f"{state.attempt_number}/{self.max_attempts}, retrying"
            )

        retrying = Retrying(
            stop=stop_after_attempt(self.max_attempts),
            wait=wait_fixed(self.retry_interval_milliseconds / 1000.0),
            retry=(
                retry_if_exception_type(NetworkError)
                | retry_if_result(lambda response: is_retryable_status(response.status))
            ),
            before_sleep=log_retry,
            retry_error_callback=lambda state: state.outcome.result(),
            sleep=self._sleep,
        )
        return retrying(attempt)
