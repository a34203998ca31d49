"""
Retry with Exponential Backoff for the ActorGate API Client

Wraps the whole request/response cycle of a logical call. Retryable
failures are repeated with an increasing, jittered delay until the policy's
attempt ceiling is reached; everything else is surfaced immediately.
"""

import logging
import random
import threading
import time
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Callable, FrozenSet, Optional, Tuple, TypeVar

from .errors import CallCancelledError, ClassifiedError, ErrorKind


T = TypeVar('T')

# 8 repeats after the first attempt
DEFAULT_MAX_ATTEMPTS = 9
# 9 repeats for request queue endpoints
REQUEST_QUEUE_MAX_ATTEMPTS = 10

DEFAULT_BASE_DELAY_MS = 500
DEFAULT_MAX_DELAY_MS = 256_000
DEFAULT_BACKOFF_MULTIPLIER = 2.0
DEFAULT_JITTER_MS = 500

DEFAULT_RETRYABLE_STATUS_CODES = frozenset({429, *range(500, 600)})
DEFAULT_RETRYABLE_KINDS = frozenset({
    ErrorKind.INVALID_RESPONSE_BODY,
    ErrorKind.NETWORK,
    ErrorKind.HTTP_STATUS,
    ErrorKind.TIMEOUT,
})


class CallState(Enum):
    """States of a logical call"""
    ATTEMPTING = "attempting"
    SUCCEEDED = "succeeded"
    RETRY_SCHEDULED = "retry_scheduled"
    FAILED = "failed"


@dataclass(frozen=True)
class RetryPolicy:
    """Immutable retry configuration shared by concurrent calls"""
    max_attempts: int = DEFAULT_MAX_ATTEMPTS
    base_delay_ms: float = DEFAULT_BASE_DELAY_MS
    max_delay_ms: float = DEFAULT_MAX_DELAY_MS
    backoff_multiplier: float = DEFAULT_BACKOFF_MULTIPLIER
    jitter_ms: float = DEFAULT_JITTER_MS
    retryable_status_codes: FrozenSet[int] = field(default=DEFAULT_RETRYABLE_STATUS_CODES)
    retryable_kinds: FrozenSet[ErrorKind] = field(default=DEFAULT_RETRYABLE_KINDS)

    def __post_init__(self):
        if self.max_attempts < 1:
            raise ValueError(f"max_attempts must be at least 1, got {self.max_attempts}")
        if self.base_delay_ms < 0 or self.max_delay_ms < 0 or self.jitter_ms < 0:
            raise ValueError("Delays and jitter must not be negative")
        if self.backoff_multiplier < 1:
            raise ValueError(f"backoff_multiplier must be at least 1, got {self.backoff_multiplier}")
        # Accept any iterable for the sets but store them frozen
        object.__setattr__(self, 'retryable_status_codes', frozenset(self.retryable_status_codes))
        object.__setattr__(self, 'retryable_kinds', frozenset(ErrorKind(k) for k in self.retryable_kinds))

    def delay_bounds(self, retry_index: int) -> Tuple[float, float]:
        """Lower and upper bound in ms of the delay before retry number retry_index (0-based)"""
        try:
            exponential = self.base_delay_ms * self.backoff_multiplier ** retry_index
        except OverflowError:
            exponential = float('inf')
        lower = min(self.max_delay_ms, exponential)
        upper = min(self.max_delay_ms, lower + self.jitter_ms)
        return lower, upper

    def compute_delay_ms(self, retry_index: int, rng: Callable[[], float] = random.random) -> float:
        lower, upper = self.delay_bounds(retry_index)
        return lower + (upper - lower) * rng()

    def is_retryable(self, error: ClassifiedError) -> bool:
        """Whether the policy allows another attempt after this error"""
        if error.retryable is not None:
            return error.retryable
        if error.kind not in self.retryable_kinds:
            return False
        if error.kind is ErrorKind.HTTP_STATUS:
            return error.http_status in self.retryable_status_codes
        return True

    def with_overrides(self, **changes) -> 'RetryPolicy':
        return replace(self, **changes)

    @classmethod
    def for_request_queues(cls, base: Optional['RetryPolicy'] = None) -> 'RetryPolicy':
        base = base or cls()
        return replace(base, max_attempts=max(base.max_attempts, REQUEST_QUEUE_MAX_ATTEMPTS))


class BackoffEngine:
    """
    Executes a logical call, retrying failed attempts.

    The attempt function receives the 1-based attempt number and either
    returns a result or raises a ClassifiedError. Other exceptions are
    programming errors and propagate immediately.
    """

    def __init__(
        self,
        policy: RetryPolicy,
        sleep: Callable[[float], None] = time.sleep,
        rng: Callable[[], float] = random.random,
        on_retry: Optional[Callable[[ClassifiedError, int, float], None]] = None
    ):
        self.policy = policy
        self.sleep = sleep
        self.rng = rng
        self.on_retry = on_retry
        self.logger = logging.getLogger(__name__)

    def run(
        self,
        attempt_fn: Callable[[int], T],
        cancel_event: Optional[threading.Event] = None
    ) -> T:
        attempt = 0
        state = CallState.ATTEMPTING

        while True:
            if cancel_event is not None and cancel_event.is_set():
                raise CallCancelledError(f"Call cancelled before attempt {attempt + 1}")

            attempt += 1
            try:
                result = attempt_fn(attempt)
            except ClassifiedError as error:
                if attempt >= self.policy.max_attempts or not self.policy.is_retryable(error):
                    state = CallState.FAILED
                    self.logger.debug(f"Call {state.value} after {attempt} attempt(s): {error!r}")
                    raise

                state = CallState.RETRY_SCHEDULED
                delay_ms = self.policy.compute_delay_ms(attempt - 1, self.rng)
                self.logger.warning(
                    f"Request failed (attempt {attempt} of {self.policy.max_attempts}), "
                    f"retrying in {delay_ms / 1000:.2f}s: {error.message}"
                )
                if self.on_retry:
                    self.on_retry(error, attempt, delay_ms)

                self._wait(delay_ms / 1000, cancel_event)
                state = CallState.ATTEMPTING
                continue

            state = CallState.SUCCEEDED
            if attempt > 1:
                self.logger.info(f"Call {state.value} on attempt {attempt}")
            return result

    def _wait(self, seconds: float, cancel_event: Optional[threading.Event]):
        if cancel_event is None:
            self.sleep(seconds)
        elif cancel_event.wait(seconds):
            raise CallCancelledError("Call cancelled while waiting to retry")
