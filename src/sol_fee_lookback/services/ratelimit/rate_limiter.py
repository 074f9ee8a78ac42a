# src/sol_fee_lookback/services/ratelimit/rate_limiter.py
import enum
import logging
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Optional, TypeVar

from ...errors import FetchFailedError, PipelineCancelled, RateLimitedError, TransportError

T = TypeVar("T")


class LimiterState(enum.Enum):
    IDLE = "idle"
    WAITING = "waiting"        # holding / waiting for a request slot, request in flight
    RETRYING = "retrying"      # last attempt failed, backing off before the next one
    EXHAUSTED = "exhausted"    # terminal, FetchFailedError raised


@dataclass(frozen=True)
class BackoffPolicy:
    """Request spacing and retry budget shared by every RPC call.

    Rate limits back off exponentially: base * 2**(n-1), capped at
    rate_limit_max_delay_sec. Transport failures back off linearly:
    step * n. Both are bounded by a retry count and by max_elapsed_sec
    measured from the first attempt of the request.
    """
    min_interval_sec: float = 0.1
    rate_limit_base_delay_sec: float = 0.5
    rate_limit_max_delay_sec: float = 8.0
    rate_limit_max_retries: int = 6
    transport_max_retries: int = 3
    transport_step_delay_sec: float = 1.0
    max_elapsed_sec: float = 120.0

    @property
    def max_attempts(self) -> int:
        return 1 + self.rate_limit_max_retries + self.transport_max_retries

    def rate_limit_delay(self, n: int) -> float:
        return min(self.rate_limit_base_delay_sec * (2 ** (n - 1)), self.rate_limit_max_delay_sec)

    def transport_delay(self, n: int) -> float:
        return self.transport_step_delay_sec * n


class RetryTracker:
    """Retry state machine for one logical request.

    IDLE -> WAITING -> (success) IDLE
                    -> (throttled / transport error) RETRYING -> WAITING ...
                    -> (budget spent) EXHAUSTED
    """
    def __init__(self, policy: BackoffPolicy, what: str, clock: Callable[[], float] = time.monotonic):
        self.policy = policy
        self.what = what
        self._clock = clock
        self.state = LimiterState.IDLE
        self.attempts = 0
        self.rate_limited = 0
        self.transport_failures = 0
        self._started: Optional[float] = None

    def begin(self) -> None:
        if self.state is LimiterState.EXHAUSTED:
            raise RuntimeError(f"{self.what}: retry budget already exhausted")
        if self._started is None:
            self._started = self._clock()
        self.state = LimiterState.WAITING
        self.attempts += 1

    def on_success(self) -> None:
        self.state = LimiterState.IDLE
        self.rate_limited = 0
        self.transport_failures = 0

    def on_rate_limited(self, err: BaseException) -> float:
        self.rate_limited += 1
        if self.rate_limited > self.policy.rate_limit_max_retries:
            self._exhaust("rate_limited", err)
        return self._retry_after(self.policy.rate_limit_delay(self.rate_limited), err)

    def on_transport_error(self, err: BaseException) -> float:
        self.transport_failures += 1
        if self.transport_failures > self.policy.transport_max_retries:
            self._exhaust("transport", err)
        return self._retry_after(self.policy.transport_delay(self.transport_failures), err)

    def _retry_after(self, delay: float, err: BaseException) -> float:
        started = self._started if self._started is not None else self._clock()
        if self._clock() - started + delay > self.policy.max_elapsed_sec:
            self._exhaust("elapsed", err)
        self.state = LimiterState.RETRYING
        return delay

    def _exhaust(self, reason: str, err: BaseException) -> None:
        self.state = LimiterState.EXHAUSTED
        raise FetchFailedError(self.what, reason, err) from err


class RateLimiter:
    """Single shared gate in front of every RPC call.

    Request start times are serialized under one lock so that consecutive
    requests start at least min_interval_sec apart no matter how many
    worker threads call in. A throttled request pushes the shared next-slot
    instant forward, so all workers back off together.
    """
    def __init__(
        self,
        policy: Optional[BackoffPolicy] = None,
        *,
        clock: Callable[[], float] = time.monotonic,
        sleeper: Optional[Callable[[float], None]] = None,
        cancel: Optional[threading.Event] = None,
    ):
        self.policy = policy or BackoffPolicy()
        self._clock = clock
        self._cancel = cancel or threading.Event()
        self._sleeper = sleeper or self._wait_or_cancel
        self._lock = threading.Lock()
        self._next_slot: Optional[float] = None
        self.last_request_at: Optional[float] = None
        self.consecutive_failures = 0
        self.requests_issued = 0

    # ---------- cancellation ----------
    @property
    def cancel_event(self) -> threading.Event:
        return self._cancel

    def cancel(self) -> None:
        self._cancel.set()

    def _check_cancelled(self) -> None:
        if self._cancel.is_set():
            raise PipelineCancelled("cancelled")

    def _wait_or_cancel(self, delay: float) -> None:
        if self._cancel.wait(delay):
            raise PipelineCancelled("cancelled while waiting")

    def _sleep(self, delay: float) -> None:
        self._check_cancelled()
        if delay > 0:
            self._sleeper(delay)
        self._check_cancelled()

    # ---------- shared timing ----------
    def _acquire_slot(self) -> None:
        with self._lock:
            now = self._clock()
            if self._next_slot is not None and now < self._next_slot:
                self._sleep(self._next_slot - now)
                now = self._clock()
            self.last_request_at = now
            self._next_slot = now + self.policy.min_interval_sec
            self.requests_issued += 1

    def _defer_until(self, delay: float) -> None:
        with self._lock:
            not_before = self._clock() + delay
            if self._next_slot is None or self._next_slot < not_before:
                self._next_slot = not_before

    def _record_failure(self) -> None:
        with self._lock:
            self.consecutive_failures += 1

    def _record_success(self) -> None:
        with self._lock:
            self.consecutive_failures = 0

    # ---------- public ----------
    def call(self, fn: Callable[..., T], *args: Any, what: str = "rpc call", **kwargs: Any) -> T:
        tracker = RetryTracker(self.policy, what, clock=self._clock)
        while True:
            self._check_cancelled()
            tracker.begin()
            self._acquire_slot()
            try:
                result = fn(*args, **kwargs)
            except RateLimitedError as e:
                self._record_failure()
                delay = tracker.on_rate_limited(e)
                logging.warning("%s throttled (%d/%d), backing off %.2fs",
                                what, tracker.rate_limited, self.policy.rate_limit_max_retries, delay)
                self._defer_until(delay)
                continue
            except TransportError as e:
                self._record_failure()
                delay = tracker.on_transport_error(e)
                logging.warning("%s failed: %s (%d/%d), retrying in %.2fs",
                                what, e, tracker.transport_failures, self.policy.transport_max_retries, delay)
                self._sleep(delay)
                continue
            tracker.on_success()
            self._record_success()
            return result
