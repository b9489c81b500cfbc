"""
Reliability utilities for the tracking pipeline.

Includes the Circuit Breaker guarding the driver location source.
"""

import time
import enum
from typing import Callable, Any, Awaitable


class CircuitOpenError(Exception):
    pass


class CircuitState(str, enum.Enum):
    CLOSED = "CLOSED"
    OPEN = "OPEN"
    HALF_OPEN = "HALF_OPEN"


class CircuitBreaker:
    """
    Simple Circuit Breaker implementation.
    After 'failure_threshold' consecutive failures the circuit opens and
    rejects calls for 'reset_timeout' seconds, then lets one trial call
    through (HALF_OPEN). A successful trial closes it again.
    """
    def __init__(
        self,
        failure_threshold: int = 5,
        reset_timeout: float = 60,
        clock: Callable[[], float] = time.monotonic
    ):
        self.failure_threshold = failure_threshold
        self.reset_timeout = reset_timeout
        self.clock = clock
        self.failures = 0
        self.last_failure_time = 0.0
        self.state = CircuitState.CLOSED

    async def call(self, func: Callable[..., Awaitable[Any]], *args, **kwargs) -> Any:
        if self.state == CircuitState.OPEN:
            if self.clock() - self.last_failure_time >= self.reset_timeout:
                self.state = CircuitState.HALF_OPEN
            else:
                raise CircuitOpenError("Circuit is OPEN")

        try:
            result = await func(*args, **kwargs)
        except Exception:
            self.record_failure()
            raise

        self.reset_state()
        return result

    def record_failure(self):
        self.failures += 1
        self.last_failure_time = self.clock()
        # A failed trial call re-opens immediately
        if self.state == CircuitState.HALF_OPEN or self.failures >= self.failure_threshold:
            self.state = CircuitState.OPEN

    def reset_state(self):
        self.failures = 0
        self.state = CircuitState.CLOSED
