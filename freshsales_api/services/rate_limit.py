"""Client-side rate limiting.

Spaces consecutive calls made by one client instance at least one cycle
apart (plus a buffer). There is no queueing or fairness between callers;
concurrent callers are simply serialized on the gate.
"""

import threading
import time
from dataclasses import dataclass
from typing import Callable, Optional, Tuple


@dataclass
class RateLimitConfig:
    """Rate limiter settings.

    Attributes:
        enabled: Whether the gate sleeps at all
        cycle_ms: Minimum spacing between calls in milliseconds
        buffer_ms: Safety margin added to every computed wait
    """

    enabled: bool = False
    cycle_ms: float = 500
    buffer_ms: float = 100


class RateLimiter:
    """Gate that blocks the calling thread until the cycle has elapsed.

    The last request timestamp is tracked whether or not limiting is
    enabled, so enabling it mid-session spaces the very next call.
    """

    def __init__(
        self,
        config: Optional[RateLimitConfig] = None,
        clock: Callable[[], float] = time.time,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.config = config or RateLimitConfig()
        self._clock = clock
        self._sleep = sleep
        self._lock = threading.Lock()
        self._last_request_at: Optional[float] = None

    @property
    def last_request_at(self) -> Optional[float]:
        return self._last_request_at

    def enable(self, cycle: Optional[float] = None, buffer: Optional[float] = None) -> None:
        """Enable limiting, optionally overriding cycle and buffer (ms).

        Each override applies on its own; a buffer may be changed without
        a cycle.
        """
        self.config.enabled = True
        if cycle is not None:
            self.config.cycle_ms = cycle
        if buffer is not None:
            self.config.buffer_ms = buffer

    def disable(self) -> None:
        self.config.enabled = False

    def is_enabled(self) -> bool:
        return self.config.enabled is True

    def compute_wait_ms(self, now: float) -> float:
        """Milliseconds to wait before a call issued at ``now``.

        Zero or negative means no wait.
        """
        if not self.is_enabled() or self._last_request_at is None:
            return 0.0
        elapsed_ms = round(now - self._last_request_at, 3) * 1000
        return (self.config.cycle_ms - elapsed_ms) + self.config.buffer_ms

    def acquire(
        self, on_limit_hit: Optional[Callable[[float], None]] = None
    ) -> Tuple[Optional[float], float]:
        """Pass the gate and stamp the request.

        Blocks when limiting is enabled and the previous call was less than
        a cycle ago. ``on_limit_hit`` receives the wait in milliseconds
        before sleeping.

        Returns:
            ``(previous_request_time, current_request_time)``
        """
        with self._lock:
            wait_ms = self.compute_wait_ms(self._clock())
            if wait_ms > 0:
                if on_limit_hit is not None:
                    on_limit_hit(wait_ms)
                self._sleep(wait_ms / 1000)

            previous = self._last_request_at
            self._last_request_at = self._clock()
            return previous, self._last_request_at
