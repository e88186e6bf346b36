"""API call quota tracking from Freshsales rate-limit headers."""

import threading
from typing import Dict, Iterable, Optional, Union

import httpx

from freshsales_api.exceptions import InvalidQuotaKeyError
from freshsales_api.models import QuotaState

REMAINING_HEADER = "x-ratelimit-remaining"
LIMIT_HEADER = "x-ratelimit-limit"


def _header_int(response: httpx.Response, name: str) -> Optional[int]:
    """Read the first value of a header as an int, None if missing or not numeric."""
    values = response.headers.get_list(name)
    if not values:
        return None
    try:
        return int(values[0].strip())
    except ValueError:
        return None


class QuotaTracker:
    """Keeps the latest call counters per API family.

    The counters are only ever moved by response headers; the server's
    window rollover is never timed locally.
    """

    KEYS = ("left", "made", "limit")

    def __init__(self, default_limit: int = 2000, families: Iterable[str] = ("rest",)):
        self.default_limit = default_limit
        self._lock = threading.Lock()
        self._states: Dict[str, QuotaState] = {
            family: QuotaState(limit=default_limit) for family in families
        }

    def update(self, response: httpx.Response, family: str = "rest") -> bool:
        """Update a family's counters from a response's rate-limit headers.

        A missing, non-numeric or zero remaining count leaves the counters
        untouched. A missing limit header keeps the previous limit.

        Returns:
            True if the counters changed
        """
        remaining = _header_int(response, REMAINING_HEADER)
        if not remaining:
            return False

        total = _header_int(response, LIMIT_HEADER)
        with self._lock:
            state = self._states.setdefault(
                family, QuotaState(limit=self.default_limit)
            )
            if total is None:
                total = state.limit
            state.left = remaining
            state.limit = total
            state.made = total - remaining
        return True

    def get(
        self, family: str = "rest", key: Optional[str] = None
    ) -> Union[Dict[str, int], int]:
        """Return all counters of a family, or one of them.

        Raises:
            InvalidQuotaKeyError: For an unknown family or counter key
        """
        with self._lock:
            state = self._states.get(family)
            if state is None:
                raise InvalidQuotaKeyError(family, sorted(self._states))
            counters = state.to_dict()

        if key is None:
            return counters
        if key not in counters:
            raise InvalidQuotaKeyError(key, list(self.KEYS))
        return counters[key]

    def families(self) -> list[str]:
        with self._lock:
            return list(self._states)
