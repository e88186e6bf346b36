"""Result and state records shared by the client and its services."""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional, Tuple

import httpx


class ErrorBodyKind(str, Enum):
    """Which shape an error response body was unwrapped from."""

    ABSENT = "absent"
    SINGLE = "error"
    COLLECTION = "errors"


@dataclass(frozen=True)
class ErrorBody:
    """Error payload unwrapped from an error response.

    Attributes:
        kind: ``COLLECTION`` for an ``errors`` property, ``SINGLE`` for an
            ``error`` property, ``ABSENT`` when neither was found
        raw: The unwrapped value from the mapping decode
        strict: The unwrapped value from the object decode
    """

    kind: ErrorBodyKind
    raw: Any = None
    strict: Any = None

    @classmethod
    def absent(cls) -> "ErrorBody":
        return cls(ErrorBodyKind.ABSENT)


@dataclass
class CallResult:
    """Uniform outcome of a dispatched API call.

    Success results carry both body decodes and never an exception.
    Error results always carry the originating exception; their bodies
    are the unwrapped error payload, or ``None``.

    Attributes:
        status: HTTP status code, ``None`` when no response was received
        is_error: True for 4xx/5xx responses and transport failures
        body_raw: Body decoded to dicts and lists
        body_strict: Body decoded to ``SimpleNamespace`` objects
        response: The httpx response, if any
        exception: The httpx exception, only for error results
        timestamps: ``(previous_request_time, current_request_time)``
        error_body: Tagged error payload, only for error results
    """

    status: Optional[int]
    is_error: bool
    body_raw: Any = None
    body_strict: Any = None
    response: Optional[httpx.Response] = None
    exception: Optional[Exception] = None
    timestamps: Tuple[Optional[float], Optional[float]] = (None, None)
    error_body: Optional[ErrorBody] = None

    def __post_init__(self) -> None:
        if self.is_error and self.exception is None:
            raise ValueError("Error results must carry the originating exception")
        if not self.is_error and (
            self.exception is not None or self.error_body is not None
        ):
            raise ValueError("Success results cannot carry error fields")

    @property
    def body(self) -> Any:
        """Alias for ``body_raw``."""
        return self.body_raw

    @property
    def ok(self) -> bool:
        return not self.is_error


@dataclass
class QuotaState:
    """Call counters for one API family."""

    left: int = 0
    made: int = 0
    limit: int = 2000

    def to_dict(self) -> dict:
        """Counters as a plain dict (``left``, ``made``, ``limit``)."""
        return {
            "left": self.left,
            "made": self.made,
            "limit": self.limit,
        }
