"""Response normalization.

Turns httpx responses and failures into ``CallResult`` records so sync and
async callers inspect outcomes the same way.
"""

import json
from types import SimpleNamespace
from typing import Any, Optional, Tuple, Union

import httpx

from freshsales_api.models import CallResult, ErrorBody, ErrorBodyKind

# Largest integer a double represents exactly; larger literals decode as strings
MAX_SAFE_INTEGER = 2**53 - 1
MAX_SAFE_DIGITS = len(str(MAX_SAFE_INTEGER))

Timestamps = Tuple[Optional[float], Optional[float]]


def _parse_int(literal: str) -> Union[int, str]:
    # Longer literals are out of range, and int() refuses very long strings
    if len(literal.lstrip("-")) > MAX_SAFE_DIGITS:
        return literal
    value = int(literal)
    if abs(value) > MAX_SAFE_INTEGER:
        return literal
    return value


def _to_namespace(obj: dict) -> SimpleNamespace:
    return SimpleNamespace(**obj)


def json_decode(content: Union[bytes, str, None], as_object: bool = False) -> Any:
    """Decode a JSON body.

    Integer literals beyond ``MAX_SAFE_INTEGER`` are kept as digit strings.

    Args:
        content: Raw body
        as_object: Decode JSON objects to ``SimpleNamespace`` instead of dict

    Returns:
        The decoded value, or None for an empty or malformed body
    """
    if not content:
        return None
    try:
        return json.loads(
            content,
            parse_int=_parse_int,
            object_hook=_to_namespace if as_object else None,
        )
    except ValueError:
        return None


def unwrap_error_body(raw: Any, strict: Any) -> ErrorBody:
    """Pick the error payload out of a decoded error body.

    An ``errors`` property wins over ``error``; anything else is absent.
    """
    if not isinstance(raw, dict):
        return ErrorBody.absent()
    if "errors" in raw:
        return ErrorBody(ErrorBodyKind.COLLECTION, raw["errors"], strict.errors)
    if "error" in raw:
        return ErrorBody(ErrorBodyKind.SINGLE, raw["error"], strict.error)
    return ErrorBody.absent()


def normalize_success(response: httpx.Response, timestamps: Timestamps) -> CallResult:
    content = response.content
    return CallResult(
        status=response.status_code,
        is_error=False,
        body_raw=json_decode(content),
        body_strict=json_decode(content, as_object=True),
        response=response,
        timestamps=timestamps,
    )


def normalize_error(exc: httpx.HTTPError, timestamps: Timestamps) -> CallResult:
    """Build an error result from a transport failure.

    ``HTTPStatusError`` carries the 4xx/5xx response, whose body is
    unwrapped. Other failures never received a response.
    """
    response = exc.response if isinstance(exc, httpx.HTTPStatusError) else None
    if response is None:
        return CallResult(
            status=None,
            is_error=True,
            exception=exc,
            timestamps=timestamps,
            error_body=ErrorBody.absent(),
        )

    content = response.content
    error_body = unwrap_error_body(
        json_decode(content), json_decode(content, as_object=True)
    )
    return CallResult(
        status=response.status_code,
        is_error=True,
        body_raw=error_body.raw,
        body_strict=error_body.strict,
        response=response,
        exception=exc,
        timestamps=timestamps,
        error_body=error_body,
    )
