"""Tests for response normalization."""

from types import SimpleNamespace

import httpx
import pytest

from freshsales_api.models import ErrorBodyKind
from freshsales_api.services.normalizer import (
    MAX_SAFE_INTEGER,
    json_decode,
    normalize_error,
    normalize_success,
    unwrap_error_body,
)

URL = "https://acme.myfreshworks.com/api/leads/1"


def _response(status: int, content: bytes = b"", headers=None) -> httpx.Response:
    return httpx.Response(
        status,
        content=content,
        headers=headers,
        request=httpx.Request("GET", URL),
    )


def _status_error(response: httpx.Response) -> httpx.HTTPStatusError:
    return httpx.HTTPStatusError(
        "error", request=response.request, response=response
    )


class TestJsonDecode:
    """Test JSON decoding policy."""

    def test_decodes_mapping(self):
        assert json_decode(b'{"id": 1, "name": "x"}') == {"id": 1, "name": "x"}

    def test_decodes_object(self):
        body = json_decode('{"lead": {"id": 7}}', as_object=True)

        assert isinstance(body, SimpleNamespace)
        assert body.lead.id == 7

    def test_keys_keep_order(self):
        body = json_decode(b'{"b": 1, "a": 2, "c": 3}')

        assert list(body) == ["b", "a", "c"]

    @pytest.mark.parametrize("content", [b"", None, b"not json", b"{\"open\": "])
    def test_empty_or_malformed_is_none(self, content):
        assert json_decode(content) is None
        assert json_decode(content, as_object=True) is None

    def test_large_integer_kept_as_string(self):
        body = json_decode(b'{"id": 12345678901234567890, "small": 42}')

        assert body["id"] == "12345678901234567890"
        assert body["small"] == 42

    def test_large_negative_integer_kept_as_string(self):
        body = json_decode(b'{"id": -98765432109876543210}', as_object=True)

        assert body.id == "-98765432109876543210"

    def test_safe_integer_boundary(self):
        body = json_decode(
            f'[{MAX_SAFE_INTEGER}, {MAX_SAFE_INTEGER + 1}]'.encode()
        )

        assert body == [MAX_SAFE_INTEGER, str(MAX_SAFE_INTEGER + 1)]

    def test_floats_untouched(self):
        assert json_decode(b'{"amount": 10.5}') == {"amount": 10.5}

    def test_very_long_integer_kept_as_string(self):
        digits = "9" * 5000

        body = json_decode(b'{"id": ' + digits.encode() + b', "name": "x"}')

        assert body == {"id": digits, "name": "x"}

    def test_very_long_negative_integer_kept_as_string(self):
        digits = "-" + "1" * 5000

        body = json_decode(f'[{digits}]', as_object=True)

        assert body == [digits]


class TestUnwrapErrorBody:
    """Test error body unwrapping."""

    def test_errors_collection(self):
        raw = {"errors": {"email": "invalid"}}
        strict = json_decode(b'{"errors": {"email": "invalid"}}', as_object=True)

        body = unwrap_error_body(raw, strict)

        assert body.kind is ErrorBodyKind.COLLECTION
        assert body.raw == {"email": "invalid"}
        assert body.strict.email == "invalid"

    def test_errors_wins_over_error(self):
        raw = {"error": "first", "errors": ["second"]}
        strict = SimpleNamespace(**raw)

        assert unwrap_error_body(raw, strict).raw == ["second"]

    def test_single_error(self):
        raw = {"error": "Not found"}

        body = unwrap_error_body(raw, SimpleNamespace(**raw))

        assert body.kind is ErrorBodyKind.SINGLE
        assert body.raw == "Not found"
        assert body.strict == "Not found"

    @pytest.mark.parametrize("raw", [{"foo": "bar"}, None, ["errors"], "error"])
    def test_absent(self, raw):
        body = unwrap_error_body(raw, None)

        assert body.kind is ErrorBodyKind.ABSENT
        assert body.raw is None
        assert body.strict is None


class TestNormalizeSuccess:
    """Test the success path."""

    def test_success_result(self):
        response = _response(200, b'{"id":1,"name":"x"}')

        result = normalize_success(response, (None, 10.0))

        assert result.is_error is False
        assert result.ok is True
        assert result.status == 200
        assert result.body_raw == {"id": 1, "name": "x"}
        assert vars(result.body_strict) == result.body_raw
        assert result.body == result.body_raw
        assert result.response is response
        assert result.exception is None
        assert result.error_body is None
        assert result.timestamps == (None, 10.0)

    def test_empty_body(self):
        result = normalize_success(_response(204), (1.0, 2.0))

        assert result.status == 204
        assert result.body_raw is None
        assert result.body_strict is None


class TestNormalizeError:
    """Test the error path."""

    def test_errors_unwrapped(self):
        exc = _status_error(_response(422, b'{"errors":{"email":"invalid"}}'))

        result = normalize_error(exc, (None, 1.0))

        assert result.is_error is True
        assert result.status == 422
        assert result.body_raw == {"email": "invalid"}
        assert result.body_strict.email == "invalid"
        assert result.exception is exc
        assert result.response is exc.response
        assert result.error_body.kind is ErrorBodyKind.COLLECTION

    def test_error_unwrapped(self):
        exc = _status_error(_response(404, b'{"error":"Not found"}'))

        result = normalize_error(exc, (None, 1.0))

        assert result.status == 404
        assert result.body_raw == "Not found"
        assert result.body_strict == "Not found"

    def test_unknown_shape_is_absent(self):
        exc = _status_error(_response(500, b'{"foo":"bar"}'))

        result = normalize_error(exc, (None, 1.0))

        assert result.status == 500
        assert result.body_raw is None
        assert result.body_strict is None
        assert result.error_body.kind is ErrorBodyKind.ABSENT

    def test_non_json_error_body(self):
        exc = _status_error(_response(502, b"<html>Bad gateway</html>"))

        result = normalize_error(exc, (None, 1.0))

        assert result.status == 502
        assert result.body_raw is None

    def test_no_response(self):
        exc = httpx.ConnectError("connection refused", request=httpx.Request("GET", URL))

        result = normalize_error(exc, (5.0, 6.0))

        assert result.is_error is True
        assert result.status is None
        assert result.body_raw is None
        assert result.body_strict is None
        assert result.response is None
        assert result.exception is exc
        assert result.timestamps == (5.0, 6.0)
