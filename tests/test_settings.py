import pytest
from pydantic import ValidationError

from freshsales_api.core.config import Settings


def test_defaults(monkeypatch) -> None:
    for var in ("FRESHSALES_DOMAIN", "FRESHSALES_APIKEY"):
        monkeypatch.delenv(var, raising=False)

    settings = Settings(_env_file=None)

    assert settings.domain is None
    assert settings.apikey == ""
    assert settings.scheme == "https"
    assert settings.rate_limit_enabled is False
    assert settings.rate_limit_cycle_ms == 500
    assert settings.rate_limit_buffer_ms == 100
    assert settings.quota_default_limit == 2000


def test_reads_prefixed_environment(monkeypatch) -> None:
    monkeypatch.setenv("FRESHSALES_DOMAIN", "acme.myfreshworks.com")
    monkeypatch.setenv("FRESHSALES_APIKEY", "token")
    monkeypatch.setenv("FRESHSALES_RATE_LIMIT_CYCLE_MS", "1000")

    settings = Settings(_env_file=None)

    assert settings.domain == "acme.myfreshworks.com"
    assert settings.apikey == "token"
    assert settings.rate_limit_cycle_ms == 1000


@pytest.mark.parametrize(
    ("field", "value"),
    [
        ("httpx_read_timeout", 0),
        ("httpx_connect_timeout", -1),
        ("rate_limit_cycle_ms", -5),
        ("rate_limit_buffer_ms", -1),
        ("quota_default_limit", -1),
        ("log_format", "xml"),
    ],
)
def test_invalid_values_rejected(field: str, value) -> None:
    with pytest.raises(ValidationError):
        Settings(_env_file=None, **{field: value})


def test_log_format_normalized() -> None:
    assert Settings(_env_file=None, log_format="JSON").log_format == "json"
