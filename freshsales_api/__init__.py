"""Freshsales REST API client.

This package provides:
- FreshsalesClient: sync and async request dispatch with rate limiting
- CallResult: the uniform result of every call
- Quota tracking from the API's rate-limit headers
"""

from freshsales_api.client import LOG_KEY, FreshsalesClient
from freshsales_api.exceptions import (
    ConfigurationError,
    FreshsalesException,
    InvalidQuotaKeyError,
)
from freshsales_api.models import CallResult, ErrorBody, ErrorBodyKind, QuotaState

__all__ = [
    "LOG_KEY",
    "FreshsalesClient",
    "ConfigurationError",
    "FreshsalesException",
    "InvalidQuotaKeyError",
    "CallResult",
    "ErrorBody",
    "ErrorBodyKind",
    "QuotaState",
]

__version__ = "0.1.0"
