"""Services package for the Freshsales client.

This package provides:
- Response normalization into CallResult records
- Quota tracking from rate-limit headers
- Client-side rate limiting
"""

from freshsales_api.services.normalizer import (
    MAX_SAFE_INTEGER,
    json_decode,
    normalize_error,
    normalize_success,
    unwrap_error_body,
)
from freshsales_api.services.quota import QuotaTracker
from freshsales_api.services.rate_limit import RateLimitConfig, RateLimiter

__all__ = [
    "MAX_SAFE_INTEGER",
    "json_decode",
    "normalize_error",
    "normalize_success",
    "unwrap_error_body",
    "QuotaTracker",
    "RateLimitConfig",
    "RateLimiter",
]
