"""Custom exceptions for the Freshsales API client."""


class FreshsalesException(Exception):
    """Base class for client exceptions.

    Only configuration and lookup problems are raised to callers; transport
    failures are captured into a ``CallResult`` instead.
    """

    def __init__(self, message: str = "Freshsales client error"):
        self.message = message
        super().__init__(message)


class ConfigurationError(FreshsalesException):
    """Raised when a required setting (the CRM domain) is missing.

    Raised at call time, before any network activity.
    """

    def __init__(self, detail: str = "Freshsales domain missing for API calls"):
        self.detail = detail
        super().__init__(detail)


class InvalidQuotaKeyError(FreshsalesException, LookupError):
    """Raised when an unknown quota family or counter key is requested."""

    def __init__(self, key: str, valid_keys: list[str] | None = None):
        self.key = key
        self.valid_keys = valid_keys or []
        message = f"Invalid API call limit key: {key!r}."
        if self.valid_keys:
            message += " Valid keys are: " + ", ".join(self.valid_keys)
        super().__init__(message)
