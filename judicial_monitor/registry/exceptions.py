class FetchError(Exception):
    """Raised when the registry could not be queried (anything but "not found")."""


class RegistryNetworkError(FetchError):
    """Raised on timeouts and connection failures."""


class RegistryHTTPError(FetchError):
    """Raised when the registry answers with a non-2xx status."""

    def __init__(self, message: str, status_code: int) -> None:
        super().__init__(message)
        self.status_code = status_code


class RegistryRateLimitedError(RegistryHTTPError):
    """Raised when the registry throttles us (HTTP 429)."""

    def __init__(self, message: str, retry_after: float | None = None) -> None:
        super().__init__(message, status_code=429)
        self.retry_after = retry_after


class MalformedPayloadError(FetchError):
    """Raised when the registry payload does not have the expected shape."""
