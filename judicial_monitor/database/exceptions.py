class StoreError(Exception):
    """Base exception for monitoring store failures."""


class ProcessNotFoundError(StoreError):
    """Raised when a monitored process cannot be found."""


class DuplicateMonitorError(StoreError):
    """Raised when the owner already monitors the docket."""
