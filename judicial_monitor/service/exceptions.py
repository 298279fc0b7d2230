class OwnershipError(Exception):
    """Raised when a caller targets a monitored process owned by someone else."""


class InvalidDocketError(ValueError):
    """Raised when a docket number cannot be monitored as given."""
