class MeteringError(Exception):
    """Raised when the metering service cannot be reached or misbehaves."""


class AuthorizationDenied(MeteringError):
    """Raised when the owner may not spend the requested units (e.g. no balance)."""

    def __init__(
        self,
        message: str,
        current_balance: int | None = None,
        required: int | None = None,
    ) -> None:
        super().__init__(message)
        self.current_balance = current_balance
        self.required = required
