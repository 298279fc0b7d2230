from abc import ABC, abstractmethod


class MeteringGateway(ABC):
    """Contract for the credit system that pays for registry quota."""

    @abstractmethod
    def authorize(self, owner_id: str, units: int, *, action: str) -> None:
        """Check that the owner may spend ``units`` before any work starts.

        Raises:
            AuthorizationDenied: if the owner may not proceed.
            MeteringError: if the metering service failed.
        """

    @abstractmethod
    def record_usage(self, owner_id: str, units: int, *, action: str) -> None:
        """Report the units actually consumed after the work ran.

        Raises:
            MeteringError: if the usage could not be recorded.
        """
