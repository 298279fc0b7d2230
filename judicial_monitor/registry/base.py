from abc import ABC, abstractmethod

from judicial_monitor.registry.models import ProcessSnapshot


class BaseRegistryClient(ABC):
    """Contract for all judicial-registry adapters."""

    @abstractmethod
    def fetch_by_docket(self, docket: str) -> ProcessSnapshot:
        """Query the registry for a single case.

        Args:
            docket: Docket number (radicado) of the case.

        Returns:
            ProcessSnapshot; ``found`` is False when the case is unknown.

        Raises:
            FetchError: on transport, HTTP or payload failures. Adapters do
                not retry.
        """
