from abc import ABC, abstractmethod
from collections.abc import Sequence
from datetime import date

from judicial_monitor.database.models import ActuationKey, ActuationRecord, MonitoredProcess
from judicial_monitor.registry.models import FetchedActuation


class MonitoringStore(ABC):
    """Durable persistence for monitored processes and their actuations.

    Implementations raise StoreError (or a subclass) for every persistence
    failure. Writes for one process touch only that process's rows.
    """

    @abstractmethod
    def list_syncable_processes(self, owner_id: str) -> list[MonitoredProcess]:
        """Active, notification-enabled processes of an owner, oldest first."""

    @abstractmethod
    def list_owners_with_active_processes(self) -> list[str]:
        """Distinct owners that have at least one active process."""

    @abstractmethod
    def find_process(self, process_id: str) -> MonitoredProcess:
        """Raises ProcessNotFoundError if no process has this id."""

    @abstractmethod
    def find_by_docket(self, owner_id: str, docket: str) -> MonitoredProcess | None:
        """Return the owner's process for a docket, if any."""

    @abstractmethod
    def create_process(
        self,
        *,
        owner_id: str,
        docket: str,
        forum: str | None = None,
        case_type: str | None = None,
        plaintiff: str | None = None,
        defendant: str | None = None,
        last_actuation_date: date | None = None,
        last_actuation_desc: str | None = None,
        seed_actuations: Sequence[FetchedActuation] = (),
    ) -> MonitoredProcess:
        """Insert a new active process with notifications enabled.

        seed_actuations are stored with is_new = false in the same transaction,
        so a failed seed leaves no process behind.

        Raises:
            DuplicateMonitorError: if the owner already monitors the docket.
        """

    @abstractmethod
    def delete_process(self, process_id: str, owner_id: str) -> bool:
        """Hard delete a process and its actuations. False if nothing matched."""

    @abstractmethod
    def set_notifications_enabled(self, process_id: str, owner_id: str, enabled: bool) -> None:
        """Raises ProcessNotFoundError if nothing matched."""

    @abstractmethod
    def get_actuation_keys(self, process_id: str) -> set[ActuationKey]:
        """Dedup keys of every stored actuation of a process."""

    @abstractmethod
    def insert_actuations(
        self,
        process_id: str,
        actuations: Sequence[FetchedActuation],
        *,
        is_new: bool,
    ) -> list[ActuationRecord]:
        """Insert actuations, silently skipping keys already stored.

        Returns only the rows actually inserted, in input order.
        """

    @abstractmethod
    def update_last_actuation(
        self,
        process_id: str,
        *,
        forum: str | None,
        last_actuation_date: date | None,
        last_actuation_desc: str | None,
    ) -> None:
        """Refresh the denormalized summary. None values keep the stored value."""

    @abstractmethod
    def fill_missing_forum(self, process_id: str, forum: str) -> None:
        """Set the forum only if the stored value is null."""

    @abstractmethod
    def list_actuations(self, process_id: str) -> list[ActuationRecord]:
        """All actuations of a process, most recent first."""
