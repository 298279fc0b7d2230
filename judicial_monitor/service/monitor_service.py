import threading
import time

from judicial_monitor.config.settings import Settings
from judicial_monitor.database.base import MonitoringStore
from judicial_monitor.database.exceptions import DuplicateMonitorError, ProcessNotFoundError
from judicial_monitor.database.models import ActuationRecord, MonitoredProcess
from judicial_monitor.database.repositories.monitoring_repository import MonitoringRepository
from judicial_monitor.logging.logger import Log
from judicial_monitor.metering.base import MeteringGateway
from judicial_monitor.metering.exceptions import MeteringError
from judicial_monitor.metering.factory import MeteringGatewayFactory
from judicial_monitor.registry.base import BaseRegistryClient
from judicial_monitor.registry.exceptions import FetchError
from judicial_monitor.registry.factory import RegistryClientFactory
from judicial_monitor.registry.models import ProcessSnapshot
from judicial_monitor.service.dockets import normalize_docket, parse_docket_list
from judicial_monitor.service.exceptions import OwnershipError
from judicial_monitor.service.models import BulkAddEntry, BulkAddResult, BulkAddStatus
from judicial_monitor.sync.coordinator import BatchSyncCoordinator
from judicial_monitor.sync.models import BatchSyncResult, SyncAttemptResult
from judicial_monitor.sync.reconciler import reconcile
from judicial_monitor.sync.syncer import ProcessSyncer

ACTION_SYNC_PROCESS = "sync_process"
ACTION_SYNC_ALL = "sync_all"


class MonitorService:
    """Entry points used by calling code (CLI, cron trigger, API layer).

    Quota-consuming syncs (sync_process, sync_all) are authorized before any
    registry call and the units actually attempted are reported afterwards.
    Registration, lookup and check_updates are not metered.
    """

    def __init__(
        self,
        store: MonitoringStore,
        registry: BaseRegistryClient,
        metering: MeteringGateway,
        coordinator: BatchSyncCoordinator,
        settings: Settings,
    ) -> None:
        self._store = store
        self._registry = registry
        self._metering = metering
        self._coordinator = coordinator
        self._settings = settings

    def lookup(self, docket: str) -> ProcessSnapshot:
        """Read-only registry preview. Raises FetchError, never touches the store."""
        normalized = normalize_docket(docket)
        Log.info(f"Looking up docket {normalized}")
        return self._registry.fetch_by_docket(normalized)

    def add_monitor(self, owner_id: str, docket: str) -> MonitoredProcess:
        """Register a docket for an owner and seed its known actuations.

        Seeded actuations are stored with is_new = false so that registering
        a case never produces a notification burst. A registry failure does
        not block registration; the first sync fills the gaps. The process and
        its seed are written together, so a store failure registers nothing.

        Raises:
            InvalidDocketError: if the docket is malformed.
            DuplicateMonitorError: if the owner already monitors the docket.
        """
        normalized = normalize_docket(docket)
        if self._store.find_by_docket(owner_id, normalized) is not None:
            raise DuplicateMonitorError(f"Owner {owner_id} already monitors docket {normalized}")

        snapshot = self._preview(normalized)
        seed = reconcile(set(), snapshot.actuations)
        process = self._store.create_process(
            owner_id=owner_id,
            docket=normalized,
            forum=snapshot.forum,
            case_type=snapshot.case_type,
            plaintiff=snapshot.plaintiff,
            defendant=snapshot.defendant,
            last_actuation_date=snapshot.most_recent_date,
            last_actuation_desc=snapshot.most_recent_type,
            seed_actuations=seed,
        )
        Log.info(
            f"Owner {owner_id} now monitors docket {normalized} as process {process.id}, "
            f"{len(seed)} actuation(s) seeded"
        )
        return process

    def add_monitors(
        self,
        owner_id: str,
        raw_text: str,
        *,
        cancel: threading.Event | None = None,
    ) -> BulkAddResult:
        """Register every docket found in pasted text, one at a time."""
        dockets = parse_docket_list(raw_text)
        result = BulkAddResult(owner_id=owner_id)
        Log.info(f"Bulk registration of {len(dockets)} docket(s) for owner {owner_id}")

        for index, docket in enumerate(dockets):
            result.entries.append(self._add_one(owner_id, docket))
            remaining = len(dockets) - index - 1
            if remaining == 0:
                break
            if cancel is not None and cancel.is_set():
                result.cancelled = True
                Log.warning(f"Bulk registration cancelled, {remaining} docket(s) skipped")
                break
            time.sleep(self._settings.bulk_add_delay_seconds)
        return result

    def remove_monitor(self, process_id: str, owner_id: str) -> None:
        """Hard delete a process and its actuations after checking ownership."""
        self._owned_process(process_id, owner_id)
        if not self._store.delete_process(process_id, owner_id):
            raise ProcessNotFoundError(f"Process {process_id} not found")
        Log.info(f"Owner {owner_id} stopped monitoring process {process_id}")

    def set_notifications(self, process_id: str, owner_id: str, enabled: bool) -> MonitoredProcess:
        """Pause or resume syncing of a process without touching its history."""
        self._owned_process(process_id, owner_id)
        self._store.set_notifications_enabled(process_id, owner_id, enabled)
        Log.info(f"Notifications for process {process_id} set to {enabled}")
        return self._store.find_process(process_id)

    def list_actuations(self, process_id: str, owner_id: str) -> list[ActuationRecord]:
        """Stored actuations of an owned process, most recent first."""
        self._owned_process(process_id, owner_id)
        return self._store.list_actuations(process_id)

    def sync_process(self, process_id: str, owner_id: str) -> SyncAttemptResult:
        """Metered sync of one process.

        Raises:
            ProcessNotFoundError: if the process does not exist.
            OwnershipError: if the process belongs to another owner.
            AuthorizationDenied: if the owner may not spend one unit.
        """
        process = self._owned_process(process_id, owner_id)
        self._metering.authorize(owner_id, 1, action=ACTION_SYNC_PROCESS)
        result = self._coordinator.sync_one(process)
        self._record_usage(owner_id, 1, action=ACTION_SYNC_PROCESS)
        return result

    def sync_all(
        self,
        owner_id: str,
        *,
        cancel: threading.Event | None = None,
    ) -> BatchSyncResult:
        """Metered sync of every syncable process of an owner.

        Authorization covers the whole batch up front; usage reports only the
        processes actually attempted (fewer when cancelled).
        """
        processes = self._coordinator.load_batch(owner_id)
        if not processes:
            Log.info(f"Owner {owner_id} has no syncable processes")
            return BatchSyncResult(owner_id=owner_id)

        self._metering.authorize(owner_id, len(processes), action=ACTION_SYNC_ALL)
        result = self._coordinator.sync_batch(
            owner_id,
            processes,
            delay_seconds=self._settings.sync_all_delay_seconds,
            cancel=cancel,
        )
        self._record_usage(owner_id, result.attempted, action=ACTION_SYNC_ALL)
        return result

    def check_updates(
        self,
        owner_id: str,
        *,
        process_id: str | None = None,
        cancel: threading.Event | None = None,
    ) -> BatchSyncResult:
        """Unmetered background check of an owner's processes, or of one of them.

        A single process is only checked while it is syncable.
        """
        if process_id is not None:
            process = self._owned_process(process_id, owner_id)
            processes = [process] if process.is_syncable else []
        else:
            processes = self._coordinator.load_batch(owner_id)
        return self._coordinator.sync_batch(
            owner_id,
            processes,
            delay_seconds=self._settings.check_updates_delay_seconds,
            cancel=cancel,
        )

    def list_owners(self) -> list[str]:
        return self._store.list_owners_with_active_processes()

    def _add_one(self, owner_id: str, docket: str) -> BulkAddEntry:
        try:
            process = self.add_monitor(owner_id, docket)
        except DuplicateMonitorError:
            return BulkAddEntry(docket=docket, status=BulkAddStatus.DUPLICATE)
        except Exception as exc:
            Log.warning(f"Could not register docket {docket}: {exc}")
            return BulkAddEntry(docket=docket, status=BulkAddStatus.FAILED, error=str(exc))
        return BulkAddEntry(docket=docket, status=BulkAddStatus.ADDED, process_id=process.id)

    def _preview(self, docket: str) -> ProcessSnapshot:
        try:
            return self._registry.fetch_by_docket(docket)
        except FetchError as exc:
            Log.warning(f"Registry preview failed for docket {docket}, registering anyway: {exc}")
            return ProcessSnapshot.not_found()

    def _owned_process(self, process_id: str, owner_id: str) -> MonitoredProcess:
        process = self._store.find_process(process_id)
        if process.owner_id != owner_id:
            raise OwnershipError(f"Process {process_id} is not owned by {owner_id}")
        return process

    def _record_usage(self, owner_id: str, units: int, *, action: str) -> None:
        try:
            self._metering.record_usage(owner_id, units, action=action)
        except MeteringError as exc:
            Log.error(f"Failed to record {units} unit(s) of {action} for owner {owner_id}: {exc}")


def build_monitor_service(settings: Settings) -> MonitorService:
    """Wire the repository, registry client, metering gateway and sync core."""
    store = MonitoringRepository()
    registry = RegistryClientFactory.create(settings)
    metering = MeteringGatewayFactory.create(settings)
    syncer = ProcessSyncer(
        registry,
        store,
        fetch_attempts=settings.registry_fetch_attempts,
        retry_wait_seconds=settings.registry_retry_wait_seconds,
        max_retry_after_seconds=settings.registry_max_retry_after_seconds,
    )
    coordinator = BatchSyncCoordinator(
        syncer, store, delay_seconds=settings.sync_all_delay_seconds
    )
    return MonitorService(store, registry, metering, coordinator, settings)
