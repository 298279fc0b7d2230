import threading
import time

from judicial_monitor.database.base import MonitoringStore
from judicial_monitor.database.models import MonitoredProcess
from judicial_monitor.logging.logger import Log
from judicial_monitor.sync.models import BatchSyncResult, SyncAttemptResult
from judicial_monitor.sync.syncer import ProcessSyncer


class BatchSyncCoordinator:
    """Sync an owner's processes one at a time, paced, without aborting early.

    Processes run sequentially with ``delay_seconds`` between registry calls
    to stay inside the provider's rate limit. Cancellation is checked after
    each case, never in the middle of one.
    """

    def __init__(
        self,
        syncer: ProcessSyncer,
        store: MonitoringStore,
        *,
        delay_seconds: float,
    ) -> None:
        self._syncer = syncer
        self._store = store
        self._delay_seconds = delay_seconds

    def load_batch(self, owner_id: str) -> list[MonitoredProcess]:
        """Active, notification-enabled processes of the owner. Raises StoreError."""
        return self._store.list_syncable_processes(owner_id)

    def sync_all(
        self,
        owner_id: str,
        *,
        delay_seconds: float | None = None,
        cancel: threading.Event | None = None,
    ) -> BatchSyncResult:
        processes = self.load_batch(owner_id)
        return self.sync_batch(owner_id, processes, delay_seconds=delay_seconds, cancel=cancel)

    def sync_batch(
        self,
        owner_id: str,
        processes: list[MonitoredProcess],
        *,
        delay_seconds: float | None = None,
        cancel: threading.Event | None = None,
    ) -> BatchSyncResult:
        delay = self._delay_seconds if delay_seconds is None else delay_seconds
        result = BatchSyncResult(owner_id=owner_id)
        Log.info(f"Batch sync of {len(processes)} process(es) for owner {owner_id}")

        for index, process in enumerate(processes):
            result.results.append(self.sync_one(process))
            remaining = len(processes) - index - 1
            if remaining == 0:
                break
            if cancel is not None and cancel.is_set():
                result.cancelled = True
                Log.warning(
                    f"Batch sync for owner {owner_id} cancelled, "
                    f"{remaining} process(es) skipped"
                )
                break
            Log.debug(f"Pacing {delay}s before next registry call")
            time.sleep(delay)

        Log.info(
            f"Batch sync for owner {owner_id} finished: {result.succeeded} ok, "
            f"{result.failed} failed, {result.total_new_actuations} new actuation(s)"
        )
        return result

    def sync_process(self, process_id: str) -> SyncAttemptResult:
        """Sync one process by id. Raises ProcessNotFoundError if it does not exist."""
        return self.sync_one(self._store.find_process(process_id))

    def sync_one(self, process: MonitoredProcess) -> SyncAttemptResult:
        try:
            return self._syncer.sync_one(process)
        except Exception as exc:
            Log.error(f"Unexpected error syncing process {process.id}: {exc}")
            return SyncAttemptResult.failed(process, exc)
