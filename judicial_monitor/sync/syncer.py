import time

from tenacity import (
    RetryCallState,
    Retrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from judicial_monitor.database.base import MonitoringStore
from judicial_monitor.database.exceptions import StoreError
from judicial_monitor.database.models import MonitoredProcess
from judicial_monitor.logging.logger import Log
from judicial_monitor.registry.base import BaseRegistryClient
from judicial_monitor.registry.exceptions import (
    FetchError,
    RegistryNetworkError,
    RegistryRateLimitedError,
)
from judicial_monitor.registry.models import ProcessSnapshot
from judicial_monitor.sync.models import SyncAttemptResult, SyncOutcome
from judicial_monitor.sync.reconciler import reconcile

TRANSIENT_FETCH_ERRORS = (RegistryNetworkError, RegistryRateLimitedError)


class ProcessSyncer:
    """Syncs one monitored process: fetch -> reconcile -> persist -> summarize.

    Never raises for fetch or store failures; they become a failed
    SyncAttemptResult.
    """

    def __init__(
        self,
        registry: BaseRegistryClient,
        store: MonitoringStore,
        *,
        fetch_attempts: int = 1,
        retry_wait_seconds: float = 1.0,
        max_retry_after_seconds: float = 60.0,
    ) -> None:
        self._registry = registry
        self._store = store
        self._fetch_attempts = max(1, fetch_attempts)
        retry_wait_seconds = max(0.0, retry_wait_seconds)
        self._backoff = wait_exponential(
            multiplier=retry_wait_seconds, max=retry_wait_seconds * 8
        )
        self._max_retry_after_seconds = max_retry_after_seconds

    def sync_one(self, process: MonitoredProcess) -> SyncAttemptResult:
        Log.info(f"Syncing process {process.id} (docket {process.docket})")
        try:
            snapshot = self._fetch(process.docket)
        except FetchError as exc:
            Log.warning(f"Registry fetch failed for docket {process.docket}: {exc}")
            return SyncAttemptResult.failed(process, exc)

        if not snapshot.found:
            Log.info(f"Docket {process.docket} not found in registry, nothing to do")
            return SyncAttemptResult(
                process_id=process.id,
                docket=process.docket,
                outcome=SyncOutcome.NOT_FOUND,
            )

        try:
            result = self._apply(process, snapshot)
        except StoreError as exc:
            Log.error(f"Store failure while syncing process {process.id}: {exc}")
            return SyncAttemptResult.failed(process, exc)

        Log.info(
            f"Process {process.id} synced: {result.outcome.value}, "
            f"{result.new_actuation_count} new actuation(s)"
        )
        return result

    def _fetch(self, docket: str) -> ProcessSnapshot:
        retryer = Retrying(
            stop=stop_after_attempt(self._fetch_attempts) | self._retry_after_too_long,
            wait=self._wait,
            retry=retry_if_exception_type(TRANSIENT_FETCH_ERRORS),
            before_sleep=_log_retry,
            sleep=time.sleep,
            reraise=True,
        )
        return retryer(self._registry.fetch_by_docket, docket)

    def _wait(self, retry_state: RetryCallState) -> float:
        """Exponential backoff, never shorter than the provider's Retry-After."""
        delay = self._backoff(retry_state)
        retry_after = _retry_after(retry_state)
        return max(delay, retry_after) if retry_after is not None else delay

    def _retry_after_too_long(self, retry_state: RetryCallState) -> bool:
        retry_after = _retry_after(retry_state)
        return retry_after is not None and retry_after > self._max_retry_after_seconds

    def _apply(self, process: MonitoredProcess, snapshot: ProcessSnapshot) -> SyncAttemptResult:
        existing_keys = self._store.get_actuation_keys(process.id)
        new_actuations = reconcile(existing_keys, snapshot.actuations)
        Log.debug(
            f"Process {process.id}: {len(new_actuations)} of "
            f"{len(snapshot.actuations)} fetched actuation(s) are new"
        )

        if not new_actuations:
            self._keep_forum_filled(process, snapshot)
            return self._result(process, SyncOutcome.NO_CHANGE)

        inserted = self._store.insert_actuations(process.id, new_actuations, is_new=True)
        if not inserted:
            # A concurrent sync of the same process stored them first.
            self._keep_forum_filled(process, snapshot)
            return self._result(process, SyncOutcome.NO_CHANGE)

        self._store.update_last_actuation(
            process.id,
            forum=snapshot.forum,
            last_actuation_date=snapshot.most_recent_date,
            last_actuation_desc=snapshot.most_recent_type,
        )
        return SyncAttemptResult(
            process_id=process.id,
            docket=process.docket,
            outcome=SyncOutcome.PERSISTED,
            new_actuations=tuple(inserted),
        )

    def _keep_forum_filled(self, process: MonitoredProcess, snapshot: ProcessSnapshot) -> None:
        if snapshot.forum is not None and process.forum is None:
            self._store.fill_missing_forum(process.id, snapshot.forum)

    @staticmethod
    def _result(process: MonitoredProcess, outcome: SyncOutcome) -> SyncAttemptResult:
        return SyncAttemptResult(process_id=process.id, docket=process.docket, outcome=outcome)


def _retry_after(retry_state: RetryCallState) -> float | None:
    exc = retry_state.outcome.exception() if retry_state.outcome is not None else None
    if isinstance(exc, RegistryRateLimitedError):
        return exc.retry_after
    return None


def _log_retry(retry_state: RetryCallState) -> None:
    exc = retry_state.outcome.exception() if retry_state.outcome is not None else None
    delay = retry_state.next_action.sleep if retry_state.next_action is not None else 0.0
    Log.warning(
        f"Registry fetch attempt {retry_state.attempt_number} failed, "
        f"retrying in {delay:.1f}s: {exc}"
    )
