import threading
import time

from judicial_monitor.config.settings import Settings
from judicial_monitor.logging.logger import Log
from judicial_monitor.service.models import OwnerSweepResult, SweepResult
from judicial_monitor.service.monitor_service import MonitorService


class Sweeper:
    """One pass over every owner: list owners -> check updates -> pace."""

    def __init__(self, service: MonitorService, settings: Settings) -> None:
        self._service = service
        self._settings = settings

    def run(self, cancel: threading.Event | None = None) -> SweepResult:
        """Check updates for every owner with active processes.

        A failing owner is recorded and the sweep moves on. Ctrl-C ends the
        sweep with the owners checked so far.
        """
        result = SweepResult()
        owners = self._service.list_owners()
        Log.info(f"Sweep started for {len(owners)} owner(s)")

        try:
            for index, owner_id in enumerate(owners):
                result.owners.append(self._sweep_owner(owner_id, cancel))
                if cancel is not None and cancel.is_set():
                    result.interrupted = True
                    break
                if index < len(owners) - 1:
                    time.sleep(self._settings.sweep_owner_delay_seconds)
        except KeyboardInterrupt:
            result.interrupted = True
            Log.info("Sweep shutting down gracefully")

        Log.info(
            f"Sweep finished: {result.processes_checked} process(es) checked, "
            f"{result.total_new_actuations} new actuation(s), "
            f"{len(result.failed_owners)} owner(s) failed"
        )
        return result

    def _sweep_owner(self, owner_id: str, cancel: threading.Event | None) -> OwnerSweepResult:
        try:
            batch = self._service.check_updates(owner_id, cancel=cancel)
        except Exception as exc:
            Log.error(f"Sweep failed for owner {owner_id}: {exc}")
            return OwnerSweepResult(owner_id=owner_id, error=str(exc))
        return OwnerSweepResult(owner_id=owner_id, batch=batch)
