import itertools
from collections.abc import Sequence
from dataclasses import replace
from datetime import date

import pytest

from judicial_monitor.database.base import MonitoringStore
from judicial_monitor.database.exceptions import DuplicateMonitorError, ProcessNotFoundError
from judicial_monitor.database.models import (
    ActuationKey,
    ActuationRecord,
    MonitoredProcess,
    ProcessStatus,
)
from judicial_monitor.registry.base import BaseRegistryClient
from judicial_monitor.registry.models import FetchedActuation, ProcessSnapshot


class InMemoryMonitoringStore(MonitoringStore):
    """Dict-backed store with the same skip-on-conflict and COALESCE semantics."""

    def __init__(self) -> None:
        self.processes: dict[str, MonitoredProcess] = {}
        self.actuations: dict[str, list[ActuationRecord]] = {}
        self._process_ids = itertools.count(1)
        self._actuation_ids = itertools.count(1)

    def add_process(self, **fields: object) -> MonitoredProcess:
        fields.setdefault("id", f"proc-{next(self._process_ids)}")
        fields.setdefault("owner_id", "owner-1")
        fields.setdefault("docket", "11001310300320200012300")
        process = MonitoredProcess(**fields)  # type: ignore[arg-type]
        self.processes[process.id] = process
        self.actuations.setdefault(process.id, [])
        return process

    def list_syncable_processes(self, owner_id: str) -> list[MonitoredProcess]:
        return [p for p in self.processes.values() if p.owner_id == owner_id and p.is_syncable]

    def list_owners_with_active_processes(self) -> list[str]:
        return sorted(
            {p.owner_id for p in self.processes.values() if p.status == ProcessStatus.ACTIVE}
        )

    def find_process(self, process_id: str) -> MonitoredProcess:
        if process_id not in self.processes:
            raise ProcessNotFoundError(f"Process {process_id} not found")
        return self.processes[process_id]

    def find_by_docket(self, owner_id: str, docket: str) -> MonitoredProcess | None:
        for process in self.processes.values():
            if process.owner_id == owner_id and process.docket == docket:
                return process
        return None

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
        if self.find_by_docket(owner_id, docket) is not None:
            raise DuplicateMonitorError(f"Docket {docket} is already monitored")
        process = self.add_process(
            owner_id=owner_id,
            docket=docket,
            forum=forum,
            case_type=case_type,
            plaintiff=plaintiff,
            defendant=defendant,
            last_actuation_date=last_actuation_date,
            last_actuation_desc=last_actuation_desc,
        )
        # One transaction in the repository: a failed seed leaves no process.
        try:
            self.insert_actuations(process.id, seed_actuations, is_new=False)
        except Exception:
            del self.processes[process.id]
            self.actuations.pop(process.id, None)
            raise
        return process

    def delete_process(self, process_id: str, owner_id: str) -> bool:
        process = self.processes.get(process_id)
        if process is None or process.owner_id != owner_id:
            return False
        del self.processes[process_id]
        self.actuations.pop(process_id, None)
        return True

    def set_notifications_enabled(self, process_id: str, owner_id: str, enabled: bool) -> None:
        process = self.find_process(process_id)
        if process.owner_id != owner_id:
            raise ProcessNotFoundError(f"Process {process_id} not found")
        self.processes[process_id] = replace(process, notifications_enabled=enabled)

    def get_actuation_keys(self, process_id: str) -> set[ActuationKey]:
        return {a.key for a in self.actuations.get(process_id, [])}

    def insert_actuations(
        self,
        process_id: str,
        actuations: Sequence[FetchedActuation],
        *,
        is_new: bool,
    ) -> list[ActuationRecord]:
        stored = self.actuations.setdefault(process_id, [])
        keys = {a.key for a in stored}
        inserted: list[ActuationRecord] = []
        for actuation in actuations:
            key = actuation.key
            if key in keys:
                continue
            keys.add(key)
            record = ActuationRecord(
                id=f"act-{next(self._actuation_ids)}",
                process_id=process_id,
                actuation_date=actuation.actuation_date,
                actuation_type=actuation.actuation_type,
                annotation=key[1],
                start_date=actuation.start_date,
                end_date=actuation.end_date,
                is_new=is_new,
            )
            stored.append(record)
            inserted.append(record)
        return inserted

    def update_last_actuation(
        self,
        process_id: str,
        *,
        forum: str | None,
        last_actuation_date: date | None,
        last_actuation_desc: str | None,
    ) -> None:
        process = self.find_process(process_id)
        self.processes[process_id] = replace(
            process,
            forum=forum if forum is not None else process.forum,
            last_actuation_date=last_actuation_date or process.last_actuation_date,
            last_actuation_desc=last_actuation_desc or process.last_actuation_desc,
        )

    def fill_missing_forum(self, process_id: str, forum: str) -> None:
        process = self.find_process(process_id)
        if process.forum is None:
            self.processes[process_id] = replace(process, forum=forum)

    def list_actuations(self, process_id: str) -> list[ActuationRecord]:
        return sorted(
            self.actuations.get(process_id, []),
            key=lambda a: a.actuation_date,
            reverse=True,
        )


class FakeRegistryClient(BaseRegistryClient):
    """Registry stand-in keyed by docket.

    A response may be a snapshot, an exception to raise, or a list of those
    consumed one per call (the last one repeats).
    """

    def __init__(self, responses: dict[str, object] | None = None) -> None:
        self.responses: dict[str, object] = dict(responses or {})
        self.calls: list[str] = []

    def fetch_by_docket(self, docket: str) -> ProcessSnapshot:
        self.calls.append(docket)
        response = self.responses.get(docket, ProcessSnapshot.not_found())
        if isinstance(response, list):
            response = response.pop(0) if len(response) > 1 else response[0]
        if isinstance(response, Exception):
            raise response
        assert isinstance(response, ProcessSnapshot)
        return response


@pytest.fixture()
def store() -> InMemoryMonitoringStore:
    return InMemoryMonitoringStore()


@pytest.fixture()
def registry() -> FakeRegistryClient:
    return FakeRegistryClient()

