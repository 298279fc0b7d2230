from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any

from judicial_monitor.database.models import ActuationRecord, MonitoredProcess


class SyncOutcome(str, Enum):
    """Terminal state of one case's sync.

    Fetching -> {NotFound | Fetched} -> Reconciling -> {NoChange | Persisting}
    -> Done, with Failed reachable from Fetching or Persisting.
    """

    NOT_FOUND = "not_found"
    NO_CHANGE = "no_change"
    PERSISTED = "persisted"
    FAILED = "failed"


@dataclass(frozen=True)
class SyncAttemptResult:
    """Outcome of syncing one monitored process."""

    process_id: str
    docket: str
    outcome: SyncOutcome
    new_actuations: tuple[ActuationRecord, ...] = ()
    error: str | None = None
    error_type: str | None = None

    @classmethod
    def failed(cls, process: MonitoredProcess, exc: Exception) -> "SyncAttemptResult":
        return cls(
            process_id=process.id,
            docket=process.docket,
            outcome=SyncOutcome.FAILED,
            error=str(exc),
            error_type=type(exc).__name__,
        )

    @property
    def success(self) -> bool:
        return self.outcome != SyncOutcome.FAILED

    @property
    def new_actuation_count(self) -> int:
        return len(self.new_actuations)

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["success"] = self.success
        data["new_actuation_count"] = self.new_actuation_count
        return data


@dataclass
class BatchSyncResult:
    """Per-case results of a batch, in the order the cases were loaded."""

    owner_id: str
    results: list[SyncAttemptResult] = field(default_factory=list)
    cancelled: bool = False

    @property
    def attempted(self) -> int:
        return len(self.results)

    @property
    def succeeded(self) -> int:
        return sum(1 for r in self.results if r.success)

    @property
    def failed(self) -> int:
        return self.attempted - self.succeeded

    @property
    def total_new_actuations(self) -> int:
        return sum(r.new_actuation_count for r in self.results)

    def to_dict(self) -> dict[str, Any]:
        return {
            "owner_id": self.owner_id,
            "attempted": self.attempted,
            "succeeded": self.succeeded,
            "failed": self.failed,
            "total_new_actuations": self.total_new_actuations,
            "cancelled": self.cancelled,
            "results": [r.to_dict() for r in self.results],
        }
