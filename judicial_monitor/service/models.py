from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any

from judicial_monitor.sync.models import BatchSyncResult


class BulkAddStatus(str, Enum):
    ADDED = "added"
    DUPLICATE = "duplicate"
    FAILED = "failed"


@dataclass(frozen=True)
class BulkAddEntry:
    docket: str
    status: BulkAddStatus
    process_id: str | None = None
    error: str | None = None


@dataclass
class BulkAddResult:
    """Per-docket outcome of a bulk registration, in input order."""

    owner_id: str
    entries: list[BulkAddEntry] = field(default_factory=list)
    cancelled: bool = False

    def count(self, status: BulkAddStatus) -> int:
        return sum(1 for e in self.entries if e.status == status)

    def to_dict(self) -> dict[str, Any]:
        return {
            "owner_id": self.owner_id,
            "added": self.count(BulkAddStatus.ADDED),
            "duplicate": self.count(BulkAddStatus.DUPLICATE),
            "failed": self.count(BulkAddStatus.FAILED),
            "cancelled": self.cancelled,
            "entries": [asdict(e) for e in self.entries],
        }


@dataclass(frozen=True)
class OwnerSweepResult:
    owner_id: str
    batch: BatchSyncResult | None = None
    error: str | None = None

    @property
    def success(self) -> bool:
        return self.error is None


@dataclass
class SweepResult:
    """Outcome of one pass over every owner with active processes."""

    owners: list[OwnerSweepResult] = field(default_factory=list)
    interrupted: bool = False

    @property
    def processes_checked(self) -> int:
        return sum(o.batch.attempted for o in self.owners if o.batch is not None)

    @property
    def total_new_actuations(self) -> int:
        return sum(o.batch.total_new_actuations for o in self.owners if o.batch is not None)

    @property
    def failed_owners(self) -> list[str]:
        return [o.owner_id for o in self.owners if not o.success]

    def to_dict(self) -> dict[str, Any]:
        return {
            "owners": len(self.owners),
            "processes_checked": self.processes_checked,
            "total_new_actuations": self.total_new_actuations,
            "failed_owners": self.failed_owners,
            "interrupted": self.interrupted,
        }
