from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum

ActuationKey = tuple[date, str]


def actuation_key(actuation_date: date, annotation: str | None) -> ActuationKey:
    """Dedup identity of an actuation within one process: (date, annotation).

    A missing annotation counts as the empty string. The actuation type is
    not part of the key.
    """
    return (actuation_date, (annotation or "").strip())


class ProcessStatus(str, Enum):
    ACTIVE = "active"
    TERMINATED = "terminated"
    SUSPENDED = "suspended"


@dataclass(frozen=True)
class MonitoredProcess:
    """Represents a row from the monitored_processes table."""

    id: str
    owner_id: str
    docket: str
    forum: str | None = None
    case_type: str | None = None
    plaintiff: str | None = None
    defendant: str | None = None
    status: ProcessStatus = ProcessStatus.ACTIVE
    notifications_enabled: bool = True
    last_actuation_date: date | None = None
    last_actuation_desc: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def is_syncable(self) -> bool:
        return self.status == ProcessStatus.ACTIVE and self.notifications_enabled


@dataclass(frozen=True)
class ActuationRecord:
    """Represents a row from the process_actuations table."""

    id: str
    process_id: str
    actuation_date: date
    actuation_type: str
    annotation: str
    start_date: date | None = None
    end_date: date | None = None
    is_new: bool = True
    created_at: datetime | None = None

    @property
    def key(self) -> ActuationKey:
        return actuation_key(self.actuation_date, self.annotation)
