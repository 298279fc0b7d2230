from dataclasses import dataclass
from datetime import date

from judicial_monitor.database.models import ActuationKey, actuation_key


@dataclass(frozen=True)
class FetchedActuation:
    """A procedural event as reported by the registry provider."""

    actuation_date: date
    actuation_type: str = ""
    annotation: str = ""
    start_date: date | None = None
    end_date: date | None = None

    @property
    def key(self) -> ActuationKey:
        return actuation_key(self.actuation_date, self.annotation)


@dataclass(frozen=True)
class Party:
    """A procedural subject (plaintiff, defendant, ...)."""

    name: str
    role: str = ""


@dataclass(frozen=True)
class ProcessSnapshot:
    """Normalized view of one case as currently known to the registry.

    ``found`` is False when the provider has no record of the docket. That
    is a valid answer, not an error.
    """

    found: bool
    forum: str | None = None
    actuations: tuple[FetchedActuation, ...] = ()
    most_recent_date: date | None = None
    most_recent_type: str | None = None
    case_type: str | None = None
    parties: tuple[Party, ...] = ()

    @classmethod
    def not_found(cls) -> "ProcessSnapshot":
        return cls(found=False)

    @property
    def plaintiff(self) -> str | None:
        return self._party_named("DEMANDANTE")

    @property
    def defendant(self) -> str | None:
        return self._party_named("DEMANDADO")

    def _party_named(self, role: str) -> str | None:
        for party in self.parties:
            if role in party.role.upper():
                return party.name
        return None
