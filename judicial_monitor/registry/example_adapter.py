"""Example registry adapter.

Use this module as a reference when implementing new registry providers.
Implement BaseRegistryClient and register the provider in RegistryClientFactory.
"""

from datetime import date
from typing import ClassVar

from judicial_monitor.registry.base import BaseRegistryClient
from judicial_monitor.registry.models import FetchedActuation, Party, ProcessSnapshot
from judicial_monitor.registry.validator import build_snapshot


class ExampleRegistryClient(BaseRegistryClient):
    """Offline adapter that answers every docket with the same fixed case.

    Dockets listed in ``unknown_dockets`` are reported as not found.
    """

    DEFAULT_ACTUATIONS: ClassVar[tuple[FetchedActuation, ...]] = (
        FetchedActuation(
            actuation_date=date(2024, 2, 1),
            actuation_type="Radicación de proceso",
            annotation="Actuación de radicación de proceso realizada",
        ),
        FetchedActuation(
            actuation_date=date(2024, 2, 20),
            actuation_type="Auto admite demanda",
            annotation="",
        ),
    )

    def __init__(self, unknown_dockets: frozenset[str] = frozenset()) -> None:
        self._unknown_dockets = unknown_dockets

    def fetch_by_docket(self, docket: str) -> ProcessSnapshot:
        if docket in self._unknown_dockets:
            return ProcessSnapshot.not_found()
        return build_snapshot(
            forum="Juzgado de ejemplo",
            actuations=list(self.DEFAULT_ACTUATIONS),
            case_type="Declarativo",
            parties=[
                Party(name="DEMANDANTE DE EJEMPLO", role="Demandante"),
                Party(name="DEMANDADO DE EJEMPLO", role="Demandado"),
            ],
        )
