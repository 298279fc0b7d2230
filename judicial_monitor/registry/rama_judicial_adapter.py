import re
from typing import Any

import httpx

from judicial_monitor.logging.logger import Log
from judicial_monitor.registry.base import BaseRegistryClient
from judicial_monitor.registry.exceptions import MalformedPayloadError
from judicial_monitor.registry.models import ProcessSnapshot
from judicial_monitor.registry.transport import decode_json, raise_for_status, send
from judicial_monitor.registry.validator import (
    build_actuations,
    build_snapshot,
    optional_str,
    parse_date,
    parse_parties_summary,
    require_list,
    require_object,
)

_NON_DIGITS = re.compile(r"\D")


class RamaJudicialClient(BaseRegistryClient):
    """Registry adapter for the public Rama Judicial consultation API.

    One lookup costs a search call, a detail call and one call per page of
    actuations.
    """

    def __init__(
        self,
        *,
        base_url: str,
        timeout_seconds: int,
        max_pages: int = 10,
        client: httpx.Client | None = None,
    ) -> None:
        self._client = client or httpx.Client(
            base_url=base_url,
            timeout=timeout_seconds,
            headers={"Accept": "application/json"},
        )
        self._max_pages = max(1, max_pages)

    def fetch_by_docket(self, docket: str) -> ProcessSnapshot:
        number = _NON_DIGITS.sub("", docket)
        Log.debug(f"Querying Rama Judicial for docket {number}")

        response = send(
            self._client,
            "GET",
            "/Procesos/Consulta/NumeroRadicacion",
            params={"numero": number, "SoloActivos": "false", "pagina": 1},
        )
        if response.status_code == 404:
            return ProcessSnapshot.not_found()
        raise_for_status(response)
        payload = require_object(decode_json(response), "Search response")

        procesos = require_list(payload.get("procesos"), "procesos")
        if not procesos:
            Log.info(f"Docket {number} not found in Rama Judicial")
            return ProcessSnapshot.not_found()

        proceso = _pick_process(procesos, number)
        process_id = _require_process_id(proceso.get("idProceso"))
        detail = self._get_object(f"/Proceso/Detalle/{process_id}", "Detail response")
        actuations = build_actuations(self._fetch_actuation_items(process_id))

        return build_snapshot(
            forum=optional_str(proceso.get("despacho"), "despacho"),
            actuations=actuations,
            case_type=optional_str(detail.get("tipoProceso"), "tipoProceso"),
            parties=parse_parties_summary(proceso.get("sujetosProcesales")),
            most_recent_date=(
                None
                if actuations
                else parse_date(proceso.get("fechaUltimaActuacion"), "fechaUltimaActuacion")
            ),
        )

    def _fetch_actuation_items(self, process_id: int) -> list[Any]:
        items: list[Any] = []
        page = 1
        while True:
            payload = self._get_object(
                f"/Proceso/Actuaciones/{process_id}",
                "Actuations response",
                params={"pagina": page},
            )
            items.extend(require_list(payload.get("actuaciones"), "actuaciones"))
            total_pages = _total_pages(payload.get("paginacion"))
            if page >= total_pages or page >= self._max_pages:
                if page < total_pages:
                    Log.warning(
                        f"Process {process_id} has {total_pages} actuation pages, "
                        f"reading only {self._max_pages}"
                    )
                return items
            page += 1

    def _get_object(
        self,
        path: str,
        what: str,
        params: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        response = send(self._client, "GET", path, params=params)
        raise_for_status(response)
        return require_object(decode_json(response), what)


def _pick_process(procesos: list[Any], number: str) -> dict[str, Any]:
    candidates = [require_object(p, "Process entry") for p in procesos]
    for candidate in candidates:
        if candidate.get("llaveProceso") == number:
            return candidate
    return candidates[0]


def _require_process_id(raw: Any) -> int:
    if isinstance(raw, bool) or not isinstance(raw, (int, str)):
        raise MalformedPayloadError("'idProceso' must be an integer")
    try:
        return int(raw)
    except ValueError as exc:
        raise MalformedPayloadError(f"'idProceso' must be an integer, got {raw!r}") from exc


def _total_pages(raw: Any) -> int:
    if raw is None:
        return 1
    pagination = require_object(raw, "paginacion")
    total = pagination.get("cantidadPaginas", 1)
    if isinstance(total, bool) or not isinstance(total, int):
        raise MalformedPayloadError("'paginacion.cantidadPaginas' must be an integer")
    return max(1, total)
