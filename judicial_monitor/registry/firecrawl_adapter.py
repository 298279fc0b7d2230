from typing import Any, ClassVar
from urllib.parse import quote

import httpx

from judicial_monitor.logging.logger import Log
from judicial_monitor.registry.base import BaseRegistryClient
from judicial_monitor.registry.exceptions import FetchError
from judicial_monitor.registry.models import ProcessSnapshot
from judicial_monitor.registry.transport import decode_json, raise_for_status, send
from judicial_monitor.registry.validator import (
    build_actuations,
    build_parties,
    build_snapshot,
    optional_str,
    parse_date,
    require_list,
    require_object,
)


class FirecrawlClient(BaseRegistryClient):
    """Registry adapter that scrapes the Rama Judicial portal through Firecrawl.

    Used when the consultation API is unreachable from the deployment
    network. Firecrawl renders the portal page and extracts structured JSON
    with the prompt below.
    """

    PORTAL_URL: ClassVar[str] = (
        "https://consultaprocesos.ramajudicial.gov.co/Procesos/NumeroRadicacion"
        "?llave={docket}&Generate=Consultar"
    )
    EXTRACTION_PROMPT: ClassVar[str] = (
        "Extract all judicial process information from this Colombian Rama Judicial page. "
        "Return a JSON object with: "
        "processes: array of objects with llaveProceso, despacho, tipoProceso, "
        "fechaUltimaActuacion, sujetos (array of nombre, tipoSujeto such as DEMANDANTE "
        "or DEMANDADO) and actuaciones (array of fechaActuacion, actuacion, anotacion, "
        "fechaInicia, fechaFinaliza); "
        "found: boolean indicating if the process was found."
    )

    def __init__(
        self,
        *,
        api_key: str,
        base_url: str,
        timeout_seconds: int,
        wait_for_ms: int = 5000,
        client: httpx.Client | None = None,
    ) -> None:
        self._client = client or httpx.Client(
            base_url=base_url,
            timeout=timeout_seconds,
            headers={"Authorization": f"Bearer {api_key}"},
        )
        self._wait_for_ms = wait_for_ms

    def fetch_by_docket(self, docket: str) -> ProcessSnapshot:
        target_url = self.PORTAL_URL.format(docket=quote(docket, safe=""))
        Log.debug(f"Scraping {target_url} via Firecrawl")

        response = send(
            self._client,
            "POST",
            "/scrape",
            json={
                "url": target_url,
                "formats": ["json"],
                "jsonOptions": {"prompt": self.EXTRACTION_PROMPT},
                "waitFor": self._wait_for_ms,
                "onlyMainContent": True,
            },
        )
        raise_for_status(response)
        payload = require_object(decode_json(response), "Scrape response")
        if payload.get("success") is False:
            raise FetchError(f"Firecrawl scrape failed: {payload.get('error', 'unknown error')}")

        extracted = _extracted_json(payload)
        if extracted is None or extracted.get("found") is False:
            return ProcessSnapshot.not_found()
        processes = require_list(extracted.get("processes"), "processes")
        if not processes:
            Log.info(f"Docket {docket} not found on the Rama Judicial portal")
            return ProcessSnapshot.not_found()

        process = _pick_process(processes, docket)
        actuations = build_actuations(
            process.get("actuaciones"),
            start_field="fechaInicia",
            end_field="fechaFinaliza",
        )
        return build_snapshot(
            forum=optional_str(process.get("despacho"), "despacho"),
            actuations=actuations,
            case_type=optional_str(process.get("tipoProceso"), "tipoProceso"),
            parties=build_parties(process.get("sujetos")),
            most_recent_date=(
                None
                if actuations
                else parse_date(process.get("fechaUltimaActuacion"), "fechaUltimaActuacion")
            ),
        )


def _extracted_json(payload: dict[str, Any]) -> dict[str, Any] | None:
    data = payload.get("data")
    raw = require_object(data, "Scrape data").get("json") if data is not None else None
    if raw is None:
        raw = payload.get("json")
    if raw is None:
        return None
    return require_object(raw, "Extracted JSON")


def _pick_process(processes: list[Any], docket: str) -> dict[str, Any]:
    candidates = [require_object(p, "Process entry") for p in processes]
    digits = "".join(ch for ch in docket if ch.isdigit())
    for candidate in candidates:
        key = candidate.get("llaveProceso")
        if isinstance(key, str) and "".join(ch for ch in key if ch.isdigit()) == digits:
            return candidate
    return candidates[0]
