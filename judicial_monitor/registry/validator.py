"""Validates raw registry payloads and builds ProcessSnapshot values.

Provider JSON is never trusted: every field read here is type-checked and
any mismatch raises MalformedPayloadError.
"""

from datetime import date, datetime
from typing import Any

from judicial_monitor.registry.exceptions import MalformedPayloadError
from judicial_monitor.registry.models import FetchedActuation, Party, ProcessSnapshot

_DATE_FORMATS = ("%d/%m/%Y", "%d-%m-%Y", "%Y/%m/%d")


def require_object(raw: Any, what: str) -> dict[str, Any]:
    if not isinstance(raw, dict):
        raise MalformedPayloadError(f"{what} must be an object")
    return raw


def require_list(raw: Any, what: str) -> list[Any]:
    if raw is None:
        return []
    if not isinstance(raw, list):
        raise MalformedPayloadError(f"{what} must be a list")
    return raw


def optional_str(raw: Any, what: str) -> str | None:
    """Return a stripped string, or None for null/blank values."""
    if raw is None:
        return None
    if not isinstance(raw, str):
        raise MalformedPayloadError(f"{what} must be a string or null")
    stripped = raw.strip()
    return stripped or None


def parse_date(raw: Any, what: str) -> date | None:
    """Parse an ISO date/datetime (or dd/mm/yyyy) string.

    Returns None for null or blank values.
    """
    text = optional_str(raw, what)
    if text is None:
        return None
    try:
        return date.fromisoformat(text[:10])
    except ValueError:
        pass
    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    raise MalformedPayloadError(f"{what} is not a valid date: {text!r}")


def build_actuation(
    raw: Any,
    index: int,
    *,
    start_field: str,
    end_field: str,
) -> FetchedActuation | None:
    """Build one actuation; returns None when the entry carries no date."""
    item = require_object(raw, f"Actuation at index {index}")
    actuation_date = parse_date(item.get("fechaActuacion"), f"Actuation {index} date")
    if actuation_date is None:
        return None
    return FetchedActuation(
        actuation_date=actuation_date,
        actuation_type=optional_str(item.get("actuacion"), f"Actuation {index} type") or "",
        annotation=optional_str(item.get("anotacion"), f"Actuation {index} annotation") or "",
        start_date=parse_date(item.get(start_field), f"Actuation {index} start date"),
        end_date=parse_date(item.get(end_field), f"Actuation {index} end date"),
    )


def build_actuations(
    raw: Any,
    *,
    start_field: str = "fechaInicial",
    end_field: str = "fechaFinal",
) -> list[FetchedActuation]:
    actuations: list[FetchedActuation] = []
    for i, item in enumerate(require_list(raw, "actuaciones")):
        actuation = build_actuation(item, i, start_field=start_field, end_field=end_field)
        if actuation is not None:
            actuations.append(actuation)
    return actuations


def build_parties(raw: Any, *, name_field: str = "nombre") -> list[Party]:
    parties: list[Party] = []
    for i, item in enumerate(require_list(raw, "sujetos")):
        entry = require_object(item, f"Party at index {i}")
        name = optional_str(entry.get(name_field), f"Party {i} name")
        if name is None:
            continue
        role = optional_str(entry.get("tipoSujeto"), f"Party {i} role") or ""
        parties.append(Party(name=name, role=role))
    return parties


def parse_parties_summary(raw: Any) -> list[Party]:
    """Parse a summary like ``"Demandante: ACME S.A. | Demandado: JUAN PEREZ"``."""
    text = optional_str(raw, "sujetosProcesales")
    if text is None:
        return []
    parties: list[Party] = []
    for chunk in text.split("|"):
        role, sep, name = chunk.partition(":")
        if not sep:
            continue
        name = name.strip()
        if name:
            parties.append(Party(name=name, role=role.strip()))
    return parties


def build_snapshot(
    *,
    forum: str | None,
    actuations: list[FetchedActuation],
    case_type: str | None = None,
    parties: list[Party] | None = None,
    most_recent_date: date | None = None,
    most_recent_type: str | None = None,
) -> ProcessSnapshot:
    """Assemble a found snapshot, deriving the most recent actuation if absent.

    Ties on the latest date resolve to the first such actuation in
    provider order.
    """
    latest = _latest(actuations)
    if most_recent_date is None and latest is not None:
        most_recent_date = latest.actuation_date
    if most_recent_type is None and latest is not None:
        most_recent_type = latest.actuation_type or None
    return ProcessSnapshot(
        found=True,
        forum=forum,
        actuations=tuple(actuations),
        most_recent_date=most_recent_date,
        most_recent_type=most_recent_type,
        case_type=case_type,
        parties=tuple(parties or ()),
    )


def _latest(actuations: list[FetchedActuation]) -> FetchedActuation | None:
    latest: FetchedActuation | None = None
    for actuation in actuations:
        if latest is None or actuation.actuation_date > latest.actuation_date:
            latest = actuation
    return latest
