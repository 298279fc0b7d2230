from collections.abc import Iterable, Set

from judicial_monitor.database.models import ActuationKey
from judicial_monitor.registry.models import FetchedActuation


def reconcile(
    existing_keys: Set[ActuationKey],
    incoming: Iterable[FetchedActuation],
) -> list[FetchedActuation]:
    """Return the incoming actuations whose (date, annotation) key is unknown.

    Output keeps the incoming order. A key repeated within ``incoming`` is
    returned once (first occurrence). ``existing_keys`` is not mutated.
    """
    seen = set(existing_keys)
    new: list[FetchedActuation] = []
    for actuation in incoming:
        key = actuation.key
        if key in seen:
            continue
        seen.add(key)
        new.append(actuation)
    return new
