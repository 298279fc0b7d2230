import re

from judicial_monitor.service.exceptions import InvalidDocketError

MIN_DOCKET_LENGTH = 10

_WHITESPACE = re.compile(r"\s+")
_LIST_SEPARATORS = re.compile(r"[\n,;]")
_DOCKET_CHARS = re.compile(r"[0-9-]+")


def normalize_docket(raw: str) -> str:
    """Remove whitespace and validate a docket number (radicado).

    Raises:
        InvalidDocketError: if the docket is too short or has characters
            other than digits and hyphens.
    """
    docket = _WHITESPACE.sub("", raw or "")
    if len(docket) < MIN_DOCKET_LENGTH:
        raise InvalidDocketError(
            f"Docket '{docket}' is shorter than {MIN_DOCKET_LENGTH} characters"
        )
    if not _DOCKET_CHARS.fullmatch(docket):
        raise InvalidDocketError(f"Docket '{docket}' may only contain digits and hyphens")
    return docket


def parse_docket_list(text: str) -> list[str]:
    """Split pasted text into candidate dockets.

    Entries are separated by newlines, commas or semicolons. Whitespace is
    removed, entries shorter than MIN_DOCKET_LENGTH are dropped and
    duplicates are removed keeping the first occurrence.
    """
    dockets: list[str] = []
    for chunk in _LIST_SEPARATORS.split(text or ""):
        candidate = _WHITESPACE.sub("", chunk)
        if len(candidate) < MIN_DOCKET_LENGTH or candidate in dockets:
            continue
        dockets.append(candidate)
    return dockets
