import uuid
from collections.abc import Generator, Sequence
from contextlib import contextmanager
from datetime import date
from typing import Any

import psycopg
from psycopg.rows import dict_row

from judicial_monitor.database.base import MonitoringStore
from judicial_monitor.database.connection import get_connection
from judicial_monitor.database.exceptions import (
    DuplicateMonitorError,
    ProcessNotFoundError,
    StoreError,
)
from judicial_monitor.database.models import (
    ActuationKey,
    ActuationRecord,
    MonitoredProcess,
    ProcessStatus,
    actuation_key,
)
from judicial_monitor.registry.models import FetchedActuation

_PROCESS_COLUMNS = """
    id, owner_id, docket, forum, case_type, plaintiff, defendant, status,
    notifications_enabled, last_actuation_date, last_actuation_desc,
    created_at, updated_at
"""

_ACTUATION_COLUMNS = """
    id, process_id, actuation_date, actuation_type, annotation,
    start_date, end_date, is_new, created_at
"""


@contextmanager
def _store_errors(action: str) -> Generator[None, None, None]:
    """Translate driver failures into StoreError."""
    try:
        yield
    except psycopg.Error as exc:
        raise StoreError(f"Failed to {action}: {exc}") from exc


class MonitoringRepository(MonitoringStore):
    """Database operations for monitored_processes and process_actuations."""

    def list_syncable_processes(self, owner_id: str) -> list[MonitoredProcess]:
        with _store_errors(f"list processes of owner {owner_id}"):
            with get_connection() as conn:
                with conn.cursor(row_factory=dict_row) as cur:
                    cur.execute(
                        f"""
                        SELECT {_PROCESS_COLUMNS}
                        FROM monitored_processes
                        WHERE owner_id = %s
                          AND status = 'active'
                          AND notifications_enabled
                        ORDER BY created_at, id
                        """,
                        (owner_id,),
                    )
                    rows = cur.fetchall()
        return [_to_process(row) for row in rows]

    def list_owners_with_active_processes(self) -> list[str]:
        with _store_errors("list owners with active processes"):
            with get_connection() as conn:
                with conn.cursor() as cur:
                    cur.execute(
                        """
                        SELECT DISTINCT owner_id
                        FROM monitored_processes
                        WHERE status = 'active'
                        ORDER BY owner_id
                        """
                    )
                    rows = cur.fetchall()
        return [row[0] for row in rows]

    def find_process(self, process_id: str) -> MonitoredProcess:
        """Find a monitored process by ID.

        Raises:
            ProcessNotFoundError: if no process with this ID exists.
        """
        if not _is_uuid(process_id):
            raise ProcessNotFoundError(f"Process {process_id} not found")
        with _store_errors(f"load process {process_id}"):
            with get_connection() as conn:
                with conn.cursor(row_factory=dict_row) as cur:
                    cur.execute(
                        f"SELECT {_PROCESS_COLUMNS} FROM monitored_processes WHERE id = %s",
                        (process_id,),
                    )
                    row = cur.fetchone()

        if row is None:
            raise ProcessNotFoundError(f"Process {process_id} not found")
        return _to_process(row)

    def find_by_docket(self, owner_id: str, docket: str) -> MonitoredProcess | None:
        with _store_errors(f"look up docket {docket}"):
            with get_connection() as conn:
                with conn.cursor(row_factory=dict_row) as cur:
                    cur.execute(
                        f"""
                        SELECT {_PROCESS_COLUMNS}
                        FROM monitored_processes
                        WHERE owner_id = %s AND docket = %s
                        """,
                        (owner_id, docket),
                    )
                    row = cur.fetchone()
        return _to_process(row) if row is not None else None

    def create_process(
        self,
        *,
        owner_id: str,
        docket: str,
        forum: str | None = None,
        case_type: str | None = None,
        plaintiff: str | None = None,
        defendant: str | None = None,
        last_actuation_date: date | None = None,
        last_actuation_desc: str | None = None,
        seed_actuations: Sequence[FetchedActuation] = (),
    ) -> MonitoredProcess:
        """Insert the process row and its seed actuations, committing once."""
        with _store_errors(f"create process for docket {docket}"):
            with get_connection() as conn:
                try:
                    with conn.cursor(row_factory=dict_row) as cur:
                        cur.execute(
                            f"""
                            INSERT INTO monitored_processes
                            (owner_id, docket, forum, case_type, plaintiff, defendant,
                             last_actuation_date, last_actuation_desc)
                            VALUES (%s, %s, %s, %s, %s, %s, %s, %s)
                            RETURNING {_PROCESS_COLUMNS}
                            """,
                            (
                                owner_id,
                                docket,
                                forum,
                                case_type,
                                plaintiff,
                                defendant,
                                last_actuation_date,
                                last_actuation_desc,
                            ),
                        )
                        row = cur.fetchone()
                        if row is None:
                            conn.rollback()
                            raise StoreError(f"Insert of docket {docket} returned no row")
                        _insert_actuation_rows(cur, str(row["id"]), seed_actuations, is_new=False)
                except psycopg.errors.UniqueViolation as exc:
                    conn.rollback()
                    raise DuplicateMonitorError(
                        f"Docket {docket} is already monitored by owner {owner_id}"
                    ) from exc
                except psycopg.Error:
                    conn.rollback()
                    raise
                conn.commit()

        return _to_process(row)

    def delete_process(self, process_id: str, owner_id: str) -> bool:
        with _store_errors(f"delete process {process_id}"):
            with get_connection() as conn:
                with conn.cursor() as cur:
                    cur.execute(
                        "DELETE FROM monitored_processes WHERE id = %s AND owner_id = %s",
                        (process_id, owner_id),
                    )
                    deleted = cur.rowcount > 0
                conn.commit()
        return deleted

    def set_notifications_enabled(self, process_id: str, owner_id: str, enabled: bool) -> None:
        """Raises ProcessNotFoundError if the owner has no such process."""
        with _store_errors(f"update notifications of process {process_id}"):
            with get_connection() as conn:
                with conn.cursor() as cur:
                    cur.execute(
                        """
                        UPDATE monitored_processes
                        SET notifications_enabled = %s, updated_at = NOW()
                        WHERE id = %s AND owner_id = %s
                        """,
                        (enabled, process_id, owner_id),
                    )
                    if cur.rowcount == 0:
                        raise ProcessNotFoundError(f"Process {process_id} not found")
                conn.commit()

    def get_actuation_keys(self, process_id: str) -> set[ActuationKey]:
        with _store_errors(f"load actuation keys of process {process_id}"):
            with get_connection() as conn:
                with conn.cursor() as cur:
                    cur.execute(
                        """
                        SELECT actuation_date, annotation
                        FROM process_actuations
                        WHERE process_id = %s
                        """,
                        (process_id,),
                    )
                    rows = cur.fetchall()
        return {actuation_key(row[0], row[1]) for row in rows}

    def insert_actuations(
        self,
        process_id: str,
        actuations: Sequence[FetchedActuation],
        *,
        is_new: bool,
    ) -> list[ActuationRecord]:
        """Insert actuations in one transaction.

        Keys already present are skipped by the dedup index, so a concurrent
        sync of the same process cannot insert an event twice.
        """
        if not actuations:
            return []
        with _store_errors(f"insert actuations of process {process_id}"):
            with get_connection() as conn:
                with conn.cursor(row_factory=dict_row) as cur:
                    inserted = _insert_actuation_rows(cur, process_id, actuations, is_new=is_new)
                conn.commit()
        return inserted

    def update_last_actuation(
        self,
        process_id: str,
        *,
        forum: str | None,
        last_actuation_date: date | None,
        last_actuation_desc: str | None,
    ) -> None:
        with _store_errors(f"update summary of process {process_id}"):
            with get_connection() as conn:
                with conn.cursor() as cur:
                    cur.execute(
                        """
                        UPDATE monitored_processes
                        SET forum = COALESCE(%s, forum),
                            last_actuation_date = COALESCE(%s, last_actuation_date),
                            last_actuation_desc = COALESCE(%s, last_actuation_desc),
                            updated_at = NOW()
                        WHERE id = %s
                        """,
                        (forum, last_actuation_date, last_actuation_desc, process_id),
                    )
                    if cur.rowcount == 0:
                        raise ProcessNotFoundError(f"Process {process_id} not found")
                conn.commit()

    def fill_missing_forum(self, process_id: str, forum: str) -> None:
        with _store_errors(f"fill forum of process {process_id}"):
            with get_connection() as conn:
                conn.execute(
                    """
                    UPDATE monitored_processes
                    SET forum = %s, updated_at = NOW()
                    WHERE id = %s AND forum IS NULL
                    """,
                    (forum, process_id),
                )
                conn.commit()

    def list_actuations(self, process_id: str) -> list[ActuationRecord]:
        with _store_errors(f"list actuations of process {process_id}"):
            with get_connection() as conn:
                with conn.cursor(row_factory=dict_row) as cur:
                    cur.execute(
                        f"""
                        SELECT {_ACTUATION_COLUMNS}
                        FROM process_actuations
                        WHERE process_id = %s
                        ORDER BY actuation_date DESC, created_at DESC
                        """,
                        (process_id,),
                    )
                    rows = cur.fetchall()
        return [_to_actuation(row) for row in rows]


def _insert_actuation_rows(
    cur: psycopg.Cursor[dict[str, Any]],
    process_id: str,
    actuations: Sequence[FetchedActuation],
    *,
    is_new: bool,
) -> list[ActuationRecord]:
    """Insert through an open cursor; the caller owns the transaction."""
    inserted: list[ActuationRecord] = []
    for actuation in actuations:
        # The conflict target must match the expression of process_actuations_dedup_hash_key.
        cur.execute(
            f"""
            INSERT INTO process_actuations
            (process_id, actuation_date, actuation_type, annotation,
             start_date, end_date, is_new)
            VALUES (%s, %s, %s, %s, %s, %s, %s)
            ON CONFLICT (process_id, actuation_date, (md5(annotation))) DO NOTHING
            RETURNING {_ACTUATION_COLUMNS}
            """,
            (
                process_id,
                actuation.actuation_date,
                actuation.actuation_type,
                actuation_key(actuation.actuation_date, actuation.annotation)[1],
                actuation.start_date,
                actuation.end_date,
                is_new,
            ),
        )
        row = cur.fetchone()
        if row is not None:
            inserted.append(_to_actuation(row))
    return inserted


def _is_uuid(value: str) -> bool:
    try:
        uuid.UUID(value)
    except ValueError:
        return False
    return True


def _to_process(row: dict[str, Any]) -> MonitoredProcess:
    return MonitoredProcess(
        id=str(row["id"]),
        owner_id=row["owner_id"],
        docket=row["docket"],
        forum=row["forum"],
        case_type=row["case_type"],
        plaintiff=row["plaintiff"],
        defendant=row["defendant"],
        status=ProcessStatus(row["status"]),
        notifications_enabled=row["notifications_enabled"],
        last_actuation_date=row["last_actuation_date"],
        last_actuation_desc=row["last_actuation_desc"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


def _to_actuation(row: dict[str, Any]) -> ActuationRecord:
    return ActuationRecord(
        id=str(row["id"]),
        process_id=str(row["process_id"]),
        actuation_date=row["actuation_date"],
        actuation_type=row["actuation_type"],
        annotation=row["annotation"],
        start_date=row["start_date"],
        end_date=row["end_date"],
        is_new=row["is_new"],
        created_at=row["created_at"],
    )
