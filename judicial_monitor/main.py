import json
from collections.abc import Callable, Generator
from contextlib import contextmanager
from dataclasses import asdict
from pathlib import Path
from typing import Any, Optional

import typer

from judicial_monitor.config.settings import Settings
from judicial_monitor.database.connection import close_pool, init_pool
from judicial_monitor.database.exceptions import StoreError
from judicial_monitor.logging.logger import Log
from judicial_monitor.metering.exceptions import AuthorizationDenied, MeteringError
from judicial_monitor.registry.exceptions import FetchError
from judicial_monitor.service.exceptions import InvalidDocketError, OwnershipError
from judicial_monitor.service.monitor_service import MonitorService, build_monitor_service
from judicial_monitor.worker.sweeper import Sweeper

EXIT_FAILURE = 1
EXIT_DENIED = 2

app = typer.Typer(help="Monitor judicial processes and sync their actuations")


@contextmanager
def _service() -> Generator[tuple[MonitorService, Settings], None, None]:
    """Initialize pool -> build dependencies -> yield; always close the pool."""
    settings = Settings()
    Log.configure(settings.log_level)
    init_pool(settings)
    try:
        yield build_monitor_service(settings), settings
    finally:
        close_pool()


def _run(action: Callable[[MonitorService, Settings], Any]) -> None:
    try:
        with _service() as (service, settings):
            payload = action(service, settings)
    except AuthorizationDenied as exc:
        typer.echo(f"Authorization denied: {exc}", err=True)
        raise typer.Exit(EXIT_DENIED) from exc
    except (
        InvalidDocketError,
        OwnershipError,
        StoreError,
        FetchError,
        MeteringError,
    ) as exc:
        typer.echo(f"{type(exc).__name__}: {exc}", err=True)
        raise typer.Exit(EXIT_FAILURE) from exc
    if payload is not None:
        typer.echo(json.dumps(payload, indent=2, default=str))


@app.command()
def lookup(docket: str = typer.Argument(..., help="Docket number (radicado)")) -> None:
    """Preview a docket in the registry without storing anything."""
    _run(lambda service, _: asdict(service.lookup(docket)))


@app.command()
def add(
    owner_id: str = typer.Argument(..., help="Owner (lawyer) id"),
    docket: str = typer.Argument(..., help="Docket number (radicado)"),
) -> None:
    """Start monitoring a docket."""
    _run(lambda service, _: asdict(service.add_monitor(owner_id, docket)))


@app.command("bulk-add")
def bulk_add(
    owner_id: str = typer.Argument(..., help="Owner (lawyer) id"),
    dockets: Optional[str] = typer.Argument(
        None, help="Dockets separated by newlines, commas or semicolons"
    ),
    file: Optional[Path] = typer.Option(
        None, "--file", exists=True, dir_okay=False, help="Read dockets from a file"
    ),
) -> None:
    """Start monitoring many dockets at once."""
    if file is not None:
        raw_text = file.read_text(encoding="utf-8")
    elif dockets is not None:
        raw_text = dockets
    else:
        typer.echo("Provide dockets or --file", err=True)
        raise typer.Exit(EXIT_FAILURE)
    _run(lambda service, _: service.add_monitors(owner_id, raw_text).to_dict())


@app.command()
def remove(
    owner_id: str = typer.Argument(..., help="Owner (lawyer) id"),
    process_id: str = typer.Argument(..., help="Monitored process id"),
) -> None:
    """Stop monitoring a process and delete its actuations."""

    def action(service: MonitorService, _: Settings) -> dict[str, Any]:
        service.remove_monitor(process_id, owner_id)
        return {"removed": process_id}

    _run(action)


@app.command()
def notifications(
    owner_id: str = typer.Argument(..., help="Owner (lawyer) id"),
    process_id: str = typer.Argument(..., help="Monitored process id"),
    enabled: bool = typer.Option(True, "--enable/--disable"),
) -> None:
    """Pause or resume syncing of a process."""
    _run(lambda service, _: asdict(service.set_notifications(process_id, owner_id, enabled)))


@app.command()
def actuations(
    owner_id: str = typer.Argument(..., help="Owner (lawyer) id"),
    process_id: str = typer.Argument(..., help="Monitored process id"),
) -> None:
    """List the stored actuations of a process, most recent first."""
    _run(
        lambda service, _: [asdict(a) for a in service.list_actuations(process_id, owner_id)]
    )


@app.command()
def sync(
    owner_id: str = typer.Argument(..., help="Owner (lawyer) id"),
    process_id: str = typer.Argument(..., help="Monitored process id"),
) -> None:
    """Sync one process (metered)."""
    _run(lambda service, _: service.sync_process(process_id, owner_id).to_dict())


@app.command("sync-all")
def sync_all(owner_id: str = typer.Argument(..., help="Owner (lawyer) id")) -> None:
    """Sync every active process of an owner (metered)."""
    _run(lambda service, _: service.sync_all(owner_id).to_dict())


@app.command("check-updates")
def check_updates(
    owner_id: str = typer.Argument(..., help="Owner (lawyer) id"),
    process_id: Optional[str] = typer.Option(
        None, "--process-id", help="Check only this process"
    ),
) -> None:
    """Check an owner's processes for new actuations (unmetered)."""
    _run(lambda service, _: service.check_updates(owner_id, process_id=process_id).to_dict())


@app.command()
def sweep() -> None:
    """Check updates for every owner with active processes."""
    _run(lambda service, settings: Sweeper(service, settings).run().to_dict())


def main() -> None:
    app()


if __name__ == "__main__":
    main()
