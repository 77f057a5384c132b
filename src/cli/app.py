"""Typer application entrypoint."""

from __future__ import annotations

import logging
import os
import sys
from enum import Enum
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from harvest import DecodeMode, HarvestConfig, HarvestError, HarvestResult, get_default_config, run_harvest
from harvest.errors import HarvestTimeoutError
from harvest.sink import write_records, write_records_to_path
from logging_config import configure_logging


logger = logging.getLogger(__name__)


class Verbosity(str, Enum):
    OFF = "off"
    ERROR = "error"
    WARN = "warn"
    INFO = "info"
    DEBUG = "debug"
    TRACE = "trace"


_LEVELS = {
    Verbosity.OFF: "CRITICAL",
    Verbosity.ERROR: "ERROR",
    Verbosity.WARN: "WARNING",
    Verbosity.INFO: "INFO",
    Verbosity.DEBUG: "DEBUG",
    Verbosity.TRACE: "DEBUG",
}


app = typer.Typer(help="Harvest PatientID and PatientName from every DICOM file under a directory")


def _metric_summary(metrics: dict) -> str:
    keys = ["files_discovered", "records", "files_failed", "traversal_errors", "elapsed_seconds"]
    return " ".join(f"{key}={metrics[key]}" for key in keys if key in metrics)


def _print_summary(result: HarvestResult) -> None:
    metrics = result.metrics()
    table = Table(title="Harvest summary")
    table.add_column("Metric")
    table.add_column("Value", justify="right")
    for key in ("files_discovered", "records", "files_failed", "traversal_errors", "elapsed_seconds"):
        table.add_row(key, str(metrics[key]))
    for kind, count in metrics["failures"].items():
        table.add_row(f"  {kind}", str(count))
    Console(stderr=True).print(table)


@app.command()
def main(
    input: Path = typer.Option(..., "--input", "-i", help="Root directory to scan"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write JSON here instead of stdout"),
    verbosity: Verbosity = typer.Option(Verbosity.INFO, "--verbosity", "-v", case_sensitive=False),
    mode: Optional[DecodeMode] = typer.Option(
        None, "--mode", help="bounded stops after PatientID, full parses the whole file"
    ),
    workers: Optional[int] = typer.Option(None, "--workers", "-w", help="Concurrent decodes"),
    process_pool: bool = typer.Option(False, "--process-pool", help="Decode in worker processes"),
    follow_symlinks: bool = typer.Option(False, "--follow-symlinks"),
    timeout: Optional[float] = typer.Option(None, "--timeout", help="Abort the run after this many seconds"),
    summary: bool = typer.Option(False, "--summary", help="Print run metrics to stderr"),
) -> None:
    configure_logging(_LEVELS[verbosity])

    overrides: dict = {}
    if mode is not None:
        overrides["decode_mode"] = mode
    if workers is not None:
        overrides["max_workers"] = workers
    if process_pool:
        overrides["use_process_pool"] = True
    if follow_symlinks:
        overrides["follow_symlinks"] = True
    if timeout is not None:
        overrides["timeout_seconds"] = timeout
    try:
        base = get_default_config(input)
        config = HarvestConfig(**{**base.model_dump(), **overrides})
    except ValueError as exc:
        typer.echo(f"Invalid options: {exc}", err=True)
        raise typer.Exit(code=1)

    try:
        result = run_harvest(config)
        # The output file is only created once the harvest itself succeeded.
        if output is not None:
            write_records_to_path(result.records, output)
        else:
            write_records(result.records, sys.stdout.buffer)
    except HarvestTimeoutError as exc:
        typer.echo(f"Error: {exc}", err=True)
        # Hung decode threads are joined at interpreter exit; skip that.
        sys.stdout.flush()
        sys.stderr.flush()
        os._exit(1)
    except HarvestError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from exc

    logger.info("Harvest complete root=%s %s", config.input_root, _metric_summary(result.metrics()))

    if summary:
        _print_summary(result)


if __name__ == "__main__":  # pragma: no cover
    app()
