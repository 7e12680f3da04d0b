"""labdata generate command - generate a dataset and write it to a sink."""

from __future__ import annotations

import signal
import sys
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime
from typing import Any

import click

from labdata_cli.errors import handle_labdata_error, handle_validation_error
from labdata_cli.output import info, print_row_counts, success, warning

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR"]


@contextmanager
def cancel_on_interrupt(token: Any) -> Iterator[None]:
    """Cancel ``token`` on Ctrl+C instead of killing the process mid-stage."""
    if threading.current_thread() is not threading.main_thread():
        yield
        return

    def _handler(signum: int, frame: Any) -> None:
        warning("Interrupted: finishing the running stage, then stopping")
        token.cancel()

    previous = signal.signal(signal.SIGINT, _handler)
    try:
        yield
    finally:
        signal.signal(signal.SIGINT, previous)


@click.command("generate")
@click.option("--seed", type=int, default=None, help="Root random seed [default: 42]")
@click.option(
    "--customers",
    type=click.IntRange(min=0),
    default=None,
    help="Number of customer accounts [default: 500]",
)
@click.option(
    "--leads",
    type=click.IntRange(min=0),
    default=None,
    help="Number of sales leads [default: 1000]",
)
@click.option(
    "-o",
    "--out",
    "out",
    required=True,
    help="Target: DIR, parquet://DIR, csv://DIR, iceberg://NAMESPACE or memory://",
)
@click.option(
    "-c",
    "--config",
    "config_path",
    type=click.Path(),
    default=None,
    help="YAML file with generator settings",
)
@click.option(
    "--as-of",
    type=click.DateTime(formats=["%Y-%m-%d"]),
    default=None,
    help="Reference date for relative dates [default: today]",
)
@click.option(
    "--workers",
    type=click.IntRange(1, 32),
    default=None,
    help="Stage worker pool size [default: 4]",
)
@click.option(
    "--stage",
    "stages",
    multiple=True,
    help="Generate only this stage and its ancestors (repeatable)",
)
@click.option(
    "--log-level",
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    default="WARNING",
    help="Log level for stderr logs [default: WARNING]",
)
@click.option("--json-logs", is_flag=True, default=False, help="Emit JSON log lines")
def generate(
    seed: int | None,
    customers: int | None,
    leads: int | None,
    out: str,
    config_path: str | None,
    as_of: datetime | None,
    workers: int | None,
    stages: tuple[str, ...],
    log_level: str,
    json_logs: bool,
) -> None:
    """Generate a synthetic dataset and write it as one batch.

    Every stage runs after its parents, on a bounded worker pool. The batch
    is written all-or-nothing: on any failure nothing reaches the target.

    Examples:

        labdata generate --seed 42 --customers 500 --out lab-data/

        labdata generate --config lab.yaml --out csv://exports/lab

        labdata generate --customers 50 --stage usage --out memory://
    """
    # Import here to avoid heavy imports at CLI startup
    from pydantic import ValidationError as PydanticValidationError

    from labdata_synthetic.config import GeneratorConfig
    from labdata_synthetic.errors import LabDataError
    from labdata_synthetic.loaders import sink_from_uri, write_dataset
    from labdata_synthetic.observability import configure_logging
    from labdata_synthetic.pipeline import CancellationToken, GenerationPipeline

    configure_logging(log_level=log_level, json_format=json_logs, stream=sys.stderr)

    overrides: dict[str, Any] = {
        "seed": seed,
        "customers": customers,
        "leads": leads,
        "as_of": as_of.date() if as_of else None,
        "max_workers": workers,
        "stages": tuple(stages) or None,
    }
    overrides = {key: value for key, value in overrides.items() if value is not None}

    try:
        if config_path:
            config = GeneratorConfig.from_yaml(config_path, **overrides)
        else:
            config = GeneratorConfig(**overrides)
    except PydanticValidationError as e:
        handle_validation_error(e, "command line")
    except LabDataError as e:
        handle_labdata_error(e)

    token = CancellationToken()
    try:
        sink = sink_from_uri(out)
        pipeline = GenerationPipeline(config, cancellation=token)
        info(
            f"Generating seed={config.seed} customers={config.customers} "
            f"leads={config.leads} as_of={config.as_of.isoformat()}"
        )
        with cancel_on_interrupt(token):
            dataset = pipeline.run()
        results = write_dataset(dataset, sink)
    except LabDataError as e:
        handle_labdata_error(e)

    print_row_counts(dataset.row_counts())
    success(f"Wrote {len(results)} tables to {sink.describe()}")
