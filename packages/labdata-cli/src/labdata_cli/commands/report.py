"""labdata report command - summarize a generated Parquet dataset."""

from __future__ import annotations

from datetime import date, datetime

import click

from labdata_cli.errors import EXIT_SYSTEM_ERROR, CLIError
from labdata_cli.output import print_record_cards, print_records, print_row_counts

VIEWS = ["counts", "customer-360", "revenue"]
LAYOUTS = ["auto", "table", "vertical"]

# Wider views print one field/value table per row under "auto"
MAX_TABLE_COLUMNS = 8


@click.command("report")
@click.option(
    "-i",
    "--input",
    "input_dir",
    type=click.Path(),
    required=True,
    help="Directory written by 'labdata generate' (Parquet)",
)
@click.option(
    "--view",
    type=click.Choice(VIEWS),
    default="counts",
    help="Report to print [default: counts]",
)
@click.option(
    "--as-of",
    type=click.DateTime(formats=["%Y-%m-%d"]),
    default=None,
    help="Reference date for tenure and ticket windows [default: today]",
)
@click.option("--limit", type=click.IntRange(min=1), default=20, help="Rows to print")
@click.option(
    "--column",
    "columns",
    multiple=True,
    help="Only print this column of the view (repeatable)",
)
@click.option(
    "--layout",
    type=click.Choice(LAYOUTS),
    default="auto",
    help=f"Row layout; auto is vertical above {MAX_TABLE_COLUMNS} columns [default: auto]",
)
def report(
    input_dir: str,
    view: str,
    as_of: datetime | None,
    limit: int,
    columns: tuple[str, ...],
    layout: str,
) -> None:
    """Print row counts or a reporting view of a generated dataset.

    Examples:

        labdata report --input lab-data/

        labdata report --input lab-data/ --view customer-360 --as-of 2025-06-30

        labdata report --input lab-data/ --view revenue --column segment --column total_mrr
    """
    from labdata_synthetic.loaders import read_parquet_dir
    from labdata_synthetic.reporting import customer_360, revenue_summary

    try:
        tables = read_parquet_dir(input_dir)
    except FileNotFoundError as e:
        raise CLIError(str(e), exit_code=EXIT_SYSTEM_ERROR) from e
    if not tables:
        raise CLIError(f"No Parquet tables found in {input_dir}")

    if view == "counts":
        print_row_counts({name: table.num_rows for name, table in tables.items()}, title="Rows")
        return

    try:
        if view == "customer-360":
            result = customer_360(tables, as_of=as_of.date() if as_of else date.today())
        else:
            result = revenue_summary(tables)
    except KeyError as e:
        raise CLIError(f"Dataset in {input_dir} is missing table {e}") from e

    unknown = [c for c in columns if c not in result.column_names]
    if unknown:
        raise CLIError(
            f"Unknown column(s) for {view}: {', '.join(unknown)}. "
            f"Available: {', '.join(result.column_names)}"
        )
    selected = list(columns) or result.column_names

    if layout == "auto":
        layout = "vertical" if len(selected) > MAX_TABLE_COLUMNS else "table"
    printer = print_record_cards if layout == "vertical" else print_records
    printer(
        result.slice(0, limit).select(selected).to_pylist(),
        columns=selected,
        title=f"{view} ({result.num_rows} rows)",
    )
