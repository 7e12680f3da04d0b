"""labdata stages command - show the generation DAG."""

from __future__ import annotations

import click

from labdata_cli.output import print_json, print_records


@click.command("stages")
@click.option("--json", "as_json", is_flag=True, default=False, help="Output as JSON")
def stages(as_json: bool) -> None:
    """List generation stages in execution order with their parents.

    Examples:

        labdata stages

        labdata stages --json
    """
    from labdata_synthetic.generators import STAGES

    records = []
    for name in STAGES.topological_order():
        stage = STAGES.get(name)
        records.append(
            {
                "stage": name,
                "depends_on": list(stage.depends_on),
                "description": stage.description,
            }
        )

    if as_json:
        print_json(records)
        return

    print_records(
        [{**r, "depends_on": ", ".join(r["depends_on"]) or "-"} for r in records],
        columns=["stage", "depends_on", "description"],
        title="Generation stages",
    )
