from __future__ import annotations

from pathlib import Path
from typing import List, Optional

import typer

from app.executor import FileQueryExecutor
from core.facets.alignment import CONFLICT_POLICIES
from core.facets.errors import QueryExecutionError
from core.facets.pipeline import ChartState, prepare_chart
from core.facets.ticks import format_tick
from core.facets.validation import validate_config

from ..common import console, load_or_exit, print_json

chart_app = typer.Typer(help="Validate widget configs and reshape captured query results")

EXIT_PLACEHOLDER = 2


@chart_app.command("validate")
def validate(
    config: Optional[Path] = typer.Option(None, "--config", "-c", help="Widget configuration file"),
) -> None:
    """Check the configured axes, query and facet clause."""
    settings = load_or_exit(config)
    result = validate_config(settings.widget)
    print_json({"config": settings.widget.to_dict(), **result.to_dict()})
    if not result.ok:
        raise typer.Exit(code=EXIT_PLACEHOLDER)


@chart_app.command("transform")
def transform(
    rows: Path = typer.Argument(..., help="Captured query result (JSON)"),
    config: Optional[Path] = typer.Option(None, "--config", "-c", help="Widget configuration file"),
    out: Optional[Path] = typer.Option(None, "--out", "-o", help="Export points to .csv or .json"),
    conflict_policy: Optional[str] = typer.Option(None, "--conflict-policy", help="error or overwrite"),
) -> None:
    """Run validation and the facet transform over a captured result file."""
    settings = load_or_exit(config)
    policy = conflict_policy or settings.conflict_policy
    if policy not in CONFLICT_POLICIES:
        console().print(f"[red]Unknown conflict policy:[/] {policy}")
        raise typer.Exit(code=1)

    widget = settings.widget
    try:
        raw_rows = FileQueryExecutor(rows).execute(widget.query, widget.data_source_id)
    except QueryExecutionError as exc:
        state = ChartState.from_error(exc)
    else:
        state = prepare_chart(widget, raw_rows, conflict_policy=policy)

    if not state.ok:
        print_json(state.to_dict())
        raise typer.Exit(code=EXIT_PLACEHOLDER)

    if out is None:
        print_json(state.to_dict())
        return

    from core.facets.export import records_to_frame, write_frame

    frame = records_to_frame(state.series)
    try:
        written = write_frame(frame, out)
    except ValueError as exc:
        console().print(f"[red]{exc}[/]")
        raise typer.Exit(code=1) from exc
    console().print(f"[green]Wrote {len(frame)} points across {len(state.series)} series to {written}[/]")


@chart_app.command("ticks")
def ticks(
    values: List[float] = typer.Argument(..., help="Numeric tick values"),
    locale: str = typer.Option("en", "--locale", "-l"),
) -> None:
    """Print tick labels as the chart axis would show them."""
    for value in values:
        console().print(format_tick(value, locale))
