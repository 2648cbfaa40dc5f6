"""
CLI interface for AI Spend Dashboard.

Renders the daily spend series in the terminal and exports it as chart JSON.
"""

import json
import math
import sys
from dataclasses import replace
from datetime import date
from pathlib import Path
from typing import Optional

import typer
import yaml
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from ai_spend_dashboard.config.loader import DashboardConfig, load_dashboard_config
from ai_spend_dashboard.config.logging_setup import configure_logging
from ai_spend_dashboard.core.dashboard import (
    DashboardSession,
    DashboardStatus,
    DashboardView,
)
from ai_spend_dashboard.core.dates import DATE_FORMAT_HINT, format_date, parse_date
from ai_spend_dashboard.core.filters import FilterCriteria
from ai_spend_dashboard.core.pricing import InvalidCostRateError
from ai_spend_dashboard.storage.fetch import DatasetFetchError, load_datasets

app = typer.Typer()
console = Console()

EXIT_CODE_OK = 0
EXIT_CODE_FAIL = 1

BAR_WIDTH = 30


def _status_to_exit_code(status: DashboardStatus) -> int:
    """Convert dashboard status to CLI exit code."""
    return {
        DashboardStatus.READY: EXIT_CODE_OK,
        DashboardStatus.EMPTY: EXIT_CODE_OK,
        DashboardStatus.LOADING: EXIT_CODE_FAIL,
        DashboardStatus.FAILED: EXIT_CODE_FAIL,
    }[status]


def _parse_date_option(value: Optional[str]) -> Optional[date]:
    if value is None:
        return None
    try:
        return parse_date(value)
    except ValueError:
        console.print(f"[red]Error:[/] '{escape(value)}' is not a valid date, expected {DATE_FORMAT_HINT}")
        sys.exit(EXIT_CODE_FAIL)


def _build_criteria(
    usage_type: Optional[str],
    model: Optional[str],
    start: Optional[str],
    end: Optional[str]
) -> FilterCriteria:
    return FilterCriteria(
        type=usage_type,
        model=model,
        start_date=_parse_date_option(start),
        end_date=_parse_date_option(end)
    )


CONFIG_OPTION = typer.Option(None, "--config", "-c", help="YAML configuration file")
USAGES_OPTION = typer.Option(None, "--usages", help="Usage CSV file or URL (overrides config)")
COSTS_OPTION = typer.Option(None, "--costs", help="Cost CSV file or URL (overrides config)")
TYPE_OPTION = typer.Option(None, "--type", "-t", help="Only include this usage type")
MODEL_OPTION = typer.Option(None, "--model", "-m", help="Only include this model")
START_OPTION = typer.Option(
    None, "--start", "-s",
    help=f"First day to include ({DATE_FORMAT_HINT})"
)
END_OPTION = typer.Option(
    None, "--end", "-e",
    help=f"Last day to include ({DATE_FORMAT_HINT})"
)


def _load_config(
    config_path: Optional[str],
    usages: Optional[str],
    costs: Optional[str]
) -> DashboardConfig:
    config = load_dashboard_config(config_path) if config_path else DashboardConfig()
    if usages or costs:
        config = replace(config, datasets=replace(
            config.datasets,
            usages=usages or config.datasets.usages,
            costs=costs or config.datasets.costs
        ))
    return config


def _open_session(config: DashboardConfig, criteria: FilterCriteria) -> DashboardView:
    """Load both datasets into a new session and apply the filters."""
    session = DashboardSession(style=config.chart)
    try:
        session.load(load_datasets(config))
    except (DatasetFetchError, InvalidCostRateError) as e:
        return session.fail(str(e))
    return session.select(criteria)


def _build_view(
    config_path: Optional[str],
    usages: Optional[str],
    costs: Optional[str],
    criteria: FilterCriteria
) -> DashboardView:
    try:
        config = _load_config(config_path, usages, costs)
    except (FileNotFoundError, ValueError, yaml.YAMLError) as e:
        console.print(f"[red]Configuration error:[/] {escape(str(e))}")
        sys.exit(EXIT_CODE_FAIL)
    return _open_session(config, criteria)


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging")
):
    """AI Spend Dashboard CLI."""
    configure_logging(verbose)
    if ctx.invoked_subcommand is None:
        console.print("AI Spend Dashboard - Use --help to see available commands")


@app.command()
def show(
    config_path: Optional[str] = CONFIG_OPTION,
    usages: Optional[str] = USAGES_OPTION,
    costs: Optional[str] = COSTS_OPTION,
    usage_type: Optional[str] = TYPE_OPTION,
    model: Optional[str] = MODEL_OPTION,
    start: Optional[str] = START_OPTION,
    end: Optional[str] = END_OPTION
):
    """Show daily spend for the selected filters."""
    criteria = _build_criteria(usage_type, model, start, end)
    view = _build_view(config_path, usages, costs, criteria)

    if view.status is DashboardStatus.READY:
        _display_daily_spend(view)
    else:
        _display_status(view)
    sys.exit(_status_to_exit_code(view.status))


@app.command()
def options(
    config_path: Optional[str] = CONFIG_OPTION,
    usages: Optional[str] = USAGES_OPTION,
    costs: Optional[str] = COSTS_OPTION
):
    """List the available types, models and date range."""
    view = _build_view(config_path, usages, costs, FilterCriteria())

    if view.status is not DashboardStatus.READY:
        _display_status(view)
        sys.exit(_status_to_exit_code(view.status))

    console.print(f"[bold]Types:[/bold] {escape(', '.join(view.options.types))}")
    console.print(f"[bold]Models:[/bold] {escape(', '.join(view.options.models))}")
    console.print(f"[bold]Dates:[/bold] {_format_range(view)}")
    sys.exit(EXIT_CODE_OK)


@app.command()
def export(
    config_path: Optional[str] = CONFIG_OPTION,
    usages: Optional[str] = USAGES_OPTION,
    costs: Optional[str] = COSTS_OPTION,
    usage_type: Optional[str] = TYPE_OPTION,
    model: Optional[str] = MODEL_OPTION,
    start: Optional[str] = START_OPTION,
    end: Optional[str] = END_OPTION,
    output: Optional[Path] = typer.Option(
        None, "--output", "-o", help="Write the chart JSON to this file instead of stdout"
    )
):
    """Export the chart-ready series as JSON."""
    criteria = _build_criteria(usage_type, model, start, end)
    view = _build_view(config_path, usages, costs, criteria)

    if view.status is DashboardStatus.FAILED:
        _display_status(view)
        sys.exit(EXIT_CODE_FAIL)

    payload = json.dumps(_view_to_payload(view), indent=2, allow_nan=False)
    if output is not None:
        output.write_text(payload + "\n", encoding="utf-8")
        console.print(f"[green]✓[/] Chart data written to {output}")
    else:
        typer.echo(payload)
    sys.exit(EXIT_CODE_OK)


def _view_to_payload(view: DashboardView) -> dict:
    """JSON-safe payload: chart series plus picker bounds and options."""
    bounds = view.bounds
    return {
        "status": view.status.value,
        "message": view.message,
        "chart": view.chart.to_dict() if view.chart else None,
        "minDate": format_date(bounds.min_date) if bounds.min_date else None,
        "maxDate": format_date(bounds.max_date) if bounds.max_date else None,
        "types": list(view.options.types),
        "models": list(view.options.models),
    }


def _format_currency(amount: float) -> str:
    """Format currency with proper symbols and formatting."""
    if not math.isfinite(amount):
        return "n/a"
    return f"${amount:,.2f}"


def _format_range(view: DashboardView) -> str:
    if view.bounds.min_date is None:
        return "none"
    return f"{format_date(view.bounds.min_date)} - {format_date(view.bounds.max_date)}"


def _display_status(view: DashboardView):
    """Display a non-ready state."""
    if view.status is DashboardStatus.FAILED:
        console.print(f"[red]Error:[/] {escape(view.message)}")
    else:
        console.print(f"\n[bold yellow]{view.message}[/]\n")


def _display_daily_spend(view: DashboardView):
    """Display the daily series as a table with a bar per day."""
    console.print("\n[bold]AI Spend by Day[/bold]")
    console.print("-" * 40)

    if not view.aggregates:
        console.print("\n[dim]No usage matches the selected filters.[/]")
        return

    valid_costs = [entry.total_cost for entry in view.aggregates if math.isfinite(entry.total_cost)]
    peak = max(valid_costs, default=0.0)

    table = Table()
    table.add_column("Date")
    table.add_column("Cost", justify="right")
    table.add_column("")
    for entry in view.aggregates:
        if not math.isfinite(entry.total_cost):
            table.add_row(format_date(entry.date), "[red]n/a[/]", "")
            continue
        width = round(entry.total_cost / peak * BAR_WIDTH) if peak > 0 else 0
        table.add_row(format_date(entry.date), _format_currency(entry.total_cost), "█" * width)
    console.print(table)

    console.print(f"Total: {_format_currency(view.total_cost)}")
    console.print(f"Days: {len(view.aggregates)} ({_format_range(view)})")
    if view.invalid_days:
        console.print(
            f"[yellow]Warning:[/] {len(view.invalid_days)} day(s) use cost rates "
            "or units that are not finite numbers"
        )


if __name__ == "__main__":
    app()
