"""Typer CLI entrypoint for the fuzzy row matcher."""

from __future__ import annotations

import sqlite3
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional

import typer
from rich import box
from rich.console import Console
from rich.table import Table

from .config import ConfigRepository, RunConfiguration
from .engine import RunReport
from .errors import FuzzyRowMatcherError
from .infra import SQLiteManager, run_script
from .logging_conf import (
    available_run_logs,
    configure_logging,
    default_log_dir,
    release_run_logger,
    run_logger,
    tail_log,
)
from .orchestrator import Orchestrator, new_run_timestamp

app = typer.Typer(
    help="Fuzzy row matcher command line tool",
    no_args_is_help=True,
    rich_markup_mode=None,
)
log_app = typer.Typer(
    name="log",
    help="Inspect matcher log files",
    no_args_is_help=True,
    rich_markup_mode=None,
)

console = Console()


@dataclass
class AppState:
    repository: ConfigRepository
    storage: SQLiteManager
    runner: Callable[[RunConfiguration, str], RunReport]
    verbose: bool = False


def _default_runner(storage: SQLiteManager, verbose: bool) -> Callable[[RunConfiguration, str], RunReport]:
    def _run(config: RunConfiguration, run_timestamp: str) -> RunReport:
        logger = run_logger(run_timestamp, verbose)
        try:
            return Orchestrator(config, storage=storage, logger=logger).run(run_timestamp)
        finally:
            release_run_logger(run_timestamp)

    return _run


def build_state(verbose: bool) -> AppState:
    configure_logging(verbose=verbose)
    storage = SQLiteManager()
    return AppState(
        repository=ConfigRepository(),
        storage=storage,
        runner=_default_runner(storage, verbose),
        verbose=verbose,
    )


def _get_state(ctx: typer.Context) -> AppState:
    state = ctx.obj
    if state is None:
        state = build_state(verbose=False)
        ctx.obj = state
    return state


def _format_number(value: float) -> str:
    return f"{value:,.4f}".rstrip("0").rstrip(".")


def _render_summary_table(report: RunReport) -> Table:
    table = Table(title=f"Run {report.run_timestamp}", box=box.SIMPLE_HEAD, show_header=False)
    table.add_column("Metric", style="cyan", no_wrap=True)
    table.add_column("Value", style="green", justify="right")
    table.add_row("Rows", f"{report.row_count:,}")
    table.add_row("Comparisons", f"{report.comparison_count:,}")
    table.add_row("Matches", f"{report.match_count:,}")
    table.add_row("Duplicates", f"{report.duplicate_count:,}")
    return table


def _render_stats_table(report: RunReport) -> Table:
    table = Table(title="Algorithm statistics", box=box.SIMPLE_HEAD)
    table.add_column("Algorithm", style="cyan", no_wrap=True)
    for label in ("Min", "P25", "Median", "P75", "Max", "Mean", "Std dev"):
        table.add_column(label, justify="right")
    for kind, stats in report.per_algorithm_stats.items():
        table.add_row(
            kind.value,
            *(
                _format_number(value)
                for value in (
                    stats.min,
                    stats.p25,
                    stats.median,
                    stats.p75,
                    stats.max,
                    stats.mean,
                    stats.stddev,
                )
            ),
        )
    return table


app.add_typer(log_app, name="log", help="View run logs")


@app.callback()
def main(
    ctx: typer.Context, verbose: bool = typer.Option(False, "--verbose", help="Enable debug logging")
) -> None:
    ctx.obj = build_state(verbose)


@app.command("run", help="Run a fuzzy match described by a YAML/JSON configuration file.")
def run_command(
    ctx: typer.Context,
    config_path: Path = typer.Argument(..., help="Run configuration file."),
) -> None:
    state = _get_state(ctx)
    try:
        config = state.repository.load(config_path)
    except (FileNotFoundError, FuzzyRowMatcherError) as exc:
        console.print(f"Cannot load configuration: {exc}", style="red")
        raise typer.Exit(code=1)
    run_timestamp = new_run_timestamp()
    try:
        report = state.runner(config, run_timestamp)
    except (FileNotFoundError, sqlite3.Error, FuzzyRowMatcherError) as exc:
        console.print(f"Run {run_timestamp} failed: {exc}", style="red")
        raise typer.Exit(code=1)
    console.print(_render_summary_table(report))
    if report.per_algorithm_stats:
        console.print(_render_stats_table(report))
    else:
        console.print("No algorithm produced a score.", style="dim")
    if config.target is not None:
        console.print(
            f"Results written to {config.target.path} (tables suffixed _{report.run_timestamp}).",
            style="dim",
        )


@app.command("bootstrap", help="Create the run tables in a SQLite target.")
def bootstrap_command(
    ctx: typer.Context,
    target_db: Path = typer.Argument(..., help="SQLite database file."),
    timestamp: Optional[str] = typer.Option(None, "--timestamp", help="Table suffix; defaults to now."),
) -> None:
    state = _get_state(ctx)
    run_timestamp = timestamp or new_run_timestamp()
    conn = state.storage.connect(target_db)
    try:
        success = run_script(conn, run_timestamp)
    except (FuzzyRowMatcherError, ValueError) as exc:
        console.print(str(exc), style="red")
        raise typer.Exit(code=1)
    finally:
        conn.close()
    if not success:
        console.print("Failed to build database tables, see the error log.", style="red")
        raise typer.Exit(code=1)
    console.print(f"Tables created with suffix _{run_timestamp}.", style="green")


@app.command("template", help="Write a run configuration template.")
def template_command(
    ctx: typer.Context,
    output: Path = typer.Argument(Path("fuzzy_match.yaml"), help="Destination file."),
    force: bool = typer.Option(False, "--force", help="Overwrite an existing file."),
) -> None:
    state = _get_state(ctx)
    if output.exists() and not force:
        console.print(f"{output} already exists, use --force to overwrite.", style="yellow")
        raise typer.Exit(code=1)
    state.repository.write_template(output)
    console.print(f"Template written to {output}.", style="green")


@log_app.command("list", help="List per-run log files.")
def log_list() -> None:
    logs = list(available_run_logs())
    if not logs:
        console.print("No run logs yet.", style="dim")
        return
    for path in logs:
        console.print(path.stem)


@log_app.command("show", help="Show the tail of the main log or of one run's log.")
def log_show(
    run: Optional[str] = typer.Option(None, "--run", help="Run timestamp."),
    lines: int = typer.Option(50, "--lines", "-n", help="Number of lines."),
) -> None:
    log_dir = default_log_dir()
    path = log_dir / "runs" / f"{run}.log" if run else log_dir / "matcher.log"
    content = tail_log(path, lines)
    if not content:
        console.print(f"No log entries in {path}.", style="dim")
        return
    for line in content:
        console.print(line.rstrip("\n"), markup=False, highlight=False)


if __name__ == "__main__":  # pragma: no cover
    app()
