"""CLI entrypoint.

- covreport run      (inside a GitHub Actions job)
- covreport status   (inspect a finished run)
- covreport doctor   (preflight checks)

CONTRACT
- Inputs: Command line arguments (parsed by Typer), Actions environment
- Outputs (required):
  - Exit code 0 on success, 1 when the run failed or could not initialize
  - Console output describing stage outcomes
- Invariants:
  - Stage errors never surface as tracebacks; the pipeline turns them into data
  - Initialization failure is reported through the host before exiting
- Failure:
  - Invalid arguments raise Typer exit/error
"""

from __future__ import annotations

import asyncio
import os
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from .doctor import doctor_report
from .host import ActionsHost
from .orchestrator import InitializationError, run_pipeline
from .util.ids import validate_run_id

app = typer.Typer(add_completion=False, help="Staged coverage report runner for GitHub Actions.")

console = Console()

_STATUS_STYLE = {"completed": "green", "skipped": "yellow", "failed": "red"}


def _version_callback(value: bool):
    if value:
        from . import __version__

        console.print(f"covreport version: {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        False, "--version", callback=_version_callback, is_eager=True, help="Show version."
    )
):
    pass


_WORKDIR_OPTION = typer.Option(
    None,
    "--working-directory",
    help="Project directory (overrides the working-directory input).",
)
_ARTIFACTS_DIR_OPTION = typer.Option(
    Path(".covreport/runs"),
    "--artifacts-dir",
    help="Artifacts root dir.",
)
_RUN_ID_OPTION = typer.Option(
    None,
    "--run-id",
    help="Run id (default: derived from GITHUB_RUN_ID or generated).",
)
_RUN_ID_REQUIRED_OPTION = typer.Option(
    ...,
    "--run",
    help="Run id.",
)


@app.command()
def run(
    working_directory: Path | None = _WORKDIR_OPTION,
    run_id: str | None = _RUN_ID_OPTION,
) -> None:
    """Run the coverage report pipeline."""
    env = dict(os.environ)
    if working_directory is not None:
        env["INPUT_WORKING-DIRECTORY"] = str(working_directory)
    if run_id is not None:
        validate_run_id(run_id)

    host = ActionsHost.from_env(env)
    try:
        result = asyncio.run(run_pipeline(env=env, host=host, run_id=run_id))
    except InitializationError as exc:
        host.set_failed(str(exc))
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(code=host.exit_code)

    table = Table(title="covreport stages")
    table.add_column("Stage")
    table.add_column("Outcome")
    for o in result.stages:
        style = _STATUS_STYLE.get(o.status.value, "white")
        table.add_row(o.name, f"[{style}]{o.status.value}[/{style}]")
    console.print(table)
    for err in result.data.errors:
        console.print(f"[red]{err.stage}[/red]: {err.describe()}")
    console.print(f"[bold]Run[/bold] finished with status: {result.status}")
    if result.run_dir:
        console.print(f"Artifacts: {result.run_dir}")
    if host.failed:
        raise typer.Exit(code=host.exit_code)


@app.command()
def status(
    run_id: str = _RUN_ID_REQUIRED_OPTION,
    artifacts_dir: Path = _ARTIFACTS_DIR_OPTION,
) -> None:
    """Print RUN_STATUS.json of a finished run."""
    validate_run_id(run_id)
    status_path = artifacts_dir / run_id / "RUN_STATUS.json"
    if not status_path.exists():
        raise typer.BadParameter(f"No status found: {status_path}")
    console.print_json(status_path.read_text(encoding="utf-8"))


@app.command()
def doctor(
    working_directory: Path = typer.Option(Path("."), "--working-directory", help="Project directory."),
) -> None:
    """Environment and preflight checks."""
    report = doctor_report(working_directory)
    table = Table(title="covreport doctor")
    table.add_column("Check")
    table.add_column("Status")
    table.add_column("Details")
    for item in report.items:
        table.add_row(item.name, item.status, item.details)
    console.print(table)
    if report.ok:
        console.print("[green]OK[/green]")
    else:
        raise typer.Exit(code=2)


if __name__ == "__main__":
    app()
