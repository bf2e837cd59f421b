"""
Command-line interface for the example harness.

Runs one example config (``-c``) or every config named in a list file
(``-l``) against a staged copy of the simulation executable, checks the
visualization output of each run and exits 0 when all examples passed,
1 when any failed and 2 on usage or setup errors.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer
from pydantic import ValidationError

from eh_common.errors import SETUP_ERRORS
from eh_common.logging import configure_logging
from eh_runner.api import (
    ExampleSpec,
    HarnessSettings,
    RunResult,
    Summary,
    check_launcher,
    persist_summary,
    prepare_sandbox,
    resolve_examples,
    run_examples,
    summary_to_payload,
)
from eh_ui.console import ConsoleUI
from eh_ui.presenters.summary import (
    build_summary_table,
    failure_lines,
    result_headline,
    summary_counts_line,
    summary_item_lines,
)

EXIT_USAGE = 2

app = typer.Typer(
    help="Run simulation examples with a patched config and verify their output.",
    add_completion=False,
    context_settings={"help_option_names": ["-h", "--help"]},
)


class _ConsoleHooks:
    """Print progress for each example as the harness runs it."""

    def __init__(self, ui: ConsoleUI) -> None:
        self.ui = ui

    def on_example_start(self, example: ExampleSpec, workdir: Path) -> None:
        self.ui.show_info(f"==> Running example: {example.label}")
        self.ui.show_plain(f"    Working dir: {workdir}")

    def on_example_done(self, result: RunResult) -> None:
        if result.succeeded:
            self.ui.show_success(result_headline(result))
            return
        self.ui.show_failure(result_headline(result))
        for line in failure_lines(result):
            self.ui.show_plain(line)


def _render_summary(ui: ConsoleUI, summary: Summary) -> None:
    ui.show_plain()
    ui.show_plain("===== Example Summary =====")
    ui.show_plain(summary_counts_line(summary))
    for line in summary_item_lines(summary):
        ui.show_plain(line)
    if summary.failed:
        ui.show_plain()
        ui.show_table(build_summary_table(summary))


@app.command()
def run(
    steps: int = typer.Option(100, "-n", "--steps", min=1, help="Number of steps to run."),
    build_dir: Path = typer.Option(Path("build"), "-b", "--build-dir", help="Build directory."),
    executable: Optional[Path] = typer.Option(
        None,
        "-e",
        "--executable",
        help="Path to the simulation executable (default: <build-dir>/Prandtl).",
    ),
    run_dir: Path = typer.Option(Path("RunTests"), "-o", "--run-dir", help="Directory to run in."),
    config: Optional[Path] = typer.Option(None, "-c", "--config", help="Single example config.json to run."),
    list_file: Optional[Path] = typer.Option(
        None,
        "-l",
        "--list",
        help="List file with one config.json path per line (comments (#) allowed).",
    ),
    timeout: Optional[float] = typer.Option(
        None, "--timeout", help="Stop a simulation after this many seconds (default: wait forever)."
    ),
    launcher: Optional[str] = typer.Option(
        None, "--launcher", help="Parallel job launcher (default: mpiexec or $EH_LAUNCHER)."
    ),
    default_dt: Optional[float] = typer.Option(
        None, "--default-dt", help="Time step used when a config has neither dt nor final_time."
    ),
    manifest_subdir: Optional[str] = typer.Option(
        None, "--manifest-subdir", help="Visualization subdirectory checked for output."
    ),
    manifest_file: Optional[str] = typer.Option(
        None, "--manifest-file", help="Manifest file expected in the visualization subdirectory."
    ),
    debug: bool = typer.Option(False, "--debug", help="Enable debug logging."),
    log_level: Optional[str] = typer.Option(None, "--log-level", help="Log level (default: INFO or $EH_LOG_LEVEL)."),
    log_file: Optional[Path] = typer.Option(None, "--log-file", help="Also write logs to this file."),
    json_logs: bool = typer.Option(False, "--json-logs", help="Emit logs as JSON lines."),
) -> None:
    """Patch, run and validate the selected examples."""
    ui = ConsoleUI()
    try:
        configure_logging(
            level=log_level,
            debug=debug,
            log_file=str(log_file) if log_file else None,
            json=True if json_logs else None,
        )
    except OSError as exc:
        ui.show_error(f"ERROR: cannot open log file: {exc}")
        raise typer.Exit(EXIT_USAGE)

    try:
        settings = HarnessSettings.from_env(
            step_count=steps,
            build_dir=build_dir,
            executable_path=executable,
            work_root=run_dir,
            launcher=launcher,
            timeout_seconds=timeout,
            default_dt=default_dt,
            manifest_subdir=manifest_subdir,
            manifest_file=manifest_file,
        )
    except ValidationError as exc:
        ui.show_error(f"ERROR: invalid settings: {exc}")
        raise typer.Exit(EXIT_USAGE)

    try:
        examples = resolve_examples(config=config, list_file=list_file)
        check_launcher(settings.launcher)
        staged = prepare_sandbox(settings)
    except SETUP_ERRORS as exc:
        ui.show_error(f"ERROR: {exc}")
        raise typer.Exit(EXIT_USAGE)

    summary = run_examples(examples, settings, staged, hooks=_ConsoleHooks(ui))
    persist_summary(settings.summary_path, summary_to_payload(summary, settings))
    _render_summary(ui, summary)
    raise typer.Exit(summary.exit_code)


def main() -> None:
    """Console script entrypoint (Typer app)."""
    app()


if __name__ == "__main__":
    main()
