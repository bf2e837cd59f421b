"""Presenters for per-example progress and the final summary."""

from __future__ import annotations

from eh_runner.models.results import RunResult, Summary
from eh_ui.models import TableModel


def summary_counts_line(summary: Summary) -> str:
    return (
        f"Total: {summary.total} | Succeeded: {len(summary.succeeded)} "
        f"| Failed: {len(summary.failed)}"
    )


def summary_item_lines(summary: Summary) -> list[str]:
    """Itemized ``✓``/``✗`` lines, successes first, each in run order."""
    lines = [f"  ✓ {example.label}" for example in summary.succeeded]
    lines.extend(f"  ✗ {example.label}" for example in summary.failed)
    return lines


def result_headline(result: RunResult) -> str:
    if result.succeeded:
        return f"✓ Example OK: {result.example.name} (outputs in {result.output_dir})"
    return f"✗ Example FAILED: {result.example.name}"


def failure_lines(result: RunResult) -> list[str]:
    return [f"  - {reason}" for reason in result.reasons()]


def build_summary_table(summary: Summary) -> TableModel:
    """One row per example with status, exit code and reasons."""
    rows = []
    for result in summary.results:
        exit_code = "-" if result.exit_code is None else str(result.exit_code)
        rows.append(
            [
                result.example.name,
                result.state.value,
                exit_code,
                f"{result.duration_seconds:.1f}",
                "\n".join(result.reasons()),
            ]
        )
    return TableModel(
        title="Example Results",
        columns=["Example", "Status", "Exit", "Seconds", "Reasons"],
        rows=rows,
    )
