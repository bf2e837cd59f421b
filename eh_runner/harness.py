"""Per-example pipeline and the sequential run loop.

Each example goes pending -> patched -> executed -> validated and ends as
succeeded or failed. Failures inside one example become a failed
``RunResult``; only setup errors raised before the loop stop a run.
"""

from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import Protocol, Sequence

import structlog

from eh_common.errors import HarnessError, error_to_payload
from eh_runner.executor import build_command, run_simulation
from eh_runner.models.config import HarnessSettings
from eh_runner.models.results import ExampleSpec, ExampleState, RunResult, Summary
from eh_runner.patcher import load_config, patch_config, write_patched_config
from eh_runner.sandbox import prepare_workdir
from eh_runner.validator import find_missing_artifacts

logger = logging.getLogger(__name__)


class HarnessHooks(Protocol):
    """Callbacks used by the UI to follow progress."""

    def on_example_start(self, example: ExampleSpec, workdir: Path) -> None: ...
    def on_example_done(self, result: RunResult) -> None: ...


def _failed(
    example: ExampleSpec,
    reached: ExampleState,
    exc: Exception,
    started: float,
    output_dir: Path | None,
) -> RunResult:
    if isinstance(exc, HarnessError):
        payload = error_to_payload(exc)
    else:
        payload = {"error_type": exc.__class__.__name__, "error": str(exc), "error_context": {}}
    return RunResult(
        example=example,
        exit_code=None,
        reached=reached,
        error=payload["error"],
        error_type=payload["error_type"],
        error_context=payload["error_context"],
        duration_seconds=time.monotonic() - started,
        output_dir=output_dir,
    )


def run_example(
    example: ExampleSpec,
    settings: HarnessSettings,
    staged_executable: Path,
) -> RunResult:
    """Patch, run and validate one example without ever raising."""
    started = time.monotonic()
    reached = ExampleState.PENDING
    output_dir: Path | None = None
    with structlog.contextvars.bound_contextvars(example=example.name):
        try:
            original = load_config(example.config_path.absolute())
            workdir, output_dir = prepare_workdir(settings, example.name)
            patched = patch_config(
                original, settings.step_count, output_dir, settings.default_dt
            )
            patched_path = write_patched_config(
                patched, workdir / settings.patched_config_name
            )
            reached = ExampleState.PATCHED

            outcome = run_simulation(
                build_command(settings, staged_executable, patched_path),
                workdir,
                workdir / settings.run_log_name,
                timeout=settings.timeout_seconds,
                kill_grace_seconds=settings.kill_grace_seconds,
            )
            reached = ExampleState.EXECUTED

            missing = find_missing_artifacts(
                output_dir,
                settings.step_count,
                settings.manifest_subdir,
                settings.manifest_file,
            )
        except (HarnessError, OSError) as exc:
            logger.error("Example %s failed while %s: %s", example.label, reached.value, exc)
            return _failed(example, reached, exc, started, output_dir)
        except Exception as exc:
            logger.exception("Unexpected error in example %s", example.label)
            return _failed(example, reached, exc, started, output_dir)

        result = RunResult(
            example=example,
            exit_code=outcome.returncode,
            missing_artifacts=tuple(missing),
            reached=ExampleState.VALIDATED,
            timed_out=outcome.timed_out,
            timeout_seconds=settings.timeout_seconds if outcome.timed_out else None,
            duration_seconds=time.monotonic() - started,
            output_dir=output_dir,
        )
        logger.info("Example %s %s", example.label, result.state.value)
        return result


def run_examples(
    examples: Sequence[ExampleSpec],
    settings: HarnessSettings,
    staged_executable: Path,
    hooks: HarnessHooks | None = None,
) -> Summary:
    """Run every example in order and return the finished summary."""
    summary = Summary(total=len(examples))
    for example in examples:
        if hooks is not None:
            hooks.on_example_start(example, settings.workdir_for(example.name))
        result = run_example(example, settings, staged_executable)
        summary = summary.record(result)
        if hooks is not None:
            hooks.on_example_done(result)
    logger.info(
        "Finished %s example(s): %s succeeded, %s failed",
        summary.total,
        len(summary.succeeded),
        len(summary.failed),
    )
    return summary
