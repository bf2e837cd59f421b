"""Derive the patched simulation configuration for a harness run.

The patched ``runTime`` block forces visualization output and NaN checks,
fixes the time step so that ``step_count`` cycles cover exactly
``final_time``, points output at the example's own directory and disables
checkpoint restarts. Everything else in the document passes through.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from eh_common.errors import ConfigNotFound, MalformedConfig, PatchWriteFailed
from eh_runner.models.config import DEFAULT_TIME_STEP, RunTimeOptions, SimulationConfig

logger = logging.getLogger(__name__)


def _is_number(value: Any) -> bool:
    # JSON booleans load as bool, which is an int subclass.
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def compute_vis_steps(step_count: int) -> int:
    """Snapshot cadence that emits both cycle 0 and cycle ``step_count``.

    A cadence of 10 lands on the last cycle only when ``step_count`` is a
    multiple of 10; otherwise use half the run, never less than one step.
    """
    if step_count % 10 == 0:
        return 10
    return max(1, step_count // 2)


def derive_time_step(
    options: RunTimeOptions,
    step_count: int,
    default_dt: float = DEFAULT_TIME_STEP,
) -> float:
    """Keep a numeric ``dt``, else split ``final_time``, else use the default."""
    if _is_number(options.dt):
        return options.dt
    if _is_number(options.final_time):
        return options.final_time / step_count
    return default_dt


def patch_run_time(
    options: RunTimeOptions | None,
    step_count: int,
    output_dir: Path | str,
    default_dt: float = DEFAULT_TIME_STEP,
) -> RunTimeOptions:
    """Return a new ``runTime`` block with the harness overrides applied."""
    if step_count < 1:
        raise ValueError(f"step_count must be >= 1, got {step_count}")

    current = options or RunTimeOptions()
    merged = current.to_document()

    vis_steps = compute_vis_steps(step_count)
    dt = derive_time_step(current, step_count, default_dt)
    merged.update(
        visualize=True,
        paraview=True,
        visit=False,
        nancheck=True,
        vis_steps=vis_steps,
        variable_dt=False,
        dt=dt,
        final_time=dt * step_count,
        initial_save_dt=dt * vis_steps,
        output_file_path=str(output_dir),
        checkpoint_load=False,
    )
    return RunTimeOptions.model_validate(merged)


def patch_config(
    original: SimulationConfig,
    step_count: int,
    output_dir: Path | str,
    default_dt: float = DEFAULT_TIME_STEP,
) -> SimulationConfig:
    """Build the patched document; ``original`` is left untouched."""
    document = original.to_document()
    run_time = patch_run_time(original.run_time, step_count, output_dir, default_dt)
    document["runTime"] = run_time.to_document()
    return SimulationConfig.from_dict(document)


def load_config(path: Path) -> SimulationConfig:
    """Read and parse an example's configuration document."""
    if not path.is_file():
        raise ConfigNotFound(f"config not found: {path}", context={"config": path})
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigNotFound(
            f"config not readable: {path}", context={"config": path}, cause=exc
        ) from exc
    except UnicodeDecodeError as exc:
        raise MalformedConfig(
            f"malformed config {path}: not valid UTF-8 ({exc.reason})",
            context={"config": path},
            cause=exc,
        ) from exc
    try:
        return SimulationConfig.from_json(text)
    except ValidationError as exc:
        raise MalformedConfig(
            f"malformed config {path}: {exc.error_count()} error(s), first: {exc.errors()[0]['msg']}",
            context={"config": path},
            cause=exc,
        ) from exc


def write_patched_config(config: SimulationConfig, path: Path) -> Path:
    try:
        path.write_text(config.to_json() + "\n", encoding="utf-8")
    except OSError as exc:
        raise PatchWriteFailed(
            f"failed to write patched config {path}: {exc}",
            context={"patched_config": path},
            cause=exc,
        ) from exc
    logger.debug("Wrote patched config %s", path)
    return path
