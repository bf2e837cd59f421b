"""Stable runner API surface."""

from eh_runner.executor import ExecutionOutcome, build_command, run_simulation
from eh_runner.harness import HarnessHooks, run_example, run_examples
from eh_runner.models.config import HarnessSettings, RunTimeOptions, SimulationConfig
from eh_runner.models.results import ExampleSpec, ExampleState, RunResult, Summary
from eh_runner.patcher import (
    compute_vis_steps,
    derive_time_step,
    load_config,
    patch_config,
    patch_run_time,
    write_patched_config,
)
from eh_runner.resolver import parse_list_file, resolve_examples
from eh_runner.sandbox import check_executable, check_launcher, prepare_sandbox, prepare_workdir
from eh_runner.services.results import persist_summary, summary_to_payload
from eh_runner.validator import find_missing_artifacts, format_cycle, required_artifacts

__all__ = [
    "ExampleSpec",
    "ExampleState",
    "ExecutionOutcome",
    "HarnessHooks",
    "HarnessSettings",
    "RunResult",
    "RunTimeOptions",
    "SimulationConfig",
    "Summary",
    "build_command",
    "check_executable",
    "check_launcher",
    "compute_vis_steps",
    "derive_time_step",
    "find_missing_artifacts",
    "format_cycle",
    "load_config",
    "parse_list_file",
    "patch_config",
    "patch_run_time",
    "persist_summary",
    "prepare_sandbox",
    "prepare_workdir",
    "required_artifacts",
    "resolve_examples",
    "run_example",
    "run_examples",
    "run_simulation",
    "summary_to_payload",
    "write_patched_config",
]
