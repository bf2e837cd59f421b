"""Data models for the harness runner."""

from eh_runner.models.config import HarnessSettings, RunTimeOptions, SimulationConfig
from eh_runner.models.results import ExampleSpec, ExampleState, RunResult, Summary

__all__ = [
    "ExampleSpec",
    "ExampleState",
    "HarnessSettings",
    "RunResult",
    "RunTimeOptions",
    "SimulationConfig",
    "Summary",
]
