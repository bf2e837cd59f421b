"""Per-example records and the run summary."""

from __future__ import annotations

import os
from dataclasses import dataclass, field, replace
from enum import Enum
from pathlib import Path
from typing import Any


class ExampleState(str, Enum):
    """Lifecycle of a single example."""

    PENDING = "pending"
    PATCHED = "patched"
    EXECUTED = "executed"
    VALIDATED = "validated"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass(frozen=True)
class ExampleSpec:
    """One requested example: its config path and logical name."""

    config_path: Path
    name: str

    @classmethod
    def from_config_path(cls, config_path: str | Path) -> "ExampleSpec":
        """Derive the example name from the config's parent directory.

        ``..`` segments are collapsed first, so ``../config.json`` is named
        after the real parent rather than ``..``.
        """
        path = Path(config_path)
        return cls(config_path=path, name=Path(os.path.abspath(path)).parent.name)

    @property
    def label(self) -> str:
        return str(self.config_path)


@dataclass(frozen=True)
class RunResult:
    """Outcome of patching, running and validating one example."""

    example: ExampleSpec
    exit_code: int | None
    missing_artifacts: tuple[str, ...] = ()
    reached: ExampleState = ExampleState.VALIDATED
    error: str | None = None
    error_type: str | None = None
    error_context: dict[str, Any] = field(default_factory=dict)
    timed_out: bool = False
    timeout_seconds: float | None = None
    duration_seconds: float = 0.0
    output_dir: Path | None = None

    @property
    def succeeded(self) -> bool:
        return (
            self.exit_code == 0
            and not self.missing_artifacts
            and self.error is None
            and not self.timed_out
        )

    @property
    def state(self) -> ExampleState:
        return ExampleState.SUCCEEDED if self.succeeded else ExampleState.FAILED

    def reasons(self) -> list[str]:
        """Human-readable failure reasons, empty for a success."""
        reasons: list[str] = []
        if self.error is not None:
            reasons.append(self.error)
        if self.timed_out:
            limit = self.timeout_seconds if self.timeout_seconds is not None else self.duration_seconds
            reasons.append(f"timed out after {limit:g}s")
        if self.exit_code not in (None, 0):
            reasons.append(f"runtime exit code: {self.exit_code}")
        reasons.extend(f"missing: {artifact}" for artifact in self.missing_artifacts)
        return reasons


@dataclass(frozen=True)
class Summary:
    """Aggregated results; ``record`` returns a new summary."""

    total: int
    succeeded: tuple[ExampleSpec, ...] = ()
    failed: tuple[ExampleSpec, ...] = ()
    results: tuple[RunResult, ...] = field(default=())

    def record(self, result: RunResult) -> "Summary":
        if result.succeeded:
            return replace(
                self,
                succeeded=self.succeeded + (result.example,),
                results=self.results + (result,),
            )
        return replace(
            self,
            failed=self.failed + (result.example,),
            results=self.results + (result,),
        )

    @property
    def is_complete(self) -> bool:
        return len(self.succeeded) + len(self.failed) == self.total

    @property
    def exit_code(self) -> int:
        return 1 if self.failed else 0
