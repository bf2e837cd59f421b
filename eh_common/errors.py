"""Shared error taxonomy for the example harness."""

from __future__ import annotations

from typing import Any, Mapping


def _normalize_context_value(value: Any) -> Any:
    if isinstance(value, Mapping):
        return normalize_context(value)
    if isinstance(value, (list, tuple)):
        return [_normalize_context_value(item) for item in value]
    if isinstance(value, (str, int, float, bool)) or value is None:
        return value
    return str(value)


def normalize_context(context: Mapping[str, Any]) -> dict[str, Any]:
    """Return a JSON-friendly copy of an error context mapping."""
    return {key: _normalize_context_value(val) for key, val in context.items()}


class HarnessError(Exception):
    """Base error type for typed failure handling."""

    def __init__(
        self,
        message: str,
        *,
        context: Mapping[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(message)
        self.context = normalize_context(context or {})
        if cause is not None:
            self.__cause__ = cause

    @property
    def error_type(self) -> str:
        return self.__class__.__name__


# --- Setup phase: abort the whole invocation (exit code 2) ---


class UsageError(HarnessError):
    """Bad or conflicting command-line arguments."""


class NoInputSpecified(UsageError):
    """Neither a single config nor a list file was given."""


class ConflictingInputs(UsageError):
    """Both a single config and a list file were given."""


class DependencyMissing(HarnessError):
    """A required external tool or binary is unavailable."""


class ExecutableNotFound(DependencyMissing):
    """The simulation executable is missing or not executable."""


class LauncherNotFound(DependencyMissing):
    """The parallel job launcher cannot be found on PATH."""


class SandboxCreateFailed(HarnessError):
    """The run directory or the staged executable could not be written."""


# --- Per example: recorded as a failure, the loop continues ---


class ExampleError(HarnessError):
    """Failure confined to a single example."""


class ConfigNotFound(ExampleError):
    """The example's configuration file does not exist."""


class MalformedConfig(ExampleError):
    """The example's configuration cannot be parsed as structured data."""


class PatchWriteFailed(ExampleError):
    """The patched configuration could not be persisted."""


class WorkdirPrepareFailed(ExampleError):
    """The per-example working directory could not be recreated."""


class ExecutionError(ExampleError):
    """The simulation process could not be launched."""


SETUP_ERRORS = (UsageError, DependencyMissing, SandboxCreateFailed)


def error_to_payload(error: HarnessError) -> dict[str, Any]:
    """Convert a HarnessError to a summary payload."""
    return {
        "error_type": error.error_type,
        "error": str(error),
        "error_context": error.context,
    }
