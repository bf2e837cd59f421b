"""Harness settings and the typed view of a simulation configuration."""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr, model_validator

from eh_common.config.env import parse_float_env, parse_str_env

DEFAULT_EXECUTABLE_NAME = "Prandtl"
DEFAULT_TIME_STEP = 1e-7

# --- Simulation configuration document ---


class _OrderedDocument(BaseModel):
    """JSON object that is dumped back in the key order it was read with."""

    model_config = ConfigDict(extra="allow")

    _key_order: list[str] = PrivateAttr(default_factory=list)

    @model_validator(mode="wrap")
    @classmethod
    def _remember_key_order(cls, data: Any, handler: Any) -> Any:
        document = handler(data)
        if isinstance(data, dict):
            document._key_order = list(data)
        return document

    def to_document(self) -> Dict[str, Any]:
        dumped = self.model_dump(by_alias=True, exclude_unset=True)
        ordered = {key: dumped[key] for key in self._key_order if key in dumped}
        # keys added after loading go last
        ordered.update(dumped)
        return ordered


class RunTimeOptions(_OrderedDocument):
    """The ``runTime`` block of a simulation configuration.

    Only the fields the harness reads or overrides are declared; every other
    key is kept as extra data and written back untouched. All declared fields
    are untyped: the harness overwrites them, so whatever an example ships
    in them is accepted as is.
    """

    dt: Any = Field(default=None, description="Fixed time step")
    final_time: Any = Field(default=None, description="Simulated end time")
    visualize: Any = Field(default=None, description="Write visualization snapshots")
    paraview: Any = Field(default=None, description="Enable the ParaView writer")
    visit: Any = Field(default=None, description="Enable the VisIt writer")
    nancheck: Any = Field(default=None, description="Abort on NaN values")
    vis_steps: Any = Field(default=None, description="Steps between snapshots")
    variable_dt: Any = Field(default=None, description="Adaptive time stepping")
    initial_save_dt: Any = Field(default=None, description="Simulated time between snapshots")
    output_file_path: Any = Field(default=None, description="Directory for simulation output")
    checkpoint_load: Any = Field(default=None, description="Restart from a stored checkpoint")


class SimulationConfig(_OrderedDocument):
    """A simulation configuration document with an optional ``runTime`` block."""

    run_time: Optional[RunTimeOptions] = Field(default=None, alias="runTime")

    def to_document(self) -> Dict[str, Any]:
        """Dump back to the on-disk key layout, omitting fields never set."""
        document = super().to_document()
        if self.run_time is not None:
            document["runTime"] = self.run_time.to_document()
        return document

    def to_json(self) -> str:
        return json.dumps(self.to_document(), indent=2)

    @classmethod
    def from_json(cls, json_str: str) -> "SimulationConfig":
        return cls.model_validate_json(json_str)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SimulationConfig":
        return cls.model_validate(data)


# --- Harness settings ---


class HarnessSettings(BaseModel):
    """Process-wide run parameters, fixed once the CLI has been parsed."""

    model_config = ConfigDict(frozen=True)

    step_count: int = Field(default=100, ge=1, description="Number of simulation steps per example")
    build_dir: Path = Field(default=Path("./build"), description="Build directory holding the executable")
    executable_name: str = Field(default=DEFAULT_EXECUTABLE_NAME, description="File name of the executable")
    executable_path: Optional[Path] = Field(
        default=None,
        description="Explicit executable; defaults to <build_dir>/<executable_name>",
    )
    work_root: Path = Field(default=Path("./RunTests"), description="Sandbox directory for all runs")

    launcher: str = Field(default="mpiexec", description="Parallel job launcher")
    workers: int = Field(default=2, gt=0, description="Number of cooperating worker processes")
    config_flag: str = Field(default="-c", description="Executable flag introducing the config path")
    timeout_seconds: Optional[float] = Field(
        default=None, gt=0, description="Kill a run after this many seconds; None waits forever"
    )
    kill_grace_seconds: float = Field(default=5.0, ge=0, description="Wait between SIGTERM and SIGKILL")

    default_dt: float = Field(default=DEFAULT_TIME_STEP, gt=0, description="Time step when the config has neither dt nor final_time")
    manifest_subdir: str = Field(default="ParaView", description="Visualization subdirectory of the output dir")
    manifest_file: str = Field(default="ParaView.pvd", description="Snapshot manifest file name")

    output_subdir: str = Field(default="out", description="Simulation output directory inside each workdir")
    patched_config_name: str = Field(default="config.patched.json", description="File name of the patched config")
    run_log_name: str = Field(default="run.log", description="File capturing simulation stdout/stderr")
    summary_file: str = Field(default="summary.json", description="Machine-readable summary in the work root")

    def resolve_executable(self) -> Path:
        """Return the executable to stage into the sandbox."""
        if self.executable_path is not None:
            return self.executable_path
        return self.build_dir / self.executable_name

    @property
    def staged_executable(self) -> Path:
        return self.work_root / self.executable_name

    @property
    def summary_path(self) -> Path:
        return self.work_root / self.summary_file

    def workdir_for(self, name: str) -> Path:
        return self.work_root / name

    @classmethod
    def from_env(cls, **overrides: Any) -> "HarnessSettings":
        """Build settings from ``EH_*`` environment variables plus explicit overrides.

        Overrides whose value is None are ignored so CLI options left at their
        default do not mask the environment.
        """
        values: Dict[str, Any] = {}
        env_values = {
            "launcher": parse_str_env(os.environ.get("EH_LAUNCHER")),
            "default_dt": parse_float_env(os.environ.get("EH_DEFAULT_DT")),
            "manifest_subdir": parse_str_env(os.environ.get("EH_MANIFEST_SUBDIR")),
            "manifest_file": parse_str_env(os.environ.get("EH_MANIFEST_FILE")),
            "timeout_seconds": parse_float_env(os.environ.get("EH_TIMEOUT")),
        }
        values.update({key: val for key, val in env_values.items() if val is not None})
        values.update({key: val for key, val in overrides.items() if val is not None})
        return cls.model_validate(values)
