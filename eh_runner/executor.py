"""Launch the staged simulation as a parallel job and wait for it."""

from __future__ import annotations

import logging
import os
import signal
import subprocess
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from eh_common.errors import ExecutionError
from eh_runner.models.config import HarnessSettings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExecutionOutcome:
    """Exit status and bookkeeping for one simulation run."""

    command: list[str]
    returncode: int
    duration_seconds: float
    log_path: Path
    timed_out: bool = False


def build_command(
    settings: HarnessSettings,
    staged_executable: Path,
    patched_config: Path,
) -> list[str]:
    """``<launcher> -n <workers> <exe> -c <patched config>``."""
    return [
        settings.launcher,
        "-n",
        str(settings.workers),
        str(staged_executable),
        settings.config_flag,
        str(patched_config),
    ]


def _signal_group(process: subprocess.Popen, sig: signal.Signals) -> None:
    try:
        os.killpg(process.pid, sig)
    except ProcessLookupError:
        pass


def _stop_process_group(process: subprocess.Popen, grace_seconds: float) -> None:
    """Terminate the job's process group, escalating to SIGKILL."""
    logger.info("Terminating process group %s", process.pid)
    _signal_group(process, signal.SIGTERM)
    try:
        process.wait(timeout=grace_seconds)
    except subprocess.TimeoutExpired:
        logger.warning("Force killing process group %s", process.pid)
        _signal_group(process, signal.SIGKILL)
        process.wait()


def run_simulation(
    command: list[str],
    workdir: Path,
    log_path: Path,
    timeout: Optional[float] = None,
    kill_grace_seconds: float = 5.0,
) -> ExecutionOutcome:
    """Run ``command`` in ``workdir`` and block until its process group exits.

    Output is captured to ``log_path``. A non-zero exit status is returned,
    not raised. With ``timeout`` set, an overrunning job is stopped and the
    outcome is flagged ``timed_out``.
    """
    logger.info("Running command: %s", " ".join(command))
    start = time.monotonic()
    timed_out = False
    with log_path.open("w", encoding="utf-8") as log_file:
        try:
            process = subprocess.Popen(
                command,
                cwd=workdir,
                stdin=subprocess.DEVNULL,
                stdout=log_file,
                stderr=subprocess.STDOUT,
                start_new_session=True,
            )
        except OSError as exc:
            raise ExecutionError(
                f"failed to launch {command[0]}: {exc}",
                context={"command": command, "workdir": workdir},
                cause=exc,
            ) from exc

        try:
            returncode = process.wait(timeout=timeout)
        except subprocess.TimeoutExpired:
            logger.error("Simulation exceeded %ss. Stopping it.", timeout)
            timed_out = True
            _stop_process_group(process, kill_grace_seconds)
            returncode = process.returncode

    duration = time.monotonic() - start
    if returncode != 0:
        logger.error("Simulation exited with code %s (log: %s)", returncode, log_path)
    else:
        logger.info("Simulation finished in %.1fs", duration)
    return ExecutionOutcome(
        command=command,
        returncode=returncode,
        duration_seconds=duration,
        log_path=log_path,
        timed_out=timed_out,
    )
