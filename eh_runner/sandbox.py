"""Sandbox and per-example working directory helpers."""

from __future__ import annotations

import logging
import os
import shutil
from pathlib import Path

from eh_common.errors import (
    ExecutableNotFound,
    LauncherNotFound,
    SandboxCreateFailed,
    WorkdirPrepareFailed,
)
from eh_runner.models.config import HarnessSettings

logger = logging.getLogger(__name__)


def check_executable(path: Path) -> Path:
    """Return ``path`` if it is an executable file, else raise."""
    if not path.is_file() or not os.access(path, os.X_OK):
        raise ExecutableNotFound(
            f"executable not found at {path}",
            context={"executable": path},
        )
    return path


def check_launcher(launcher: str) -> str:
    """Resolve the job launcher on PATH (or as an explicit path)."""
    resolved = shutil.which(launcher)
    if resolved is None:
        raise LauncherNotFound(
            f"launcher '{launcher}' not found; install it or pass --launcher",
            context={"launcher": launcher},
        )
    return resolved


def prepare_sandbox(settings: HarnessSettings) -> Path:
    """Create the work root and stage a private copy of the executable.

    The staged copy is the binary that every example runs, so a rebuild of
    the original executable during the run does not affect it. The returned
    path is absolute since each example runs from its own workdir.
    """
    source = check_executable(settings.resolve_executable())
    staged = settings.staged_executable.absolute()
    try:
        settings.work_root.mkdir(parents=True, exist_ok=True)
        if staged.exists() and staged.resolve() == source.resolve():
            logger.info("Executable already staged at %s", staged)
            return staged
        shutil.copy2(source, staged)
        staged.chmod(staged.stat().st_mode | 0o111)
    except OSError as exc:
        raise SandboxCreateFailed(
            f"failed to prepare sandbox {settings.work_root}: {exc}",
            context={"work_root": settings.work_root, "executable": source},
            cause=exc,
        ) from exc
    logger.info("Staged %s -> %s", source, staged)
    return staged


def prepare_workdir(settings: HarnessSettings, name: str) -> tuple[Path, Path]:
    """Purge and recreate the example's workdir; return it with its output dir.

    The workdir must be a direct child of the work root and must not collide
    with the staged executable or the summary file; anything else is refused
    before a single file is removed.
    """
    workdir = settings.workdir_for(name)
    output_dir = workdir / settings.output_subdir
    reserved = {"", ".", "..", settings.executable_name, settings.summary_file}
    if name in reserved or workdir.resolve().parent != settings.work_root.resolve():
        raise WorkdirPrepareFailed(
            f"refusing to use {workdir} as working directory for example '{name}'",
            context={"workdir": workdir, "work_root": settings.work_root},
        )
    try:
        if workdir.exists():
            shutil.rmtree(workdir)
        output_dir.mkdir(parents=True)
    except OSError as exc:
        raise WorkdirPrepareFailed(
            f"failed to prepare working directory {workdir}: {exc}",
            context={"workdir": workdir},
            cause=exc,
        ) from exc
    return workdir.resolve(), output_dir.resolve()
