"""Check that a finished run left the expected visualization artifacts."""

from __future__ import annotations

import logging
from pathlib import Path

logger = logging.getLogger(__name__)


def format_cycle(index: int) -> str:
    """Directory name for a snapshot: ``Cycle`` plus a 6-digit cycle index."""
    return f"Cycle{index:06d}"


def required_artifacts(
    output_dir: Path,
    step_count: int,
    manifest_subdir: str = "ParaView",
    manifest_file: str = "ParaView.pvd",
) -> list[tuple[Path, bool]]:
    """Return ``(path, is_dir)`` for the manifest, cycle 0 and the last cycle."""
    vis_root = output_dir / manifest_subdir
    return [
        (vis_root / manifest_file, False),
        (vis_root / format_cycle(0), True),
        (vis_root / format_cycle(step_count), True),
    ]


def find_missing_artifacts(
    output_dir: Path,
    step_count: int,
    manifest_subdir: str = "ParaView",
    manifest_file: str = "ParaView.pvd",
) -> list[str]:
    """List the required artifacts that are absent; empty means the run passed."""
    missing: list[str] = []
    for path, is_dir in required_artifacts(output_dir, step_count, manifest_subdir, manifest_file):
        present = path.is_dir() if is_dir else path.is_file()
        if not present:
            missing.append(str(path))
    if missing:
        logger.warning("Missing %s artifact(s) under %s", len(missing), output_dir)
    return missing
