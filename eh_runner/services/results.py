"""Helpers for persisting the run summary."""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from json import JSONEncoder
from pathlib import Path
from typing import Any

from eh_runner.models.config import HarnessSettings
from eh_runner.models.results import RunResult, Summary

logger = logging.getLogger(__name__)


class DateTimeEncoder(JSONEncoder):
    """JSON encoder that handles datetime and Path objects."""

    def default(self, obj: Any) -> Any:
        if isinstance(obj, datetime):
            return obj.isoformat()
        if isinstance(obj, Path):
            return str(obj)
        return super().default(obj)


def result_to_payload(result: RunResult) -> dict[str, Any]:
    return {
        "config": result.example.config_path,
        "name": result.example.name,
        "status": result.state.value,
        "reached": result.reached.value,
        "exit_code": result.exit_code,
        "timed_out": result.timed_out,
        "missing_artifacts": list(result.missing_artifacts),
        "error_type": result.error_type,
        "error": result.error,
        "error_context": result.error_context,
        "duration_seconds": round(result.duration_seconds, 3),
        "output_dir": result.output_dir,
    }


def summary_to_payload(summary: Summary, settings: HarnessSettings) -> dict[str, Any]:
    """Assemble the JSON document written next to the sandbox."""
    return {
        "generated_at": datetime.now(timezone.utc),
        "step_count": settings.step_count,
        "executable": settings.resolve_executable(),
        "total": summary.total,
        "succeeded": len(summary.succeeded),
        "failed": len(summary.failed),
        "exit_code": summary.exit_code,
        "results": [result_to_payload(result) for result in summary.results],
    }


def persist_summary(path: Path, payload: dict[str, Any]) -> bool:
    """Atomically write ``payload``; failures are logged, never raised."""
    tmp_path = path.with_suffix(path.suffix + ".tmp")
    try:
        tmp_path.write_text(json.dumps(payload, indent=2, cls=DateTimeEncoder))
        tmp_path.replace(path)
    except OSError as exc:
        logger.warning("Failed to write summary %s: %s", path, exc)
        return False
    logger.info("Saved summary to %s", path)
    return True
