import json
from pathlib import Path

import pytest

from eh_runner.models.config import HarnessSettings
from eh_runner.models.results import ExampleSpec, RunResult, Summary
from eh_runner.services.results import persist_summary, summary_to_payload

pytestmark = pytest.mark.unit_runner


def _summary() -> Summary:
    ok = ExampleSpec(config_path=Path("cases/A/config.json"), name="A")
    bad = ExampleSpec(config_path=Path("cases/B/config.json"), name="B")
    return (
        Summary(total=2)
        .record(RunResult(ok, exit_code=0, output_dir=Path("/runs/A/out")))
        .record(RunResult(bad, exit_code=0, missing_artifacts=("/runs/B/out/ParaView/ParaView.pvd",)))
    )


def test_persist_summary_writes_json(tmp_path: Path) -> None:
    target = tmp_path / "summary.json"
    payload = summary_to_payload(_summary(), HarnessSettings(step_count=50))

    assert persist_summary(target, payload) is True
    data = json.loads(target.read_text())

    assert data["total"] == 2
    assert data["succeeded"] == 1
    assert data["failed"] == 1
    assert data["exit_code"] == 1
    assert data["step_count"] == 50
    assert data["results"][0]["status"] == "succeeded"
    assert data["results"][0]["output_dir"] == "/runs/A/out"
    assert data["results"][1]["missing_artifacts"] == ["/runs/B/out/ParaView/ParaView.pvd"]
    assert data["results"][1]["error_context"] == {}
    assert not (tmp_path / "summary.json.tmp").exists()


def test_persist_summary_failure_is_reported_not_raised(tmp_path: Path) -> None:
    payload = summary_to_payload(_summary(), HarnessSettings())
    assert persist_summary(tmp_path / "missing" / "summary.json", payload) is False


def test_error_context_is_persisted(tmp_path: Path) -> None:
    example = ExampleSpec(config_path=Path("cases/C/config.json"), name="C")
    failed = RunResult(
        example,
        exit_code=None,
        error="config not found: cases/C/config.json",
        error_type="ConfigNotFound",
        error_context={"config": "cases/C/config.json"},
    )
    target = tmp_path / "summary.json"
    persist_summary(target, summary_to_payload(Summary(total=1).record(failed), HarnessSettings()))

    entry = json.loads(target.read_text())["results"][0]
    assert entry["error_type"] == "ConfigNotFound"
    assert entry["error_context"] == {"config": "cases/C/config.json"}
