"""Tests for the configuration patcher."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from eh_common.errors import ConfigNotFound, MalformedConfig, PatchWriteFailed
from eh_runner.models.config import DEFAULT_TIME_STEP, RunTimeOptions, SimulationConfig
from eh_runner.patcher import (
    compute_vis_steps,
    derive_time_step,
    load_config,
    patch_config,
    patch_run_time,
    write_patched_config,
)

pytestmark = pytest.mark.unit_runner


@pytest.mark.parametrize("steps", [10, 20, 100, 1000])
def test_vis_steps_is_ten_for_multiples_of_ten(steps: int) -> None:
    assert compute_vis_steps(steps) == 10


@pytest.mark.parametrize(
    "steps, expected",
    [(1, 1), (2, 1), (3, 1), (7, 3), (15, 7), (99, 49)],
)
def test_vis_steps_falls_back_to_half(steps: int, expected: int) -> None:
    assert compute_vis_steps(steps) == expected


def test_vis_steps_never_zero() -> None:
    assert all(compute_vis_steps(n) >= 1 for n in range(1, 200))


def test_time_step_from_final_time_round_trips() -> None:
    for steps in (1, 3, 7, 10, 64, 100, 333):
        patched = patch_run_time(RunTimeOptions(final_time=2.5), steps, "/out")
        assert patched.dt == pytest.approx(2.5 / steps)
        assert patched.final_time == pytest.approx(patched.dt * steps)


def test_existing_dt_is_kept_and_final_time_recomputed() -> None:
    patched = patch_run_time(RunTimeOptions(dt=0.002, final_time=99.0), 50, "/out")
    assert patched.dt == 0.002
    assert patched.final_time == pytest.approx(0.1)


def test_default_dt_when_no_timing_given() -> None:
    patched = patch_run_time(None, 100, "/out")
    assert patched.dt == DEFAULT_TIME_STEP
    assert patched.final_time == pytest.approx(DEFAULT_TIME_STEP * 100)

    custom = patch_run_time(RunTimeOptions(), 10, "/out", default_dt=1e-3)
    assert custom.dt == 1e-3


@pytest.mark.parametrize("bad", ["0.1", True, None, [0.1]])
def test_non_numeric_dt_is_ignored(bad) -> None:
    options = RunTimeOptions.model_validate({"dt": bad, "final_time": 1.0})
    assert derive_time_step(options, 4) == pytest.approx(0.25)


def test_observability_and_restart_overrides() -> None:
    original = RunTimeOptions.model_validate(
        {
            "visualize": False,
            "paraview": False,
            "visit": True,
            "nancheck": False,
            "variable_dt": True,
            "checkpoint_load": True,
            "output_file_path": "/stale",
            "cfl": 0.4,
        }
    )
    patched = patch_run_time(original, 100, Path("/work/out"))
    assert patched.visualize is True
    assert patched.paraview is True
    assert patched.visit is False
    assert patched.nancheck is True
    assert patched.variable_dt is False
    assert patched.checkpoint_load is False
    assert patched.output_file_path == "/work/out"
    assert patched.vis_steps == 10
    assert patched.initial_save_dt == pytest.approx(patched.dt * 10)
    assert patched.model_extra == {"cfl": 0.4}


def test_scenario_final_time_one_hundred_steps() -> None:
    original = SimulationConfig.from_dict({"runTime": {"final_time": 1.0}})
    patched = patch_config(original, 100, "/out")
    assert patched.run_time.dt == pytest.approx(0.01)
    assert patched.run_time.vis_steps == 10
    assert patched.run_time.final_time == pytest.approx(1.0)


def test_patch_config_passes_other_fields_and_leaves_original_alone() -> None:
    document = {
        "mesh": {"nx": 64, "ny": 64},
        "solver": "NavierStokes",
        "runTime": {"final_time": 2.0, "checkpoint_load": True},
    }
    original = SimulationConfig.from_dict(document)
    patched = patch_config(original, 20, "/out").to_document()

    assert patched["mesh"] == {"nx": 64, "ny": 64}
    assert patched["solver"] == "NavierStokes"
    assert patched["runTime"]["checkpoint_load"] is False
    assert original.run_time.checkpoint_load is True
    assert original.to_document() == document


def test_patch_config_adds_missing_run_time_block() -> None:
    patched = patch_config(SimulationConfig.from_dict({"mesh": "box"}), 10, "/out")
    document = patched.to_document()
    assert document["mesh"] == "box"
    assert document["runTime"]["dt"] == DEFAULT_TIME_STEP
    assert document["runTime"]["checkpoint_load"] is False


def test_patch_rejects_zero_steps() -> None:
    with pytest.raises(ValueError):
        patch_run_time(None, 0, "/out")


def test_load_and_write_round_trip(tmp_path: Path) -> None:
    source = tmp_path / "config.json"
    source.write_text(json.dumps({"runTime": {"final_time": 1.0}, "title": "cavity"}))
    patched = patch_config(load_config(source), 100, tmp_path / "out")
    target = write_patched_config(patched, tmp_path / "config.patched.json")

    written = json.loads(target.read_text())
    assert written["title"] == "cavity"
    assert written["runTime"]["output_file_path"] == str(tmp_path / "out")
    assert written["runTime"]["dt"] == pytest.approx(0.01)
    assert json.loads(source.read_text())["runTime"] == {"final_time": 1.0}


def test_load_config_missing(tmp_path: Path) -> None:
    with pytest.raises(ConfigNotFound):
        load_config(tmp_path / "nope.json")


@pytest.mark.parametrize("text", ["{not json", "[1, 2]", '{"runTime": [1]}'])
def test_load_config_malformed(tmp_path: Path, text: str) -> None:
    path = tmp_path / "config.json"
    path.write_text(text)
    with pytest.raises(MalformedConfig):
        load_config(path)


def test_write_patched_config_failure(tmp_path: Path) -> None:
    config = SimulationConfig.from_dict({})
    with pytest.raises(PatchWriteFailed):
        write_patched_config(config, tmp_path / "missing-dir" / "config.patched.json")


@pytest.mark.parametrize(
    "run_time",
    [
        {"vis_steps": 2.5},
        {"output_file_path": 123},
        {"checkpoint_load": "maybe"},
        {"visualize": "yes", "initial_save_dt": [1, 2], "nancheck": None},
    ],
)
def test_odd_values_in_overridden_fields_are_replaced(tmp_path: Path, run_time: dict) -> None:
    source = tmp_path / "config.json"
    source.write_text(json.dumps({"runTime": {"final_time": 1.0, **run_time}}))

    patched = patch_config(load_config(source), 10, "/out").to_document()["runTime"]

    assert patched["vis_steps"] == 10
    assert patched["output_file_path"] == "/out"
    assert patched["checkpoint_load"] is False
    assert patched["visualize"] is True
    assert patched["nancheck"] is True
    assert patched["initial_save_dt"] == pytest.approx(1.0)


def test_load_config_rejects_invalid_utf8(tmp_path: Path) -> None:
    path = tmp_path / "config.json"
    path.write_bytes(b'\xff\xfe{"runTime": {}}')
    with pytest.raises(MalformedConfig, match="UTF-8"):
        load_config(path)


def test_patched_document_keeps_key_order(tmp_path: Path) -> None:
    source = tmp_path / "config.json"
    source.write_text(
        '{"title": "cavity", "runTime": {"final_time": 1.0, "cfl": 0.5, "dt": null}, "mesh": {"nx": 8}}'
    )
    patched = patch_config(load_config(source), 100, "/out")
    written = json.loads(write_patched_config(patched, tmp_path / "config.patched.json").read_text())

    assert list(written) == ["title", "runTime", "mesh"]
    assert list(written["runTime"])[:3] == ["final_time", "cfl", "dt"]
    assert written["runTime"]["cfl"] == 0.5
