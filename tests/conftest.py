import json
import logging
import stat
import sys
import textwrap
from collections import defaultdict
from pathlib import Path

import pytest
from rich.console import Console
from rich.table import Table

KNOWN_MARKERS = {"unit_common", "unit_runner", "unit_ui", "integration"}

FAKE_SIMULATION = textwrap.dedent(
    """
    import json
    import pathlib
    import sys
    import time

    args = sys.argv[1:]
    config_path = pathlib.Path(args[args.index("-c") + 1])
    document = json.loads(config_path.read_text())
    run_time = document["runTime"]
    behaviour = document.get("fake", {})

    pathlib.Path("invocation.json").write_text(
        json.dumps({"argv": sys.argv, "cwd": str(pathlib.Path.cwd())})
    )
    if behaviour.get("sleep"):
        time.sleep(behaviour["sleep"])

    steps = int(round(run_time["final_time"] / run_time["dt"]))
    vis_root = pathlib.Path(run_time["output_file_path"]) / "ParaView"
    vis_root.mkdir(parents=True, exist_ok=True)
    if not behaviour.get("skip_cycles"):
        cycles = set(range(0, steps + 1, run_time["vis_steps"])) | {steps}
        for cycle in sorted(cycles):
            (vis_root / f"Cycle{cycle:06d}").mkdir(exist_ok=True)
    if not behaviour.get("skip_manifest"):
        (vis_root / "ParaView.pvd").write_text("<VTKFile/>")
    sys.exit(behaviour.get("exit_code", 0))
    """
)

FAKE_LAUNCHER = textwrap.dedent(
    """\
    #!/bin/sh
    printf '%s\\n' "$*" > launcher_args.txt
    shift 2
    exec "$@"
    """
)


def _make_executable(path: Path, content: str) -> Path:
    path.write_text(content)
    path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return path


@pytest.fixture
def fake_launcher(tmp_path: Path) -> Path:
    """Stand-in for mpiexec: records its arguments, drops ``-n N``, execs the rest."""
    return _make_executable(tmp_path / "fake_mpiexec", FAKE_LAUNCHER)


@pytest.fixture
def fake_simulation(tmp_path: Path) -> Path:
    """Executable that writes ParaView-style output according to the patched config."""
    script = tmp_path / "fake_simulation.py"
    script.write_text(FAKE_SIMULATION)
    build_dir = tmp_path / "build"
    build_dir.mkdir(exist_ok=True)
    wrapper = f'#!/bin/sh\nexec "{sys.executable}" "{script}" "$@"\n'
    return _make_executable(build_dir / "Prandtl", wrapper)


@pytest.fixture
def write_example(tmp_path: Path):
    """Create ``examples/<name>/config.json`` and return its path."""

    def _write(name: str, document: dict | str) -> Path:
        example_dir = tmp_path / "examples" / name
        example_dir.mkdir(parents=True, exist_ok=True)
        config_path = example_dir / "config.json"
        text = document if isinstance(document, str) else json.dumps(document)
        config_path.write_text(text)
        return config_path

    return _write


@pytest.fixture(autouse=True)
def _restore_root_logging():
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


def pytest_terminal_summary(terminalreporter, exitstatus, config):
    """Print statistics by marker at the end of the test session."""
    _ = (exitstatus, config)
    marker_stats = defaultdict(lambda: {"passed": 0, "failed": 0, "skipped": 0, "total": 0, "duration": 0.0})

    for outcome in ["passed", "failed", "skipped"]:
        for report in terminalreporter.stats.get(outcome, []):
            if report.when == "call" or (report.when == "setup" and report.outcome == "skipped"):
                duration = getattr(report, "duration", 0.0)
                for marker in KNOWN_MARKERS:
                    if marker in report.keywords:
                        stats = marker_stats[marker]
                        stats[outcome] += 1
                        stats["total"] += 1
                        stats["duration"] += duration

    if not marker_stats:
        return

    table = Table(title="Test Statistics by Marker", show_header=True, header_style="bold magenta")
    table.add_column("Marker", style="cyan")
    table.add_column("Total", justify="right")
    table.add_column("Passed", justify="right", style="green")
    table.add_column("Failed", justify="right", style="red")
    table.add_column("Skipped", justify="right", style="yellow")
    table.add_column("Duration (s)", justify="right", style="blue")

    for marker in sorted(marker_stats):
        stats = marker_stats[marker]
        table.add_row(
            marker,
            str(stats["total"]),
            str(stats["passed"]),
            str(stats["failed"]),
            str(stats["skipped"]),
            f"{stats['duration']:.2f}",
        )

    console = Console()
    console.print("\n")
    console.print(table)
