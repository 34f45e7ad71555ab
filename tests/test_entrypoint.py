"""Smoke tests for the NavSim entrypoint module."""

from __future__ import annotations

import builtins
import importlib.util
import io
import json
from contextlib import redirect_stdout
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]

pytestmark = pytest.mark.usefixtures("restore_logger")


def load_entrypoint_module():
    """Load the project entrypoint module without running it as ``__main__``."""
    module_path = ROOT / "__main__.py"
    spec = importlib.util.spec_from_file_location("navsim_entry", module_path)
    module = importlib.util.module_from_spec(spec)
    assert spec.loader is not None
    spec.loader.exec_module(module)
    return module


@pytest.fixture()
def entry_module():
    return load_entrypoint_module()


@pytest.fixture()
def route_file(tmp_path):
    path = tmp_path / "short_hop.json"
    path.write_text(json.dumps({
        "title": "Short hop",
        "coordinates": [[0.0, 0.0], [0.0, 0.0001], [0.0001, 0.0001]],
    }))
    return path


def run_main(entry_module, argv):
    buffer = io.StringIO()
    with redirect_stdout(buffer):
        exit_code = entry_module.main(argv)
    return exit_code, buffer.getvalue()


def test_check_dependencies_reports_missing_required(entry_module, monkeypatch):
    """check_dependencies should fail gracefully when PySide6 is unavailable."""
    real_import = builtins.__import__

    def fake_import(name, globals=None, locals=None, fromlist=(), level=0):  # noqa: D401
        if name.startswith("PySide6"):
            raise ImportError("No module named PySide6")
        return real_import(name, globals, locals, fromlist, level)

    monkeypatch.setattr(builtins, "__import__", fake_import)

    buffer = io.StringIO()
    with redirect_stdout(buffer):
        result = entry_module.check_dependencies()

    output = buffer.getvalue()

    assert result is False
    assert "Missing required dependencies" in output
    assert "PySide6" in output


def test_check_dependencies_succeeds(entry_module):
    buffer = io.StringIO()
    with redirect_stdout(buffer):
        assert entry_module.check_dependencies() is True
    assert "OK PySide6" in buffer.getvalue()


def test_main_reports_missing_dependencies(entry_module, monkeypatch):
    """The main function should exit early when dependencies are missing."""
    monkeypatch.setattr(entry_module, "check_dependencies", lambda: False)

    exit_code, output = run_main(entry_module, ["--check-deps"])

    assert exit_code == 1
    assert "Some dependencies are missing" in output


def test_main_requires_a_route(entry_module, monkeypatch):
    monkeypatch.setattr(entry_module, "check_dependencies", lambda: True)

    exit_code, output = run_main(entry_module, [])

    assert exit_code == 1
    assert "No route given" in output


def test_invalid_settings_exit_with_usage_error(entry_module, route_file, tmp_path):
    exit_code, output = run_main(
        entry_module,
        [str(route_file), "--manual", "--step-distance=-1", "--log-dir", str(tmp_path / "logs")],
    )

    assert exit_code == 2
    assert "Step Distance Invalid" in output


def test_unreadable_route_is_reported(entry_module, tmp_path):
    exit_code, output = run_main(
        entry_module,
        [str(tmp_path / "missing.json"), "--manual", "--log-dir", str(tmp_path / "logs")],
    )

    assert exit_code == 1
    assert "Cannot load route" in output


def test_bad_start_location_is_reported(entry_module, route_file, tmp_path):
    exit_code, output = run_main(
        entry_module,
        [str(route_file), "--manual", "--start", "north", "--log-dir", str(tmp_path / "logs")],
    )

    assert exit_code == 1
    assert "expected LAT,LON" in output


def test_empty_route_with_start_location_is_reported(entry_module, tmp_path):
    empty = tmp_path / "empty.json"
    empty.write_text(json.dumps({"coordinates": []}))
    exit_code, output = run_main(
        entry_module,
        [str(empty), "--manual", "--start", "40.39,71.79", "--log-dir", str(tmp_path / "logs")],
    )

    assert exit_code == 1
    assert "Cannot load route" in output
    assert "has no coordinates" in output
    assert "Critical error" not in output


def test_manual_replay_writes_trace(entry_module, route_file, tmp_path):
    trace_file = tmp_path / "trace.jsonl"
    log_dir = tmp_path / "logs"
    exit_code, output = run_main(
        entry_module,
        [str(route_file), "--manual", "--log-dir", str(log_dir), "--trace-file", str(trace_file)],
    )

    assert exit_code == 0
    assert "Route 'Short hop': 3 points" in output
    assert "You have reached your destination" in output

    snapshots = [json.loads(line) for line in trace_file.read_text(encoding="utf-8").splitlines()]
    assert snapshots[0]["tick_count"] == 0
    assert snapshots[0]["is_navigating"] is True
    assert snapshots[-1]["is_navigating"] is False
    assert snapshots[-1]["remaining_distance"] == pytest.approx(0.0, abs=1e-6)
    assert (log_dir / "navsim_navigation.log").exists()


def test_demo_route_replays(entry_module, tmp_path):
    exit_code, output = run_main(
        entry_module,
        [str(ROOT / "routes" / "fergana_demo.json"), "--manual", "--step-distance", "25",
         "--log-dir", str(tmp_path / "logs")],
    )

    assert exit_code == 0
    assert "You have reached your destination" in output


def test_realtime_replay_uses_event_loop(entry_module, route_file, tmp_path, qt_app):
    exit_code, output = run_main(
        entry_module,
        [str(route_file), "--interval-ms", "10", "--step-distance", "5",
         "--log-dir", str(tmp_path / "logs")],
    )

    assert exit_code == 0
    assert "Drove 22 m" in output
