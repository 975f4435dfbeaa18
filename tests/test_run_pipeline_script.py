import json
import subprocess
import sys
from pathlib import Path

import pytest


SCRIPT = Path(__file__).resolve().parents[1] / "scripts" / "run_pipeline.py"


def _run(*args):
    return subprocess.run(
        [sys.executable, str(SCRIPT), *args],
        capture_output=True,
        text=True,
        stdin=subprocess.DEVNULL,
    )


@pytest.mark.integration
def test_script_writes_last_stage_output(py_commands):
    proc = _run(*py_commands["produce"], "|", *py_commands["rev"], "|", *py_commands["upper"])

    assert proc.returncode == 0
    assert proc.stdout == "OOF\n"
    assert proc.stderr == ""


@pytest.mark.integration
def test_script_json_output(py_commands):
    proc = _run("--json", *py_commands["fail"])

    assert proc.returncode == 1
    payload = json.loads(proc.stdout)
    assert payload["success"] is False
    assert payload["error"] == {"kind": "ExecError", "code": 1, "details": "non-zero exit code"}


@pytest.mark.integration
def test_script_empty_stage_exit_code(py_commands):
    proc = _run(*py_commands["produce"], "|", "|", *py_commands["upper"])

    assert proc.returncode == 2
    assert "InvalidFormatError" in proc.stderr
    assert "no command binary supplied" in proc.stderr


@pytest.mark.integration
def test_script_without_commands():
    proc = _run()

    assert proc.returncode == 2
    assert "no commands supplied" in proc.stderr


@pytest.mark.integration
def test_script_verbose_logs_to_stderr(py_commands):
    proc = _run("--verbose", *py_commands["produce"])

    assert proc.returncode == 0
    assert proc.stdout == "foo\n"
    assert "Spawned pid" in proc.stderr


@pytest.mark.unit
def test_split_stages():
    sys.path.insert(0, str(SCRIPT.parent))
    from run_pipeline import split_stages

    assert split_stages([], "|") == []
    assert split_stages(["a", "b"], "|") == [["a", "b"]]
    assert split_stages(["a", "|", "b", "c"], "|") == [["a"], ["b", "c"]]
    assert split_stages(["|", "a"], "|") == [[], ["a"]]


@pytest.mark.integration
def test_script_keeps_last_stage_stderr_off_the_terminal(py_commands):
    proc = _run(*py_commands["noisy"])

    assert proc.returncode == 0
    assert proc.stdout == "ok\n"
    assert proc.stderr == ""
