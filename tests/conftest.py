"""Shared fixtures for procpipe tests."""

import io
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, List, Optional, Sequence, Tuple

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from procpipe.process import ProcessHandle, ProcessLauncher


Program = Callable[[bytes], Tuple[Optional[int], bytes]]


@dataclass
class FakeProcess:
    pid: int
    returncode: Optional[int]


@dataclass
class FakeLauncher(ProcessLauncher):
    """In-memory launcher: each program maps stdin bytes to (returncode, stdout)."""

    programs: Dict[str, Program] = field(default_factory=dict)
    spawn_errors: Dict[str, OSError] = field(default_factory=dict)
    spawned: List[Tuple[str, ...]] = field(default_factory=list)
    waited: List[Tuple[str, ...]] = field(default_factory=list)
    released: List[Tuple[str, ...]] = field(default_factory=list)
    stderr_captured: List[Tuple[str, ...]] = field(default_factory=list)

    def spawn(self, argv: Sequence[str], stdin=None, *, capture_stderr: bool = False) -> ProcessHandle:
        args = tuple(argv)
        if args[0] in self.spawn_errors:
            raise self.spawn_errors[args[0]]
        if args[0] not in self.programs:
            raise FileNotFoundError(2, "No such file or directory", args[0])

        data = stdin.read() if stdin is not None else b""
        returncode, out = self.programs[args[0]](data)
        self.spawned.append(args)
        if capture_stderr:
            self.stderr_captured.append(args)
        return ProcessHandle(
            argv=args,
            process=FakeProcess(pid=1000 + len(self.spawned), returncode=returncode),
            stdout=io.BytesIO(out),
        )

    def wait_and_capture(self, handle: ProcessHandle):
        self.waited.append(handle.argv)
        return handle.process.returncode, handle.stdout.read()

    def release(self, handle: ProcessHandle) -> None:
        self.released.append(handle.argv)
        handle.stdout.close()


@pytest.fixture
def fake_launcher():
    """FakeLauncher with a few shell-like programs installed."""
    return FakeLauncher(
        programs={
            "true": lambda data: (0, b""),
            "false": lambda data: (1, b""),
            "produce": lambda data: (0, b"foo\n"),
            "rev": lambda data: (0, b"".join(line[::-1] + b"\n" for line in data.splitlines())),
            "upper": lambda data: (0, data.upper()),
            "cat": lambda data: (0, data),
            "partial": lambda data: (3, b"partial\n"),
            "binary": lambda data: (0, b"\xff\xfe\x00"),
            "killed": lambda data: (None, b""),
        }
    )


def _py(code: str) -> List[str]:
    return [sys.executable, "-c", code]


@pytest.fixture
def py_commands():
    """Real helper programs implemented with the running interpreter."""
    return {
        "produce": _py("import sys; sys.stdout.write('foo\\n')"),
        "rev": _py(
            "import sys\n"
            "for line in sys.stdin:\n"
            "    sys.stdout.write(line.rstrip('\\n')[::-1] + '\\n')\n"
        ),
        "upper": _py("import sys; sys.stdout.write(sys.stdin.read().upper())"),
        "echo": _py("import sys; sys.stdout.write(' '.join(sys.argv[1:]) + '\\n')"),
        "succeed": _py("pass"),
        "fail": _py("raise SystemExit(1)"),
        "partial": _py("import sys; sys.stdout.write('partial\\n'); sys.exit(3)"),
        "binary": _py("import sys; sys.stdout.buffer.write(b'\\xff\\xfe')"),
        "suicide": _py("import os, signal; os.kill(os.getpid(), signal.SIGKILL)"),
        "noisy": _py("import sys; sys.stderr.write('warning: noisy\\n'); sys.stdout.write('ok\\n')"),
    }
