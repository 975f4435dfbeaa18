"""
Process Launching
=================
Capability seam between the pipeline algorithm and the operating system.

A ProcessLauncher starts a child with its stdout piped back to the parent,
hands out that stdout stream while the child is still running, and later
waits for a child while draining its output. The stage that is waited on
can have its stderr captured as well, so nothing it prints reaches the
caller's terminal. SubprocessLauncher is the real implementation on top of
subprocess.Popen; tests substitute an in-memory launcher.
"""

from __future__ import annotations

import subprocess
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import IO, Any, Optional, Sequence, Tuple

from loguru import logger


@dataclass
class ProcessHandle:
    """A spawned child process and the parent's end of its stdout pipe."""

    argv: Tuple[str, ...]
    process: Any
    stdout: Optional[IO[bytes]]

    @property
    def pid(self) -> Optional[int]:
        return getattr(self.process, "pid", None)


class ProcessLauncher(ABC):
    """Start, wait for and release child processes."""

    @abstractmethod
    def spawn(
        self,
        argv: Sequence[str],
        stdin: Optional[IO[bytes]] = None,
        *,
        capture_stderr: bool = False,
    ) -> ProcessHandle:
        """Start argv asynchronously with stdout piped.

        Args:
            argv: Executable followed by its arguments, passed verbatim
            stdin: Upstream stage's stdout, or None for a detached stdin
            capture_stderr: Pipe stderr back to the parent instead of inheriting it

        Returns:
            ProcessHandle whose stdout is readable before the child exits

        Raises:
            OSError: The process could not be started
        """

    @abstractmethod
    def wait_and_capture(self, handle: ProcessHandle) -> Tuple[Optional[int], bytes]:
        """Block until the child exits and return (returncode, stdout bytes).

        The return code is None when the child was terminated by a signal.
        """

    @abstractmethod
    def release(self, handle: ProcessHandle) -> None:
        """Drop the parent's resources for a child that will not be waited on."""


class SubprocessLauncher(ProcessLauncher):
    """ProcessLauncher backed by subprocess.Popen (no shell)."""

    def spawn(
        self,
        argv: Sequence[str],
        stdin: Optional[IO[bytes]] = None,
        *,
        capture_stderr: bool = False,
    ) -> ProcessHandle:
        args = tuple(argv)
        try:
            proc = subprocess.Popen(
                list(args),
                stdin=stdin if stdin is not None else subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE if capture_stderr else None,
                close_fds=True,
                shell=False,
            )
        except ValueError as e:
            # Arguments the OS cannot represent (e.g. an embedded NUL) never
            # reach exec; report them as a start failure without an errno.
            raise OSError(str(e)) from e

        # The child now holds the upstream pipe; dropping the parent's copy
        # lets the upstream stage receive SIGPIPE if this stage exits early.
        if stdin is not None:
            stdin.close()

        logger.debug(f"Spawned pid {proc.pid}: {args[0]}")
        return ProcessHandle(argv=args, process=proc, stdout=proc.stdout)

    def wait_and_capture(self, handle: ProcessHandle) -> Tuple[Optional[int], bytes]:
        proc: subprocess.Popen = handle.process
        stdout, stderr = proc.communicate()
        returncode = proc.returncode
        logger.debug(f"pid {proc.pid} exited with {returncode}")
        if stderr:
            logger.debug(f"pid {proc.pid} stderr: {stderr.decode('utf-8', errors='replace').rstrip()}")
        if returncode is not None and returncode < 0:
            # Negative codes are signal numbers, not exit statuses.
            return None, stdout or b""
        return returncode, stdout or b""

    def release(self, handle: ProcessHandle) -> None:
        stream = handle.stdout
        if stream is not None and not stream.closed:
            try:
                stream.close()
            except OSError as e:
                logger.debug(f"Closing stdout of pid {handle.pid} failed: {e}")

        proc = handle.process
        if proc is not None and proc.poll() is None:
            # Still running; subprocess reaps it once the Popen object is collected.
            logger.debug(f"pid {proc.pid} still running at release")
