"""
Pipeline Executor
=================
Run an ordered chain of external commands connected by pipes, the way a
shell runs `cmd1 | cmd2 | cmd3`, and return the last command's output.

Stages are prepared left to right. Preparing stage i starts stage i-1, keeps
that process's stdout as stage i's stdin, and then validates stage i, so a
malformed stage is reported after every stage before it is running.
The last stage is started and waited on, and only its exit status and
output decide the result. Earlier stages are never waited on.

Every failure is classified into a PipelineError and returned in the
PipelineResult; nothing is retried.
"""

from __future__ import annotations

from typing import IO, Any, List, Optional, Sequence, Tuple

from loguru import logger

from procpipe.config import PIPELINE
from procpipe.errors import (
    SENTINEL_CODE,
    decode_failure,
    exec_failure,
    from_os_error,
    invalid_format,
)
from procpipe.process import ProcessHandle, ProcessLauncher, SubprocessLauncher
from procpipe.result import PipelineResult
from procpipe.tracing import init_tracing, record_span_attributes


CommandSpec = Sequence[str]
PipelineSpec = Sequence[CommandSpec]


def _as_argv(command: CommandSpec) -> Tuple[str, ...]:
    if isinstance(command, (str, bytes)):
        raise TypeError("Each stage must be a sequence of strings, not a single string")
    argv = tuple(command)
    for token in argv:
        if not isinstance(token, str):
            raise TypeError(f"Command tokens must be str, got {type(token).__name__}")
    return argv


class PipelineExecutor:
    """
    Execute pipelines of external commands.

    The executor holds no per-call state, so one instance can serve
    concurrent callers.
    """

    def __init__(self, launcher: Optional[ProcessLauncher] = None):
        """
        Initialize the executor.

        Args:
            launcher: Process capability; defaults to SubprocessLauncher
        """
        self.launcher = launcher if launcher is not None else SubprocessLauncher()
        self.tracer = init_tracing()

    def execute(self, spec: PipelineSpec) -> PipelineResult:
        """
        Run the pipeline and classify its outcome.

        Args:
            spec: Ordered stages, each an argv-style sequence of strings

        Returns:
            PipelineResult with the last stage's decoded stdout, or the error
            raised by the first failing step
        """
        if isinstance(spec, (str, bytes)):
            raise TypeError("Pipeline must be a sequence of commands, not a string")

        with self.tracer.start_as_current_span("procpipe.pipeline.execute") as span:
            spawned: List[ProcessHandle] = []
            try:
                result = self._run(spec, spawned, span)
            finally:
                for handle in spawned:
                    self.launcher.release(handle)

            attributes = {"pipeline.success": result.success}
            if result.error is not None:
                attributes["pipeline.error_kind"] = result.error.kind.value
                attributes["pipeline.error_code"] = result.error.code
            record_span_attributes(span, attributes)

        if result.error is not None:
            logger.warning(
                f"Pipeline failed: {result.error.kind.value} "
                f"(code={result.error.code}): {result.error.details}"
            )
        return result

    def _run(self, spec: PipelineSpec, spawned: List[ProcessHandle], span: Any) -> PipelineResult:
        commands = list(spec)
        if not commands:
            return PipelineResult.failed(invalid_format("no commands supplied"))

        record_span_attributes(span, {"pipeline.stage_count": len(commands)})

        pending_argv: Tuple[str, ...] = ()
        pending_stdin: Optional[IO[bytes]] = None

        for index, command in enumerate(commands):
            if index > 0:
                try:
                    handle = self.launcher.spawn(pending_argv, stdin=pending_stdin)
                except OSError as e:
                    return PipelineResult.failed(
                        exec_failure(SENTINEL_CODE, f"failed to spawn stage {index - 1}: {e}")
                    )
                spawned.append(handle)
                pending_stdin = handle.stdout

            argv = _as_argv(command)
            if not argv:
                return PipelineResult.failed(invalid_format("no command binary supplied"))
            if index > 0:
                logger.debug(f"Stage {index - 1} ({pending_argv[0]}) piped into stage {index} ({argv[0]})")

            pending_argv = argv

        record_span_attributes(span, {"pipeline.executables": [c[0] for c in commands]})

        try:
            last = self.launcher.spawn(pending_argv, stdin=pending_stdin, capture_stderr=True)
        except OSError as e:
            return PipelineResult.failed(from_os_error(e))
        spawned.append(last)

        returncode, data = self.launcher.wait_and_capture(last)
        if returncode != 0:
            return PipelineResult.failed(exec_failure(returncode, "non-zero exit code"))

        try:
            text = data.decode(PIPELINE.OUTPUT_ENCODING)
        except UnicodeDecodeError:
            return PipelineResult.failed(decode_failure())

        return PipelineResult.ok(text)


def pipe(spec: PipelineSpec, *, launcher: Optional[ProcessLauncher] = None) -> PipelineResult:
    """Run a pipeline of commands and return its result."""
    return PipelineExecutor(launcher=launcher).execute(spec)


def run_command(argv: CommandSpec, *, launcher: Optional[ProcessLauncher] = None) -> PipelineResult:
    """Run a single command; equivalent to pipe([argv])."""
    if isinstance(argv, (str, bytes)):
        raise TypeError("argv must be a sequence of strings, not a single string")
    return pipe([argv], launcher=launcher)
