"""
procpipe
========
Run chains of external commands connected by pipes and classify how they
fail.

    >>> from procpipe import pipe
    >>> pipe([["echo", "foo"], ["rev"]]).unwrap()
    'oof\\n'

The package logs through loguru but is silent by default; call
``logger.enable("procpipe")`` to see its records.
"""

from loguru import logger

from .errors import ErrorKind, PipelineError, SENTINEL_CODE
from .result import PipelineResult
from .process import ProcessHandle, ProcessLauncher, SubprocessLauncher
from .executor import CommandSpec, PipelineExecutor, PipelineSpec, pipe, run_command

logger.disable("procpipe")

__all__ = [
    # Errors
    "ErrorKind",
    "PipelineError",
    "SENTINEL_CODE",
    # Results
    "PipelineResult",
    # Process capability
    "ProcessHandle",
    "ProcessLauncher",
    "SubprocessLauncher",
    # Execution
    "CommandSpec",
    "PipelineSpec",
    "PipelineExecutor",
    "pipe",
    "run_command",
]
