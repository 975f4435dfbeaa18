"""
Pipeline Errors
===============
Closed error taxonomy for pipeline execution.

Every failure a pipeline can produce is one of the ErrorKind members below.
PipelineError carries the kind, an optional integer code and a diagnostic
message. Executors return it inside a PipelineResult; callers that prefer
exceptions can raise it via PipelineResult.unwrap().
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Optional

from procpipe.config import PIPELINE


SENTINEL_CODE = PIPELINE.SENTINEL_CODE


class ErrorKind(Enum):
    """Kinds of pipeline failure."""
    INVALID_FORMAT_ERROR = "InvalidFormatError"    # Empty pipeline or empty stage
    OS_ERROR = "OsError"                           # Last stage could not start
    EXEC_ERROR = "ExecError"                       # Non-zero exit or broken spawn chain
    UNICODE_DECODE_ERROR = "UnicodeDecodeError"    # Output is not valid UTF-8
    UNKNOWN_ERROR = "UnknownError"                 # Start failure without errno


class PipelineError(RuntimeError):
    """Classified pipeline failure."""

    def __init__(self, kind: ErrorKind, code: Optional[int], details: str):
        super().__init__(kind, code, details)
        self._kind = kind
        self._code = code
        self._details = details

    @property
    def kind(self) -> ErrorKind:
        return self._kind

    @property
    def code(self) -> Optional[int]:
        return self._code

    @property
    def details(self) -> str:
        return self._details

    def __str__(self) -> str:
        return self._details

    def __repr__(self) -> str:
        return f"PipelineError(kind={self._kind.value}, code={self._code!r}, details={self._details!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PipelineError):
            return NotImplemented
        return (self._kind, self._code, self._details) == (other._kind, other._code, other._details)

    def __hash__(self) -> int:
        return hash((self._kind, self._code, self._details))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self._kind.value,
            "code": self._code,
            "details": self._details,
        }


def invalid_format(details: str) -> PipelineError:
    return PipelineError(ErrorKind.INVALID_FORMAT_ERROR, SENTINEL_CODE, details)


def exec_failure(code: Optional[int], details: str) -> PipelineError:
    return PipelineError(ErrorKind.EXEC_ERROR, code, details)


def decode_failure() -> PipelineError:
    return PipelineError(ErrorKind.UNICODE_DECODE_ERROR, None, "utf-8 decode failed")


def from_os_error(exc: OSError) -> PipelineError:
    """Classify a failure to start a process.

    An OSError carrying a raw errno becomes OsError with that number;
    anything else becomes UnknownError with no code.
    """

    errno = getattr(exc, "errno", None)
    if isinstance(errno, int):
        return PipelineError(ErrorKind.OS_ERROR, errno, str(exc))
    return PipelineError(ErrorKind.UNKNOWN_ERROR, None, str(exc))
