"""Pipeline result type."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

from procpipe.errors import PipelineError


@dataclass(frozen=True)
class PipelineResult:
    """Outcome of one pipeline run: decoded output or a classified error."""

    output: Optional[str] = None
    error: Optional[PipelineError] = None

    def __post_init__(self) -> None:
        if (self.output is None) == (self.error is None):
            raise ValueError("PipelineResult requires exactly one of output or error")

    @classmethod
    def ok(cls, output: str) -> "PipelineResult":
        return cls(output=output)

    @classmethod
    def failed(cls, error: PipelineError) -> "PipelineResult":
        return cls(error=error)

    @property
    def success(self) -> bool:
        return self.error is None

    def unwrap(self) -> str:
        """Return the output text, raising the carried PipelineError on failure."""
        if self.error is not None:
            raise self.error
        return self.output  # type: ignore[return-value]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": self.success,
            "output": self.output,
            "error": self.error.to_dict() if self.error is not None else None,
        }
