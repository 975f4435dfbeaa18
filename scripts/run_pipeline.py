"""Run a pipeline of commands from the command line.

Stages are separated by a literal "|" token, which must be quoted so the
invoking shell does not interpret it:

    python scripts/run_pipeline.py echo foo '|' rev '|' tr a-z A-Z

Exit codes:
- 0: success, the last stage's output is written to stdout unchanged
- 2: malformed pipeline (no commands, or an empty stage)
- 1: any other failure
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import List


def split_stages(tokens: List[str], separator: str) -> List[List[str]]:
    if not tokens:
        return []
    stages: List[List[str]] = [[]]
    for token in tokens:
        if token == separator:
            stages.append([])
        else:
            stages[-1].append(token)
    return stages


def main() -> int:
    parser = argparse.ArgumentParser(description="Run commands connected by pipes")
    parser.add_argument("--json", action="store_true", help="Print the result as JSON")
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Log pipeline activity to stderr (level from PROCPIPE_LOG_LEVEL, default DEBUG)",
    )
    parser.add_argument("command", nargs=argparse.REMAINDER, help="CMD [ARG...] ['|' CMD [ARG...]]...")

    args = parser.parse_args()

    # Allow running this script directly without requiring installation.
    repo_root = Path(__file__).resolve().parents[1]
    if str(repo_root) not in sys.path:
        sys.path.insert(0, str(repo_root))

    from loguru import logger

    from procpipe import ErrorKind, pipe
    from procpipe.config import LOGGING, PIPELINE

    if args.verbose:
        logger.remove()
        logger.add(sys.stderr, level=LOGGING.LEVEL)
        logger.enable("procpipe")

    result = pipe(split_stages(list(args.command), PIPELINE.STAGE_SEPARATOR))

    if args.json:
        print(json.dumps(result.to_dict(), indent=2, sort_keys=True))
    elif result.success:
        sys.stdout.write(result.output or "")
    else:
        err = result.error
        print(f"{err.kind.value} (code={err.code}): {err.details}", file=sys.stderr)

    if result.success:
        return 0
    if result.error.kind is ErrorKind.INVALID_FORMAT_ERROR:
        return 2
    return 1


if __name__ == "__main__":
    raise SystemExit(main())
