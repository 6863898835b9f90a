"""Shell and git utilities.

Provides a wrapper around subprocess calls for running git from inside the
event loop, plus output formatting helpers.
"""

from __future__ import annotations

import asyncio
import subprocess
import sys
from pathlib import Path


async def git(*args: str, cwd: Path | None = None, check: bool = True) -> str:
    """Run a git command without blocking the event loop.

    Args:
        *args: Arguments to pass to git (e.g., "tag", "--list").
        cwd: Directory to run git in. Defaults to the process cwd.
        check: If True (default), raise CalledProcessError on non-zero exit.

    Returns:
        Stripped stdout from the git command.
    """
    cmd = ["git", *args]
    proc = await asyncio.create_subprocess_exec(
        *cmd,
        cwd=cwd,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.PIPE,
    )
    stdout, stderr = await proc.communicate()
    if check and proc.returncode != 0:
        raise subprocess.CalledProcessError(
            proc.returncode, cmd, output=stdout, stderr=stderr
        )
    return stdout.decode().strip()


def step(msg: str) -> None:
    """Print a visually distinct step header.

    Used to separate major phases of a run in terminal output.
    """
    print(f"\n{'─' * 60}\n{msg}\n{'─' * 60}")


def fatal(msg: str) -> None:
    """Print an error message and exit with code 1.

    Use for unrecoverable errors that should halt the command.
    """
    print(f"ERROR: {msg}", file=sys.stderr)
    sys.exit(1)
