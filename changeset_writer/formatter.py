"""Markdown formatter resolution.

A project may pin its own mdformat (installed in its virtualenv, with its
own plugins). When it does, changesets are formatted with that executable so
they match what the project's own tooling produces. Otherwise the mdformat
library installed alongside changeset-writer is used.
"""

from __future__ import annotations

import asyncio
import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Literal, Protocol

import mdformat

from .errors import FormatterError, UnsupportedParserError

PARSER = "markdown"

# Options understood by both the mdformat API and its CLI.
MDFORMAT_OPTIONS = ("wrap", "number", "end_of_line")

# Parser extensions every formatter must enable; without frontmatter the
# header is read as a thematic break plus a setext heading.
EXTENSIONS = ("frontmatter",)

# Virtualenv locations checked, relative to the working directory.
LOCAL_EXECUTABLES = (
    Path(".venv") / "bin" / "mdformat",
    Path("venv") / "bin" / "mdformat",
    Path(".venv") / "Scripts" / "mdformat.exe",
    Path("venv") / "Scripts" / "mdformat.exe",
)


class Formatter(Protocol):
    """Anything that turns markdown text into formatted markdown text."""

    async def format(self, text: str, options: Mapping[str, Any]) -> str: ...


def _mdformat_options(options: Mapping[str, Any]) -> dict[str, Any]:
    parser = options.get("parser", PARSER)
    if parser != PARSER:
        raise UnsupportedParserError(parser)
    return {k: options[k] for k in MDFORMAT_OPTIONS if k in options}


class BundledFormatter:
    """Formats with the mdformat library shipped with this tool."""

    extensions = frozenset(EXTENSIONS)

    async def format(self, text: str, options: Mapping[str, Any]) -> str:
        opts = _mdformat_options(options)
        return await asyncio.to_thread(
            mdformat.text, text, options=opts, extensions=self.extensions
        )


class LocalFormatter:
    """Formats by piping text through a project-local mdformat executable.

    The executable must support `--extensions` and have the frontmatter
    plugin installed; otherwise mdformat exits non-zero and FormatterError
    is raised rather than writing a changeset without its header.
    """

    def __init__(self, executable: Path) -> None:
        self.executable = executable

    def command(self, options: Mapping[str, Any]) -> list[str]:
        """Build the CLI invocation for the given options."""
        opts = _mdformat_options(options)
        cmd = [str(self.executable)]
        if "wrap" in opts:
            cmd.extend(["--wrap", str(opts["wrap"])])
        if opts.get("number"):
            cmd.append("--number")
        if "end_of_line" in opts:
            cmd.extend(["--end-of-line", str(opts["end_of_line"])])
        for ext in EXTENSIONS:
            cmd.extend(["--extensions", ext])
        # "-" reads stdin and writes the result to stdout
        cmd.append("-")
        return cmd

    async def format(self, text: str, options: Mapping[str, Any]) -> str:
        cmd = self.command(options)
        proc = await asyncio.create_subprocess_exec(
            *cmd,
            stdin=asyncio.subprocess.PIPE,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
        stdout, stderr = await proc.communicate(text.encode())
        if proc.returncode != 0:
            raise FormatterError(
                f"{self.executable} exited with {proc.returncode}: "
                f"{stderr.decode().strip()}"
            )
        return stdout.decode()


@dataclass(frozen=True)
class FormatterLookup:
    """Outcome of formatter resolution: which formatter, and where from."""

    formatter: Formatter
    source: Literal["local", "bundled"]


def find_local_formatter(cwd: Path) -> LocalFormatter | None:
    """Look for an mdformat executable installed relative to cwd.

    Returns None when none is installed. Errors while probing (e.g. an
    unreadable directory) propagate.
    """
    for rel in LOCAL_EXECUTABLES:
        candidate = cwd / rel
        if candidate.is_file() and os.access(candidate, os.X_OK):
            return LocalFormatter(candidate)
    return None


def resolve_formatter(cwd: Path) -> FormatterLookup:
    """Prefer a project-local formatter, fall back to the bundled one."""
    local = find_local_formatter(cwd)
    if local is not None:
        return FormatterLookup(formatter=local, source="local")
    return FormatterLookup(formatter=BundledFormatter(), source="bundled")
