"""Read-only git queries used to summarize a package's history."""

from __future__ import annotations

from pathlib import Path

from .models import CommitEntry
from .shell import git

# Unit and record separators keep subjects with arbitrary punctuation intact.
_FIELD_SEP = "\x1f"
_RECORD_SEP = "\x1e"
LOG_FORMAT = f"--format=%H{_FIELD_SEP}%s{_RECORD_SEP}"


class GitClient:
    """Git queries bound to a working directory."""

    def __init__(self, cwd: Path) -> None:
        self.cwd = cwd

    async def tags(self) -> list[str]:
        """All tag names in the repository."""
        output = await git("tag", "--list", cwd=self.cwd)
        return output.splitlines()

    async def log(self, revision_range: str, path: str) -> list[CommitEntry]:
        """Commits in revision_range touching path, newest first."""
        output = await git(
            "log",
            LOG_FORMAT,
            revision_range,
            "--full-history",
            "--date-order",
            "--decorate=full",
            "--",
            path,
            cwd=self.cwd,
        )
        return parse_log(output)


def parse_log(output: str) -> list[CommitEntry]:
    """Parse output produced with LOG_FORMAT."""
    entries: list[CommitEntry] = []
    for record in output.split(_RECORD_SEP):
        record = record.strip()
        if not record:
            continue
        commit_hash, _, message = record.partition(_FIELD_SEP)
        entries.append(CommitEntry(hash=commit_hash, message=message))
    return entries
