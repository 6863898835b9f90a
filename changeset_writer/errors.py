"""Exceptions raised by changeset-writer."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .models import ReleaseOutcome


class ChangesetError(Exception):
    """Base class for all changeset-writer errors."""


class ConfigError(ChangesetError):
    """A configuration file could not be parsed."""


class FormatterError(ChangesetError):
    """The markdown formatter failed to format a document."""


class UnsupportedParserError(FormatterError):
    """A formatter was asked to parse something other than markdown."""

    def __init__(self, parser: str) -> None:
        super().__init__(f"Unsupported parser {parser!r}; only 'markdown' is handled")
        self.parser = parser


class FilenameCollisionError(ChangesetError):
    """Two or more releases map to the same changeset filename.

    Attributes:
        collisions: Map of filename → release identifiers that produce it.
    """

    def __init__(self, collisions: dict[str, list[str]]) -> None:
        lines = [
            f"  {filename}: {', '.join(names)}"
            for filename, names in sorted(collisions.items())
        ]
        super().__init__(
            "Releases map to the same changeset file:\n" + "\n".join(lines)
        )
        self.collisions = collisions


class ChangesetWriteError(ChangesetError):
    """One or more release entries failed to write.

    Attributes:
        failures: The failed outcomes, each carrying its original error.
    """

    def __init__(self, failures: list[ReleaseOutcome]) -> None:
        lines = [f"  {o.release.name}: {o.error!r}" for o in failures]
        super().__init__(
            f"{len(failures)} release(s) failed:\n" + "\n".join(lines)
        )
        self.failures = failures
