"""Data models for changeset-writer.

These Pydantic models represent the inputs, the package metadata read from
disk, and the per-release results of a changeset run.
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field


class BumpType(str, Enum):
    """Semantic version bump kind declared for a release."""

    PATCH = "patch"
    MINOR = "minor"
    MAJOR = "major"


class ReleaseEntry(BaseModel):
    """A single package release inside a change description.

    Attributes:
        name: Package identifier as published (e.g. "@scope/pkg"). May
              contain "/" separators.
        type: Bump kind for this release.
    """

    name: str
    type: BumpType


class ChangeDescription(BaseModel):
    """Input to a changeset run: a summary plus the releases it covers."""

    summary: str = ""
    releases: list[ReleaseEntry] = Field(default_factory=list)


class PackageManifest(BaseModel):
    """The fields of a package.json that matter for tagging.

    Every other key in the manifest is ignored.
    """

    model_config = ConfigDict(extra="ignore")

    name: str
    version: str

    @property
    def tag(self) -> str:
        """Release tag for this version, e.g. "@scope/pkg@1.2.3"."""
        return f"{self.name}@{self.version}"


class CommitEntry(BaseModel):
    """One commit from a scoped git log."""

    hash: str
    message: str


class ReleaseOutcome(BaseModel):
    """Result of writing one release entry: a path or the error raised."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    release: ReleaseEntry
    path: Path | None = None
    error: BaseException | None = None

    @property
    def ok(self) -> bool:
        """True when the changeset file was written."""
        return self.error is None
