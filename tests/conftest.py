"""Shared test fixtures."""

from __future__ import annotations

import json
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import pytest

from changeset_writer.models import CommitEntry


class FakeGit:
    """In-memory stand-in for GitClient."""

    def __init__(
        self,
        tags: list[str] | None = None,
        logs: dict[str, list[str]] | None = None,
    ) -> None:
        self._tags = tags or []
        self._logs = logs or {}
        self.log_calls: list[tuple[str, str]] = []

    async def tags(self) -> list[str]:
        return list(self._tags)

    async def log(self, revision_range: str, path: str) -> list[CommitEntry]:
        self.log_calls.append((revision_range, path))
        messages = self._logs.get(path, [])
        return [
            CommitEntry(hash=f"{i:040x}", message=m) for i, m in enumerate(messages)
        ]


class IdentityFormatter:
    """Returns text unchanged and records the options it was given."""

    def __init__(self) -> None:
        self.calls: list[dict[str, Any]] = []

    async def format(self, text: str, options: Mapping[str, Any]) -> str:
        self.calls.append(dict(options))
        return text


def write_manifest(root: Path, dir_name: str, name: str, version: str) -> Path:
    """Create packages/<dir_name>/package.json under root."""
    pkg_dir = root / "packages" / dir_name
    pkg_dir.mkdir(parents=True, exist_ok=True)
    manifest = pkg_dir / "package.json"
    manifest.write_text(
        json.dumps({"name": name, "version": version, "private": False})
    )
    return manifest


@pytest.fixture
def repo(tmp_path: Path) -> Path:
    """A workspace with two packages, one scoped."""
    write_manifest(tmp_path, "pkg-a", "@scope/pkg-a", "1.2.3")
    write_manifest(tmp_path, "pkg-b", "pkg-b", "0.4.0")
    return tmp_path


@pytest.fixture
def formatter() -> IdentityFormatter:
    return IdentityFormatter()
