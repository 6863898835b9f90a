"""Changeset writer: manifest → tag → history → render → format → write.

For each release in a change description:
1. Derive the package directory from the release identifier
2. Read packages/<dir>/package.json for the published name and version
3. Check whether the tag <name>@<version> exists
4. If it does, summarize the commits touching the package since that tag
5. Render the front matter and summary, format it as markdown
6. Write .changeset/<snake_case(identifier)>.md

Releases are processed concurrently and joined before returning, so the
caller sees every result and every failure.
"""

from __future__ import annotations

import asyncio
import json
import os
import tempfile
from collections import defaultdict
from pathlib import Path
from typing import Any

from .errors import ChangesetWriteError, FilenameCollisionError
from .formatter import PARSER, Formatter, resolve_formatter
from .gitlog import GitClient
from .models import ChangeDescription, PackageManifest, ReleaseEntry, ReleaseOutcome
from .names import changeset_filename, changeset_path, manifest_path, package_dir_name
from .shell import step
from .toml import resolve_config
from .versions import bump_version

PLACEHOLDER_CHANGESET_ID = "temp"


def read_manifest(cwd: Path, dir_name: str) -> PackageManifest:
    """Read and validate packages/<dir_name>/package.json.

    Raises:
        FileNotFoundError: If the manifest does not exist.
        json.JSONDecodeError: If it is not valid JSON.
        pydantic.ValidationError: If name or version is missing.
    """
    data = json.loads(manifest_path(cwd, dir_name).read_text(encoding="utf-8"))
    return PackageManifest.model_validate(data)


async def summarize_history(
    git: GitClient, manifest: PackageManifest, dir_name: str
) -> str:
    """Bulleted commit subjects since the package's release tag.

    Returns an empty string when the tag does not exist yet.
    """
    tag = manifest.tag
    if tag not in await git.tags():
        return ""
    commits = await git.log(f"{tag}..HEAD", f"packages/{dir_name}")
    return "\n".join(f"- {c.message}" for c in commits)


def render_changeset(release: ReleaseEntry, summary: str) -> str:
    """Render the unformatted changeset document.

    The identifier is always quoted: scoped names such as "@scope/pkg"
    are not valid bare YAML keys.
    """
    heading = "Change records" if summary else "No change"
    return (
        "---\n"
        f'"{release.name}": {release.type.value}\n'
        "---\n"
        "\n"
        f"{heading}\n"
        f"{summary}\n"
    )


def write_text_atomic(path: Path, text: str) -> None:
    """Write text to path via a temp file and rename.

    Parent directories are created. Existing content is replaced in one
    step, so readers see either the old file or the new one.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="") as fh:
            fh.write(text)
        os.replace(tmp, path)
    except BaseException:
        Path(tmp).unlink(missing_ok=True)
        raise


def find_collisions(releases: list[ReleaseEntry]) -> dict[str, list[str]]:
    """Map each changeset filename shared by 2+ releases to their names."""
    by_file: dict[str, list[str]] = defaultdict(list)
    for release in releases:
        by_file[changeset_filename(release.name)].append(release.name)
    return {f: names for f, names in by_file.items() if len(names) > 1}


def _next_version(version: str, release: ReleaseEntry) -> str:
    # Progress output only; versions need not be semver.
    try:
        return bump_version(version, release.type)
    except ValueError:
        return "?"


async def build_release(
    release: ReleaseEntry,
    cwd: Path,
    git: GitClient,
    formatter: Formatter,
    config: dict[str, Any],
) -> str:
    """Produce the formatted changeset text for one release."""
    dir_name = package_dir_name(release.name)
    manifest = await asyncio.to_thread(read_manifest, cwd, dir_name)

    if package_dir_name(manifest.name) != dir_name:
        print(
            f"  Warning: {release.name} reads packages/{dir_name} whose manifest "
            f"name is {manifest.name}; looking for tag {manifest.tag}"
        )

    summary = await summarize_history(git, manifest, dir_name)
    print(
        f"  {release.name}: {manifest.version} → "
        f"{_next_version(manifest.version, release)} ({release.type.value})"
    )
    return await formatter.format(
        render_changeset(release, summary), {**config, "parser": PARSER}
    )


async def write_release(
    release: ReleaseEntry,
    cwd: Path,
    git: GitClient,
    formatter: Formatter,
    config: dict[str, Any],
) -> Path:
    """Build and write the changeset for one release; return its path."""
    content = await build_release(release, cwd, git, formatter, config)
    path = changeset_path(cwd, release.name)
    await asyncio.to_thread(write_text_atomic, path, content)
    return path


async def write_changeset_files(
    changeset: ChangeDescription,
    cwd: Path,
    *,
    git: GitClient | None = None,
    formatter: Formatter | None = None,
    allow_collisions: bool = False,
) -> list[ReleaseOutcome]:
    """Write one changeset file per release and wait for all of them.

    Args:
        changeset: The change description to write.
        cwd: Repository root containing packages/ and .changeset/.
        git: Git client; defaults to one bound to cwd.
        formatter: Markdown formatter; resolved from cwd when omitted.
        allow_collisions: If False (default), releases whose identifiers
            produce the same filename are rejected before anything is
            written. If True they race and the last write wins.

    Returns:
        One outcome per release, in input order. Failed releases carry
        their error instead of a path.

    Raises:
        FilenameCollisionError: On filename collisions, unless allowed.
    """
    cwd = Path(cwd)
    step(f"Writing {len(changeset.releases)} changeset(s)")

    collisions = find_collisions(changeset.releases)
    if collisions and not allow_collisions:
        raise FilenameCollisionError(collisions)

    if formatter is None:
        lookup = resolve_formatter(cwd)
        formatter = lookup.formatter
        print(f"  Formatter: {lookup.source}")
    config = resolve_config(cwd)
    git = git or GitClient(cwd)

    results = await asyncio.gather(
        *(
            write_release(release, cwd, git, formatter, config)
            for release in changeset.releases
        ),
        return_exceptions=True,
    )

    outcomes: list[ReleaseOutcome] = []
    for release, result in zip(changeset.releases, results):
        if isinstance(result, BaseException):
            outcomes.append(ReleaseOutcome(release=release, error=result))
        else:
            outcomes.append(ReleaseOutcome(release=release, path=result))
    return outcomes


async def preview_changeset(
    changeset: ChangeDescription,
    cwd: Path,
    *,
    git: GitClient | None = None,
    formatter: Formatter | None = None,
    allow_collisions: bool = False,
) -> dict[str, str]:
    """Render and format every release without writing anything.

    Returns a map of changeset filename → formatted content. Errors
    propagate from the first failing release. Collisions are handled as in
    write_changeset_files; when allowed, the last colliding release in input
    order is the one kept.

    Raises:
        FilenameCollisionError: On filename collisions, unless allowed.
    """
    cwd = Path(cwd)
    collisions = find_collisions(changeset.releases)
    if collisions and not allow_collisions:
        raise FilenameCollisionError(collisions)

    formatter = formatter or resolve_formatter(cwd).formatter
    config = resolve_config(cwd)
    git = git or GitClient(cwd)
    contents = await asyncio.gather(
        *(
            build_release(release, cwd, git, formatter, config)
            for release in changeset.releases
        )
    )
    return {
        changeset_filename(release.name): content
        for release, content in zip(changeset.releases, contents)
    }


async def write_changeset(
    changeset: ChangeDescription,
    cwd: Path,
    *,
    git: GitClient | None = None,
    formatter: Formatter | None = None,
    allow_collisions: bool = False,
) -> str:
    """Write all changeset files for a change description.

    Returns PLACEHOLDER_CHANGESET_ID; the value carries no meaning.

    Raises:
        FilenameCollisionError: If identifiers collide and that is not allowed.
        ChangesetWriteError: If any release failed, after all have finished.
    """
    outcomes = await write_changeset_files(
        changeset,
        cwd,
        git=git,
        formatter=formatter,
        allow_collisions=allow_collisions,
    )
    failures = [o for o in outcomes if not o.ok]
    if failures:
        raise ChangesetWriteError(failures)
    return PLACEHOLDER_CHANGESET_ID
