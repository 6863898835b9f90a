"""CLI entry point for changeset-writer."""

from __future__ import annotations

import asyncio
from pathlib import Path

import click
from pydantic import ValidationError

from changeset_writer.errors import ChangesetError
from changeset_writer.models import BumpType, ChangeDescription, ReleaseEntry
from changeset_writer.shell import fatal
from changeset_writer.writer import preview_changeset, write_changeset_files


def parse_release(spec: str) -> ReleaseEntry:
    """Parse a NAME:BUMP option value, e.g. "@scope/pkg:minor"."""
    name, sep, bump = spec.rpartition(":")
    if not sep or not name:
        raise click.BadParameter(f"expected NAME:BUMP, got {spec!r}")
    try:
        return ReleaseEntry(name=name, type=BumpType(bump))
    except ValueError:
        choices = ", ".join(b.value for b in BumpType)
        raise click.BadParameter(f"bump must be one of {choices}, got {bump!r}")


def load_description(
    summary: str, releases: tuple[str, ...], from_json: str | None
) -> ChangeDescription:
    """Build a ChangeDescription from --from-json and/or --release options."""
    if from_json:
        try:
            description = ChangeDescription.model_validate_json(
                Path(from_json).read_text()
            )
        except ValidationError as exc:
            raise click.ClickException(f"Invalid change description:\n{exc}")
    else:
        description = ChangeDescription(summary=summary)
    if summary:
        description.summary = summary
    description.releases.extend(parse_release(r) for r in releases)
    if not description.releases:
        raise click.UsageError("No releases given. Use --release or --from-json.")
    return description


def _changeset_options(fn):
    fn = click.option(
        "--from-json",
        type=click.Path(exists=True, dir_okay=False),
        help="Read the change description from a JSON file.",
    )(fn)
    fn = click.option(
        "-r",
        "--release",
        "releases",
        multiple=True,
        metavar="NAME:BUMP",
        help="Package release, e.g. @scope/pkg:minor (repeatable).",
    )(fn)
    fn = click.option("--summary", default="", help="Summary of the change.")(fn)
    fn = click.option(
        "--cwd",
        type=click.Path(exists=True, file_okay=False, path_type=Path),
        default=".",
        show_default=True,
        help="Repository root containing packages/ and .changeset/.",
    )(fn)
    return fn


@click.group()
@click.version_option(package_name="changeset-writer")
def cli() -> None:
    """Write changeset files summarizing package history since the last tag."""


@cli.command()
@_changeset_options
@click.option(
    "--allow-collisions",
    is_flag=True,
    help="Let releases that map to the same file overwrite each other.",
)
@click.option("--dry-run", is_flag=True, help="Print changesets instead of writing.")
def write(
    cwd: Path,
    summary: str,
    releases: tuple[str, ...],
    from_json: str | None,
    allow_collisions: bool,
    dry_run: bool,
) -> None:
    """Write one .changeset/*.md file per release."""
    description = load_description(summary, releases, from_json)
    if dry_run:
        _preview(description, cwd, allow_collisions=allow_collisions)
        return

    try:
        outcomes = asyncio.run(
            write_changeset_files(description, cwd, allow_collisions=allow_collisions)
        )
    except ChangesetError as exc:
        fatal(str(exc))
        return

    failed = False
    for outcome in outcomes:
        if outcome.ok:
            click.echo(f"✓ Wrote {outcome.path}")
        else:
            failed = True
            click.echo(f"✗ {outcome.release.name}: {outcome.error}", err=True)
    if failed:
        fatal("Some changesets could not be written.")


@cli.command()
@_changeset_options
def preview(
    cwd: Path, summary: str, releases: tuple[str, ...], from_json: str | None
) -> None:
    """Print the changesets that `write` would produce."""
    _preview(load_description(summary, releases, from_json), cwd)


def _preview(
    description: ChangeDescription, cwd: Path, *, allow_collisions: bool = False
) -> None:
    try:
        contents = asyncio.run(
            preview_changeset(description, cwd, allow_collisions=allow_collisions)
        )
    except ChangesetError as exc:
        fatal(str(exc))
        return
    for filename, content in contents.items():
        click.echo(f"==> .changeset/{filename} <==")
        click.echo(content)
