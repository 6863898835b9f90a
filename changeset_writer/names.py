"""Name derivation for package directories and changeset files."""

from __future__ import annotations

import re
from pathlib import Path

CHANGESET_DIR = ".changeset"
CHANGESET_SUFFIX = ".md"

# Words are runs of: an uppercase letter followed by lowercase letters, a run
# of uppercase letters not followed by a lowercase one, lowercase letters, or
# digits. Everything else separates words.
_WORD_RE = re.compile(r"[A-Z]?[a-z]+|[A-Z]+(?![a-z])|\d+")


def snake_case(value: str) -> str:
    """Convert an identifier to snake_case.

    Examples:
        "@scope/my-pkg" → "scope_my_pkg"
        "fooBar" → "foo_bar"
        "HTTPServer" → "http_server"
        "pkg2go" → "pkg_2_go"
    """
    return "_".join(word.lower() for word in _WORD_RE.findall(value))


def package_dir_name(release_name: str) -> str:
    """Directory name under packages/ for a release identifier.

    Uses the last "/" segment, so "@scope/pkg" lives in packages/pkg.
    """
    return release_name.split("/")[-1]


def changeset_filename(release_name: str) -> str:
    """File name of the changeset written for a release identifier."""
    return f"{snake_case(release_name)}{CHANGESET_SUFFIX}"


def changeset_path(cwd: Path, release_name: str) -> Path:
    """Absolute path of the changeset written for a release identifier."""
    return cwd.resolve() / CHANGESET_DIR / changeset_filename(release_name)


def manifest_path(cwd: Path, dir_name: str) -> Path:
    """Path of a package's package.json."""
    return cwd / "packages" / dir_name / "package.json"
